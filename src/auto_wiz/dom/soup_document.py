"""
Soup Document - In-memory, mutable DOM built on BeautifulSoup.

Selectors are evaluated by soupsieve. Computed style is derived from inline
``style`` attributes and the ``hidden`` attribute; ``visibility`` and
``pointer-events`` inherit from ancestors as they do in CSS. Form values,
clicks and synthetic events are kept in memory so replays can be inspected.

Example:
    >>> document = SoupDocument('<form><input name="q"></form>')
    >>> field = await document.query_selector('input[name="q"]')
    >>> await field.set_value("cats")
    >>> document.events_of("submit")
    []
"""

import copy
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from soupsieve import SelectorSyntaxError

from auto_wiz.exceptions import DomError, InvalidSelectorError
from auto_wiz.interfaces.dom import (
    FORM_CONTROL_TAGS,
    DomEvent,
    ElementState,
    IDocument,
    IDomElement,
    classify_element,
)

logger = logging.getLogger(__name__)

EventListener = Callable[[DomEvent], Any]

INHERITED_PROPERTIES = ("visibility", "pointer-events")
VALUE_TAGS = frozenset({"input", "textarea", "select", "button", "option"})
SUBMIT_INPUT_TYPES = frozenset({"submit", "image"})


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse a ``style`` attribute into a property -> value dict.

    Property names are lower-cased and ``!important`` is dropped.
    """
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        value = value.replace("!important", "").strip().lower()
        if name and value:
            declarations[name] = value
    return declarations


def _option_value(option: Tag) -> str:
    value = option.get("value")
    return value if value is not None else option.get_text().strip()


class SoupElement(IDomElement):
    """
    An element of a SoupDocument.

    Two SoupElement wrappers compare equal when they wrap the same node.
    """

    def __init__(self, document: "SoupDocument", tag: Tag):
        self._document = document
        self._tag = tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SoupElement) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        attrs = " ".join(f'{k}="{v}"' for k, v in self._tag.attrs.items())
        return f"<SoupElement {self._tag.name}{' ' + attrs if attrs else ''}>"

    @property
    def tag(self) -> Tag:
        """The underlying BeautifulSoup tag."""
        return self._tag

    # ------------------------------------------------------------------
    # IDomElement
    # ------------------------------------------------------------------

    async def tag_name(self) -> str:
        return self._tag.name.lower()

    async def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        return None if value is None else str(value)

    async def attributes(self) -> Dict[str, str]:
        return {name: str(value) for name, value in self._tag.attrs.items()}

    async def parent(self) -> Optional[IDomElement]:
        parent = self._parent_tag(self._tag)
        return self._document.wrap(parent) if parent is not None else None

    async def children(self) -> List[IDomElement]:
        return [self._document.wrap(child) for child in self._tag.children if isinstance(child, Tag)]

    async def own_text(self) -> str:
        return "".join(
            str(child)
            for child in self._tag.children
            if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
        )

    async def text_content(self) -> str:
        return self._tag.get_text()

    async def state(self) -> ElementState:
        tag_name = self._tag.name.lower()
        style = parse_inline_style(self._tag.get("style"))

        display = style.get("display", "")
        if not display:
            if self._tag.has_attr("hidden") or (
                tag_name == "input" and str(self._tag.get("type", "")).lower() == "hidden"
            ):
                display = "none"
            else:
                display = "inline"

        inherited = {name: style.get(name) for name in INHERITED_PROPERTIES}
        ancestor = self._parent_tag(self._tag)
        while ancestor is not None and not all(inherited.values()):
            ancestor_style = parse_inline_style(ancestor.get("style"))
            for name in INHERITED_PROPERTIES:
                if not inherited[name] and ancestor_style.get(name):
                    inherited[name] = ancestor_style[name]
            ancestor = self._parent_tag(ancestor)

        return ElementState(
            tag_name=tag_name,
            display=display,
            visibility=inherited["visibility"] or "visible",
            opacity=style.get("opacity", "1"),
            pointer_events=inherited["pointer-events"] or "auto",
            disabled=tag_name in FORM_CONTROL_TAGS and self._tag.has_attr("disabled"),
            kind=classify_element(tag_name, self._tag.get("type")),
        )

    async def get_value(self) -> Optional[str]:
        tag_name = self._tag.name.lower()
        if tag_name not in VALUE_TAGS:
            return None
        if tag_name == "textarea":
            return self._tag.get_text()
        if tag_name == "select":
            options = self._tag.find_all("option")
            for option in options:
                if option.has_attr("selected"):
                    return _option_value(option)
            return _option_value(options[0]) if options else ""
        if tag_name == "option":
            return _option_value(self._tag)
        return str(self._tag.get("value", ""))

    async def set_value(self, value: str) -> None:
        tag_name = self._tag.name.lower()
        if tag_name == "textarea":
            self._tag.string = value
        elif tag_name == "select":
            options = self._tag.find_all("option")
            match = next((o for o in options if _option_value(o) == value), None)
            if match is None:
                match = next((o for o in options if o.get_text().strip() == value), None)
            if match is None:
                raise DomError(f"No option matching {value!r}", {"value": value})
            for option in options:
                if option.has_attr("selected"):
                    del option["selected"]
            match["selected"] = ""
        elif tag_name in ("input", "button"):
            self._tag["value"] = value
        else:
            raise DomError(f"<{tag_name}> has no value property")

    async def click(self) -> None:
        state = await self.state()
        if state.disabled:
            return

        tag_name = state.tag_name
        input_type = str(self._tag.get("type", "")).lower()
        if tag_name == "input" and input_type == "checkbox":
            if self._tag.has_attr("checked"):
                del self._tag["checked"]
            else:
                self._tag["checked"] = ""
        elif tag_name == "input" and input_type == "radio":
            name = self._tag.get("name")
            if name:
                for radio in self._document.soup.find_all("input", attrs={"type": "radio", "name": name}):
                    if radio.has_attr("checked"):
                        del radio["checked"]
            self._tag["checked"] = ""

        self._document.dispatch(DomEvent("click", self, {"bubbles": True}))

        is_submitter = (
            (tag_name == "button" and input_type in ("", "submit"))
            or (tag_name == "input" and input_type in SUBMIT_INPUT_TYPES)
        )
        if is_submitter:
            form = await self.form()
            if form is not None:
                await form.request_submit()

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        self._document.dispatch(DomEvent(event_type, self, dict(init or {})))

    async def form(self) -> Optional[IDomElement]:
        ancestor = self._parent_tag(self._tag)
        while ancestor is not None:
            if ancestor.name.lower() == "form":
                return self._document.wrap(ancestor)
            ancestor = self._parent_tag(ancestor)
        return None

    async def request_submit(self) -> None:
        if self._tag.name.lower() != "form":
            raise DomError(f"<{self._tag.name}> is not a form")
        self._document.dispatch(DomEvent("submit", self, {"bubbles": True, "cancelable": True}))

    async def query_selector(self, selector: str) -> Optional[IDomElement]:
        return self._document.select_one(self._tag, selector)

    async def is_same_node(self, other: IDomElement) -> bool:
        return self == other

    # ------------------------------------------------------------------
    # In-memory mutation helpers
    # ------------------------------------------------------------------

    def set_attribute(self, name: str, value: str) -> None:
        self._tag[name] = value

    def remove_attribute(self, name: str) -> None:
        if self._tag.has_attr(name):
            del self._tag[name]

    @staticmethod
    def _parent_tag(tag: Tag) -> Optional[Tag]:
        parent = tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return parent


class SoupDocument(IDocument):
    """
    In-memory document over a BeautifulSoup tree.

    Attributes:
        url: URL the document represents (informational)
        events: Every event dispatched so far, in order
    """

    def __init__(self, html: str, url: str = "about:blank", parser: str = "html.parser"):
        self._soup = BeautifulSoup(html, parser, multi_valued_attributes=None)
        self._listeners: Dict[int, List[Tuple[str, EventListener]]] = {}
        self.url = url
        self.events: List[DomEvent] = []

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SoupDocument":
        """Load a document from a local HTML file."""
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), url=path.resolve().as_uri())

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def wrap(self, tag: Tag) -> SoupElement:
        return SoupElement(self, tag)

    # ------------------------------------------------------------------
    # IDocument
    # ------------------------------------------------------------------

    async def query_selector(self, selector: str) -> Optional[IDomElement]:
        return self.select_one(self._soup, selector)

    async def query_selector_all(self, selector: str) -> List[IDomElement]:
        return [self.wrap(tag) for tag in self._select(self._soup, selector)]

    async def get_element_by_id(self, element_id: str) -> Optional[IDomElement]:
        tag = self._soup.find(attrs={"id": element_id})
        return self.wrap(tag) if isinstance(tag, Tag) else None

    async def body(self) -> Optional[IDomElement]:
        body = self._soup.find("body")
        return self.wrap(body) if isinstance(body, Tag) else None

    # ------------------------------------------------------------------
    # Selector evaluation
    # ------------------------------------------------------------------

    def select_one(self, root: Tag, selector: str) -> Optional[SoupElement]:
        matches = self._select(root, selector, limit=1)
        return self.wrap(matches[0]) if matches else None

    def _select(self, root: Tag, selector: str, limit: Optional[int] = None) -> List[Tag]:
        try:
            return list(root.select(selector, limit=limit))
        except (SelectorSyntaxError, NotImplementedError) as e:
            raise InvalidSelectorError(f"Invalid selector: {selector}", selector=selector) from e

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event_listener(self, element: SoupElement, event_type: str, listener: EventListener) -> None:
        """Register a listener on an element (receives bubbled events too)."""
        self._listeners.setdefault(id(element.tag), []).append((event_type, listener))

    def dispatch(self, event: DomEvent) -> None:
        """Record an event and run listeners on the target and, if it bubbles, its ancestors."""
        self.events.append(event)
        target = event.target
        if not isinstance(target, SoupElement):
            return

        path: List[Tag] = [target.tag]
        if event.bubbles:
            ancestor = SoupElement._parent_tag(target.tag)
            while ancestor is not None:
                path.append(ancestor)
                ancestor = SoupElement._parent_tag(ancestor)

        for node in path:
            for event_type, listener in self._listeners.get(id(node), []):
                if event_type != event.type:
                    continue
                try:
                    listener(event)
                except Exception:
                    # Listener errors are reported, not propagated, as in a browser.
                    logger.exception(f"Listener for '{event.type}' raised")

    def events_of(self, event_type: str) -> List[DomEvent]:
        return [event for event in self.events if event.type == event_type]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert_html(self, html: str, parent: Optional[SoupElement] = None) -> List[SoupElement]:
        """
        Parse an HTML fragment and append it to ``parent`` (default: body).

        Returns:
            The inserted top-level elements
        """
        fragment = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
        if parent is not None:
            target: Tag = parent.tag
        else:
            body = self._soup.find("body")
            target = body if isinstance(body, Tag) else self._soup

        inserted: List[SoupElement] = []
        for node in list(fragment.contents):
            target.append(node)
            if isinstance(node, Tag):
                inserted.append(self.wrap(node))
        return inserted

    def remove(self, element: SoupElement) -> None:
        element.tag.extract()

    def replace_with_clone(self, element: SoupElement) -> SoupElement:
        """Swap an element for an attribute-identical copy, as a re-render would."""
        clone = copy.copy(element.tag)
        element.tag.replace_with(clone)
        return self.wrap(clone)
