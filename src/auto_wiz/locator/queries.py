"""
Semantic element queries - text, role, label, placeholder and test-id lookups.

These back the resolver's metadata phase, once every recorded selector has
failed. All functions are read-only over an ``IDocument``.
"""

import logging
import re
from typing import Dict, List, Optional

from auto_wiz.exceptions import InvalidSelectorError
from auto_wiz.interfaces.dom import IDocument, IDomElement
from auto_wiz.locator.css import attribute_selector

logger = logging.getLogger(__name__)

# Checked in this order; the first one present on an element wins.
TEST_ID_ATTRIBUTES = ("data-testid", "data-test", "data-cy", "data-test-id")

LABELABLE_TAGS = frozenset({"input", "textarea", "select"})

_WHITESPACE = re.compile(r"\s+")

_IMPLICIT_ROLES: Dict[str, str] = {
    "button": "button",
    "textarea": "textbox",
    "select": "combobox",
    "img": "img",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "nav": "navigation",
    "main": "main",
    "aside": "complementary",
    "header": "banner",
    "footer": "contentinfo",
    "section": "region",
    "article": "article",
    "form": "form",
    "table": "table",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
}

_INPUT_ROLES: Dict[str, str] = {
    "text": "textbox",
    "email": "textbox",
    "tel": "textbox",
    "url": "textbox",
    "search": "searchbox",
    "checkbox": "checkbox",
    "radio": "radio",
    "button": "button",
    "submit": "button",
    "reset": "button",
}


def normalize_text(text: str) -> str:
    """Lower-case and collapse runs of whitespace."""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def implicit_role(tag_name: str, attributes: Dict[str, str]) -> Optional[str]:
    """ARIA role implied by an element's tag (and type / href)."""
    tag = tag_name.lower()
    if tag == "a":
        return "link" if "href" in attributes else None
    if tag == "input":
        return _INPUT_ROLES.get((attributes.get("type") or "text").lower())
    return _IMPLICIT_ROLES.get(tag)


async def role_of(element: IDomElement) -> Optional[str]:
    """Explicit ``role`` attribute, else the implicit role."""
    attributes = await element.attributes()
    explicit = attributes.get("role")
    if explicit:
        return explicit
    return implicit_role(await element.tag_name(), attributes)


async def _closest(element: IDomElement, tag_name: str) -> Optional[IDomElement]:
    node: Optional[IDomElement] = element
    while node is not None:
        if await node.tag_name() == tag_name:
            return node
        node = await node.parent()
    return None


async def accessible_name(document: IDocument, element: IDomElement) -> str:
    """
    Accessible name, following the usual precedence.

    aria-label, aria-labelledby, associated <label> (form controls), alt
    (images), placeholder, title, then text content.
    """
    attributes = await element.attributes()
    tag = await element.tag_name()

    if attributes.get("aria-label"):
        return attributes["aria-label"]

    labelledby = attributes.get("aria-labelledby")
    if labelledby:
        label_element = await document.get_element_by_id(labelledby)
        if label_element is not None:
            return (await label_element.text_content()).strip()

    if tag in LABELABLE_TAGS:
        element_id = attributes.get("id")
        if element_id:
            label = await _safe_query(document, attribute_selector("for", element_id, tag="label"))
            if label is not None:
                return (await label.text_content()).strip()
        parent_label = await _closest(element, "label")
        if parent_label is not None:
            return (await parent_label.text_content()).strip()

    if tag == "img":
        return attributes.get("alt", "")

    if attributes.get("placeholder"):
        return attributes["placeholder"]
    if attributes.get("title"):
        return attributes["title"]

    return (await element.text_content()).strip()


async def _safe_query(document: IDocument, selector: str) -> Optional[IDomElement]:
    try:
        return await document.query_selector(selector)
    except InvalidSelectorError as e:
        logger.debug(f"Skipping invalid selector {selector!r}: {e}")
        return None


async def _safe_query_all(document: IDocument, selector: str) -> List[IDomElement]:
    try:
        return await document.query_selector_all(selector)
    except InvalidSelectorError as e:
        logger.debug(f"Skipping invalid selector {selector!r}: {e}")
        return []


async def _descendants(document: IDocument, within: Optional[IDomElement]) -> List[IDomElement]:
    container = within or await document.body()
    if container is None:
        return await document.query_selector_all("*")

    found: List[IDomElement] = []
    stack = list(reversed(await container.children()))
    while stack:
        node = stack.pop()
        found.append(node)
        stack.extend(reversed(await node.children()))
    return found


async def find_by_text(
    document: IDocument,
    text: str,
    *,
    exact: bool = False,
    normalize: bool = False,
    role: Optional[str] = None,
    within: Optional[IDomElement] = None,
) -> List[IDomElement]:
    """
    Find elements by their text.

    The compared text is the accessible name (falling back to text content);
    for elements with element children, the direct text nodes are used when
    they are not blank, so a button wrapping an icon and a label matches on
    the label.

    Args:
        document: Document to search
        text: Text to look for
        exact: Trimmed equality instead of substring
        normalize: Case- and whitespace-insensitive equality
        role: Only consider elements with this role
        within: Search this element's descendants instead of the body

    Returns:
        Matching elements in document order
    """
    wanted = normalize_text(text) if normalize else text
    results: List[IDomElement] = []

    for element in await _descendants(document, within):
        if role and await role_of(element) != role:
            continue

        element_text = await accessible_name(document, element)
        if not element_text:
            element_text = await element.text_content()

        if await element.children():
            direct = await element.own_text()
            if direct.strip():
                element_text = direct

        if normalize:
            matched = normalize_text(element_text) == wanted
        elif exact:
            matched = element_text.strip() == text
        else:
            matched = text in element_text

        if matched:
            results.append(element)

    return results


async def find_by_role(
    document: IDocument,
    role: str,
    *,
    name: Optional[str] = None,
    exact: bool = False,
    level: Optional[int] = None,
) -> List[IDomElement]:
    """
    Find elements by ARIA role, optionally filtered by accessible name and
    heading level.
    """
    results: List[IDomElement] = []
    for element in await document.query_selector_all("*"):
        if await role_of(element) != role:
            continue

        if level is not None:
            tag = await element.tag_name()
            if not (len(tag) == 2 and tag[0] == "h" and tag[1].isdigit() and int(tag[1]) == level):
                continue

        if name is not None:
            element_name = await accessible_name(document, element)
            if exact and element_name != name:
                continue
            if not exact and name not in element_name:
                continue

        results.append(element)
    return results


async def find_by_placeholder(document: IDocument, text: str, *, exact: bool = False) -> List[IDomElement]:
    """Elements whose ``placeholder`` equals (or contains) ``text``."""
    operator = "=" if exact else "*="
    return await _safe_query_all(document, attribute_selector("placeholder", text, operator=operator))


async def find_by_label_text(document: IDocument, text: str, *, exact: bool = False) -> List[IDomElement]:
    """
    Form controls labelled by a ``<label>`` whose text matches.

    ``label[for]`` points at the control by id; otherwise the first control
    nested inside the label is used.
    """
    results: List[IDomElement] = []
    for label in await _safe_query_all(document, "label"):
        label_text = (await label.text_content()).strip()
        matches = label_text == text if exact else text in label_text
        if not matches:
            continue

        target_id = await label.get_attribute("for")
        if target_id:
            control = await document.get_element_by_id(target_id)
        else:
            control = await label.query_selector("input, textarea, select")
        if control is not None:
            results.append(control)
    return results


async def find_by_test_id(document: IDocument, test_id: str) -> Optional[IDomElement]:
    """First element carrying ``test_id`` in any test-id attribute."""
    for attribute in TEST_ID_ATTRIBUTES:
        element = await _safe_query(document, attribute_selector(attribute, test_id))
        if element is not None:
            return element
    return None
