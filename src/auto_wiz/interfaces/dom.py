"""
DOM Interface - Abstract base classes for the documents the engine drives.

The locator engine and step executor never touch a concrete DOM. They talk to
``IDocument`` / ``IDomElement``, which are implemented both by the in-memory
``SoupDocument`` and by the Playwright adapter, so the same flow replays
against either.

Example:
    >>> from auto_wiz.dom import SoupDocument
    >>> document = SoupDocument('<button data-testid="go">Go</button>')
    >>> button = await document.query_selector('[data-testid="go"]')
    >>> await button.click()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ElementKind(Enum):
    """Capability tag derived once from an element's tag and type."""
    TEXT_INPUT = "text_input"
    SELECT = "select"
    GENERIC = "generic"


# Native controls whose ``disabled`` state gates interaction.
FORM_CONTROL_TAGS = frozenset({"input", "textarea", "select", "button"})

# <input> types that do not accept typed text.
NON_TEXT_INPUT_TYPES = frozenset({
    "button",
    "checkbox",
    "color",
    "file",
    "hidden",
    "image",
    "radio",
    "range",
    "reset",
    "submit",
})


def classify_element(tag_name: str, input_type: Optional[str] = None) -> ElementKind:
    """
    Map a tag (and ``type`` attribute for inputs) to an ElementKind.

    Args:
        tag_name: Lower- or upper-case tag name
        input_type: Value of the ``type`` attribute, if any

    Returns:
        The element's capability tag
    """
    tag = tag_name.lower()
    if tag == "textarea":
        return ElementKind.TEXT_INPUT
    if tag == "input":
        if (input_type or "text").lower() in NON_TEXT_INPUT_TYPES:
            return ElementKind.GENERIC
        return ElementKind.TEXT_INPUT
    if tag == "select":
        return ElementKind.SELECT
    return ElementKind.GENERIC


@dataclass(frozen=True)
class ElementState:
    """
    Snapshot of the parts of an element that gate interaction.

    Attributes:
        tag_name: Lower-case tag name
        display: Computed ``display``
        visibility: Computed ``visibility``
        opacity: Computed ``opacity`` as reported by the backend
        pointer_events: Computed ``pointer-events``
        disabled: Whether the element's ``disabled`` state is set
        kind: Capability tag
    """
    tag_name: str
    display: str = "inline"
    visibility: str = "visible"
    opacity: str = "1"
    pointer_events: str = "auto"
    disabled: bool = False
    kind: ElementKind = ElementKind.GENERIC


@dataclass
class DomEvent:
    """An event dispatched on an element."""
    type: str
    target: "IDomElement"
    init: Dict[str, Any] = field(default_factory=dict)

    @property
    def bubbles(self) -> bool:
        return bool(self.init.get("bubbles", False))


class IDomElement(ABC):
    """
    Abstract interface for a live element in a document.

    All methods are coroutines so that remote backends can implement them
    with a round trip to the browser.
    """

    @abstractmethod
    async def tag_name(self) -> str:
        """Lower-case tag name."""
        ...

    @abstractmethod
    async def get_attribute(self, name: str) -> Optional[str]:
        """Attribute value, or None if absent."""
        ...

    @abstractmethod
    async def attributes(self) -> Dict[str, str]:
        """All attributes as a name -> value mapping."""
        ...

    @abstractmethod
    async def parent(self) -> Optional["IDomElement"]:
        """Parent element, or None at the document root."""
        ...

    @abstractmethod
    async def children(self) -> List["IDomElement"]:
        """Child elements in document order (text nodes excluded)."""
        ...

    @abstractmethod
    async def own_text(self) -> str:
        """Concatenated direct text-node children, untrimmed."""
        ...

    @abstractmethod
    async def text_content(self) -> str:
        """Full descendant text content."""
        ...

    @abstractmethod
    async def state(self) -> ElementState:
        """Computed-style and disabled snapshot."""
        ...

    @abstractmethod
    async def get_value(self) -> Optional[str]:
        """Current ``value`` for form controls, None for other elements."""
        ...

    @abstractmethod
    async def set_value(self, value: str) -> None:
        """Set the ``value`` of a form control."""
        ...

    @abstractmethod
    async def click(self) -> None:
        """Invoke the element's native click."""
        ...

    @abstractmethod
    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        """
        Dispatch a synthetic event.

        Args:
            event_type: Event name, e.g. ``input`` or ``keydown``
            init: Event init dictionary (``bubbles``, ``key`` ...)
        """
        ...

    @abstractmethod
    async def form(self) -> Optional["IDomElement"]:
        """Enclosing ``<form>``, or None."""
        ...

    @abstractmethod
    async def request_submit(self) -> None:
        """Submit this element, which must be a ``<form>``."""
        ...

    @abstractmethod
    async def query_selector(self, selector: str) -> Optional["IDomElement"]:
        """
        First descendant matching a CSS selector.

        Raises:
            InvalidSelectorError: If the selector cannot be parsed
        """
        ...

    @abstractmethod
    async def is_same_node(self, other: "IDomElement") -> bool:
        """True if both handles refer to the same node."""
        ...

    async def has_attribute(self, name: str) -> bool:
        return await self.get_attribute(name) is not None

    async def class_list(self) -> List[str]:
        class_attr = await self.get_attribute("class")
        return class_attr.split() if class_attr else []


class IDocument(ABC):
    """
    Abstract interface for a queryable document.

    Query methods raise ``InvalidSelectorError`` for selectors the backend
    cannot parse; they return None / [] when nothing matches.
    """

    @abstractmethod
    async def query_selector(self, selector: str) -> Optional[IDomElement]:
        """First element matching a CSS selector."""
        ...

    @abstractmethod
    async def query_selector_all(self, selector: str) -> List[IDomElement]:
        """All elements matching a CSS selector, in document order."""
        ...

    @abstractmethod
    async def get_element_by_id(self, element_id: str) -> Optional[IDomElement]:
        """Element with the given id, or None."""
        ...

    @abstractmethod
    async def body(self) -> Optional[IDomElement]:
        """The ``<body>`` element, or None for bare fragments."""
        ...


class INavigator(ABC):
    """
    Page-level navigation used by the flow runner for navigate and
    waitForNavigation steps.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Current page URL."""
        ...

    @abstractmethod
    async def goto(self, url: str, timeout_ms: Optional[int] = None) -> None:
        """Navigate to a URL and wait for it to load."""
        ...

    @abstractmethod
    async def wait_for_load(self, timeout_ms: int) -> None:
        """Wait until the current navigation has finished loading."""
        ...
