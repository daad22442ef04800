"""
Locator models - the portable, serializable reference to a DOM node.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MAX_TEXT_LENGTH = 50

# Python attribute name -> JSON key
_METADATA_KEYS = {
    "test_id": "testId",
    "aria_label": "ariaLabel",
    "placeholder": "placeholder",
    "title": "title",
    "text": "text",
    "tag_name": "tagName",
    "role": "role",
}


@dataclass
class LocatorMetadata:
    """
    Descriptive hints used only when every selector fails.

    Attributes:
        test_id: Value of the element's test-id attribute
        aria_label: ``aria-label`` value
        placeholder: ``placeholder`` value
        title: ``title`` value
        text: Direct visible text, trimmed, at most 50 characters
        tag_name: Lower-case tag name
        role: Explicit or implicit ARIA role
    """
    test_id: Optional[str] = None
    aria_label: Optional[str] = None
    placeholder: Optional[str] = None
    title: Optional[str] = None
    text: Optional[str] = None
    tag_name: Optional[str] = None
    role: Optional[str] = None

    def __post_init__(self) -> None:
        if self.text is not None:
            self.text = self.text.strip()[:MAX_TEXT_LENGTH].rstrip() or None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON form, omitting unset fields."""
        return {
            key: getattr(self, attr)
            for attr, key in _METADATA_KEYS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocatorMetadata":
        return cls(**{attr: data.get(key) for attr, key in _METADATA_KEYS.items()})


@dataclass
class ElementLocator:
    """
    Tiered, fallback-ordered reference to an element.

    Created once at recording time and only matched against afterwards.

    Attributes:
        primary: Highest-confidence selector, never empty
        fallbacks: Selectors tried in order when ``primary`` fails
        metadata: Hints for text/attribute matching when all selectors fail

    Example:
        >>> locator = ElementLocator(primary='[data-testid="go"]', fallbacks=["button.cta"])
        >>> locator.selectors()
        ['[data-testid="go"]', 'button.cta']
    """
    primary: str
    fallbacks: List[str] = field(default_factory=list)
    metadata: Optional[LocatorMetadata] = None

    def __post_init__(self) -> None:
        if not self.primary:
            raise ValueError("ElementLocator.primary must not be empty")
        unique: List[str] = []
        for selector in self.fallbacks:
            if selector and selector != self.primary and selector not in unique:
                unique.append(selector)
        self.fallbacks = unique

    def selectors(self) -> List[str]:
        """All selectors in resolution order."""
        return [self.primary, *self.fallbacks]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"primary": self.primary, "fallbacks": list(self.fallbacks)}
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementLocator":
        metadata = data.get("metadata")
        return cls(
            primary=data["primary"],
            fallbacks=list(data.get("fallbacks") or []),
            metadata=LocatorMetadata.from_dict(metadata) if metadata else None,
        )
