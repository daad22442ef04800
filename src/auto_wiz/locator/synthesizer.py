"""
Selector Synthesizer - Generate tiered, fallback-ordered locators.

Candidates are produced in strict tier order:

1. Identity: test-id attribute family, stable ``id``, ``name``, ``aria-label``
2. Semantic: ``placeholder``, ``title``, ``alt`` (images)
3. Structural: stable class selector, then a positional path
4. Text: no selector; ``metadata.text`` is matched at resolution time

The first candidate becomes ``primary``; the rest become ``fallbacks``.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from auto_wiz.exceptions import DomError
from auto_wiz.interfaces.dom import IDomElement
from auto_wiz.locator.css import attribute_selector, css_escape
from auto_wiz.locator.models import MAX_TEXT_LENGTH, ElementLocator, LocatorMetadata
from auto_wiz.locator.queries import TEST_ID_ATTRIBUTES, role_of

logger = logging.getLogger(__name__)

# Framework-generated ids and classes tend to carry hash runs or a leading underscore.
_HASH_RUN = re.compile(r"[0-9a-f]{8,}")

MAX_PATH_DEPTH = 5
MAX_CLASSES = 2


class SelectorStrategy(Enum):
    """Strategies a candidate selector can come from."""
    TEST_ID = "test-id"
    ID = "id"
    NAME = "name"
    ARIA_LABEL = "aria-label"
    PLACEHOLDER = "placeholder"
    TITLE = "title"
    ALT = "alt"
    CSS_CLASS = "css-class"
    STRUCTURAL = "structural"


@dataclass
class GeneratedSelector:
    """
    A candidate selector.

    Attributes:
        selector: CSS selector
        strategy: Strategy that produced it
        tier: Durability class, 1 (most durable) to 3
    """
    selector: str
    strategy: SelectorStrategy
    tier: int


def is_stable_token(token: str) -> bool:
    """
    True if an id or class looks hand-written rather than generated.

    Example:
        >>> is_stable_token("submit-btn")
        True
        >>> is_stable_token("css-1a2b3c4d5e")
        False
    """
    return bool(token) and not token.startswith("_") and not _HASH_RUN.search(token)


class SelectorSynthesizer:
    """
    Generate an ``ElementLocator`` for an element.

    Never raises: backend failures while reading one source are logged and
    that source is skipped. Every element gets at least a structural primary.

    Example:
        >>> synthesizer = SelectorSynthesizer()
        >>> locator = await synthesizer.generate(button)
        >>> locator.primary
        '[data-testid="go"]'
    """

    def __init__(self, max_path_depth: int = MAX_PATH_DEPTH):
        self.max_path_depth = max_path_depth

    async def generate(self, element: IDomElement) -> ElementLocator:
        """
        Generate a locator for an element.

        Args:
            element: Element the user acted on

        Returns:
            Locator with primary, fallbacks and metadata
        """
        candidates = await self.candidates(element)
        selectors: List[str] = []
        for candidate in candidates:
            if candidate.selector not in selectors:
                selectors.append(candidate.selector)

        if not selectors:
            selectors.append(await self._safe_tag_name(element) or "*")

        metadata = await self.metadata(element)
        return ElementLocator(primary=selectors[0], fallbacks=selectors[1:], metadata=metadata)

    async def candidates(self, element: IDomElement) -> List[GeneratedSelector]:
        """All candidate selectors in tier order (duplicates possible)."""
        sources: List[Callable[[IDomElement], Awaitable[List[GeneratedSelector]]]] = [
            self._identity_selectors,
            self._semantic_selectors,
            self._structural_selectors,
        ]
        found: List[GeneratedSelector] = []
        for source in sources:
            try:
                found.extend(await source(element))
            except DomError as e:
                logger.debug(f"Selector source {source.__name__} failed: {e}")
        return found

    async def metadata(self, element: IDomElement) -> Optional[LocatorMetadata]:
        """Descriptive hints, captured regardless of which tiers produced selectors."""
        try:
            attributes = await element.attributes()
            tag = await element.tag_name()
            return LocatorMetadata(
                test_id=self._test_id(attributes)[1],
                aria_label=attributes.get("aria-label") or None,
                placeholder=attributes.get("placeholder") or None,
                title=attributes.get("title") or None,
                text=await visible_text(element) or None,
                tag_name=tag,
                role=await role_of(element),
            )
        except DomError as e:
            logger.debug(f"Could not capture locator metadata: {e}")
            return None

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _identity_selectors(self, element: IDomElement) -> List[GeneratedSelector]:
        attributes = await element.attributes()
        tag = await element.tag_name()
        found: List[GeneratedSelector] = []

        test_id_attr, test_id = self._test_id(attributes)
        if test_id_attr and test_id:
            found.append(GeneratedSelector(
                attribute_selector(test_id_attr, test_id), SelectorStrategy.TEST_ID, 1,
            ))

        element_id = attributes.get("id")
        if element_id and is_stable_token(element_id):
            found.append(GeneratedSelector(f"#{css_escape(element_id)}", SelectorStrategy.ID, 1))

        if attributes.get("name"):
            found.append(GeneratedSelector(
                attribute_selector("name", attributes["name"], tag=tag), SelectorStrategy.NAME, 1,
            ))

        if attributes.get("aria-label"):
            found.append(GeneratedSelector(
                attribute_selector("aria-label", attributes["aria-label"]), SelectorStrategy.ARIA_LABEL, 1,
            ))

        return found

    async def _semantic_selectors(self, element: IDomElement) -> List[GeneratedSelector]:
        attributes = await element.attributes()
        tag = await element.tag_name()
        found: List[GeneratedSelector] = []

        if attributes.get("placeholder"):
            found.append(GeneratedSelector(
                attribute_selector("placeholder", attributes["placeholder"], tag=tag),
                SelectorStrategy.PLACEHOLDER,
                2,
            ))

        if attributes.get("title"):
            found.append(GeneratedSelector(
                attribute_selector("title", attributes["title"], tag=tag), SelectorStrategy.TITLE, 2,
            ))

        if tag == "img" and attributes.get("alt"):
            found.append(GeneratedSelector(
                attribute_selector("alt", attributes["alt"], tag="img"), SelectorStrategy.ALT, 2,
            ))

        return found

    async def _structural_selectors(self, element: IDomElement) -> List[GeneratedSelector]:
        found: List[GeneratedSelector] = []

        class_selector = await self._class_selector(element)
        if class_selector:
            found.append(GeneratedSelector(class_selector, SelectorStrategy.CSS_CLASS, 3))

        path = await self.structural_path(element)
        if path:
            found.append(GeneratedSelector(path, SelectorStrategy.STRUCTURAL, 3))

        return found

    async def _class_selector(self, element: IDomElement) -> Optional[str]:
        stable = [c for c in await element.class_list() if is_stable_token(c)]
        if not stable:
            return None
        tag = await element.tag_name()
        return tag + "".join(f".{css_escape(c)}" for c in stable[:MAX_CLASSES])

    async def structural_path(self, element: IDomElement) -> str:
        """
        Positional path of up to ``max_path_depth`` levels.

        The walk stops at the first ancestor (or the element itself) with a
        stable id. Other levels are qualified by test-id or aria-label when
        present, else by ``:nth-of-type(n)`` when the parent has more than one
        child with the same tag.
        """
        segments: List[str] = []
        node: Optional[IDomElement] = element

        while node is not None and len(segments) < self.max_path_depth:
            tag = await node.tag_name()
            attributes = await node.attributes()

            element_id = attributes.get("id")
            if element_id and is_stable_token(element_id):
                segments.insert(0, f"{tag}#{css_escape(element_id)}")
                break

            if attributes.get("data-testid"):
                segment = tag + attribute_selector("data-testid", attributes["data-testid"])
            elif attributes.get("aria-label"):
                segment = tag + attribute_selector("aria-label", attributes["aria-label"])
            else:
                segment = tag + await self._nth_of_type(node, tag, only_if_ambiguous=True)

            segments.insert(0, segment)
            node = await node.parent()

        return " > ".join(segments)

    @staticmethod
    async def _nth_of_type(node: IDomElement, tag: str, only_if_ambiguous: bool) -> str:
        parent = await node.parent()
        if parent is None:
            return "" if only_if_ambiguous else ":nth-of-type(1)"

        same_tag: List[IDomElement] = []
        for sibling in await parent.children():
            if await sibling.tag_name() == tag:
                same_tag.append(sibling)

        if only_if_ambiguous and len(same_tag) <= 1:
            return ""

        for index, sibling in enumerate(same_tag, start=1):
            if await sibling.is_same_node(node):
                return f":nth-of-type({index})"
        return ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _test_id(attributes: Dict[str, str]) -> Tuple[Optional[str], Optional[str]]:
        for name in TEST_ID_ATTRIBUTES:
            if attributes.get(name):
                return name, attributes[name]
        return None, None

    @staticmethod
    async def _safe_tag_name(element: IDomElement) -> Optional[str]:
        try:
            return await element.tag_name()
        except DomError:
            return None


async def visible_text(element: IDomElement) -> str:
    """
    Text a user would read on the element, trimmed and capped at 50 chars.

    Inputs and textareas use their current value (never for passwords) or
    placeholder, images their alt text, everything else its direct text
    nodes only so that nested content is not captured.
    """
    tag = await element.tag_name()
    if tag in ("input", "textarea"):
        text = ""
        if (await element.get_attribute("type") or "").lower() != "password":
            text = await element.get_value() or ""
        text = text or await element.get_attribute("placeholder") or ""
    elif tag == "img":
        text = await element.get_attribute("alt") or ""
    else:
        text = await element.own_text()
    return text.strip()[:MAX_TEXT_LENGTH].strip()


async def generate_locator(element: IDomElement) -> ElementLocator:
    """Shortcut for ``SelectorSynthesizer().generate(element)``."""
    return await SelectorSynthesizer().generate(element)


async def generate_selector(element: IDomElement) -> str:
    """Primary selector only, for callers that store a single string."""
    return (await generate_locator(element)).primary


async def simple_selector(element: IDomElement) -> str:
    """
    Quick selector: ``#id`` when the element has one, otherwise a path of up
    to five ``tag.class:nth-of-type(n)`` segments.
    """
    element_id = await element.get_attribute("id")
    if element_id:
        return f"#{css_escape(element_id)}"

    segments: List[str] = []
    node: Optional[IDomElement] = element
    while node is not None and len(segments) < MAX_PATH_DEPTH:
        tag = await node.tag_name()
        classes = "".join(f".{css_escape(c)}" for c in (await node.class_list())[:MAX_CLASSES])
        position = await SelectorSynthesizer._nth_of_type(node, tag, only_if_ambiguous=False)
        segments.insert(0, f"{tag}{classes}{position}")
        node = await node.parent()
    return " > ".join(segments)
