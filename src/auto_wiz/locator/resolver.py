"""
Locator Resolver - Turn an ElementLocator into a live element, without waiting.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from auto_wiz.exceptions import InvalidSelectorError
from auto_wiz.interfaces.dom import IDocument, IDomElement
from auto_wiz.locator.css import attribute_selector
from auto_wiz.locator.models import ElementLocator, LocatorMetadata
from auto_wiz.locator.oracle import element_is_visible
from auto_wiz.locator.queries import find_by_label_text, find_by_test_id, find_by_text

logger = logging.getLogger(__name__)


@dataclass
class ResolvedElement:
    """
    A resolution hit.

    Attributes:
        element: The matched element
        used_selector: Selector (or descriptive query) that matched
        source: ``primary``, ``fallback`` or ``metadata:<field>``
    """
    element: IDomElement
    used_selector: str
    source: str


class LocatorResolver:
    """
    Single-pass locator resolution.

    Order, stopping at the first visible match:

    1. ``primary``
    2. each fallback in order
    3. metadata: test id, text (filtered by role, preferring the recorded
       tag), placeholder (exact), aria-label via label text (exact)

    Invalid selectors are skipped. The resolver never sleeps, never mutates
    the document and only checks visibility, not interactability.

    Example:
        >>> resolver = LocatorResolver(document)
        >>> button = await resolver.resolve(locator)
    """

    def __init__(self, document: IDocument):
        self.document = document

    async def resolve(self, locator: ElementLocator) -> Optional[IDomElement]:
        """Best visible element for a locator, or None."""
        resolved = await self.resolve_with_selector(locator)
        return resolved.element if resolved else None

    async def resolve_with_selector(self, locator: ElementLocator) -> Optional[ResolvedElement]:
        """Like ``resolve`` but also reports which candidate matched."""
        element = await self._query_visible(locator.primary)
        if element is not None:
            return ResolvedElement(element, locator.primary, "primary")

        for selector in locator.fallbacks:
            element = await self._query_visible(selector)
            if element is not None:
                logger.debug(f"Primary selector missed, matched fallback {selector!r}")
                return ResolvedElement(element, selector, "fallback")

        if locator.metadata is not None:
            return await self._resolve_metadata(locator.metadata)

        return None

    async def _resolve_metadata(self, metadata: LocatorMetadata) -> Optional[ResolvedElement]:
        if metadata.test_id:
            element = await find_by_test_id(self.document, metadata.test_id)
            if element is not None and await element_is_visible(element):
                return ResolvedElement(
                    element, attribute_selector("data-testid", metadata.test_id), "metadata:testId",
                )

        if metadata.text:
            candidates = await find_by_text(
                self.document, metadata.text, normalize=True, role=metadata.role,
            )
            element = await self._pick_visible(candidates, metadata.tag_name)
            if element is not None:
                return ResolvedElement(element, f"text={metadata.text!r}", "metadata:text")

        if metadata.placeholder:
            selector = attribute_selector("placeholder", metadata.placeholder)
            element = await self._query_visible(selector)
            if element is not None:
                return ResolvedElement(element, selector, "metadata:placeholder")

        if metadata.aria_label:
            candidates = await find_by_label_text(self.document, metadata.aria_label, exact=True)
            element = await self._pick_visible(candidates, None)
            if element is not None:
                return ResolvedElement(element, f"label={metadata.aria_label!r}", "metadata:ariaLabel")

        return None

    async def _query_visible(self, selector: str) -> Optional[IDomElement]:
        try:
            element = await self.document.query_selector(selector)
        except InvalidSelectorError as e:
            logger.debug(f"Skipping invalid selector {selector!r}: {e}")
            return None
        if element is not None and await element_is_visible(element):
            return element
        return None

    @staticmethod
    async def _pick_visible(candidates: List[IDomElement], tag_name: Optional[str]) -> Optional[IDomElement]:
        visible = [c for c in candidates if await element_is_visible(c)]
        if not visible:
            return None
        if tag_name:
            for candidate in visible:
                if await candidate.tag_name() == tag_name:
                    return candidate
        return visible[0]
