"""
Wait Engine - Deadline-bounded polling over the resolver.

Polls at a fixed interval (100ms by default, no backoff) so the worst-case
latency past a deadline is one interval.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from auto_wiz.exceptions import InvalidSelectorError, LocatorTimeoutError, WaitCancelledError
from auto_wiz.interfaces.dom import IDocument, IDomElement
from auto_wiz.locator.models import ElementLocator
from auto_wiz.locator.oracle import element_is_interactable, element_is_visible
from auto_wiz.locator.resolver import LocatorResolver, ResolvedElement
from auto_wiz.utils.cancellation import CancellationToken

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 100


class WaitEngine:
    """
    Wait for locators and selectors to become available.

    At least one attempt is always made, even with a zero timeout. A
    supplied ``CancellationToken`` is checked on every tick.

    Example:
        >>> waits = WaitEngine(LocatorResolver(document))
        >>> button = await waits.wait_for_locator(locator, timeout=2000, interactable=True)
    """

    def __init__(self, resolver: LocatorResolver, poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS):
        self.resolver = resolver
        self.poll_interval_ms = poll_interval_ms

    @property
    def document(self) -> IDocument:
        return self.resolver.document

    async def wait_for_locator(
        self,
        locator: ElementLocator,
        timeout: int = DEFAULT_TIMEOUT_MS,
        visible: bool = False,
        interactable: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IDomElement:
        """
        Wait until the locator resolves to an element meeting the constraints.

        Args:
            locator: Locator to resolve
            timeout: Deadline in milliseconds
            visible: Require the element to be visible
            interactable: Require the element to be interactable
            cancel_token: Optional stop signal

        Returns:
            The matched element

        Raises:
            LocatorTimeoutError: Deadline passed without a qualifying match
            WaitCancelledError: The token was cancelled while waiting
        """
        resolved = await self.wait_for_resolution(
            locator,
            timeout=timeout,
            visible=visible,
            interactable=interactable,
            cancel_token=cancel_token,
        )
        return resolved.element

    async def wait_for_resolution(
        self,
        locator: ElementLocator,
        timeout: int = DEFAULT_TIMEOUT_MS,
        visible: bool = False,
        interactable: bool = False,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ResolvedElement:
        """Like ``wait_for_locator`` but also reports which selector matched."""

        async def attempt() -> Optional[ResolvedElement]:
            resolved = await self.resolver.resolve_with_selector(locator)
            if resolved is None:
                return None
            if visible and not await element_is_visible(resolved.element):
                return None
            if interactable and not await element_is_interactable(resolved.element):
                return None
            return resolved

        return await self._poll(attempt, locator.primary, timeout, cancel_token)

    async def wait_for_selector(
        self,
        selector: str,
        timeout: int = DEFAULT_TIMEOUT_MS,
        cancel_token: Optional[CancellationToken] = None,
    ) -> IDomElement:
        """
        Wait until a plain selector matches anything (present, visible or not).

        Invalid selectors never match, so they run into the deadline.
        """

        async def attempt() -> Optional[IDomElement]:
            try:
                return await self.document.query_selector(selector)
            except InvalidSelectorError as e:
                logger.debug(f"Skipping invalid selector {selector!r}: {e}")
                return None

        return await self._poll(attempt, selector, timeout, cancel_token)

    async def _poll(
        self,
        attempt: Callable[[], Awaitable[Optional[T]]],
        primary: str,
        timeout: int,
        cancel_token: Optional[CancellationToken],
    ) -> T:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(timeout, 0) / 1000
        interval = self.poll_interval_ms / 1000

        while True:
            if cancel_token is not None and cancel_token.is_cancelled:
                raise WaitCancelledError(primary)

            result = await attempt()
            if result is not None:
                return result

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.debug(f"Wait for {primary!r} timed out after {timeout}ms")
                raise LocatorTimeoutError(primary, timeout)
            await asyncio.sleep(min(interval, remaining))
