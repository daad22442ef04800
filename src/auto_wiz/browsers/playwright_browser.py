"""
Playwright Browser - IDocument / INavigator over a Playwright page.

The locator engine and step executor run unchanged against a real browser:
every DOM read is a small ``evaluate`` round trip, and Playwright errors are
translated into the engine's ``DomError`` family.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from playwright.async_api import Error as PlaywrightError

from auto_wiz.config import BrowserSettings
from auto_wiz.exceptions import (
    BrowserError,
    BrowserLaunchError,
    DomError,
    InvalidSelectorError,
    NavigationError,
)
from auto_wiz.interfaces.dom import ElementState, IDocument, IDomElement, INavigator, classify_element

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, JSHandle, Page

logger = logging.getLogger(__name__)

_SELECTOR_ERROR_MARKERS = ("is not a valid selector", "Unexpected token", "SyntaxError")

_STATE_SCRIPT = """el => {
    const style = window.getComputedStyle(el);
    return {
        tagName: el.tagName.toLowerCase(),
        type: el.getAttribute('type'),
        display: style.display,
        visibility: style.visibility,
        opacity: style.opacity,
        pointerEvents: style.pointerEvents,
        disabled: !!el.disabled,
    };
}"""

_ATTRIBUTES_SCRIPT = """el => {
    const attrs = {};
    for (const attr of el.attributes) {
        attrs[attr.name] = attr.value;
    }
    return attrs;
}"""

_OWN_TEXT_SCRIPT = """el => Array.from(el.childNodes)
    .filter(node => node.nodeType === Node.TEXT_NODE)
    .map(node => node.textContent)
    .join('')"""

_GET_VALUE_SCRIPT = """el => ['INPUT', 'TEXTAREA', 'SELECT', 'BUTTON', 'OPTION'].includes(el.tagName)
    ? el.value
    : null"""

_SET_VALUE_SCRIPT = """(el, value) => {
    if (el.tagName === 'SELECT') {
        const options = Array.from(el.options);
        const match = options.find(o => o.value === value)
            || options.find(o => o.text.trim() === value);
        if (!match) {
            throw new Error(`No option matching "${value}"`);
        }
        el.value = match.value;
        return;
    }
    if (!('value' in el)) {
        throw new Error(`<${el.tagName.toLowerCase()}> has no value property`);
    }
    el.value = value;
}"""

_REQUEST_SUBMIT_SCRIPT = """form => {
    if (typeof form.requestSubmit === 'function') {
        form.requestSubmit();
    } else {
        form.submit();
    }
}"""


class BrowserType(Enum):
    """Playwright browser engines."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


@contextmanager
def _dom_errors(selector: Optional[str] = None) -> Iterator[None]:
    """Translate Playwright errors raised in the block into DomError."""
    try:
        yield
    except PlaywrightError as e:
        message = str(e)
        if selector is not None and any(marker in message for marker in _SELECTOR_ERROR_MARKERS):
            raise InvalidSelectorError(f"Invalid selector: {selector}", selector=selector) from e
        raise DomError(message) from e


class PlaywrightElement(IDomElement):
    """
    IDomElement over a Playwright ElementHandle.
    """

    def __init__(self, handle: "ElementHandle"):
        self._handle = handle

    @property
    def handle(self) -> "ElementHandle":
        return self._handle

    @staticmethod
    def from_js_handle(handle: "JSHandle") -> Optional["PlaywrightElement"]:
        element = handle.as_element()
        return PlaywrightElement(element) if element is not None else None

    async def tag_name(self) -> str:
        with _dom_errors():
            return await self._handle.evaluate("el => el.tagName.toLowerCase()")

    async def get_attribute(self, name: str) -> Optional[str]:
        with _dom_errors():
            return await self._handle.get_attribute(name)

    async def attributes(self) -> Dict[str, str]:
        with _dom_errors():
            return await self._handle.evaluate(_ATTRIBUTES_SCRIPT)

    async def parent(self) -> Optional[IDomElement]:
        with _dom_errors():
            handle = await self._handle.evaluate_handle("el => el.parentElement")
        return self.from_js_handle(handle)

    async def children(self) -> List[IDomElement]:
        with _dom_errors():
            handles = await self._handle.query_selector_all(":scope > *")
        return [PlaywrightElement(h) for h in handles]

    async def own_text(self) -> str:
        with _dom_errors():
            return await self._handle.evaluate(_OWN_TEXT_SCRIPT)

    async def text_content(self) -> str:
        with _dom_errors():
            return await self._handle.text_content() or ""

    async def state(self) -> ElementState:
        with _dom_errors():
            data = await self._handle.evaluate(_STATE_SCRIPT)
        return ElementState(
            tag_name=data["tagName"],
            display=data["display"],
            visibility=data["visibility"],
            opacity=str(data["opacity"]),
            pointer_events=data["pointerEvents"],
            disabled=bool(data["disabled"]),
            kind=classify_element(data["tagName"], data.get("type")),
        )

    async def get_value(self) -> Optional[str]:
        with _dom_errors():
            return await self._handle.evaluate(_GET_VALUE_SCRIPT)

    async def set_value(self, value: str) -> None:
        with _dom_errors():
            await self._handle.evaluate(_SET_VALUE_SCRIPT, value)

    async def click(self) -> None:
        # HTMLElement.click(), like in-page replay; no pointer simulation.
        with _dom_errors():
            await self._handle.evaluate("el => el.click()")

    async def dispatch_event(self, event_type: str, init: Optional[Dict[str, Any]] = None) -> None:
        with _dom_errors():
            await self._handle.dispatch_event(event_type, init or {})

    async def form(self) -> Optional[IDomElement]:
        with _dom_errors():
            handle = await self._handle.evaluate_handle("el => el.form || el.closest('form')")
        return self.from_js_handle(handle)

    async def request_submit(self) -> None:
        with _dom_errors():
            await self._handle.evaluate(_REQUEST_SUBMIT_SCRIPT)

    async def query_selector(self, selector: str) -> Optional[IDomElement]:
        with _dom_errors(selector):
            handle = await self._handle.query_selector(selector)
        return PlaywrightElement(handle) if handle else None

    async def is_same_node(self, other: IDomElement) -> bool:
        if not isinstance(other, PlaywrightElement):
            return False
        with _dom_errors():
            return await self._handle.evaluate("(a, b) => a === b", other.handle)


class PlaywrightDocument(IDocument, INavigator):
    """
    IDocument and INavigator over a Playwright Page.

    Example:
        >>> document = await browser.new_document("https://example.com")
        >>> runner = FlowRunner(StepExecutor(document), navigator=document)
    """

    def __init__(self, page: "Page", timeout_ms: int = 30000):
        """
        Initialize the document wrapper.

        Args:
            page: Playwright Page object
            timeout_ms: Default navigation timeout
        """
        self._page = page
        self._timeout_ms = timeout_ms

    @property
    def page(self) -> "Page":
        return self._page

    # ------------------------------------------------------------------
    # IDocument
    # ------------------------------------------------------------------

    async def query_selector(self, selector: str) -> Optional[IDomElement]:
        with _dom_errors(selector):
            handle = await self._page.query_selector(selector)
        return PlaywrightElement(handle) if handle else None

    async def query_selector_all(self, selector: str) -> List[IDomElement]:
        with _dom_errors(selector):
            handles = await self._page.query_selector_all(selector)
        return [PlaywrightElement(h) for h in handles]

    async def get_element_by_id(self, element_id: str) -> Optional[IDomElement]:
        with _dom_errors():
            handle = await self._page.evaluate_handle("id => document.getElementById(id)", element_id)
        return PlaywrightElement.from_js_handle(handle)

    async def body(self) -> Optional[IDomElement]:
        with _dom_errors():
            handle = await self._page.query_selector("body")
        return PlaywrightElement(handle) if handle else None

    # ------------------------------------------------------------------
    # INavigator
    # ------------------------------------------------------------------

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, timeout_ms: Optional[int] = None) -> None:
        try:
            await self._page.goto(url, timeout=timeout_ms or self._timeout_ms, wait_until="load")
        except PlaywrightError as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}", url=url) from e

    async def wait_for_load(self, timeout_ms: int) -> None:
        try:
            await self._page.wait_for_load_state("load", timeout=timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Page did not finish loading: {e}", url=self._page.url) from e


class PlaywrightBrowser:
    """
    Owns the Playwright process, browser and context.

    Example:
        >>> async with PlaywrightBrowser(settings.browser) as browser:
        ...     document = await browser.new_document("https://example.com")
    """

    def __init__(self, settings: Optional[BrowserSettings] = None):
        """Initialize the browser (not launched yet)."""
        self.settings = settings or BrowserSettings()
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None

    @property
    def is_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def launch(self, headless: Optional[bool] = None, **options: Any) -> None:
        """
        Launch the browser.

        Args:
            headless: Override the configured headless mode
            **options: Additional Playwright launch options
        """
        browser_type = BrowserType(self.settings.browser_type)
        headless = self.settings.headless if headless is None else headless
        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()

            launchers = {
                BrowserType.CHROMIUM: self._playwright.chromium,
                BrowserType.FIREFOX: self._playwright.firefox,
                BrowserType.WEBKIT: self._playwright.webkit,
            }
            self._browser = await launchers[browser_type].launch(
                headless=headless,
                slow_mo=self.settings.slow_mo,
                **options,
            )
            self._context = await self._browser.new_context(
                viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
            )
            logger.info(f"Launched {browser_type.value} browser (headless={headless})")

        except PlaywrightError as e:
            await self.close()
            raise BrowserLaunchError(f"Failed to launch browser: {e}", browser_type=browser_type.value) from e

    async def new_document(self, url: Optional[str] = None) -> PlaywrightDocument:
        """
        Open a new page, optionally navigating to ``url``.

        Raises:
            BrowserError: If the browser has not been launched
            NavigationError: If the initial navigation fails
        """
        if self._context is None:
            raise BrowserError("Browser not launched. Call launch() first.")

        page = await self._context.new_page()
        page.set_default_timeout(self.settings.timeout_ms)
        document = PlaywrightDocument(page, timeout_ms=self.settings.timeout_ms)
        if url:
            await document.goto(url)
        return document

    async def close(self) -> None:
        """Close the browser and clean up."""
        if self._context is not None:
            await self._context.close()
            self._context = None

        if self._browser is not None:
            await self._browser.close()
            self._browser = None

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Browser closed")

    async def __aenter__(self) -> "PlaywrightBrowser":
        await self.launch()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
