"""
Browsers module - Playwright backend for the DOM interfaces.
"""

from auto_wiz.browsers.playwright_browser import (
    BrowserType,
    PlaywrightBrowser,
    PlaywrightDocument,
    PlaywrightElement,
)

__all__ = [
    "BrowserType",
    "PlaywrightBrowser",
    "PlaywrightDocument",
    "PlaywrightElement",
]
