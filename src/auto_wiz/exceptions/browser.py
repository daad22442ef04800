"""
Browser-related exceptions.
"""

from auto_wiz.exceptions.base import AutoWizError


class BrowserError(AutoWizError):
    """Base exception for browser-related errors."""
    pass


class BrowserLaunchError(BrowserError):
    """
    Failed to launch the browser.

    Raised when Playwright is not installed, its browsers are missing, or the
    launch itself fails.
    """

    def __init__(self, message: str, browser_type: str | None = None):
        super().__init__(message, {"browser_type": browser_type} if browser_type else None)
        self.browser_type = browser_type


class NavigationError(BrowserError):
    """
    Navigation failed.

    Raised when a page fails to load or a load wait times out.
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message, {"url": url} if url else None)
        self.url = url
