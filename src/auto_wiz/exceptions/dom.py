"""
DOM and locator exceptions.
"""

from auto_wiz.exceptions.base import AutoWizError


class DomError(AutoWizError):
    """Base exception for errors raised while querying or driving a document."""
    pass


class InvalidSelectorError(DomError):
    """
    A selector string could not be parsed by the document backend.

    The resolver treats this as "no match for that candidate".
    """

    def __init__(self, message: str, selector: str):
        super().__init__(message, {"selector": selector})
        self.selector = selector


class ElementNotFoundError(DomError):
    """
    Element not found in the document.

    Raised when no element matches a selector or locator. ``timed_out`` is
    set when a locator was waited on until its deadline first.
    """

    def __init__(self, message: str, selector: str, timed_out: bool = False):
        super().__init__(message, {"selector": selector})
        self.selector = selector
        self.timed_out = timed_out


class ElementNotInteractableError(DomError):
    """
    Element cannot be interacted with.

    Raised when an element is found but is hidden, disabled, or has
    pointer events suppressed.
    """

    def __init__(self, message: str, selector: str, reason: str | None = None):
        super().__init__(message, {"selector": selector, "reason": reason})
        self.selector = selector
        self.reason = reason


class WrongElementKindError(DomError):
    """
    Element is of the wrong kind for the requested action.

    For example a select step resolving to a plain ``<div>``.
    """

    def __init__(self, message: str, selector: str, expected: str, actual: str):
        super().__init__(message, {"selector": selector, "expected": expected, "actual": actual})
        self.selector = selector
        self.expected = expected
        self.actual = actual


class LocatorTimeoutError(DomError):
    """
    Waiting for a locator exceeded its deadline.

    The message always names the locator's primary selector.
    """

    def __init__(self, primary: str, timeout_ms: int):
        super().__init__(f"Timeout waiting for element. Primary selector: {primary}")
        self.primary = primary
        self.timeout_ms = timeout_ms


class WaitCancelledError(DomError):
    """A wait was abandoned because its cancellation token was triggered."""

    def __init__(self, primary: str):
        super().__init__(f"Wait cancelled. Primary selector: {primary}")
        self.primary = primary
