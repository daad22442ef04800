"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout auto-wiz,
providing clear error types for different failure scenarios.
"""

from auto_wiz.exceptions.base import (
    AutoWizError,
    ConfigurationError,
)
from auto_wiz.exceptions.browser import (
    BrowserError,
    BrowserLaunchError,
    NavigationError,
)
from auto_wiz.exceptions.dom import (
    DomError,
    InvalidSelectorError,
    ElementNotFoundError,
    ElementNotInteractableError,
    WrongElementKindError,
    LocatorTimeoutError,
    WaitCancelledError,
)
from auto_wiz.exceptions.step import (
    StepError,
    StepValidationError,
    StepExecutionError,
)

__all__ = [
    # Base exceptions
    "AutoWizError",
    "ConfigurationError",
    # Browser exceptions
    "BrowserError",
    "BrowserLaunchError",
    "NavigationError",
    # DOM exceptions
    "DomError",
    "InvalidSelectorError",
    "ElementNotFoundError",
    "ElementNotInteractableError",
    "WrongElementKindError",
    "LocatorTimeoutError",
    "WaitCancelledError",
    # Step exceptions
    "StepError",
    "StepValidationError",
    "StepExecutionError",
]
