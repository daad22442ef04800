"""
Utilities module - Common utility functions.
"""

from auto_wiz.utils.logging import setup_logging
from auto_wiz.utils.cancellation import CancellationToken, cancellable_sleep
from auto_wiz.utils.urls import normalize_url, is_same_url, same_page, is_valid_url

__all__ = [
    "setup_logging",
    "CancellationToken",
    "cancellable_sleep",
    "normalize_url",
    "is_same_url",
    "same_page",
    "is_valid_url",
]
