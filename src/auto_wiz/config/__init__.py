"""
Configuration module - Centralized settings management.

Usage:
    from auto_wiz.config import get_settings, load_config

    # Get global settings (loaded once)
    settings = get_settings()

    # Or load fresh settings with overrides
    settings = load_config(replay={"poll_interval_ms": 50})

Environment Variables:
    AUTO_WIZ__REPLAY__DEFAULT_TIMEOUT_MS=8000
    AUTO_WIZ__REPLAY__STOP_ON_ERROR=false
    AUTO_WIZ__BROWSER__HEADLESS=false
    AUTO_WIZ__LOGGING__LEVEL=DEBUG
"""

from auto_wiz.config.settings import (
    Settings,
    BrowserSettings,
    ReplaySettings,
    LoggingSettings,
)
from auto_wiz.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Call reset_settings() to reload.
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "BrowserSettings",
    "ReplaySettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
