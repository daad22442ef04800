"""
Settings - Pydantic models for type-safe configuration.

This module defines all configuration settings as Pydantic models,
providing validation, type hints, and automatic environment variable loading.

Example:
    >>> from auto_wiz.config import Settings, load_config
    >>> settings = load_config()  # Loads from env, yaml, and defaults
    >>> print(settings.replay.poll_interval_ms)
    100
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserSettings(BaseModel):
    """
    Headless browser settings (Playwright backend only).

    Attributes:
        headless: Run browser in headless mode
        browser_type: Playwright browser engine
        timeout_ms: Default timeout for page loads
        viewport_width: Browser viewport width in pixels
        viewport_height: Browser viewport height in pixels
        slow_mo: Slow down operations by this amount (ms) - useful for debugging
    """
    headless: bool = True
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    slow_mo: int = Field(default=0, ge=0, le=5000)


class ReplaySettings(BaseModel):
    """
    Locator resolution and step replay settings.

    Attributes:
        default_timeout_ms: Element wait timeout when a step carries none
        poll_interval_ms: Fixed cadence of the locator wait loop
        wait_for_navigation_timeout_ms: Default for waitForNavigation steps
        navigation_settle_ms: Pause after a navigate step completes
        navigation_wait_settle_ms: Pause after a waitForNavigation step
        stop_on_error: Stop the flow at the first failing step
        skip_first_navigate: Skip a leading navigate to the page already open
    """
    default_timeout_ms: int = Field(default=5000, ge=0, le=600000)
    poll_interval_ms: int = Field(default=100, ge=10, le=5000)
    wait_for_navigation_timeout_ms: int = Field(default=10000, ge=0, le=600000)
    navigation_settle_ms: int = Field(default=1000, ge=0, le=60000)
    navigation_wait_settle_ms: int = Field(default=500, ge=0, le=60000)
    stop_on_error: bool = True
    skip_first_navigate: bool = False


class LoggingSettings(BaseModel):
    """
    Logging configuration.

    Attributes:
        level: Log level
        format: Log format string
        file: Log file path (None for console only)
        json_format: Use JSON format for logs
    """
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    json_format: bool = False


class Settings(BaseSettings):
    """
    Root settings container - single source of truth for all configuration.

    Settings are loaded in this priority order (highest to lowest):
    1. Explicit values passed to constructor
    2. Environment variables (prefixed with AUTO_WIZ__)
    3. Config file (YAML)
    4. Default values

    Example:
        >>> settings = Settings()  # Load from env vars
        >>> settings = Settings(replay=ReplaySettings(stop_on_error=False))  # Override
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTO_WIZ__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    replay: ReplaySettings = Field(default_factory=ReplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False

    def merge_with(self, overrides: dict) -> "Settings":
        """
        Create a new Settings instance with overrides applied.

        Args:
            overrides: Dictionary of values to override

        Returns:
            New Settings instance with overrides applied
        """
        current = self.model_dump()

        def deep_merge(base: dict, updates: dict) -> dict:
            for key, value in updates.items():
                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value)
                else:
                    base[key] = value
            return base

        merged = deep_merge(current, overrides)
        return Settings(**merged)
