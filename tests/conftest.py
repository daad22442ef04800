"""
Pytest configuration and fixtures.
"""

import pytest


@pytest.fixture
def settings():
    """Provide test settings with short waits."""
    from auto_wiz.config import Settings, ReplaySettings

    return Settings(
        replay=ReplaySettings(
            default_timeout_ms=300,
            poll_interval_ms=20,
            navigation_settle_ms=0,
            navigation_wait_settle_ms=0,
        ),
    )


@pytest.fixture
def make_document():
    """Build an in-memory document from an HTML snippet."""
    from auto_wiz.dom import SoupDocument

    def _make(html: str, url: str = "https://example.com/app") -> SoupDocument:
        return SoupDocument(f"<html><body>{html}</body></html>", url=url)

    return _make


@pytest.fixture
def make_executor(settings):
    """Build a StepExecutor over a document using the test settings."""
    from auto_wiz.steps import StepExecutor

    def _make(document):
        return StepExecutor(document, settings=settings.replay)

    return _make


@pytest.fixture(autouse=True)
def _reset_global_settings():
    """Keep the settings singleton from leaking between tests."""
    from auto_wiz.config import reset_settings

    reset_settings()
    yield
    reset_settings()
