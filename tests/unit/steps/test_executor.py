"""
Tests for the step executor.
"""

import asyncio
import time

import pytest
from unittest.mock import AsyncMock, MagicMock

from auto_wiz.steps import StepErrorKind
from auto_wiz.utils import CancellationToken


def _listen(document, element, event_type):
    seen = []
    document.add_event_listener(element, event_type, seen.append)
    return seen


class TestClick:
    """Test click steps."""

    @pytest.mark.asyncio
    async def test_click_by_selector(self, make_document, make_executor):
        """A click dispatches a bubbling click event."""
        document = make_document('<div id="wrap"><button id="go">Go</button></div>')
        wrapper = await document.query_selector("#wrap")
        clicks = _listen(document, wrapper, "click")

        result = await make_executor(document).execute_step({"type": "click", "selector": "#go"})

        assert result.success
        assert result.used_selector == "#go"
        assert len(clicks) == 1
        assert await clicks[0].target.get_attribute("id") == "go"

    @pytest.mark.asyncio
    async def test_click_reports_matching_fallback(self, make_document, make_executor):
        """used_selector names the locator candidate that matched."""
        document = make_document('<button class="cta">Go</button>')
        step = {
            "type": "click",
            "selector": "#legacy",
            "locator": {"primary": "#go", "fallbacks": ["button.cta"]},
        }

        result = await make_executor(document).execute_step(step)

        assert result.success
        assert result.used_selector == "button.cta"

    @pytest.mark.asyncio
    async def test_click_missing_element(self, make_document, make_executor):
        """No match by selector is ELEMENT_NOT_FOUND."""
        document = make_document("<p>nothing</p>")

        result = await make_executor(document).execute_step({"type": "click", "selector": "#go"})

        assert not result.success
        assert result.error_kind is StepErrorKind.ELEMENT_NOT_FOUND
        assert result.error == "Element not found with selector: #go"
        assert result.used_selector is None

    @pytest.mark.asyncio
    async def test_click_locator_timeout(self, make_document, make_executor):
        """An expired locator wait plus a selector miss is a TIMEOUT naming the primary."""
        document = make_document("<p>nothing</p>")
        step = {"type": "click", "selector": "#legacy", "locator": {"primary": "#go"}, "timeoutMs": 100}

        result = await make_executor(document).execute_step(step)

        assert result.error_kind is StepErrorKind.TIMEOUT
        assert result.error == "Element not found with selector: #go"
        assert result.used_selector is None

    @pytest.mark.asyncio
    async def test_click_disabled(self, make_document, make_executor):
        """A disabled button is found but not clicked."""
        document = make_document('<button id="go" disabled>Go</button>')

        result = await make_executor(document).execute_step({"type": "click", "selector": "#go"})

        assert result.error_kind is StepErrorKind.NOT_INTERACTABLE
        assert result.error == "Element is not interactable: #go"
        assert document.events_of("click") == []

    @pytest.mark.asyncio
    async def test_click_disabled_via_locator(self, make_document, make_executor):
        """A locator wait on a disabled target falls back to the selector check."""
        document = make_document('<button id="go" disabled>Go</button>')
        step = {"type": "click", "selector": "#go", "locator": {"primary": "#go"}, "timeoutMs": 100}

        result = await make_executor(document).execute_step(step)

        assert result.error_kind is StepErrorKind.NOT_INTERACTABLE

    @pytest.mark.asyncio
    async def test_click_submit_button_submits_form(self, make_document, make_executor):
        """Clicking a submit button submits its form."""
        document = make_document('<form id="f"><button type="submit">Send</button></form>')

        result = await make_executor(document).execute_step({"type": "click", "selector": "button"})

        assert result.success
        assert len(document.events_of("submit")) == 1


class TestType:
    """Test type steps."""

    @pytest.mark.asyncio
    async def test_type_sets_value_and_fires_events(self, make_document, make_executor):
        """Typing sets the value then dispatches input and change."""
        document = make_document('<input id="q">')

        result = await make_executor(document).execute_step({"type": "type", "selector": "#q", "text": "cats"})

        field = await document.query_selector("#q")
        assert result.success
        assert await field.get_value() == "cats"
        assert [e.type for e in document.events] == ["input", "change"]
        assert all(e.bubbles for e in document.events)

    @pytest.mark.asyncio
    async def test_original_text_preferred(self, make_document, make_executor):
        """The unmasked text is typed."""
        document = make_document('<input id="pw" type="password">')
        step = {"type": "type", "selector": "#pw", "text": "******", "originalText": "hunter2"}

        await make_executor(document).execute_step(step)

        assert await (await document.query_selector("#pw")).get_value() == "hunter2"

    @pytest.mark.asyncio
    async def test_textarea(self, make_document, make_executor):
        """Textareas accept typed text."""
        document = make_document("<textarea id=\"t\"></textarea>")

        result = await make_executor(document).execute_step({"type": "type", "selector": "#t", "text": "hello"})

        assert result.success
        assert await (await document.query_selector("#t")).get_value() == "hello"

    @pytest.mark.asyncio
    async def test_submit_with_form(self, make_document, make_executor):
        """submit requests submission of the enclosing form."""
        document = make_document('<form><input name="q"></form>')
        step = {"type": "type", "selector": "input", "text": "cats", "submit": True}

        result = await make_executor(document).execute_step(step)

        assert result.success
        submits = document.events_of("submit")
        assert len(submits) == 1
        assert await submits[0].target.tag_name() == "form"

    @pytest.mark.asyncio
    async def test_submit_without_form(self, make_document, make_executor):
        """Without a form an Enter keydown is dispatched."""
        document = make_document('<input id="q">')
        step = {"type": "type", "selector": "#q", "text": "cats", "submit": True}

        await make_executor(document).execute_step(step)

        keydowns = document.events_of("keydown")
        assert len(keydowns) == 1
        assert keydowns[0].init["key"] == "Enter"
        assert keydowns[0].init["keyCode"] == 13

    @pytest.mark.asyncio
    async def test_wrong_kind(self, make_document, make_executor):
        """Typing into a non-text element is WRONG_ELEMENT_KIND."""
        document = make_document('<div id="d">x</div><input id="c" type="checkbox">')
        executor = make_executor(document)

        div = await executor.execute_step({"type": "type", "selector": "#d", "text": "x"})
        checkbox = await executor.execute_step({"type": "type", "selector": "#c", "text": "x"})

        assert div.error_kind is StepErrorKind.WRONG_ELEMENT_KIND
        assert div.error == "Element is not a text input"
        assert checkbox.error_kind is StepErrorKind.WRONG_ELEMENT_KIND

    @pytest.mark.asyncio
    async def test_disabled_input(self, make_document, make_executor):
        """Disabled inputs are not typed into."""
        document = make_document('<input id="q" disabled>')

        result = await make_executor(document).execute_step({"type": "type", "selector": "#q", "text": "x"})

        assert result.error_kind is StepErrorKind.NOT_INTERACTABLE
        assert document.events == []


class TestSelect:
    """Test select steps."""

    HTML = (
        '<select id="size"><option value="s">Small</option>'
        '<option value="m">Medium</option></select><div id="d"></div>'
    )

    @pytest.mark.asyncio
    async def test_select_by_value(self, make_document, make_executor):
        """Selecting by option value fires change."""
        document = make_document(self.HTML)

        result = await make_executor(document).execute_step({"type": "select", "selector": "#size", "value": "m"})

        assert result.success
        assert await (await document.query_selector("#size")).get_value() == "m"
        assert [e.type for e in document.events] == ["change"]

    @pytest.mark.asyncio
    async def test_select_by_text(self, make_document, make_executor):
        """Option text also matches."""
        document = make_document(self.HTML)

        await make_executor(document).execute_step({"type": "select", "selector": "#size", "value": "Medium"})

        assert await (await document.query_selector("#size")).get_value() == "m"

    @pytest.mark.asyncio
    async def test_missing_option(self, make_document, make_executor):
        """An unknown option is ACTION_FAILED."""
        document = make_document(self.HTML)

        result = await make_executor(document).execute_step({"type": "select", "selector": "#size", "value": "xl"})

        assert result.error_kind is StepErrorKind.ACTION_FAILED
        assert result.error.startswith("Failed to select option")

    @pytest.mark.asyncio
    async def test_wrong_kind(self, make_document, make_executor):
        """Selecting on a non-select is WRONG_ELEMENT_KIND."""
        document = make_document(self.HTML)

        result = await make_executor(document).execute_step({"type": "select", "selector": "#d", "value": "m"})

        assert result.error_kind is StepErrorKind.WRONG_ELEMENT_KIND
        assert result.error == "Element is not a select element"


class TestExtract:
    """Test extract steps."""

    @pytest.mark.asyncio
    async def test_extract_text(self, make_document, make_executor):
        """By default the trimmed text is extracted."""
        document = make_document('<h1 id="t">  Hello <b>world</b> </h1>')

        result = await make_executor(document).execute_step({"type": "extract", "selector": "#t"})

        assert result.success
        assert result.extracted_data == "Hello world"

    @pytest.mark.asyncio
    async def test_extract_value(self, make_document, make_executor):
        """prop=value reads a control's value."""
        document = make_document('<input id="q" value="cats">')

        result = await make_executor(document).execute_step({"type": "extract", "selector": "#q", "prop": "value"})

        assert result.extracted_data == "cats"

    @pytest.mark.asyncio
    async def test_extract_value_falls_back_to_text(self, make_document, make_executor):
        """prop=value on an element without a value reads its text."""
        document = make_document('<span id="s">42</span>')

        result = await make_executor(document).execute_step({"type": "extract", "selector": "#s", "prop": "value"})

        assert result.extracted_data == "42"

    @pytest.mark.asyncio
    async def test_extract_hidden_by_locator(self, make_document, make_executor):
        """Extraction by locator requires visibility."""
        document = make_document('<span id="s" hidden>42</span>')
        step = {"type": "extract", "selector": "#old-id", "locator": {"primary": "#s"}, "timeoutMs": 50}

        result = await make_executor(document).execute_step(step)

        assert result.error_kind is StepErrorKind.TIMEOUT


class TestWaitFor:
    """Test waitFor steps."""

    @pytest.mark.asyncio
    async def test_pure_delay(self, make_document, make_executor):
        """A waitFor without target sleeps for its timeout."""
        document = make_document("<p></p>")
        start = time.monotonic()

        result = await make_executor(document).execute_step({"type": "waitFor", "timeoutMs": 50})

        assert result.success
        assert time.monotonic() - start >= 0.045

    @pytest.mark.asyncio
    async def test_delay_cancelled(self, make_document, make_executor):
        """A cancelled delay ends early as CANCELLED."""
        document = make_document("<p></p>")
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel, "Stopped by user")
        start = time.monotonic()

        result = await make_executor(document).execute_step({"type": "waitFor", "timeoutMs": 5000}, token)

        assert result.error_kind is StepErrorKind.CANCELLED
        assert result.error == "Stopped by user"
        assert time.monotonic() - start < 1.0

    @pytest.mark.asyncio
    async def test_selector_present(self, make_document, make_executor):
        """A present element satisfies a selector wait even if hidden."""
        document = make_document('<div id="spinner" hidden></div>')

        result = await make_executor(document).execute_step({"type": "waitFor", "selector": "#spinner"})

        assert result.success
        assert result.used_selector == "#spinner"

    @pytest.mark.asyncio
    async def test_selector_timeout(self, make_document, make_executor):
        """A selector that never appears times out."""
        document = make_document("<p></p>")

        result = await make_executor(document).execute_step(
            {"type": "waitFor", "selector": "#never", "timeoutMs": 50},
        )

        assert result.error_kind is StepErrorKind.TIMEOUT
        assert result.error == "Timeout waiting for element: #never"

    @pytest.mark.asyncio
    async def test_locator_timeout(self, make_document, make_executor):
        """A locator wait that times out names the primary."""
        document = make_document("<p></p>")
        step = {"type": "waitFor", "locator": {"primary": "#never"}, "timeoutMs": 50}

        result = await make_executor(document).execute_step(step)

        assert result.error_kind is StepErrorKind.TIMEOUT
        assert result.error == "WaitFor failed: Timeout waiting for element. Primary selector: #never"

    @pytest.mark.asyncio
    async def test_locator_timeout_selector_fallback(self, make_document, make_executor):
        """A hidden element still satisfies the legacy selector after a locator timeout."""
        document = make_document('<div id="x" hidden></div>')
        step = {"type": "waitFor", "selector": "#x", "locator": {"primary": "#x"}, "timeoutMs": 50}

        result = await make_executor(document).execute_step(step)

        assert result.success
        assert result.used_selector == "#x"


class TestExecuteStep:
    """Test dispatch and error containment."""

    @pytest.mark.asyncio
    async def test_page_level_steps_pass_through(self, make_document, make_executor):
        """Navigation and screenshot steps succeed without touching the document."""
        document = make_document("<p></p>")
        executor = make_executor(document)

        for step in (
            {"type": "navigate", "url": "https://example.com"},
            {"type": "waitForNavigation"},
            {"type": "screenshot", "selector": "body"},
        ):
            assert (await executor.execute_step(step)).success
        assert document.events == []

    @pytest.mark.asyncio
    async def test_invalid_step(self, make_document, make_executor):
        """Malformed steps are INVALID_STEP."""
        executor = make_executor(make_document("<p></p>"))

        missing = await executor.execute_step({"type": "click"})
        unknown = await executor.execute_step({"type": "hover", "selector": "#a"})

        assert missing.error_kind is StepErrorKind.INVALID_STEP
        assert missing.error == "Click step requires selector"
        assert unknown.error_kind is StepErrorKind.INVALID_STEP
        assert unknown.error == "Unknown step type: hover"

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_document, make_executor):
        """A cancelled token stops the step before it runs."""
        document = make_document('<button id="go">Go</button>')
        token = CancellationToken()
        token.cancel("Stopped by user")

        result = await make_executor(document).execute_step({"type": "click", "selector": "#go"}, token)

        assert result.error_kind is StepErrorKind.CANCELLED
        assert document.events == []

    @pytest.mark.asyncio
    async def test_unexpected_error_contained(self):
        """Backend errors outside the DOM hierarchy become ACTION_FAILED."""
        from auto_wiz.config import ReplaySettings
        from auto_wiz.steps import StepExecutor

        document = MagicMock()
        document.query_selector = AsyncMock(side_effect=RuntimeError("socket closed"))
        executor = StepExecutor(document, settings=ReplaySettings())

        result = await executor.execute_step({"type": "click", "selector": "#go"})

        assert result.error_kind is StepErrorKind.ACTION_FAILED
        assert result.error == "Step execution failed: socket closed"
