"""
Integration tests for the CLI commands.
"""

import json

import pytest
from typer.testing import CliRunner

PAGE = """
<html><body>
  <form><input name="q" placeholder="Search"><button data-testid="go">Go</button></form>
  <h1 id="title">Hello</h1>
</body></html>
"""


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def page(tmp_path):
    """Write a local HTML page."""
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


def _write_flow(tmp_path, steps, name="flow.json"):
    path = tmp_path / name
    path.write_text(json.dumps({"id": "f1", "title": "Search flow", "steps": steps}), encoding="utf-8")
    return path


class TestCLIReplay:
    """Test the 'replay' CLI command."""

    def test_replay_help(self, runner):
        """Test help for replay command."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["replay", "--help"])
        assert result.exit_code == 0
        assert "--html" in result.stdout
        assert "--keep-going" in result.stdout

    def test_replay_html_success(self, runner, page, tmp_path):
        """A flow replays against a local page."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [
            {"type": "type", "selector": "input[name=q]", "text": "cats"},
            {"type": "click", "selector": '[data-testid="go"]'},
            {"type": "extract", "selector": "#title"},
        ])

        result = runner.invoke(app, ["replay", str(flow), "--html", str(page)])

        assert result.exit_code == 0, result.stdout
        assert "Success" in result.stdout
        assert "step_2: Hello" in result.stdout

    def test_replay_html_failure(self, runner, page, tmp_path):
        """A failing step exits non-zero and names the step."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [{"type": "click", "selector": "#missing"}])

        result = runner.invoke(app, ["replay", str(flow), "--html", str(page)])

        assert result.exit_code == 1
        assert "Failed" in result.stdout
        assert "#missing" in result.stdout

    def test_replay_keep_going(self, runner, page, tmp_path):
        """--keep-going runs past failures and lists them."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [
            {"type": "click", "selector": "#missing"},
            {"type": "extract", "selector": "#title"},
            {"type": "click", "selector": "#also-missing"},
        ])

        result = runner.invoke(app, ["replay", str(flow), "--html", str(page), "--keep-going"])

        assert result.exit_code == 1
        assert "Failed steps" in result.stdout
        assert "step_1: Hello" in result.stdout

    def test_replay_requires_one_target(self, runner, page, tmp_path):
        """Exactly one of --html and --url must be given."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [{"type": "click", "selector": "#go"}])

        neither = runner.invoke(app, ["replay", str(flow)])
        both = runner.invoke(app, ["replay", str(flow), "--html", str(page), "--url", "https://example.com"])

        assert neither.exit_code == 1
        assert both.exit_code == 1
        assert "exactly one" in neither.stdout

    def test_replay_invalid_flow_file(self, runner, page, tmp_path):
        """A malformed flow file is reported."""
        from auto_wiz.main import app
        flow = tmp_path / "flow.json"
        flow.write_text("{broken", encoding="utf-8")

        result = runner.invoke(app, ["replay", str(flow), "--html", str(page)])

        assert result.exit_code == 1
        assert "Error loading flow" in result.stdout

    def test_replay_nonexistent_file(self, runner, page):
        """Test error on nonexistent flow file."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["replay", "nonexistent_flow.json", "--html", str(page)])
        assert result.exit_code != 0


class TestCLILocate:
    """Test the 'locate' CLI command."""

    def test_locate_prints_locator(self, runner, page):
        """The generated locator is printed as JSON."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["locate", str(page), "button"])

        assert result.exit_code == 0, result.stdout
        assert '"primary"' in result.stdout
        assert "data-testid" in result.stdout
        assert '"tagName": "button"' in result.stdout

    def test_locate_no_match(self, runner, page):
        """No match exits non-zero."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["locate", str(page), "table"])

        assert result.exit_code == 1
        assert "No element matches" in result.stdout

    def test_locate_invalid_selector(self, runner, page):
        """An invalid selector is reported, not raised."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["locate", str(page), "div[["])

        assert result.exit_code == 1
        assert "Invalid selector" in result.stdout


class TestCLIValidate:
    """Test the 'validate' CLI command."""

    def test_validate_ok(self, runner, tmp_path):
        """A well-formed flow passes."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [
            {"type": "navigate", "url": "https://example.com"},
            {"type": "click", "selector": "#go"},
        ])

        result = runner.invoke(app, ["validate", str(flow)])

        assert result.exit_code == 0
        assert "Flow is valid" in result.stdout
        assert "2 steps" in result.stdout

    def test_validate_invalid(self, runner, tmp_path):
        """The first bad step is reported with its position."""
        from auto_wiz.main import app
        flow = _write_flow(tmp_path, [
            {"type": "click", "selector": "#go"},
            {"type": "select", "selector": "#size"},
        ])

        result = runner.invoke(app, ["validate", str(flow)])

        assert result.exit_code == 1
        assert "Step 2: Select step requires value" in result.stdout


class TestCLIVersion:
    """Test the 'version' CLI command."""

    def test_version(self, runner):
        """Test version command."""
        from auto_wiz.main import app
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "auto-wiz" in result.stdout
        assert "0.1.0" in result.stdout
