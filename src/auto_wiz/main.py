"""
auto-wiz - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--timeout, --visible, etc.)
    2. Environment variables (AUTO_WIZ__REPLAY__DEFAULT_TIMEOUT_MS, etc.)
    3. Config file (auto-wiz.yaml)

Usage:
    auto-wiz replay flow.json --html page.html
    auto-wiz replay flow.json --url https://example.com --visible
    auto-wiz locate page.html "button.primary"
    auto-wiz validate flow.json
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from auto_wiz import __version__
from auto_wiz.config import Settings, get_settings
from auto_wiz.dom import SoupDocument
from auto_wiz.exceptions import AutoWizError, InvalidSelectorError, StepValidationError
from auto_wiz.locator import SelectorSynthesizer
from auto_wiz.steps import (
    Flow,
    FlowRunner,
    RunResult,
    StepEvent,
    StepExecutor,
    StepPhase,
    load_flow,
    validate_steps,
)
from auto_wiz.utils import CancellationToken, setup_logging

# Create the CLI app
app = typer.Typer(
    name="auto-wiz",
    help="Replay recorded browser flows with resilient element locators",
    add_completion=False,
)

console = Console()
logger = logging.getLogger(__name__)


def _configure(verbose: bool) -> Settings:
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose or settings.debug else settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
        console=console,
    )
    return settings


def _load_flow_or_exit(flow_path: Path) -> Flow:
    try:
        return load_flow(flow_path)
    except (OSError, StepValidationError) as e:
        console.print(f"[red]Error loading flow: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _print_step_event(event: StepEvent) -> None:
    if event.phase is StepPhase.STARTED:
        return
    result = event.result
    status = "[green]✓[/green]" if result and result.success else "[red]✗[/red]"
    detail = ""
    if result is not None:
        detail = result.error or (result.used_selector or "")
    console.print(f"  {status} [{event.index + 1}/{event.total}] {event.step.type.value} [dim]{escape(detail)}[/dim]")


def _print_run_result(result: RunResult) -> None:
    step_number = (result.failed_step_index or 0) + 1
    if result.success:
        console.print(f"\n[green]✓ Success![/green]  Steps executed: {result.steps_executed}")
    elif result.cancelled:
        console.print(f"\n[yellow]Stopped[/yellow] at step {step_number}: {escape(result.error or '')}")
    else:
        console.print(f"\n[red]✗ Failed[/red] at step {step_number}")
        console.print(f"  Error: {escape(result.error or '')}")

    if len(result.errors) > 1:
        table = Table(title="Failed steps")
        table.add_column("Step", justify="right")
        table.add_column("Kind")
        table.add_column("Error")
        for failure in result.errors:
            kind = failure.error_kind.value if failure.error_kind else ""
            table.add_row(str(failure.index + 1), kind, escape(failure.error))
        console.print(table)

    if result.extracted_data:
        console.print("\n[bold]Extracted Data:[/bold]")
        for key, value in result.extracted_data.items():
            console.print(f"  {key}: {escape(str(value))}")


@app.command()
def replay(
    flow_path: Path = typer.Argument(..., help="Path to a recorded flow (.json)", exists=True, dir_okay=False),
    html: Optional[Path] = typer.Option(None, "--html", help="Replay in memory against a local HTML file"),
    url: Optional[str] = typer.Option(None, "--url", help="Replay in a Playwright browser starting at URL"),
    visible: bool = typer.Option(False, "--visible", "-v", help="Run with visible browser"),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", help="Element wait timeout in ms"),
    keep_going: bool = typer.Option(False, "--keep-going", help="Continue past failing steps"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Replay a recorded flow.

    Examples:
        auto-wiz replay flow.json --html page.html
        auto-wiz replay flow.json --url https://example.com --visible
    """
    settings = _configure(verbose)

    if (html is None) == (url is None):
        console.print("[red]Error: pass exactly one of --html or --url.[/red]")
        raise typer.Exit(1)

    overrides: dict = {"replay": {}}
    if timeout is not None:
        overrides["replay"]["default_timeout_ms"] = timeout
    if keep_going:
        overrides["replay"]["stop_on_error"] = False
    if visible:
        overrides["browser"] = {"headless": False}
    settings = settings.merge_with(overrides)

    flow = _load_flow_or_exit(flow_path)

    console.print(Panel.fit(
        f"[bold blue]auto-wiz replay[/bold blue]\n"
        f"[dim]Flow:[/dim] {flow.title or flow.id} ({len(flow.steps)} steps)\n"
        f"[dim]Target:[/dim] {html or url}",
        border_style="blue",
    ))

    try:
        if html is not None:
            result = asyncio.run(_replay_html(flow, html, settings))
        else:
            result = asyncio.run(_replay_browser(flow, url, settings))
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/dim]")
        raise typer.Exit(1)
    except AutoWizError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        logger.debug("Replay failed", exc_info=True)
        raise typer.Exit(1)

    _print_run_result(result)
    if not result.success:
        raise typer.Exit(1)


async def _replay_html(flow: Flow, html: Path, settings: Settings) -> RunResult:
    document = SoupDocument.from_file(html)
    runner = FlowRunner(
        StepExecutor(document, settings=settings.replay),
        settings=settings.replay,
        on_step=_print_step_event,
    )
    return await runner.run(flow, cancel_token=CancellationToken())


async def _replay_browser(flow: Flow, url: str, settings: Settings) -> RunResult:
    # Imported here so offline commands work without Playwright browsers installed.
    from auto_wiz.browsers import PlaywrightBrowser

    async with PlaywrightBrowser(settings.browser) as browser:
        document = await browser.new_document(url)
        runner = FlowRunner(
            StepExecutor(document, settings=settings.replay),
            navigator=document,
            settings=settings.replay,
            on_step=_print_step_event,
        )
        return await runner.run(flow, cancel_token=CancellationToken())


@app.command()
def locate(
    page: Path = typer.Argument(..., help="Local HTML file", exists=True, dir_okay=False),
    selector: str = typer.Argument(..., help="CSS selector of the element to describe"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Print the locator generated for the first element matching SELECTOR.
    """
    _configure(verbose)

    async def generate() -> Optional[dict]:
        document = SoupDocument.from_file(page)
        element = await document.query_selector(selector)
        if element is None:
            return None
        locator = await SelectorSynthesizer().generate(element)
        return locator.to_dict()

    try:
        locator = asyncio.run(generate())
    except InvalidSelectorError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if locator is None:
        console.print(f"[red]No element matches {escape(selector)}[/red]")
        raise typer.Exit(1)
    console.print_json(json.dumps(locator))


@app.command()
def validate(
    flow_path: Path = typer.Argument(..., help="Path to a recorded flow (.json)", exists=True, dir_okay=False),
):
    """Check a flow for malformed steps."""
    try:
        raw = json.loads(flow_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error reading flow: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    steps = raw.get("steps") if isinstance(raw, dict) else None
    result = validate_steps(steps)
    if not result.valid:
        console.print(f"[red]✗ Invalid flow:[/red] {escape(result.error)}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Flow is valid[/green] ({len(steps)} steps)")


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]auto-wiz[/bold] v{__version__}")


if __name__ == "__main__":
    app()
