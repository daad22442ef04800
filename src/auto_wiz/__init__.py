"""
auto-wiz - Record/replay engine for browser flows.

Generates multi-tier element locators at recording time, resolves them with
fallbacks at replay time, and executes recorded steps against an in-memory
DOM or a Playwright browser.

Example:
    >>> from auto_wiz import FlowRunner, StepExecutor, SoupDocument, load_flow
    >>> document = SoupDocument(html)
    >>> result = await FlowRunner(StepExecutor(document)).run(load_flow("flow.json"))
"""

__version__ = "0.1.0"

# Public API exports
from auto_wiz.config.settings import Settings
from auto_wiz.dom import SoupDocument
from auto_wiz.locator import ElementLocator, LocatorResolver, SelectorSynthesizer, WaitEngine
from auto_wiz.steps import Flow, FlowRunner, RunResult, Step, StepExecutor, load_flow
from auto_wiz.utils.cancellation import CancellationToken

__all__ = [
    "Settings",
    "SoupDocument",
    "ElementLocator",
    "SelectorSynthesizer",
    "LocatorResolver",
    "WaitEngine",
    "Step",
    "Flow",
    "load_flow",
    "StepExecutor",
    "FlowRunner",
    "RunResult",
    "CancellationToken",
    "__version__",
]
