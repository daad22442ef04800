"""
Flow Runner - Execute a flow's steps in order.

Steps run strictly sequentially through the ``StepExecutor``. When an
``INavigator`` is supplied the runner also owns page-level steps:

- ``navigate`` loads the step's URL, then settles
- ``waitForNavigation`` waits for the page to finish loading, then settles
- element steps recorded on another page (origin + path) navigate there first
"""

import logging
from typing import Callable, List, Optional

from auto_wiz.config import ReplaySettings
from auto_wiz.exceptions import BrowserError, DomError
from auto_wiz.interfaces.dom import INavigator
from auto_wiz.steps.executor import StepExecutor
from auto_wiz.steps.models import (
    ExecutionResult,
    Flow,
    RunResult,
    Step,
    StepErrorKind,
    StepEvent,
    StepFailure,
    StepPhase,
    StepType,
)
from auto_wiz.steps.validation import validate_step
from auto_wiz.utils.cancellation import CancellationToken, cancellable_sleep
from auto_wiz.utils.urls import same_page

logger = logging.getLogger(__name__)

StepCallback = Callable[[StepEvent], None]


class FlowRunner:
    """
    Run flows and aggregate their results.

    Example:
        >>> runner = FlowRunner(StepExecutor(document))
        >>> result = await runner.run(flow)
        >>> result.extracted_data
        {'step_2': 'Hello'}
    """

    def __init__(
        self,
        executor: StepExecutor,
        navigator: Optional[INavigator] = None,
        settings: Optional[ReplaySettings] = None,
        on_step: Optional[StepCallback] = None,
    ):
        """
        Initialize the runner.

        Args:
            executor: Executor for element steps
            navigator: Page navigation; without one, page-level steps are no-ops
            settings: Replay settings (defaults to the executor's)
            on_step: Called with a ``StepEvent`` before and after each step
        """
        self.executor = executor
        self.navigator = navigator
        self.settings = settings or executor.settings
        self.on_step = on_step

    async def run(self, flow: Flow, cancel_token: Optional[CancellationToken] = None) -> RunResult:
        """
        Run every step of a flow.

        With ``stop_on_error`` (the default) the first failing step ends the
        run. Otherwise failures are collected in ``errors`` and the run goes
        on; ``success`` is still False and ``error`` / ``failed_step_index``
        describe the first failure.

        Args:
            flow: Flow to run
            cancel_token: Checked between steps and inside waits

        Returns:
            Aggregate result
        """
        steps = flow.steps
        total = len(steps)
        result = RunResult(success=True)

        logger.info(f"Running flow '{flow.title or flow.id}' ({total} steps)")

        start = 1 if self._should_skip_first(steps) else 0
        if start:
            logger.info("Skipping first navigate step; page is already open")

        for index in range(start, total):
            step = steps[index]

            if cancel_token is not None and cancel_token.is_cancelled:
                logger.info(f"Flow stopped before step {index + 1}: {cancel_token.reason}")
                self._fail(result, index, cancel_token.reason or "Cancelled")
                result.cancelled = True
                break

            self._notify(StepEvent(index, total, step, StepPhase.STARTED))
            step_result = await self._run_step(step, cancel_token)
            result.steps_executed += 1
            self._notify(StepEvent(index, total, step, StepPhase.COMPLETED, step_result))

            if step_result.success:
                if step_result.extracted_data is not None:
                    result.extracted_data[f"step_{index}"] = step_result.extracted_data
                continue

            error = step_result.error or "Step failed"
            if step_result.error_kind is StepErrorKind.CANCELLED:
                self._fail(result, index, error)
                result.cancelled = True
                break

            result.errors.append(StepFailure(
                index=index,
                error=error,
                error_kind=step_result.error_kind,
                selector=step.display_selector if step.type.targets_element else None,
            ))
            self._fail(result, index, error)
            if self.settings.stop_on_error:
                logger.warning(f"Flow failed at step {index + 1}: {error}")
                break

        if result.success:
            logger.info(f"Flow completed ({result.steps_executed} steps)")
        return result

    @staticmethod
    def _fail(result: RunResult, index: int, error: str) -> None:
        if result.success:
            result.success = False
            result.error = error
            result.failed_step_index = index

    def _should_skip_first(self, steps: List[Step]) -> bool:
        if not self.settings.skip_first_navigate or self.navigator is None or not steps:
            return False
        first = steps[0]
        return first.type is StepType.NAVIGATE and bool(first.url) and same_page(first.url, self.navigator.url)

    def _notify(self, event: StepEvent) -> None:
        if self.on_step is None:
            return
        try:
            self.on_step(event)
        except Exception as e:
            logger.warning(f"Step callback error: {e}")

    async def _run_step(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        if self.navigator is None:
            return await self.executor.execute_step(step, cancel_token)

        validation = validate_step(step)
        if not validation.valid:
            return ExecutionResult.fail(StepErrorKind.INVALID_STEP, validation.error or "Invalid step")

        try:
            if step.type is StepType.NAVIGATE:
                await self._navigate(step.url, self.settings.navigation_settle_ms, cancel_token)
                return ExecutionResult.ok()

            if step.type is StepType.WAIT_FOR_NAVIGATION:
                timeout = step.timeout_ms if step.timeout_ms is not None else self.settings.wait_for_navigation_timeout_ms
                await self.navigator.wait_for_load(int(timeout))
                await cancellable_sleep(self.settings.navigation_wait_settle_ms, cancel_token)
                return ExecutionResult.ok()

            if step.url and not same_page(step.url, self.navigator.url):
                logger.info(f"URL mismatch: expected {step.url}, got {self.navigator.url}")
                await self._navigate(step.url, self.settings.navigation_settle_ms, cancel_token)
        except (BrowserError, DomError) as e:
            return ExecutionResult.fail(StepErrorKind.ACTION_FAILED, f"Navigation failed: {e}")

        return await self.executor.execute_step(step, cancel_token)

    async def _navigate(self, url: str, settle_ms: int, cancel_token: Optional[CancellationToken]) -> None:
        logger.info(f"Navigating to: {url}")
        await self.navigator.goto(url)
        await cancellable_sleep(settle_ms, cancel_token)
