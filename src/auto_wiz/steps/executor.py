"""
Step Executor - Apply one recorded step to a document.

The executor is the boundary past which exceptions do not escape: every
outcome, including unexpected errors, comes back as an ``ExecutionResult``.

Element acquisition, shared by click/type/select/extract/waitFor:

1. With a locator, wait for it (visible, plus interactable for
   click/type/select) within the step's timeout.
2. If that fails, query the legacy ``selector`` once, so flows recorded
   before locators existed still replay.

Action handlers raise the typed DOM and step errors; ``execute_step`` maps
each onto a ``StepErrorKind``.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from auto_wiz.config import ReplaySettings, get_settings
from auto_wiz.exceptions import (
    DomError,
    ElementNotFoundError,
    ElementNotInteractableError,
    InvalidSelectorError,
    LocatorTimeoutError,
    StepExecutionError,
    StepValidationError,
    WaitCancelledError,
    WrongElementKindError,
)
from auto_wiz.interfaces.dom import ElementKind, ElementState, IDocument, IDomElement
from auto_wiz.locator.oracle import is_interactable, is_visible, snapshot
from auto_wiz.locator.resolver import LocatorResolver
from auto_wiz.locator.wait import WaitEngine
from auto_wiz.steps.models import DEFAULT_EXTRACT_PROP, ExecutionResult, Step, StepErrorKind, StepType
from auto_wiz.steps.validation import validate_step
from auto_wiz.utils.cancellation import CancellationToken, cancellable_sleep

logger = logging.getLogger(__name__)

ENTER_KEYDOWN = {
    "key": "Enter",
    "code": "Enter",
    "keyCode": 13,
    "which": 13,
    "bubbles": True,
    "cancelable": True,
}

StepHandler = Callable[[Step, Optional[CancellationToken]], Awaitable[ExecutionResult]]

_WRONG_KIND_MESSAGES = {
    ElementKind.TEXT_INPUT: "Element is not a text input",
    ElementKind.SELECT: "Element is not a select element",
}


class StepExecutor:
    """
    Execute steps against an ``IDocument``.

    Example:
        >>> executor = StepExecutor(SoupDocument(html))
        >>> result = await executor.execute_step({"type": "click", "selector": "#go"})
        >>> result.success
        True
    """

    def __init__(
        self,
        document: IDocument,
        settings: Optional[ReplaySettings] = None,
        resolver: Optional[LocatorResolver] = None,
        wait_engine: Optional[WaitEngine] = None,
    ):
        """
        Initialize the executor.

        Args:
            document: Document steps are applied to
            settings: Replay settings (defaults to the global settings)
            resolver: Locator resolver (built over ``document`` if omitted)
            wait_engine: Wait engine (built over ``resolver`` if omitted)
        """
        self.document = document
        self.settings = settings or get_settings().replay
        self.resolver = resolver or LocatorResolver(document)
        self.wait_engine = wait_engine or WaitEngine(self.resolver, self.settings.poll_interval_ms)
        self._handlers: Dict[StepType, StepHandler] = {
            StepType.CLICK: self._execute_click,
            StepType.TYPE: self._execute_type,
            StepType.SELECT: self._execute_select,
            StepType.EXTRACT: self._execute_extract,
            StepType.WAIT_FOR: self._execute_wait_for,
            StepType.NAVIGATE: self._pass_through,
            StepType.WAIT_FOR_NAVIGATION: self._pass_through,
            StepType.SCREENSHOT: self._pass_through,
        }

    async def execute_step(
        self,
        step: Union[Step, Dict[str, Any]],
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExecutionResult:
        """
        Execute one step.

        Args:
            step: Step or its JSON dict form
            cancel_token: Optional stop signal, honored by waits

        Returns:
            Structured outcome; never raises
        """
        if not isinstance(step, Step):
            try:
                step = Step.from_dict(step)
            except StepValidationError as e:
                return ExecutionResult.fail(StepErrorKind.INVALID_STEP, e.message)

        validation = validate_step(step)
        if not validation.valid:
            return ExecutionResult.fail(StepErrorKind.INVALID_STEP, validation.error or "Invalid step")

        if cancel_token is not None and cancel_token.is_cancelled:
            return ExecutionResult.fail(StepErrorKind.CANCELLED, cancel_token.reason or "Cancelled")

        try:
            result = await self._handlers[step.type](step, cancel_token)
        except WaitCancelledError as e:
            result = ExecutionResult.fail(StepErrorKind.CANCELLED, e.message)
        except ElementNotFoundError as e:
            kind = StepErrorKind.TIMEOUT if e.timed_out else StepErrorKind.ELEMENT_NOT_FOUND
            result = ExecutionResult.fail(kind, e.message)
        except ElementNotInteractableError as e:
            result = ExecutionResult.fail(StepErrorKind.NOT_INTERACTABLE, e.message, e.selector)
        except WrongElementKindError as e:
            result = ExecutionResult.fail(StepErrorKind.WRONG_ELEMENT_KIND, e.message, e.selector)
        except StepExecutionError as e:
            result = ExecutionResult.fail(StepErrorKind.ACTION_FAILED, e.message, e.selector)
        except Exception as e:
            logger.exception(f"Unexpected error executing {step.type.value} step")
            result = ExecutionResult.fail(StepErrorKind.ACTION_FAILED, f"Step execution failed: {e}")

        if result.success:
            logger.info(f"{step.type.value} step succeeded ({result.used_selector or 'no selector'})")
        else:
            logger.warning(f"{step.type.value} step failed: {result.error}")
        return result

    # ------------------------------------------------------------------
    # Element acquisition
    # ------------------------------------------------------------------

    def _timeout(self, step: Step) -> int:
        if step.timeout_ms is not None:
            return int(step.timeout_ms)
        return self.settings.default_timeout_ms

    async def _acquire(
        self,
        step: Step,
        interactable: bool,
        cancel_token: Optional[CancellationToken],
    ) -> Tuple[IDomElement, str]:
        """
        Find the step's element and the selector that matched.

        Raises:
            ElementNotFoundError: Neither the locator nor the selector matched
            WaitCancelledError: The token was cancelled during the locator wait
        """
        timed_out = False
        if step.locator is not None:
            try:
                resolved = await self.wait_engine.wait_for_resolution(
                    step.locator,
                    timeout=self._timeout(step),
                    visible=True,
                    interactable=interactable,
                    cancel_token=cancel_token,
                )
                return resolved.element, resolved.used_selector
            except LocatorTimeoutError as e:
                logger.warning(f"Locator failed, falling back to selector: {e}")
                timed_out = True

        if step.selector:
            element = await self._query(step.selector)
            if element is not None:
                return element, step.selector

        raise ElementNotFoundError(
            f"Element not found with selector: {step.display_selector}",
            selector=step.display_selector,
            timed_out=timed_out,
        )

    async def _query(self, selector: str) -> Optional[IDomElement]:
        try:
            return await self.document.query_selector(selector)
        except InvalidSelectorError as e:
            logger.debug(f"Invalid selector {selector!r}: {e}")
            return None

    @staticmethod
    async def _require_state(
        element: IDomElement,
        used_selector: str,
        kind: Optional[ElementKind] = None,
    ) -> ElementState:
        """
        Check element kind (when given), then interactability.

        Raises:
            WrongElementKindError: The element is not of ``kind``
            ElementNotInteractableError: The element cannot be acted on
        """
        state = await snapshot(element)
        if kind is not None and (state is None or state.kind is not kind):
            actual = state.kind.value if state is not None else "unknown"
            raise WrongElementKindError(
                _WRONG_KIND_MESSAGES[kind], used_selector, expected=kind.value, actual=actual,
            )

        if state is None or not is_interactable(state):
            reason = "state unavailable" if state is None else _blocked_reason(state)
            raise ElementNotInteractableError(
                f"Element is not interactable: {used_selector}", used_selector, reason=reason,
            )
        return state

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def _execute_click(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        element, used_selector = await self._acquire(step, interactable=True, cancel_token=cancel_token)
        await self._require_state(element, used_selector)

        try:
            await element.click()
        except DomError as e:
            raise StepExecutionError(f"Failed to click element: {e}", step.type.value, used_selector) from e
        return ExecutionResult.ok(used_selector=used_selector)

    async def _execute_type(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        element, used_selector = await self._acquire(step, interactable=True, cancel_token=cancel_token)
        await self._require_state(element, used_selector, ElementKind.TEXT_INPUT)

        # original_text is the unmasked value; text may be masked for display
        text = step.original_text or step.text or ""
        try:
            await element.set_value(text)
            await element.dispatch_event("input", {"bubbles": True})
            await element.dispatch_event("change", {"bubbles": True})

            if step.submit:
                form = await element.form()
                if form is not None:
                    await form.request_submit()
                else:
                    await element.dispatch_event("keydown", dict(ENTER_KEYDOWN))
        except DomError as e:
            raise StepExecutionError(f"Failed to type into element: {e}", step.type.value, used_selector) from e
        return ExecutionResult.ok(used_selector=used_selector)

    async def _execute_select(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        element, used_selector = await self._acquire(step, interactable=True, cancel_token=cancel_token)
        await self._require_state(element, used_selector, ElementKind.SELECT)

        try:
            await element.set_value(step.value or "")
            await element.dispatch_event("change", {"bubbles": True})
        except DomError as e:
            raise StepExecutionError(f"Failed to select option: {e}", step.type.value, used_selector) from e
        return ExecutionResult.ok(used_selector=used_selector)

    async def _execute_extract(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        element, used_selector = await self._acquire(step, interactable=False, cancel_token=cancel_token)

        prop = step.prop or DEFAULT_EXTRACT_PROP
        try:
            value = await element.get_value() if prop == "value" else None
            if value is None:
                value = (await element.text_content()).strip()
        except DomError as e:
            raise StepExecutionError(f"Failed to extract data: {e}", step.type.value, used_selector) from e
        return ExecutionResult.ok(used_selector=used_selector, extracted_data=value)

    async def _execute_wait_for(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        timeout = self._timeout(step)

        if step.locator is None and not step.selector:
            if not await cancellable_sleep(timeout, cancel_token, self.settings.poll_interval_ms):
                return ExecutionResult.fail(StepErrorKind.CANCELLED, cancel_token.reason or "Cancelled")
            return ExecutionResult.ok()

        if step.locator is not None:
            try:
                resolved = await self.wait_engine.wait_for_resolution(
                    step.locator, timeout=timeout, visible=True, cancel_token=cancel_token,
                )
                return ExecutionResult.ok(used_selector=resolved.used_selector)
            except LocatorTimeoutError as e:
                if step.selector and await self._query(step.selector) is not None:
                    return ExecutionResult.ok(used_selector=step.selector)
                return ExecutionResult.fail(StepErrorKind.TIMEOUT, f"WaitFor failed: {e}")

        try:
            await self.wait_engine.wait_for_selector(step.selector, timeout=timeout, cancel_token=cancel_token)
        except LocatorTimeoutError:
            return ExecutionResult.fail(StepErrorKind.TIMEOUT, f"Timeout waiting for element: {step.selector}")
        return ExecutionResult.ok(used_selector=step.selector)

    async def _pass_through(self, step: Step, cancel_token: Optional[CancellationToken]) -> ExecutionResult:
        # Page-level steps belong to the flow runner's navigator.
        return ExecutionResult.ok()


def _blocked_reason(state: ElementState) -> str:
    if not is_visible(state):
        return "hidden"
    if state.disabled:
        return "disabled"
    return "pointer-events: none"
