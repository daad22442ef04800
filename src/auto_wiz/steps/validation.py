"""
Step Validation - Detect malformed steps before they are dispatched.

Every step except ``navigate`` and ``waitForNavigation`` carries the legacy
``selector``, locator or not; ``waitFor`` may give a timeout instead.
``type`` needs text, ``select`` a value, ``navigate`` an absolute URL, and
timeouts must be non-negative.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from auto_wiz.exceptions import StepValidationError
from auto_wiz.steps.models import Step, StepType
from auto_wiz.utils.urls import is_valid_url

StepLike = Union[Step, Dict[str, Any]]


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one step or a list of steps."""
    valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


_VALID = ValidationResult(valid=True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(valid=False, error=error)


def _has_selector(step: Step) -> bool:
    return bool(step.selector)


def _validate_click(step: Step) -> ValidationResult:
    if not _has_selector(step):
        return _invalid("Click step requires selector")
    return _VALID


def _validate_type(step: Step) -> ValidationResult:
    if not _has_selector(step):
        return _invalid("Type step requires selector")
    if step.text is None and step.original_text is None:
        return _invalid("Type step requires text or originalText")
    return _VALID


def _validate_select(step: Step) -> ValidationResult:
    if not _has_selector(step):
        return _invalid("Select step requires selector")
    if step.value is None:
        return _invalid("Select step requires value")
    return _VALID


def _validate_extract(step: Step) -> ValidationResult:
    if not _has_selector(step):
        return _invalid("Extract step requires selector")
    if step.prop is not None and step.prop not in ("innerText", "value"):
        return _invalid(f"Unknown extract prop: {step.prop}")
    return _VALID


def _validate_timeout(step: Step) -> Optional[ValidationResult]:
    if step.timeout_ms is None:
        return None
    if isinstance(step.timeout_ms, bool) or not isinstance(step.timeout_ms, (int, float)) or step.timeout_ms < 0:
        return _invalid("Timeout must be a positive number")
    return None


def _validate_wait_for(step: Step) -> ValidationResult:
    if not _has_selector(step) and step.timeout_ms is None:
        return _invalid("WaitFor step requires selector or timeoutMs")
    return _validate_timeout(step) or _VALID


def _validate_navigate(step: Step) -> ValidationResult:
    if not step.url:
        return _invalid("Navigate step requires URL")
    if not is_valid_url(step.url):
        return _invalid(f"Invalid URL: {step.url}")
    return _VALID


def _validate_wait_for_navigation(step: Step) -> ValidationResult:
    return _validate_timeout(step) or _VALID


def _validate_screenshot(step: Step) -> ValidationResult:
    if not _has_selector(step):
        return _invalid("Screenshot step requires selector")
    return _VALID


_VALIDATORS: Dict[StepType, Callable[[Step], ValidationResult]] = {
    StepType.CLICK: _validate_click,
    StepType.TYPE: _validate_type,
    StepType.SELECT: _validate_select,
    StepType.EXTRACT: _validate_extract,
    StepType.WAIT_FOR: _validate_wait_for,
    StepType.NAVIGATE: _validate_navigate,
    StepType.WAIT_FOR_NAVIGATION: _validate_wait_for_navigation,
    StepType.SCREENSHOT: _validate_screenshot,
}


def validate_step(step: StepLike) -> ValidationResult:
    """
    Validate a single step (a ``Step`` or its JSON dict form).

    Example:
        >>> validate_step({"type": "click", "selector": "#go"}).valid
        True
        >>> validate_step({"type": "select", "selector": "#size"}).error
        'Select step requires value'
    """
    if not isinstance(step, Step):
        try:
            step = Step.from_dict(step)
        except StepValidationError as e:
            return _invalid(e.message)
    return _VALIDATORS[step.type](step)


def validate_steps(steps: List[StepLike]) -> ValidationResult:
    """Validate every step; the first error is prefixed with its 1-based position."""
    if not isinstance(steps, list):
        return _invalid("Steps must be an array")

    for index, step in enumerate(steps):
        result = validate_step(step)
        if not result.valid:
            return _invalid(f"Step {index + 1}: {result.error}")
    return _VALID


def is_executable_step(step: StepLike) -> bool:
    return validate_step(step).valid
