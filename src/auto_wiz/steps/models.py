"""
Step models - Recorded steps, flows and execution results.

All records serialize to the camelCase JSON form written by the recorder
(``timeoutMs``, ``originalText``, ``_frameId`` ...). ``None`` fields are
omitted from ``to_dict()``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from auto_wiz.exceptions import StepValidationError
from auto_wiz.locator.models import ElementLocator

DEFAULT_EXTRACT_PROP = "innerText"


class StepType(str, Enum):
    """Types of recorded steps."""
    CLICK = "click"
    TYPE = "type"
    SELECT = "select"
    EXTRACT = "extract"
    WAIT_FOR = "waitFor"
    NAVIGATE = "navigate"
    WAIT_FOR_NAVIGATION = "waitForNavigation"
    SCREENSHOT = "screenshot"

    @property
    def targets_element(self) -> bool:
        """True for steps that act on (or wait for) an element."""
        return self not in (StepType.NAVIGATE, StepType.WAIT_FOR_NAVIGATION)


class StepErrorKind(str, Enum):
    """Why a step failed."""
    ELEMENT_NOT_FOUND = "element_not_found"
    NOT_INTERACTABLE = "not_interactable"
    WRONG_ELEMENT_KIND = "wrong_element_kind"
    TIMEOUT = "timeout"
    ACTION_FAILED = "action_failed"
    INVALID_STEP = "invalid_step"
    CANCELLED = "cancelled"


# Python attribute name -> JSON key, in serialization order
_STEP_KEYS = {
    "selector": "selector",
    "text": "text",
    "original_text": "originalText",
    "submit": "submit",
    "value": "value",
    "prop": "prop",
    "timeout_ms": "timeoutMs",
    "url": "url",
    "screenshot": "screenshot",
    "frame_id": "_frameId",
    "frame_url": "_frameUrl",
}


@dataclass
class Step:
    """
    One recorded action or control instruction.

    Attributes:
        type: Step type
        selector: Legacy CSS selector
        locator: Multi-selector locator, preferred over ``selector``
        text: Display text for type steps (may be masked)
        original_text: Unmasked text for type steps
        submit: Submit after typing
        value: Option value or text for select steps
        prop: ``innerText`` (default) or ``value`` for extract steps
        timeout_ms: Wait budget for waitFor / waitForNavigation and element lookup
        url: Target URL for navigate steps, page URL at capture for others
        screenshot: Base64 screenshot captured with the step
        frame_id: Browser frame id the step was recorded in
        frame_url: URL of that frame
    """
    type: StepType
    selector: Optional[str] = None
    locator: Optional[ElementLocator] = None
    text: Optional[str] = None
    original_text: Optional[str] = None
    submit: Optional[bool] = None
    value: Optional[str] = None
    prop: Optional[str] = None
    timeout_ms: Optional[int] = None
    url: Optional[str] = None
    screenshot: Optional[str] = None
    frame_id: Optional[int] = None
    frame_url: Optional[str] = None

    @property
    def display_selector(self) -> str:
        """Selector to name in messages: locator primary, else the legacy selector."""
        if self.locator is not None:
            return self.locator.primary
        return self.selector or "none"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON form."""
        result: Dict[str, Any] = {"type": self.type.value}
        for attr, key in _STEP_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
            if attr == "selector" and self.locator is not None:
                result["locator"] = self.locator.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        """
        Create from the JSON form.

        Raises:
            StepValidationError: If the type is missing or unknown, or the
                locator is malformed
        """
        if not isinstance(data, dict):
            raise StepValidationError("Step must be an object")

        raw_type = data.get("type")
        if not raw_type:
            raise StepValidationError("Step type is required")
        try:
            step_type = StepType(raw_type)
        except ValueError:
            raise StepValidationError(f"Unknown step type: {raw_type}", step_type=str(raw_type))

        locator = None
        if data.get("locator"):
            try:
                locator = ElementLocator.from_dict(data["locator"])
            except (KeyError, TypeError, ValueError) as e:
                raise StepValidationError(f"Invalid locator: {e}", step_type=step_type.value)

        return cls(
            type=step_type,
            locator=locator,
            **{attr: data.get(key) for attr, key in _STEP_KEYS.items()},
        )


@dataclass
class Flow:
    """
    An ordered, named list of steps.

    Attributes:
        id: Flow identifier
        title: Human-readable title
        steps: Steps in execution order
        created_at: Creation time, epoch milliseconds
        start_url: Page the flow starts on
    """
    id: str
    title: str
    steps: List[Step] = field(default_factory=list)
    created_at: int = 0
    start_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "steps": [s.to_dict() for s in self.steps],
            "createdAt": self.created_at,
        }
        if self.start_url:
            result["startUrl"] = self.start_url
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flow":
        """Create from the JSON form. Step errors name the offending step."""
        steps: List[Step] = []
        for index, raw in enumerate(data.get("steps") or []):
            try:
                steps.append(Step.from_dict(raw))
            except StepValidationError as e:
                raise StepValidationError(f"Step {index + 1}: {e.message}", step_type=e.step_type) from e
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            steps=steps,
            created_at=data.get("createdAt", 0),
            start_url=data.get("startUrl"),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "Flow":
        return cls.from_dict(json.loads(json_str))


def load_flow(path: Union[str, Path]) -> Flow:
    """
    Load a flow from a JSON file.

    Raises:
        StepValidationError: If the file is not a valid flow
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StepValidationError(f"Invalid flow JSON in {path}: {e}")
    if not isinstance(data, dict):
        raise StepValidationError(f"Flow file {path} must contain a JSON object")
    return Flow.from_dict(data)


@dataclass
class ExecutionResult:
    """
    Outcome of one step.

    Attributes:
        success: Whether the step succeeded
        error: Human-readable failure reason
        extracted_data: Value read by an extract step
        used_selector: Selector that actually matched; absent if nothing matched
        error_kind: Failure category
    """
    success: bool
    error: Optional[str] = None
    extracted_data: Optional[Any] = None
    used_selector: Optional[str] = None
    error_kind: Optional[StepErrorKind] = None

    @classmethod
    def ok(cls, used_selector: Optional[str] = None, extracted_data: Optional[Any] = None) -> "ExecutionResult":
        return cls(success=True, used_selector=used_selector, extracted_data=extracted_data)

    @classmethod
    def fail(
        cls,
        kind: StepErrorKind,
        error: str,
        used_selector: Optional[str] = None,
    ) -> "ExecutionResult":
        return cls(success=False, error=error, error_kind=kind, used_selector=used_selector)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.error is not None:
            result["error"] = self.error
        if self.extracted_data is not None:
            result["extractedData"] = self.extracted_data
        if self.used_selector is not None:
            result["usedSelector"] = self.used_selector
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        return result


@dataclass
class StepFailure:
    """A failed step recorded while continuing past errors."""
    index: int
    error: str
    error_kind: Optional[StepErrorKind] = None
    selector: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"index": self.index, "error": self.error}
        if self.error_kind is not None:
            result["errorKind"] = self.error_kind.value
        if self.selector is not None:
            result["selector"] = self.selector
        return result


@dataclass
class RunResult:
    """
    Outcome of a flow run.

    Attributes:
        success: True only if every executed step succeeded and the run was not cancelled
        error: Reason for the first failure
        failed_step_index: Index of the step that stopped the run
        extracted_data: Extracted values keyed ``step_<index>``
        steps_executed: Number of steps attempted
        errors: Every failure, when continuing past errors
        cancelled: Whether the run was stopped by its cancellation token
    """
    success: bool
    error: Optional[str] = None
    failed_step_index: Optional[int] = None
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    steps_executed: int = 0
    errors: List[StepFailure] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "extractedData": self.extracted_data,
            "stepsExecuted": self.steps_executed,
        }
        if self.error is not None:
            result["error"] = self.error
        if self.failed_step_index is not None:
            result["failedStepIndex"] = self.failed_step_index
        if self.errors:
            result["errors"] = [e.to_dict() for e in self.errors]
        if self.cancelled:
            result["cancelled"] = True
        return result


class StepPhase(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"


@dataclass
class StepEvent:
    """
    Progress notification from the flow runner.

    Attributes:
        index: Zero-based step index
        total: Number of steps in the flow
        step: The step
        phase: ``started`` or ``completed``
        result: Step outcome, set when completed
    """
    index: int
    total: int
    step: Step
    phase: StepPhase
    result: Optional[ExecutionResult] = None
