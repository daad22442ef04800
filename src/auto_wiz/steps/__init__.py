"""
Steps module - Recorded steps, their validation, execution and flow runs.

Example:
    >>> from auto_wiz.steps import FlowRunner, StepExecutor, load_flow
    >>> runner = FlowRunner(StepExecutor(document))
    >>> result = await runner.run(load_flow("flow.json"))
"""

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
    load_flow,
)
from auto_wiz.steps.validation import ValidationResult, is_executable_step, validate_step, validate_steps
from auto_wiz.steps.executor import StepExecutor
from auto_wiz.steps.runner import FlowRunner

__all__ = [
    # Models
    "Step",
    "StepType",
    "Flow",
    "load_flow",
    "ExecutionResult",
    "StepErrorKind",
    "RunResult",
    "StepFailure",
    "StepEvent",
    "StepPhase",
    # Validation
    "ValidationResult",
    "validate_step",
    "validate_steps",
    "is_executable_step",
    # Execution
    "StepExecutor",
    "FlowRunner",
]
