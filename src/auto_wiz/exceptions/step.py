"""
Step-related exceptions.
"""

from auto_wiz.exceptions.base import AutoWizError


class StepError(AutoWizError):
    """Base exception for step-related errors."""
    pass


class StepValidationError(StepError):
    """
    Step is malformed.

    Raised when a step is missing fields its type requires.
    """

    def __init__(self, message: str, step_type: str | None = None):
        super().__init__(message)
        self.step_type = step_type


class StepExecutionError(StepError):
    """
    Error while applying a step's action.

    Raised when the native DOM call itself fails.
    """

    def __init__(self, message: str, step_type: str, selector: str | None = None):
        super().__init__(message, {"step_type": step_type, "selector": selector})
        self.step_type = step_type
        self.selector = selector
