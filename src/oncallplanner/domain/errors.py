"""Exception hierarchy for the on-call planner.

Whole-input problems are raised before scheduling starts. Day-level anomalies
are never raised; they are collected as warnings on the schedule instead.
"""

from typing import Optional


class OnCallPlannerError(Exception):
    """Base class for all planner errors."""


class ScheduleInputError(OnCallPlannerError, ValueError):
    """Input rejected before scheduling begins.

    Attributes:
        field: Name of the offending field (e.g. "date", "custom_weights").
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        message = super().__str__()
        if self.field:
            return f"[{self.field}] {message}"
        return message


class ConfigurationError(ScheduleInputError):
    """Invalid weighting rules or directory configuration."""


class AvailabilityImportError(ScheduleInputError):
    """Availability workbook could not be read.

    Attributes:
        row: 1-based worksheet row that failed, if known.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        row: Optional[int] = None,
    ):
        super().__init__(message, field=field)
        self.row = row


class SchedulingError(OnCallPlannerError):
    """Unexpected failure while generating a schedule."""
