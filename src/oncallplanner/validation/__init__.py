"""Validation module for verifying scheduler input and output."""

from oncallplanner.validation.validator import (
    InputValidator,
    ScheduleValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)

__all__ = [
    "InputValidator",
    "ScheduleValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
]
