"""Validation of scheduler input and output.

InputValidator rejects malformed input before scheduling begins.
ScheduleValidator re-checks a generated (or manually edited) schedule
against the availability it was built from.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from oncallplanner.domain.errors import ScheduleInputError
from oncallplanner.domain.models import AvailabilityRecord, OnCallSchedule
from oncallplanner.domain.rules import WeightRules

LOAD_EPSILON = 1e-9


class InputValidator:
    """Rejects availability and rules that cannot be scheduled.

    Raises ScheduleInputError naming the offending field on the first problem.
    """

    def validate(
        self,
        records: Iterable[AvailabilityRecord],
        rules: Optional[WeightRules] = None,
    ) -> None:
        seen: set[date] = set()
        for index, record in enumerate(records):
            self._validate_record(index, record)
            if record.date in seen:
                raise ScheduleInputError(
                    f"Duplicate date {record.date.isoformat()} (record {index})",
                    field="date",
                )
            seen.add(record.date)

        if rules is not None:
            rules.validate()

    def _validate_record(self, index: int, record) -> None:
        if not isinstance(record, AvailabilityRecord):
            raise ScheduleInputError(
                f"Record {index} is not an AvailabilityRecord: {record!r}",
                field="availability",
            )
        if not isinstance(record.date, date) or isinstance(record.date, datetime):
            raise ScheduleInputError(
                f"Record {index} has an invalid date: {record.date!r}",
                field="date",
            )
        if not isinstance(record.employees, dict):
            raise ScheduleInputError(
                f"Record {index} employees must be a mapping of name to bool",
                field="employees",
            )
        for name, available in record.employees.items():
            if not isinstance(name, str) or not name.strip():
                raise ScheduleInputError(
                    f"Record {index} ({record.date.isoformat()}) has an empty employee name",
                    field="employees",
                )
            if not isinstance(available, bool):
                raise ScheduleInputError(
                    f"Availability of {name} on {record.date.isoformat()} must be a bool, "
                    f"got {available!r}",
                    field="employees",
                )


class ValidationErrorType(Enum):
    """Types of schedule validation errors."""

    ASSIGNED_UNAVAILABLE = "assigned_unavailable"
    UNKNOWN_EMPLOYEE = "unknown_employee"
    MISSING_DATE = "missing_date"
    EXTRA_DATE = "extra_date"
    DUPLICATE_DATE = "duplicate_date"
    OUT_OF_ORDER = "out_of_order"
    LOAD_MISMATCH = "load_mismatch"
    WEIGHT_MISMATCH = "weight_mismatch"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    employee: Optional[str] = None
    date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.date is not None:
            parts.append(f"{self.date.isoformat()}:")
        if self.employee:
            parts.append(f"Employee {self.employee}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of(self, error_type: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.error_type == error_type]


class ScheduleValidator:
    """Validates a schedule against the availability it was generated from.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule, records)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def validate(
        self,
        schedule: OnCallSchedule,
        records: Iterable[AvailabilityRecord],
        rules: Optional[WeightRules] = None,
    ) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The schedule to check.
            records: Availability the schedule was built from.
            rules: If given, assignment weights are checked against them.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)
        by_date = {r.date: r for r in records}

        self._validate_dates(schedule, by_date, result)

        for assignment in schedule.assignments:
            record = by_date.get(assignment.date)

            if rules is not None and abs(assignment.weight - rules.day_weight(assignment.date)) > LOAD_EPSILON:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.WEIGHT_MISMATCH,
                        message=(
                            f"Charged weight {assignment.weight:g}, rules give "
                            f"{rules.day_weight(assignment.date):g}"
                        ),
                        date=assignment.date,
                    )
                )

            if assignment.is_unassigned:
                result.add_warning(f"{assignment.date.isoformat()}: no employee assigned")
                continue
            if record is None:
                continue

            employee = assignment.assigned_employee
            if employee not in record.employees:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_EMPLOYEE,
                        message="Not listed in availability for this day",
                        employee=employee,
                        date=assignment.date,
                    )
                )
            elif not record.employees[employee]:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.ASSIGNED_UNAVAILABLE,
                        message="Assigned on a day marked unavailable",
                        employee=employee,
                        date=assignment.date,
                    )
                )

        self._validate_loads(schedule, result)

        return result

    def _validate_dates(
        self,
        schedule: OnCallSchedule,
        by_date: dict[date, AvailabilityRecord],
        result: ValidationResult,
    ) -> None:
        dates = schedule.dates

        for day, count in Counter(dates).items():
            if count > 1:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DUPLICATE_DATE,
                        message=f"Assigned {count} times",
                        date=day,
                    )
                )

        for previous, current in zip(dates, dates[1:]):
            if current < previous:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.OUT_OF_ORDER,
                        message=f"Follows {previous.isoformat()}",
                        date=current,
                    )
                )

        scheduled = set(dates)
        for day in sorted(set(by_date) - scheduled):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MISSING_DATE,
                    message="Day from availability has no assignment",
                    date=day,
                )
            )
        for day in sorted(scheduled - set(by_date)):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.EXTRA_DATE,
                    message="Assignment for a day not in availability",
                    date=day,
                )
            )

    def _validate_loads(self, schedule: OnCallSchedule, result: ValidationResult) -> None:
        """Loads must equal the summed weights of each employee's assignments."""
        expected: dict[str, float] = {}
        for assignment in schedule.assignments:
            if assignment.assigned_employee:
                expected[assignment.assigned_employee] = (
                    expected.get(assignment.assigned_employee, 0.0) + assignment.weight
                )

        for employee in sorted(set(expected) | set(schedule.loads)):
            actual = schedule.loads.get(employee, 0.0)
            wanted = expected.get(employee, 0.0)
            if abs(actual - wanted) > LOAD_EPSILON:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.LOAD_MISMATCH,
                        message=f"Load {actual:g} but assignments sum to {wanted:g}",
                        employee=employee,
                        details={"actual": actual, "expected": wanted},
                    )
                )
