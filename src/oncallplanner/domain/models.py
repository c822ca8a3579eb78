"""Domain models for the on-call planner.

This module contains the data structures that flow through scheduling:
availability input, per-day assignments, and the schedule result with its
load accounting and warnings.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from oncallplanner.domain.errors import ScheduleInputError

UNASSIGNED_LABEL = "UNASSIGNED"

WEEKDAY_LABELS = {
    "de": ("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"),
    "en": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
}

MONTH_LABELS = {
    "de": (
        "Januar", "Februar", "März", "April", "Mai", "Juni",
        "Juli", "August", "September", "Oktober", "November", "Dezember",
    ),
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
}


def weekday_label(day: date, language: str = "de") -> str:
    """Display name of the weekday for `day`."""
    labels = WEEKDAY_LABELS.get(language, WEEKDAY_LABELS["de"])
    return labels[day.weekday()]


def month_label(day: date, language: str = "de") -> str:
    """Display label like "März 2025"."""
    labels = MONTH_LABELS.get(language, MONTH_LABELS["de"])
    return f"{labels[day.month - 1]} {day.year}"


@dataclass
class AvailabilityRecord:
    """One calendar day of availability.

    Attributes:
        date: The calendar day. A datetime is truncated to its date.
        employees: Mapping of employee name to whether they can take the day.
            Every key counts as a known employee, available or not.
    """

    date: date
    employees: dict[str, bool] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.date, datetime):
            self.date = self.date.date()

    @property
    def available_employees(self) -> list[str]:
        """Names marked available, in mapping order."""
        return [name for name, available in self.employees.items() if available]

    @property
    def has_candidates(self) -> bool:
        return any(self.employees.values())

    def is_available(self, name: str) -> bool:
        return bool(self.employees.get(name, False))

    @classmethod
    def from_available(
        cls,
        day: date,
        available: Iterable[str],
        roster: Iterable[str] = (),
    ) -> "AvailabilityRecord":
        """Build a record from the set of available names.

        Args:
            day: The calendar day.
            available: Names available that day.
            roster: Additional names known to be unavailable that day.
        """
        employees = {name: False for name in roster}
        for name in available:
            employees[name] = True
        return cls(date=day, employees=employees)


@dataclass(frozen=True)
class Assignment:
    """Who covers a single day.

    Attributes:
        date: The calendar day.
        weekday: Display label of the weekday.
        assigned_employee: Employee name, or None when nobody was available.
        contact_info: Phone number from the directory, empty if unknown.
        weight: Day weight charged to the assigned employee.
    """

    date: date
    weekday: str
    assigned_employee: Optional[str] = None
    contact_info: str = ""
    weight: float = 1.0

    @property
    def is_unassigned(self) -> bool:
        return not self.assigned_employee

    @property
    def display_name(self) -> str:
        return self.assigned_employee or UNASSIGNED_LABEL

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5


class WarningType(Enum):
    """Kinds of non-fatal schedule anomalies."""

    NO_CANDIDATES = "no_candidates"
    UNEVEN_DISTRIBUTION = "uneven_distribution"


@dataclass
class ScheduleWarning:
    """A day-level or schedule-level anomaly that did not abort generation."""

    warning_type: WarningType
    message: str
    date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.warning_type.value}]"]
        if self.date is not None:
            parts.append(f"{self.date.isoformat()}:")
        parts.append(self.message)
        return " ".join(parts)


@dataclass
class LoadMetrics:
    """Summary statistics of the final load distribution.

    Attributes:
        min_load: Smallest load of any employee.
        max_load: Largest load of any employee.
        avg_load: Mean load.
        load_std_dev: Standard deviation of loads.
        spread: max_load - min_load.
        fairness_score: 0-100, higher is fairer.
    """

    min_load: float = 0.0
    max_load: float = 0.0
    avg_load: float = 0.0
    load_std_dev: float = 0.0
    spread: float = 0.0
    fairness_score: float = 100.0

    @classmethod
    def calculate(cls, loads: dict[str, float]) -> "LoadMetrics":
        """Calculate metrics from a load map."""
        if not loads:
            return cls()

        values = list(loads.values())
        avg = sum(values) / len(values)
        variance = sum((v - avg) ** 2 for v in values) / len(values)
        std_dev = variance ** 0.5

        # 100 = perfectly even, 0 once std dev reaches the mean
        score = 100.0
        if avg > 0:
            score = max(0.0, 100.0 - (std_dev / avg) * 100.0)

        return cls(
            min_load=min(values),
            max_load=max(values),
            avg_load=avg,
            load_std_dev=std_dev,
            spread=max(values) - min(values),
            fairness_score=score,
        )


@dataclass
class OnCallSchedule:
    """Result of one scheduler run.

    Attributes:
        assignments: One assignment per input day, ascending by date.
        loads: Final cumulative weight per employee, in first-appearance order.
        target_load: total_weight / employee_count, used as a tie-break.
        warnings: Non-fatal anomalies collected during the run.
        language: Language of weekday and month labels.
    """

    assignments: list[Assignment] = field(default_factory=list)
    loads: dict[str, float] = field(default_factory=dict)
    target_load: float = 0.0
    warnings: list[ScheduleWarning] = field(default_factory=list)
    language: str = "de"

    def __len__(self) -> int:
        return len(self.assignments)

    def __iter__(self):
        return iter(self.assignments)

    @property
    def dates(self) -> list[date]:
        return [a.date for a in self.assignments]

    @property
    def unassigned_dates(self) -> list[date]:
        return [a.date for a in self.assignments if a.is_unassigned]

    @property
    def load_spread(self) -> float:
        if not self.loads:
            return 0.0
        return max(self.loads.values()) - min(self.loads.values())

    @property
    def metrics(self) -> LoadMetrics:
        return LoadMetrics.calculate(self.loads)

    def get_assignment(self, day: date) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.date == day:
                return assignment
        return None

    def assignments_for(self, employee: str) -> list[Assignment]:
        return [a for a in self.assignments if a.assigned_employee == employee]

    def warnings_of(self, warning_type: WarningType) -> list[ScheduleWarning]:
        return [w for w in self.warnings if w.warning_type == warning_type]

    def month_label(self) -> str:
        """Label of the first scheduled month, e.g. "März 2025"."""
        if not self.assignments:
            return ""
        return month_label(self.assignments[0].date, self.language)

    def with_override(
        self,
        day: date,
        employee: Optional[str],
        directory=None,
    ) -> "OnCallSchedule":
        """Return a copy with `day` reassigned to `employee`.

        Passing None clears the day. The day weight is kept, loads are
        recomputed from the assignments, and this schedule is left untouched.
        Availability is not checked here; ScheduleValidator reports overrides
        that assign an unavailable employee.
        """
        if isinstance(day, datetime):
            day = day.date()
        if self.get_assignment(day) is None:
            raise ScheduleInputError(
                f"No assignment for {day.isoformat()} in this schedule",
                field="date",
            )

        contact = directory.phone_for(employee) if directory is not None else ""
        assignments = [
            replace(a, assigned_employee=employee or None, contact_info=contact)
            if a.date == day else a
            for a in self.assignments
        ]

        loads = {name: 0.0 for name in self.loads}
        for assignment in assignments:
            if assignment.assigned_employee:
                loads[assignment.assigned_employee] = (
                    loads.get(assignment.assigned_employee, 0.0) + assignment.weight
                )

        warnings = [w for w in self.warnings if w.date != day]
        if not employee:
            warnings.append(
                ScheduleWarning(
                    warning_type=WarningType.NO_CANDIDATES,
                    message="Cleared by manual override",
                    date=day,
                )
            )

        return OnCallSchedule(
            assignments=assignments,
            loads=loads,
            target_load=self.target_load,
            warnings=warnings,
            language=self.language,
        )
