"""Greedy fair-assignment scheduler.

Assigns exactly one available employee to each day, always picking the
least-loaded candidate so that cumulative weighted load stays as even as
availability allows:

1. Sort days ascending and collect every employee named in any day
2. Weigh each day (custom weight > weekend multiplier > 1)
3. Walk the days, charging the day weight to the least-loaded candidate
4. Flag days nobody could take and a final load spread that looks wrong

Ties are resolved deterministically: closest to the target load first, then
first appearance in the input.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from oncallplanner.domain.directory import EmployeeDirectory
from oncallplanner.domain.models import (
    Assignment,
    AvailabilityRecord,
    OnCallSchedule,
    ScheduleWarning,
    WarningType,
    weekday_label,
)
from oncallplanner.domain.rules import WeightRules
from oncallplanner.validation.validator import InputValidator

logger = logging.getLogger(__name__)

# Float noise allowed when comparing loads and distances
DISTANCE_EPSILON = 1e-9

# Loads within this of the minimum count as tied; only float noise by default
DEFAULT_TIE_TOLERANCE = DISTANCE_EPSILON

# Final spread above this many max day weights is reported as uneven
UNEVEN_SPREAD_FACTOR = 2.0


@dataclass
class LoadState:
    """Working load accounting for a single run."""

    loads: dict[str, float] = field(default_factory=dict)
    order: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[AvailabilityRecord]) -> "LoadState":
        """Start every employee named in any record at zero load."""
        state = cls()
        for record in records:
            for name in record.employees:
                if name not in state.order:
                    state.order[name] = len(state.order)
                    state.loads[name] = 0.0
        return state

    def charge(self, name: str, weight: float) -> None:
        self.loads[name] = self.loads.get(name, 0.0) + weight

    @property
    def spread(self) -> float:
        if not self.loads:
            return 0.0
        return max(self.loads.values()) - min(self.loads.values())


class FairAssignmentScheduler:
    """Greedy least-loaded assignment of one employee per day.

    The scheduler is a pure function of its inputs: records are never
    mutated, no state survives between calls, and no randomness is involved.

    Example:
        >>> scheduler = FairAssignmentScheduler()
        >>> schedule = scheduler.solve(records, WeightRules())
        >>> [a.assigned_employee for a in schedule.assignments]
    """

    def __init__(
        self,
        tie_tolerance: float = DEFAULT_TIE_TOLERANCE,
        language: str = "de",
    ):
        self.tie_tolerance = tie_tolerance
        self.language = language

    def solve(
        self,
        records: Iterable[AvailabilityRecord],
        rules: Optional[WeightRules] = None,
        directory: Optional[EmployeeDirectory] = None,
    ) -> OnCallSchedule:
        """Generate an on-call schedule.

        Args:
            records: Availability per day, in any order. Dates must be unique.
            rules: Weighting rules; defaults to weekend weighting x2.
            directory: Optional contact lookup for the assigned employees.

        Returns:
            OnCallSchedule with one assignment per input day.
        """
        rules = rules or WeightRules()
        ordered = sorted(records, key=lambda r: r.date)
        if not ordered:
            return OnCallSchedule(language=self.language)

        state = LoadState.from_records(ordered)
        day_weights = {r.date: rules.day_weight(r.date) for r in ordered}
        total_weight = sum(day_weights.values())
        target_load = total_weight / len(state.loads) if state.loads else 0.0

        assignments: list[Assignment] = []
        warnings: list[ScheduleWarning] = []

        for record in ordered:
            weight = day_weights[record.date]
            candidates = record.available_employees

            if not candidates:
                warnings.append(self.no_candidates_warning(record.date, weight))
                assignments.append(self.make_assignment(record.date, None, weight, directory))
                continue

            selected = self.select_candidate(candidates, state, target_load)
            logger.debug(
                "%s: picked %s (weight %g) from %s",
                record.date.isoformat(),
                selected,
                weight,
                {c: state.loads[c] for c in candidates},
            )
            state.charge(selected, weight)
            assignments.append(self.make_assignment(record.date, selected, weight, directory))

        uneven = self.check_distribution(state, max(day_weights.values()))
        if uneven is not None:
            warnings.append(uneven)

        return OnCallSchedule(
            assignments=assignments,
            loads=dict(state.loads),
            target_load=target_load,
            warnings=warnings,
            language=self.language,
        )

    def select_candidate(
        self,
        candidates: list[str],
        state: LoadState,
        target_load: float,
    ) -> str:
        """Pick the least-loaded candidate.

        Ties (within tie_tolerance) go to the candidate whose load is closest
        to the target, then to whoever appeared first in the input.
        """
        min_load = min(state.loads[c] for c in candidates)
        tied = [c for c in candidates if state.loads[c] - min_load <= self.tie_tolerance]
        if len(tied) == 1:
            return tied[0]

        distances = {c: abs(state.loads[c] - target_load) for c in tied}
        min_distance = min(distances.values())
        closest = [c for c in tied if distances[c] - min_distance <= DISTANCE_EPSILON]

        return min(closest, key=lambda c: state.order[c])

    def make_assignment(
        self,
        day: date,
        employee: Optional[str],
        weight: float,
        directory: Optional[EmployeeDirectory],
    ) -> Assignment:
        return Assignment(
            date=day,
            weekday=weekday_label(day, self.language),
            assigned_employee=employee,
            contact_info=directory.phone_for(employee) if directory is not None else "",
            weight=weight,
        )

    def no_candidates_warning(self, day: date, weight: float) -> ScheduleWarning:
        logger.warning("No available employees for %s", day.isoformat())
        return ScheduleWarning(
            warning_type=WarningType.NO_CANDIDATES,
            message="No available employees",
            date=day,
            details={"weight": weight},
        )

    def check_distribution(
        self,
        state: LoadState,
        max_day_weight: float,
    ) -> Optional[ScheduleWarning]:
        """Flag a final spread larger than the sanity threshold."""
        threshold = UNEVEN_SPREAD_FACTOR * max_day_weight
        spread = state.spread
        if spread <= threshold:
            return None

        logger.warning(
            "Uneven distribution detected (spread %g > %g): %s",
            spread,
            threshold,
            state.loads,
        )
        return ScheduleWarning(
            warning_type=WarningType.UNEVEN_DISTRIBUTION,
            message=f"Load spread {spread:g} exceeds {threshold:g}",
            details={"spread": spread, "threshold": threshold, "loads": dict(state.loads)},
        )


def generate_schedule(
    availability: Iterable[AvailabilityRecord],
    rules: Optional[WeightRules] = None,
    directory: Optional[EmployeeDirectory] = None,
    language: str = "de",
) -> OnCallSchedule:
    """Validate the input and run the greedy fair scheduler.

    Raises:
        ScheduleInputError: If the availability or rules are malformed.
    """
    records = list(availability)
    rules = rules or WeightRules()
    InputValidator().validate(records, rules)
    return FairAssignmentScheduler(language=language).solve(records, rules, directory)
