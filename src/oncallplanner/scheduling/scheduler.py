"""Main scheduler interface.

This module provides the high-level Scheduler class that orchestrates
input validation, solving, and contact enrichment.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from oncallplanner.domain.directory import EmployeeDirectory
from oncallplanner.domain.errors import OnCallPlannerError, SchedulingError
from oncallplanner.domain.models import AvailabilityRecord, OnCallSchedule
from oncallplanner.domain.rules import WeightRules
from oncallplanner.scheduling.cpsat_solver import BalancedCPSATSolver, SolverConfig
from oncallplanner.scheduling.fair_scheduler import FairAssignmentScheduler
from oncallplanner.validation.validator import InputValidator

logger = logging.getLogger(__name__)


class SolverType(Enum):
    """Which solver produces the schedule."""

    GREEDY = "greedy"  # Deterministic least-loaded heuristic
    CPSAT = "cpsat"  # Exact spread minimisation, fails if nothing is found
    HYBRID = "hybrid"  # CP-SAT, falling back to greedy


class Scheduler:
    """High-level scheduler for generating on-call schedules.

    Example:
        >>> scheduler = Scheduler(rules=WeightRules(), directory=directory)
        >>> schedule = scheduler.generate_schedule(records)
        >>> schedule.unassigned_dates
        []
    """

    def __init__(
        self,
        rules: Optional[WeightRules] = None,
        directory: Optional[EmployeeDirectory] = None,
        solver_type: SolverType = SolverType.GREEDY,
        solver_config: Optional[SolverConfig] = None,
        language: str = "de",
    ):
        """Initialize scheduler.

        Args:
            rules: Weighting rules (default: weekend weighting x2).
            directory: Contact lookup used to enrich assignments.
            solver_type: Solver to use.
            solver_config: CP-SAT settings, ignored for the greedy solver.
            language: Language of weekday/month labels.
        """
        self.rules = rules or WeightRules()
        self.directory = directory
        self.solver_type = solver_type
        self.validator = InputValidator()
        self.greedy_solver = FairAssignmentScheduler(language=language)
        self.cpsat_solver = BalancedCPSATSolver(config=solver_config, language=language)

    def generate_schedule(self, records: Iterable[AvailabilityRecord]) -> OnCallSchedule:
        """Generate a complete schedule.

        Args:
            records: Availability per day.

        Returns:
            OnCallSchedule with one assignment per day.

        Raises:
            ScheduleInputError: Input failed validation; nothing was scheduled.
            SchedulingError: The solver failed unexpectedly, or CP-SAT found
                no solution with SolverType.CPSAT.
        """
        records = list(records)
        self.validator.validate(records, self.rules)

        logger.info(
            "Scheduling %d days with %s solver", len(records), self.solver_type.value
        )
        try:
            schedule = self._solve(records)
        except OnCallPlannerError:
            raise
        except Exception as exc:
            logger.exception("Error in schedule generation")
            raise SchedulingError(f"Schedule generation failed: {exc}") from exc

        logger.info(
            "Scheduled %d days, %d unassigned, load spread %g",
            len(schedule),
            len(schedule.unassigned_dates),
            schedule.load_spread,
        )
        return schedule

    def generate_schedule_with_stats(
        self,
        records: Iterable[AvailabilityRecord],
    ) -> tuple[OnCallSchedule, dict]:
        """Generate schedule and return statistics.

        Returns:
            Tuple of (schedule, stats_dict).
        """
        schedule = self.generate_schedule(records)
        return schedule, self._calculate_stats(schedule)

    def _solve(self, records: list[AvailabilityRecord]) -> OnCallSchedule:
        if self.solver_type == SolverType.GREEDY:
            return self.greedy_solver.solve(records, self.rules, self.directory)

        result = self.cpsat_solver.solve(records, self.rules, self.directory)
        if result.is_feasible and result.schedule is not None:
            return result.schedule

        if self.solver_type == SolverType.CPSAT:
            raise SchedulingError(f"CP-SAT found no schedule (status {result.status})")

        logger.warning("CP-SAT returned %s, falling back to greedy solver", result.status)
        return self.greedy_solver.solve(records, self.rules, self.directory)

    def _calculate_stats(self, schedule: OnCallSchedule) -> dict:
        """Calculate schedule statistics."""
        metrics = schedule.metrics
        shifts = {name: len(schedule.assignments_for(name)) for name in schedule.loads}

        return {
            "total_days": len(schedule),
            "assigned_days": len(schedule) - len(schedule.unassigned_dates),
            "unassigned_days": len(schedule.unassigned_dates),
            "total_employees": len(schedule.loads),
            "total_weight": sum(a.weight for a in schedule.assignments),
            "target_load": schedule.target_load,
            "loads": dict(schedule.loads),
            "shifts_per_employee": shifts,
            "load_spread": schedule.load_spread,
            "metrics": metrics,
            "warnings": [str(w) for w in schedule.warnings],
        }
