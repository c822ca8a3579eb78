"""OR-Tools CP-SAT solver for exactly balanced on-call schedules.

The greedy scheduler keeps loads within one day weight of each other when
availability allows it. This solver formulates the same assignment as a
constraint program and minimises the final load spread outright, which can
do better when availability is uneven. The greedy schedule is used as a
solution hint so the search starts from a good assignment.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ortools.sat.python import cp_model

from oncallplanner.domain.directory import EmployeeDirectory
from oncallplanner.domain.models import (
    Assignment,
    AvailabilityRecord,
    OnCallSchedule,
    ScheduleWarning,
)
from oncallplanner.domain.rules import WeightRules
from oncallplanner.scheduling.fair_scheduler import FairAssignmentScheduler, LoadState

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """Configuration for the CP-SAT solver.

    Attributes:
        time_limit_seconds: Maximum solver runtime.
        num_workers: Number of search workers. 1 keeps results reproducible.
        random_seed: Seed for the search.
        weight_scale: Day weights are multiplied by this and rounded to
            integers for the model.
    """

    time_limit_seconds: float = 10.0
    num_workers: int = 1
    random_seed: int = 0
    weight_scale: int = 100


@dataclass
class SolverResult:
    """Result from the CP-SAT solver.

    Attributes:
        schedule: The generated schedule, None if no solution was found.
        status: Solver status (OPTIMAL, FEASIBLE, INFEASIBLE, UNKNOWN, ...).
        objective_value: Final load spread, in day-weight units.
        solve_time_seconds: Time taken to solve.
        num_branches: Number of branches explored.
        num_conflicts: Number of conflicts encountered.
    """

    schedule: Optional[OnCallSchedule]
    status: str
    objective_value: float = 0.0
    solve_time_seconds: float = 0.0
    num_branches: int = 0
    num_conflicts: int = 0

    @property
    def is_optimal(self) -> bool:
        return self.status == "OPTIMAL"

    @property
    def is_feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")


class BalancedCPSATSolver:
    """Minimises max(load) - min(load) with one employee per coverable day.

    Only employees available on at least one day take part in the spread;
    someone who can never be picked would otherwise pin the minimum at zero.
    """

    def __init__(
        self,
        config: Optional[SolverConfig] = None,
        language: str = "de",
    ):
        self.config = config or SolverConfig()
        self.language = language
        self.greedy = FairAssignmentScheduler(language=language)

    def solve(
        self,
        records: Iterable[AvailabilityRecord],
        rules: Optional[WeightRules] = None,
        directory: Optional[EmployeeDirectory] = None,
    ) -> SolverResult:
        """Solve the assignment problem using CP-SAT.

        Args:
            records: Availability per day, in any order. Dates must be unique.
            rules: Weighting rules; defaults to weekend weighting x2.
            directory: Optional contact lookup for the assigned employees.

        Returns:
            SolverResult with schedule and solver statistics.
        """
        rules = rules or WeightRules()
        ordered = sorted(records, key=lambda r: r.date)
        if not ordered:
            return SolverResult(schedule=OnCallSchedule(language=self.language), status="OPTIMAL")

        state = LoadState.from_records(ordered)
        weights = [rules.day_weight(r.date) for r in ordered]
        scaled = [int(round(w * self.config.weight_scale)) for w in weights]
        total_scaled = sum(scaled)

        model = cp_model.CpModel()

        # Decision variables: x[(d, name)] = 1 if name covers day d
        x: dict[tuple[int, str], cp_model.IntVar] = {}
        for d_idx, record in enumerate(ordered):
            day_vars = []
            for name in record.available_employees:
                var = model.NewBoolVar(f"x_{d_idx}_{state.order[name]}")
                x[(d_idx, name)] = var
                day_vars.append(var)
            if day_vars:
                model.AddExactlyOne(day_vars)

        if not x:
            return SolverResult(
                schedule=self._build_schedule(ordered, weights, {}, state, directory),
                status="OPTIMAL",
            )

        active = [name for name in state.order if any(key[1] == name for key in x)]
        loads = {}
        for name in active:
            load = model.NewIntVar(0, total_scaled, f"load_{state.order[name]}")
            model.Add(
                load == sum(scaled[d_idx] * var for (d_idx, n), var in x.items() if n == name)
            )
            loads[name] = load

        max_load = model.NewIntVar(0, total_scaled, "max_load")
        min_load = model.NewIntVar(0, total_scaled, "min_load")
        model.AddMaxEquality(max_load, list(loads.values()))
        model.AddMinEquality(min_load, list(loads.values()))
        model.Minimize(max_load - min_load)

        # Start from the greedy assignment
        greedy = self.greedy.solve(ordered, rules)
        for (d_idx, name), var in x.items():
            model.AddHint(var, greedy.assignments[d_idx].assigned_employee == name)

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.time_limit_seconds
        solver.parameters.num_workers = self.config.num_workers
        solver.parameters.random_seed = self.config.random_seed

        status = solver.Solve(model)
        status_name = solver.StatusName(status)
        logger.info("CP-SAT finished with status %s in %.2fs", status_name, solver.WallTime())

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return SolverResult(
                schedule=None,
                status=status_name,
                solve_time_seconds=solver.WallTime(),
                num_branches=solver.NumBranches(),
                num_conflicts=solver.NumConflicts(),
            )

        picks = {
            d_idx: name
            for (d_idx, name), var in x.items()
            if solver.Value(var)
        }
        schedule = self._build_schedule(ordered, weights, picks, state, directory)

        return SolverResult(
            schedule=schedule,
            status=status_name,
            objective_value=solver.ObjectiveValue() / self.config.weight_scale,
            solve_time_seconds=solver.WallTime(),
            num_branches=solver.NumBranches(),
            num_conflicts=solver.NumConflicts(),
        )

    def _build_schedule(
        self,
        ordered: list[AvailabilityRecord],
        weights: list[float],
        picks: dict[int, str],
        state: LoadState,
        directory: Optional[EmployeeDirectory],
    ) -> OnCallSchedule:
        """Turn solver picks into assignments, loads and warnings."""
        assignments: list[Assignment] = []
        warnings: list[ScheduleWarning] = []

        for d_idx, record in enumerate(ordered):
            employee = picks.get(d_idx)
            if employee is None:
                warnings.append(self.greedy.no_candidates_warning(record.date, weights[d_idx]))
            else:
                state.charge(employee, weights[d_idx])
            assignments.append(
                self.greedy.make_assignment(record.date, employee, weights[d_idx], directory)
            )

        uneven = self.greedy.check_distribution(state, max(weights))
        if uneven is not None:
            warnings.append(uneven)

        total_weight = sum(weights)
        return OnCallSchedule(
            assignments=assignments,
            loads=dict(state.loads),
            target_load=total_weight / len(state.loads) if state.loads else 0.0,
            warnings=warnings,
            language=self.language,
        )
