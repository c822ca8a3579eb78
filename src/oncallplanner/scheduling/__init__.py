"""Scheduling engine for generating on-call schedules."""

from oncallplanner.scheduling.cpsat_solver import (
    BalancedCPSATSolver,
    SolverConfig,
    SolverResult,
)
from oncallplanner.scheduling.fair_scheduler import (
    FairAssignmentScheduler,
    LoadState,
    generate_schedule,
)
from oncallplanner.scheduling.scheduler import Scheduler, SolverType

__all__ = [
    # Core scheduler
    "Scheduler",
    "SolverType",
    "generate_schedule",
    # Solvers
    "FairAssignmentScheduler",
    "BalancedCPSATSolver",
    "LoadState",
    # Solver configuration
    "SolverConfig",
    "SolverResult",
]
