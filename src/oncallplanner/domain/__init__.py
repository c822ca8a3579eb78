"""Domain models and configuration for on-call scheduling."""

from oncallplanner.domain.directory import (
    Employee,
    EmployeeDirectory,
    load_directory,
)
from oncallplanner.domain.errors import (
    AvailabilityImportError,
    ConfigurationError,
    OnCallPlannerError,
    ScheduleInputError,
    SchedulingError,
)
from oncallplanner.domain.models import (
    UNASSIGNED_LABEL,
    Assignment,
    AvailabilityRecord,
    LoadMetrics,
    OnCallSchedule,
    ScheduleWarning,
    WarningType,
)
from oncallplanner.domain.rules import (
    ScheduleRule,
    WeightRules,
    default_rules,
    load_rules,
)

__all__ = [
    # Models
    "Assignment",
    "AvailabilityRecord",
    "LoadMetrics",
    "OnCallSchedule",
    "ScheduleWarning",
    "UNASSIGNED_LABEL",
    "WarningType",
    # Rules
    "ScheduleRule",
    "WeightRules",
    "default_rules",
    "load_rules",
    # Directory
    "Employee",
    "EmployeeDirectory",
    "load_directory",
    # Errors
    "AvailabilityImportError",
    "ConfigurationError",
    "OnCallPlannerError",
    "ScheduleInputError",
    "SchedulingError",
]
