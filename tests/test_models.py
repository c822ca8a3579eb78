"""Tests for schedule models, metrics and manual overrides."""

from datetime import date, timedelta

import pytest

from oncallplanner.domain.directory import Employee, EmployeeDirectory
from oncallplanner.domain.errors import ScheduleInputError
from oncallplanner.domain.models import (
    Assignment,
    AvailabilityRecord,
    LoadMetrics,
    OnCallSchedule,
    ScheduleWarning,
    WarningType,
    month_label,
    weekday_label,
)
from oncallplanner.domain.rules import WeightRules
from oncallplanner.scheduling.fair_scheduler import generate_schedule


@pytest.fixture
def base_date():
    return date(2025, 3, 3)  # Monday


@pytest.fixture
def schedule(base_date):
    records = [
        AvailabilityRecord(base_date + timedelta(days=i), {"A": True, "B": True, "C": i != 0})
        for i in range(6)
    ]
    return generate_schedule(records, WeightRules())


class TestAvailabilityRecord:
    """Availability helpers."""

    def test_available_employees_keep_order(self, base_date):
        record = AvailabilityRecord(base_date, {"C": True, "A": False, "B": True})
        assert record.available_employees == ["C", "B"]
        assert record.has_candidates
        assert record.is_available("C")
        assert not record.is_available("A")
        assert not record.is_available("Zoe")

    def test_from_available(self, base_date):
        record = AvailabilityRecord.from_available(base_date, ["B"], roster=["A", "B"])
        assert record.employees == {"A": False, "B": True}

    def test_no_candidates(self, base_date):
        assert not AvailabilityRecord(base_date, {"A": False}).has_candidates


class TestLabels:
    """Weekday and month labels."""

    def test_weekday_label(self, base_date):
        assert weekday_label(base_date) == "Montag"
        assert weekday_label(base_date + timedelta(days=6), "en") == "Sunday"

    def test_unknown_language_falls_back_to_german(self, base_date):
        assert weekday_label(base_date, "fr") == "Montag"

    def test_month_label(self, base_date):
        assert month_label(base_date) == "März 2025"
        assert month_label(base_date, "en") == "March 2025"

    def test_schedule_month_label(self, schedule):
        assert schedule.month_label() == "März 2025"
        assert OnCallSchedule().month_label() == ""


class TestAssignment:
    """Assignment display helpers."""

    def test_unassigned(self, base_date):
        assignment = Assignment(date=base_date, weekday="Montag")
        assert assignment.is_unassigned
        assert assignment.display_name == "UNASSIGNED"

    def test_weekend_flag(self, base_date):
        saturday = base_date + timedelta(days=5)
        assert Assignment(date=saturday, weekday="Samstag", assigned_employee="A").is_weekend
        assert not Assignment(date=base_date, weekday="Montag", assigned_employee="A").is_weekend

    def test_warning_str(self, base_date):
        warning = ScheduleWarning(WarningType.NO_CANDIDATES, "No available employees", date=base_date)
        assert str(warning) == "[no_candidates] 2025-03-03: No available employees"


class TestLoadMetrics:
    """Load statistics."""

    def test_even_loads(self):
        metrics = LoadMetrics.calculate({"A": 3.0, "B": 3.0})
        assert metrics.spread == 0.0
        assert metrics.load_std_dev == 0.0
        assert metrics.fairness_score == 100.0

    def test_uneven_loads(self):
        metrics = LoadMetrics.calculate({"A": 4.0, "B": 2.0})
        assert metrics.min_load == 2.0
        assert metrics.max_load == 4.0
        assert metrics.avg_load == 3.0
        assert metrics.load_std_dev == pytest.approx(1.0)
        assert metrics.fairness_score == pytest.approx(100 - 100 / 3)

    def test_empty_loads(self):
        metrics = LoadMetrics.calculate({})
        assert metrics.spread == 0.0
        assert metrics.fairness_score == 100.0

    def test_all_zero_loads(self):
        assert LoadMetrics.calculate({"A": 0.0}).fairness_score == 100.0


class TestOverride:
    """Manual reassignment of a single day."""

    def test_reassign_recomputes_loads(self, schedule, base_date):
        original = schedule.get_assignment(base_date).assigned_employee
        other = "B" if original != "B" else "A"

        edited = schedule.with_override(base_date, other)

        assert edited.get_assignment(base_date).assigned_employee == other
        assert edited.loads[other] == pytest.approx(schedule.loads[other] + 1)
        assert edited.loads[original] == pytest.approx(schedule.loads[original] - 1)
        assert sum(edited.loads.values()) == pytest.approx(sum(schedule.loads.values()))

    def test_original_schedule_untouched(self, schedule, base_date):
        before = list(schedule.assignments)
        loads = dict(schedule.loads)

        schedule.with_override(base_date, "C")

        assert schedule.assignments == before
        assert schedule.loads == loads

    def test_weight_is_kept(self, schedule, base_date):
        saturday = base_date + timedelta(days=5)
        edited = schedule.with_override(saturday, "C")
        assert edited.get_assignment(saturday).weight == 2.0

    def test_clear_day(self, schedule, base_date):
        edited = schedule.with_override(base_date, None)

        assert edited.get_assignment(base_date).is_unassigned
        assert edited.unassigned_dates == [base_date]
        warnings = edited.warnings_of(WarningType.NO_CANDIDATES)
        assert [w.message for w in warnings] == ["Cleared by manual override"]
        # Every previously known employee keeps a load entry
        assert set(edited.loads) == set(schedule.loads)

    def test_contact_from_directory(self, schedule, base_date):
        directory = EmployeeDirectory([Employee("C", phone="0170 - 42")])
        edited = schedule.with_override(base_date, "C", directory)
        assert edited.get_assignment(base_date).contact_info == "0170 - 42"

    def test_filling_gap_removes_warning(self, base_date):
        records = [
            AvailabilityRecord(base_date, {"A": False}),
            AvailabilityRecord(base_date + timedelta(days=1), {"A": True}),
        ]
        schedule = generate_schedule(records, WeightRules.minimal())
        assert schedule.warnings_of(WarningType.NO_CANDIDATES)

        edited = schedule.with_override(base_date, "A")

        assert edited.warnings_of(WarningType.NO_CANDIDATES) == []
        assert edited.loads == {"A": 2.0}

    def test_unknown_date_rejected(self, schedule):
        with pytest.raises(ScheduleInputError) as exc_info:
            schedule.with_override(date(2030, 1, 1), "A")
        assert exc_info.value.field == "date"
