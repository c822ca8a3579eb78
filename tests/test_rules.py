"""Tests for weighting rules and the employee directory."""

import json
from datetime import date, datetime

import pytest

from oncallplanner.domain.directory import Employee, EmployeeDirectory, load_directory
from oncallplanner.domain.errors import ConfigurationError, ScheduleInputError
from oncallplanner.domain.rules import (
    FAIR_DISTRIBUTION_RULE,
    WEEKEND_WEIGHT_RULE,
    ScheduleRule,
    WeightRules,
    default_rules,
    is_weekend,
    load_rules,
)

MONDAY = date(2024, 1, 15)
SATURDAY = date(2024, 1, 20)
SUNDAY = date(2024, 1, 21)


class TestDayWeight:
    """Weight precedence: custom > weekend > 1."""

    def test_weekday_weighs_one(self):
        assert WeightRules().day_weight(MONDAY) == 1.0

    def test_weekend_uses_multiplier(self):
        rules = WeightRules(weekend_multiplier=3)
        assert rules.day_weight(SATURDAY) == 3.0
        assert rules.day_weight(SUNDAY) == 3.0

    def test_weekend_weighting_disabled(self):
        rules = WeightRules(weekend_weighting=False, weekend_multiplier=3)
        assert rules.day_weight(SATURDAY) == 1.0
        assert rules.effective_weekend_weight == 1.0

    def test_custom_weight_wins(self):
        rules = WeightRules(custom_weights={MONDAY: 2.5, SATURDAY: 1})
        assert rules.day_weight(MONDAY) == 2.5
        assert rules.day_weight(SATURDAY) == 1.0

    def test_datetime_is_truncated(self):
        rules = WeightRules(custom_weights={MONDAY: 4})
        assert rules.day_weight(datetime(2024, 1, 15, 23, 59)) == 4.0

    def test_minimal_rules(self):
        rules = WeightRules.minimal()
        assert rules.day_weight(SATURDAY) == 1.0
        assert rules.custom_weights == {}

    def test_is_weekend(self):
        assert not is_weekend(MONDAY)
        assert is_weekend(SATURDAY)
        assert is_weekend(SUNDAY)


class TestRuleValidation:
    """Weights that are not finite numbers >= 1 are configuration errors."""

    def test_multiplier_below_one_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            WeightRules(weekend_multiplier=0.5)
        assert exc_info.value.field == "weekend_multiplier"

    def test_non_numeric_multiplier_rejected(self):
        with pytest.raises(ConfigurationError):
            WeightRules(weekend_multiplier="2")

    def test_custom_weight_below_one_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            WeightRules(custom_weights={MONDAY: 0})
        assert exc_info.value.field == "custom_weights"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_multiplier_rejected(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            WeightRules(weekend_multiplier=value)
        assert exc_info.value.field == "weekend_multiplier"

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_custom_weight_rejected(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            WeightRules(custom_weights={MONDAY: value})
        assert exc_info.value.field == "custom_weights"

    def test_non_finite_weight_from_json_rejected(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text('{"custom_weights": {"2024-01-15": Infinity}}')
        with pytest.raises(ConfigurationError):
            load_rules(path)

    def test_datetime_key_applies_to_its_day(self):
        rules = WeightRules(weekend_weighting=False, custom_weights={datetime(2024, 1, 15, 8, 0): 3})
        assert rules.custom_weights == {MONDAY: 3}
        assert rules.day_weight(MONDAY) == 3.0

    def test_datetime_key_added_later_rejected(self):
        rules = WeightRules()
        rules.custom_weights[datetime(2024, 1, 15, 8, 0)] = 3
        with pytest.raises(ConfigurationError, match="must be a date"):
            rules.validate()

    def test_bad_date_error_is_chained(self):
        with pytest.raises(ConfigurationError) as exc_info:
            WeightRules.from_dict({"custom_weights": {"someday": 2}})
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_custom_weight_key_must_be_date(self):
        with pytest.raises(ConfigurationError):
            WeightRules(custom_weights={"2024-01-15": 2})

    def test_configuration_error_is_input_error(self):
        with pytest.raises(ScheduleInputError):
            WeightRules(weekend_multiplier=-1)

    def test_error_message_names_field(self):
        with pytest.raises(ConfigurationError, match=r"\[weekend_multiplier\]"):
            WeightRules(weekend_multiplier=0)


class TestRuleList:
    """Building weights from the editable rule list."""

    def test_default_rules(self):
        rules = default_rules()
        ids = [r.id for r in rules]
        assert ids == [WEEKEND_WEIGHT_RULE, FAIR_DISTRIBUTION_RULE]
        assert rules[0].weight == 2.0

    def test_from_default_rules(self):
        rules = WeightRules.from_rule_list(default_rules())
        assert rules.weekend_weighting
        assert rules.day_weight(SATURDAY) == 2.0

    def test_disabled_weekend_rule(self):
        rule = ScheduleRule(id=WEEKEND_WEIGHT_RULE, name="Weekend", enabled=False, weight=3)
        rules = WeightRules.from_rule_list([rule])
        assert rules.day_weight(SATURDAY) == 1.0

    def test_missing_weekend_rule(self):
        rules = WeightRules.from_rule_list([], custom_weights={MONDAY: 2})
        assert not rules.weekend_weighting
        assert rules.day_weight(MONDAY) == 2.0

    def test_zero_weight_falls_back_to_default(self):
        rule = ScheduleRule(id=WEEKEND_WEIGHT_RULE, name="Weekend", weight=0)
        rules = WeightRules.from_rule_list([rule])
        assert rules.weekend_multiplier == 2.0


class TestRuleFiles:
    """JSON rules round trip."""

    def test_from_dict(self):
        rules = WeightRules.from_dict({
            "weekend_weighting": True,
            "weekend_multiplier": 1.5,
            "custom_weights": {"2024-01-15": 3},
        })
        assert rules.weekend_multiplier == 1.5
        assert rules.custom_weights == {MONDAY: 3}

    def test_from_dict_defaults(self):
        rules = WeightRules.from_dict({})
        assert rules.weekend_weighting
        assert rules.weekend_multiplier == 2.0

    def test_from_dict_bad_date(self):
        with pytest.raises(ConfigurationError, match="Invalid custom weight date"):
            WeightRules.from_dict({"custom_weights": {"15.01.2024": 2}})

    def test_from_dict_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            WeightRules.from_dict(["weekend_weighting"])

    def test_to_dict(self):
        rules = WeightRules(custom_weights={SATURDAY: 1, MONDAY: 2})
        data = rules.to_dict()
        assert list(data["custom_weights"]) == ["2024-01-15", "2024-01-20"]

    def test_load_rules(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"weekend_multiplier": 3, "custom_weights": {"2024-01-20": 1}}))

        rules = load_rules(path)

        assert rules.day_weight(SUNDAY) == 3.0
        assert rules.day_weight(SATURDAY) == 1.0

    def test_load_rules_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_rules(path)


class TestEmployeeDirectory:
    """Contact lookup."""

    @pytest.fixture
    def directory(self):
        return EmployeeDirectory([
            Employee("Anna", "Safety Officer", "0151 - 111"),
            Employee("Ben", "Site Manager", "0151 - 222"),
        ])

    def test_lookup(self, directory):
        assert directory.phone_for("Ben") == "0151 - 222"
        assert "Anna" in directory
        assert len(directory) == 2

    def test_missing_entry_is_empty(self, directory):
        assert directory.phone_for("Zoe") == ""
        assert directory.phone_for(None) == ""
        assert directory.get("Zoe") is None

    def test_lookup_is_case_sensitive(self, directory):
        assert directory.phone_for("anna") == ""

    def test_iteration_keeps_order(self, directory):
        assert [e.name for e in directory] == ["Anna", "Ben"]

    def test_duplicate_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            EmployeeDirectory([Employee("Anna"), Employee("Anna")])

    def test_from_records_requires_name(self):
        with pytest.raises(ConfigurationError):
            EmployeeDirectory.from_records([{"phone": "123"}])

    def test_load_directory(self, tmp_path):
        path = tmp_path / "staff.json"
        path.write_text(json.dumps([
            {"name": "Anna", "position": "Safety Officer", "phone": "0151 - 111"},
            {"name": "Ben"},
        ]))

        directory = load_directory(path)

        assert directory.get("Anna").position == "Safety Officer"
        assert directory.phone_for("Ben") == ""

    def test_load_directory_requires_list(self, tmp_path):
        path = tmp_path / "staff.json"
        path.write_text(json.dumps({"name": "Anna"}))
        with pytest.raises(ConfigurationError, match="JSON list"):
            load_directory(path)
