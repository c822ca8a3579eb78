"""Fairness weighting rules.

A day's weight is the fairness "cost" charged to whoever covers it. Regular
weekdays weigh 1, weekends weigh the weekend multiplier when weekend weighting
is enabled, and a custom per-date weight overrides both.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from oncallplanner.domain.errors import ConfigurationError

WEEKEND_WEIGHT_RULE = "weekend-weight"
FAIR_DISTRIBUTION_RULE = "fair-distribution"

DEFAULT_WEEKEND_MULTIPLIER = 2.0
MIN_WEIGHT = 1.0


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


@dataclass
class ScheduleRule:
    """A named, toggleable rule as edited in the rules configuration.

    Attributes:
        id: Stable rule identifier (e.g. "weekend-weight").
        name: Human-readable name.
        description: What the rule does.
        enabled: Whether the rule is active.
        weight: Rule weight; for the weekend rule this is the multiplier.
    """

    id: str
    name: str
    description: str = ""
    enabled: bool = True
    weight: float = 1.0


def default_rules() -> list[ScheduleRule]:
    """Rules shipped out of the box."""
    return [
        ScheduleRule(
            id=WEEKEND_WEIGHT_RULE,
            name="Weekend Weight",
            description="Weekend shifts count as multiple regular shifts for fair distribution",
            enabled=True,
            weight=DEFAULT_WEEKEND_MULTIPLIER,
        ),
        ScheduleRule(
            id=FAIR_DISTRIBUTION_RULE,
            name="Fair Distribution",
            description="Ensure shifts are distributed evenly among available employees",
            enabled=True,
            weight=1.0,
        ),
    ]


@dataclass
class WeightRules:
    """Fairness configuration for one scheduler run.

    Attributes:
        weekend_weighting: Whether Saturday/Sunday use the weekend multiplier.
        weekend_multiplier: Weight of a weekend day when weighting is enabled.
        custom_weights: Per-date weight overrides. These win over the weekend
            multiplier.
    """

    weekend_weighting: bool = True
    weekend_multiplier: float = DEFAULT_WEEKEND_MULTIPLIER
    custom_weights: dict[date, float] = field(default_factory=dict)

    def __post_init__(self):
        self.custom_weights = {
            (day.date() if isinstance(day, datetime) else day): weight
            for day, weight in self.custom_weights.items()
        }
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError if any weight is not a finite number >= 1."""
        if not _is_number(self.weekend_multiplier) or not math.isfinite(self.weekend_multiplier):
            raise ConfigurationError(
                f"Weekend multiplier must be a finite number, got {self.weekend_multiplier!r}",
                field="weekend_multiplier",
            )
        if self.weekend_multiplier < MIN_WEIGHT:
            raise ConfigurationError(
                f"Weekend multiplier must be >= {MIN_WEIGHT:g}, got {self.weekend_multiplier}",
                field="weekend_multiplier",
            )
        for day, weight in self.custom_weights.items():
            if not isinstance(day, date) or isinstance(day, datetime):
                raise ConfigurationError(
                    f"Custom weight key must be a date, got {day!r}",
                    field="custom_weights",
                )
            if not _is_number(weight) or not math.isfinite(weight) or weight < MIN_WEIGHT:
                raise ConfigurationError(
                    f"Custom weight for {day.isoformat()} must be >= {MIN_WEIGHT:g}, got {weight!r}",
                    field="custom_weights",
                )

    @property
    def effective_weekend_weight(self) -> float:
        return self.weekend_multiplier if self.weekend_weighting else 1.0

    def day_weight(self, day: date) -> float:
        """Weight charged for covering `day`."""
        if isinstance(day, datetime):
            day = day.date()
        custom = self.custom_weights.get(day)
        if custom is not None:
            return float(custom)
        if is_weekend(day):
            return float(self.effective_weekend_weight)
        return 1.0

    @classmethod
    def minimal(cls) -> "WeightRules":
        """No weekend weighting and no custom weights: every day weighs 1."""
        return cls(weekend_weighting=False)

    @classmethod
    def from_rule_list(
        cls,
        rules: Iterable[ScheduleRule],
        custom_weights: Optional[dict[date, float]] = None,
    ) -> "WeightRules":
        """Build weighting rules from the editable rule list.

        Only the weekend rule affects weights. A missing weekend rule means
        weekend weighting is off. A zero weight falls back to the default
        multiplier.
        """
        weekend_rule = next((r for r in rules if r.id == WEEKEND_WEIGHT_RULE), None)
        if weekend_rule is None:
            return cls(weekend_weighting=False, custom_weights=dict(custom_weights or {}))
        return cls(
            weekend_weighting=weekend_rule.enabled,
            weekend_multiplier=weekend_rule.weight or DEFAULT_WEEKEND_MULTIPLIER,
            custom_weights=dict(custom_weights or {}),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "WeightRules":
        """Build rules from a JSON-style dict with ISO date keys."""
        if not isinstance(data, dict):
            raise ConfigurationError("Rules must be a JSON object", field="rules")

        custom: dict[date, float] = {}
        for key, weight in (data.get("custom_weights") or {}).items():
            try:
                day = date.fromisoformat(str(key))
            except ValueError as exc:
                raise ConfigurationError(
                    f"Invalid custom weight date: {key!r} (expected YYYY-MM-DD)",
                    field="custom_weights",
                ) from exc
            custom[day] = weight

        return cls(
            weekend_weighting=bool(data.get("weekend_weighting", True)),
            weekend_multiplier=data.get("weekend_multiplier", DEFAULT_WEEKEND_MULTIPLIER),
            custom_weights=custom,
        )

    def to_dict(self) -> dict:
        return {
            "weekend_weighting": self.weekend_weighting,
            "weekend_multiplier": self.weekend_multiplier,
            "custom_weights": {
                d.isoformat(): w for d, w in sorted(self.custom_weights.items())
            },
        }


def load_rules(path: Union[str, Path]) -> WeightRules:
    """Load weighting rules from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}", field="rules") from exc
    return WeightRules.from_dict(data)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
