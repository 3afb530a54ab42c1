"""Nutrition, activity and meal-timing snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

ActivityIntensity = Literal["very_light", "light", "moderate", "busy", "intense"]


@dataclass(frozen=True)
class MetricTarget:
    """Target (or limit) versus consumed amount for one metric."""

    target: float | None
    consumed: float | None


@dataclass(frozen=True)
class NutritionSnapshot:
    """Today's intake against targets.

    ``sat_fat`` and ``caffeine`` are limits: their ``target`` is a cap and
    lower consumption scores better.
    """

    calorie_target: float | None = None
    adjusted_calories: float | None = None
    consumed_calories: float | None = None
    protein: MetricTarget | None = None
    carbs: MetricTarget | None = None
    fat: MetricTarget | None = None
    sat_fat: MetricTarget | None = None
    water: MetricTarget | None = None
    caffeine: MetricTarget | None = None


@dataclass(frozen=True)
class ActivitySnapshot:
    """Today's movement against goals."""

    steps: int | None = None
    steps_goal: int | None = 10000
    active_minutes: int | None = None
    active_minutes_goal: int | None = None
    intensity: ActivityIntensity | None = None


@dataclass(frozen=True)
class MealWindow:
    """Recommended window for a meal slot, times as HH:MM."""

    slot: str
    window_start: str
    window_end: str


@dataclass(frozen=True)
class MealEntry:
    """An actual logged meal for a slot."""

    slot: str
    timestamp: datetime


@dataclass(frozen=True)
class MealTimingSnapshot:
    """Recommended meal windows versus logged meals."""

    recommended: list[MealWindow] = field(default_factory=list)
    actual: list[MealEntry] = field(default_factory=list)


@dataclass(frozen=True)
class MealLog:
    """A logged meal with its time and energy."""

    logged_at: datetime
    calories: float
