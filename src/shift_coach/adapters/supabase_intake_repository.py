"""Supabase repository for nutrition, hydration, activity and meals."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import get_args
from uuid import UUID

from supabase import Client

from shift_coach.adapters.rows import (
    parse_clock,
    parse_float,
    parse_int,
    parse_timestamp,
)
from shift_coach.domain.intake import (
    ActivityIntensity,
    ActivitySnapshot,
    MealEntry,
    MealLog,
    MealTimingSnapshot,
    MealWindow,
    MetricTarget,
    NutritionSnapshot,
)
from shift_coach.services.scoring import IntakeRepository

_logger = logging.getLogger(__name__)

DEFAULT_STEPS_GOAL = 10000
DEFAULT_ACTIVE_MINUTES_GOAL = 30
_INTENSITIES = frozenset(get_args(ActivityIntensity))


@dataclass
class SupabaseIntakeRepository(IntakeRepository):
    """Supabase implementation for intake queries."""

    client: Client

    def get_nutrition(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> NutritionSnapshot:
        """Return meal, water and caffeine totals against profile targets."""
        profile = self._profile(
            user_id,
            "calorie_target, adjusted_calories, protein_target_g, carbs_target_g, "
            "fat_target_g, sat_fat_limit_g, water_target_ml, caffeine_limit_mg",
        )
        meals = self._rows_between(
            "meal_logs",
            "calories, protein_g, carbs_g, fat_g, sat_fat_g",
            "logged_at",
            user_id,
            start,
            end,
        )
        water = self._rows_between(
            "water_logs", "ml", "created_at", user_id, start, end
        )
        caffeine = self._rows_between(
            "caffeine_logs", "mg", "created_at", user_id, start, end
        )
        return NutritionSnapshot(
            calorie_target=parse_float(profile.get("calorie_target")),
            adjusted_calories=parse_float(profile.get("adjusted_calories")),
            consumed_calories=_total(meals, "calories"),
            protein=_metric(profile, "protein_target_g", meals, "protein_g"),
            carbs=_metric(profile, "carbs_target_g", meals, "carbs_g"),
            fat=_metric(profile, "fat_target_g", meals, "fat_g"),
            sat_fat=_metric(profile, "sat_fat_limit_g", meals, "sat_fat_g"),
            water=_metric(profile, "water_target_ml", water, "ml"),
            caffeine=_metric(profile, "caffeine_limit_mg", caffeine, "mg"),
        )

    def get_activity(self, user_id: UUID, day: date) -> ActivitySnapshot:
        """Return the day's steps and shift intensity against profile goals."""
        profile = self._profile(user_id, "daily_steps_goal, active_minutes_goal")
        response = (
            self.client.table("activity_logs")
            .select("steps, active_minutes, shift_activity_level")
            .eq("user_id", str(user_id))
            .eq("date", day.isoformat())
            .execute()
        )
        rows = response.data or []
        intensity = next(
            (
                row["shift_activity_level"]
                for row in reversed(rows)
                if row.get("shift_activity_level") in _INTENSITIES
            ),
            None,
        )
        steps_goal = parse_int(profile.get("daily_steps_goal"))
        minutes_goal = parse_int(profile.get("active_minutes_goal"))
        return ActivitySnapshot(
            steps=parse_int(_total(rows, "steps")) if rows else None,
            steps_goal=DEFAULT_STEPS_GOAL if steps_goal is None else steps_goal,
            active_minutes=parse_int(_total(rows, "active_minutes")) if rows else None,
            active_minutes_goal=(
                DEFAULT_ACTIVE_MINUTES_GOAL if minutes_goal is None else minutes_goal
            ),
            intensity=intensity,
        )

    def get_meal_timing(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> MealTimingSnapshot:
        """Return the user's meal schedule and meals logged in the range."""
        schedule = (
            self.client.table("meal_schedule")
            .select("slot_label, window_start, window_end")
            .eq("user_id", str(user_id))
            .execute()
        )
        recommended = []
        for row in schedule.data or []:
            if not row.get("slot_label"):
                continue
            window_start = parse_clock(row.get("window_start"))
            window_end = parse_clock(row.get("window_end") or row.get("window_start"))
            if window_start is None or window_end is None:
                _logger.warning(
                    "Skipping meal window with bad time: user_id=%s slot=%s",
                    user_id,
                    row["slot_label"],
                )
                continue
            recommended.append(
                MealWindow(
                    slot=str(row["slot_label"]),
                    window_start=window_start,
                    window_end=window_end,
                )
            )
        meals = self._rows_between(
            "meal_logs", "slot_label, logged_at", "logged_at", user_id, start, end
        )
        actual = []
        for row in meals:
            logged_at = parse_timestamp(row.get("logged_at"))
            if logged_at is None:
                _logger.warning("Skipping meal without time: user_id=%s", user_id)
                continue
            slot = str(row.get("slot_label") or "meal")
            actual.append(MealEntry(slot=slot, timestamp=logged_at))
        return MealTimingSnapshot(recommended=recommended, actual=actual)

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLog]:
        """Return meals logged in the range, oldest first."""
        rows = self._rows_between(
            "meal_logs", "logged_at, calories", "logged_at", user_id, start, end
        )
        meals = []
        for row in rows:
            logged_at = parse_timestamp(row.get("logged_at"))
            if logged_at is None:
                _logger.warning("Skipping meal without time: user_id=%s", user_id)
                continue
            calories = parse_float(row.get("calories")) or 0.0
            meals.append(MealLog(logged_at=logged_at, calories=calories))
        return meals

    def _profile(self, user_id: UUID, columns: str) -> dict[str, object]:
        response = (
            self.client.table("profiles")
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return {}
        return response.data[0]

    def _rows_between(  # noqa: PLR0913
        self,
        table: str,
        columns: str,
        time_column: str,
        user_id: UUID,
        start: datetime,
        end: datetime,
    ) -> list[dict[str, object]]:
        response = (
            self.client.table(table)
            .select(columns)
            .eq("user_id", str(user_id))
            .gte(time_column, start.isoformat())
            .lt(time_column, end.isoformat())
            .order(time_column, desc=False)
            .execute()
        )
        return response.data or []


def _total(rows: list[dict[str, object]], column: str) -> float:
    return sum(parse_float(row.get(column)) or 0.0 for row in rows)


def _metric(
    profile: dict[str, object],
    target_column: str,
    rows: list[dict[str, object]],
    consumed_column: str,
) -> MetricTarget | None:
    target = parse_float(profile.get(target_column))
    if target is None:
        return None
    return MetricTarget(target=target, consumed=_total(rows, consumed_column))
