"""Supabase repository for precomputed daily scores."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shift_coach.domain.scores import DailyScores
from shift_coach.services.precompute import ScoreRepository

_logger = logging.getLogger(__name__)

_ON_CONFLICT = "user_id,date"


@dataclass
class SupabaseScoreRepository(ScoreRepository):
    """Supabase implementation for score persistence."""

    client: Client

    def list_user_ids(self) -> list[UUID]:
        """Return ids of every user with a profile."""
        response = self.client.table("profiles").select("user_id").execute()
        user_ids = []
        for row in response.data or []:
            raw = row.get("user_id")
            try:
                user_ids.append(UUID(str(raw)))
            except ValueError:
                _logger.warning("Skipping profile with invalid user_id: %s", raw)
        return user_ids

    def save_daily_scores(self, scores: DailyScores) -> None:
        """Upsert the day's scores into the per-score tables."""
        key = {"user_id": str(scores.user_id), "date": scores.day.isoformat()}
        rhythm = scores.shift_rhythm
        self.client.table("shift_rhythm_scores").upsert(
            {
                **key,
                "sleep_score": rhythm.sleep_score,
                "regularity_score": rhythm.regularity_score,
                "shift_pattern_score": rhythm.shift_pattern_score,
                "recovery_score": rhythm.recovery_score,
                "nutrition_score": rhythm.nutrition_score,
                "activity_score": rhythm.activity_score,
                "meal_timing_score": rhythm.meal_timing_score,
                "total_score": rhythm.total_score,
            },
            on_conflict=_ON_CONFLICT,
        ).execute()

        lag = scores.shift_lag
        if lag.data_sufficient:
            self.client.table("shiftlag_logs").upsert(
                {
                    **key,
                    "score": lag.score,
                    "level": lag.level,
                    "sleep_debt_score": lag.sleep_debt_score,
                    "misalignment_score": lag.misalignment_score,
                    "instability_score": lag.instability_score,
                    "sleep_debt_hours_7d": lag.sleep_debt_hours,
                    "avg_night_overlap_hours": lag.avg_night_overlap_hours,
                    "shift_start_variability_hours": lag.shift_start_variability_hours,
                },
                on_conflict=_ON_CONFLICT,
            ).execute()

        circadian = scores.circadian
        if circadian.data_sufficient:
            self.client.table("circadian_logs").upsert(
                {
                    **key,
                    "sleep_midpoint_minutes": circadian.sleep_midpoint_minutes,
                    "deviation_hours": circadian.deviation_hours,
                    "circadian_phase": circadian.phase,
                    "alignment_score": circadian.alignment_score,
                    "sleep_duration": circadian.duration_factor,
                    "sleep_timing": circadian.timing_factor,
                    "sleep_debt": circadian.debt_factor,
                    "inconsistency": circadian.consistency_factor,
                    "latest_shift": circadian.shift_adjustment,
                },
                on_conflict=_ON_CONFLICT,
            ).execute()

        binge = scores.binge_risk
        if binge.data_sufficient:
            self.client.table("binge_risk_logs").upsert(
                {
                    **key,
                    "score": binge.score,
                    "level": binge.level,
                    "drivers": binge.drivers,
                    "explanation": binge.explanation,
                },
                on_conflict=_ON_CONFLICT,
            ).execute()
