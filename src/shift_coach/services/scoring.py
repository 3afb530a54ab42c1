"""Scoring service: fetches a user's recent data and runs the calculators."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from shift_coach.domain.intake import (
    ActivitySnapshot,
    MealEntry,
    MealLog,
    MealTimingSnapshot,
    NutritionSnapshot,
)
from shift_coach.domain.scores import (
    BingeRisk,
    CircadianPhase,
    DailyScores,
    ShiftLagMetrics,
    ShiftRhythmScore,
    SleepDeficit,
    SocialJetlag,
    TonightTarget,
)
from shift_coach.domain.shifts import ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.binge_risk import BingeRiskInputs, calculate_binge_risk
from shift_coach.engine.circadian import (
    calculate_circadian_phase,
    circadian_shift_type,
    summarize_recent_sleep,
)
from shift_coach.engine.shift_lag import calculate_shift_lag
from shift_coach.engine.shift_rhythm import ShiftRhythmInputs, calculate_shift_rhythm
from shift_coach.engine.sleep_deficit import (
    aggregate_main_sleep,
    calculate_sleep_deficit,
)
from shift_coach.engine.social_jetlag import calculate_social_jetlag
from shift_coach.engine.tonight_target import calculate_tonight_target
from shift_coach.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)

WEEK_DAYS = 7
JETLAG_DAYS = 10
LONG_WINDOW_DAYS = 14
UPCOMING_SHIFT_DAYS = 2


class SleepRepository(Protocol):
    """Persistence interface for sleep logs."""

    def list_sleep_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[SleepSession]:
        """Return sleep sessions starting within a time range."""


class ShiftRepository(Protocol):
    """Persistence interface for rota entries."""

    def list_shift_days(self, user_id: UUID, start: date, end: date) -> list[ShiftDay]:
        """Return shifts dated within an inclusive date range."""


class IntakeRepository(Protocol):
    """Persistence interface for nutrition, activity and meals."""

    def get_nutrition(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> NutritionSnapshot:
        """Return intake logged within a time range against daily targets."""

    def get_activity(self, user_id: UUID, day: date) -> ActivitySnapshot:
        """Return the day's activity against goals."""

    def get_meal_timing(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> MealTimingSnapshot:
        """Return recommended meal windows and meals logged within a time range."""

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLog]:
        """Return meals logged within a time range."""


@dataclass(frozen=True)
class _ScoringWindow:
    long_sleep: list[SleepSession]
    long_shifts: list[ShiftDay]
    week_sleep: list[SleepSession]
    week_shifts: list[ShiftDay]


@dataclass
class ScoringService:
    """Computes every dashboard score for a user in their own time zone.

    Every method accepts an optional ``now`` so that scores can be computed for
    a fixed moment; it defaults to the current time.
    """

    sleep_repository: SleepRepository
    shift_repository: ShiftRepository
    intake_repository: IntakeRepository
    user_settings: UserSettingsService
    service_day_start_hour: int = 7

    def get_sleep_deficit(
        self, user_id: UUID, now: datetime | None = None
    ) -> SleepDeficit:
        """Return the weekly sleep deficit over the last seven calendar days."""
        local_now = self._local_now(user_id, now)
        required = self.user_settings.get_required_sleep_hours(user_id)
        sessions = self._sleep_sessions(user_id, local_now, WEEK_DAYS)
        return self._sleep_deficit(user_id, sessions, local_now, required)

    def get_circadian(
        self, user_id: UUID, now: datetime | None = None
    ) -> CircadianPhase:
        """Return body-clock alignment from the last two weeks of sleep."""
        local_now = self._local_now(user_id, now)
        window = self._window(user_id, local_now)
        deficit = self._sleep_deficit(
            user_id,
            window.week_sleep,
            local_now,
            self.user_settings.get_required_sleep_hours(user_id),
        )
        return self._circadian(
            user_id, window.long_sleep, window.week_shifts, local_now, deficit
        )

    def get_social_jetlag(
        self, user_id: UUID, now: datetime | None = None
    ) -> SocialJetlag:
        """Return drift of the sleep midpoint from the personal baseline."""
        local_now = self._local_now(user_id, now)
        sessions = self._sleep_sessions(user_id, local_now, JETLAG_DAYS + 1)
        result = calculate_social_jetlag(
            sessions, local_now, self.service_day_start_hour
        )
        if not result.data_sufficient:
            _logger.info("Social jetlag insufficient data: user_id=%s", user_id)
        return result

    def get_shift_rhythm(
        self, user_id: UUID, now: datetime | None = None
    ) -> ShiftRhythmScore:
        """Return today's 0-10 rhythm score."""
        local_now = self._local_now(user_id, now)
        today = local_now.date()
        tz = local_now.tzinfo
        sessions = self._sleep_sessions(user_id, local_now, WEEK_DAYS)
        # One extra day so the first sleep can see a preceding night shift.
        shifts = self._shift_days(user_id, local_now, WEEK_DAYS + 1)
        day_start, day_end = _day_bounds(local_now)
        meal_timing = self.intake_repository.get_meal_timing(
            user_id, day_start, day_end
        )
        actual_meals = [
            MealEntry(slot=entry.slot, timestamp=entry.timestamp.astimezone(tz))
            for entry in meal_timing.actual
        ]
        sleep_target = self.user_settings.get_required_sleep_hours(user_id)
        result = calculate_shift_rhythm(
            ShiftRhythmInputs(
                sleep_sessions=sessions,
                shift_days=shifts,
                nutrition=self.intake_repository.get_nutrition(
                    user_id, day_start, day_end
                ),
                activity=self.intake_repository.get_activity(user_id, today),
                meal_timing=MealTimingSnapshot(
                    recommended=meal_timing.recommended, actual=actual_meals
                ),
                sleep_target_hours=sleep_target,
            )
        )
        if not result.data_sufficient:
            _logger.info("Shift rhythm without main sleep: user_id=%s", user_id)
        return result

    def get_shift_lag(
        self,
        user_id: UUID,
        now: datetime | None = None,
        circadian_midpoint_hours: float | None = None,
    ) -> ShiftLagMetrics:
        """Return the 0-100 ShiftLag score.

        Pass ``circadian_midpoint_hours`` from a circadian result computed in the
        same run to centre the biological night on the user's own sleep.
        """
        local_now = self._local_now(user_id, now)
        sessions = self._sleep_sessions(user_id, local_now, LONG_WINDOW_DAYS)
        shifts = self._shift_days(user_id, local_now, LONG_WINDOW_DAYS)
        return self._shift_lag(
            user_id, sessions, shifts, local_now, circadian_midpoint_hours
        )

    def get_binge_risk(self, user_id: UUID, now: datetime | None = None) -> BingeRisk:
        """Return today's binge risk."""
        local_now = self._local_now(user_id, now)
        window = self._window(user_id, local_now)
        sleep_deficit = self._sleep_deficit(
            user_id,
            window.week_sleep,
            local_now,
            self.user_settings.get_required_sleep_hours(user_id),
        )
        circadian = self._circadian(
            user_id, window.long_sleep, window.week_shifts, local_now, sleep_deficit
        )
        shift_lag = self._shift_lag(
            user_id,
            window.long_sleep,
            window.long_shifts,
            local_now,
            _midpoint_hours(circadian),
        )
        return self._binge_risk(
            user_id, local_now, window, sleep_deficit, circadian, shift_lag
        )

    def get_tonight_target(
        self, user_id: UUID, now: datetime | None = None
    ) -> TonightTarget:
        """Return tonight's recommended sleep duration."""
        local_now = self._local_now(user_id, now)
        deficit = self.get_sleep_deficit(user_id, local_now)
        return self._tonight_target(user_id, local_now, deficit)

    def get_daily_scores(
        self, user_id: UUID, now: datetime | None = None
    ) -> DailyScores:
        """Compute every score once, feeding each result to the scores after it."""
        local_now = self._local_now(user_id, now)
        window = self._window(user_id, local_now)
        required = self.user_settings.get_required_sleep_hours(user_id)

        sleep_deficit = self._sleep_deficit(
            user_id, window.week_sleep, local_now, required
        )
        circadian = self._circadian(
            user_id, window.long_sleep, window.week_shifts, local_now, sleep_deficit
        )
        shift_lag = self._shift_lag(
            user_id,
            window.long_sleep,
            window.long_shifts,
            local_now,
            _midpoint_hours(circadian),
        )
        binge_risk = self._binge_risk(
            user_id, local_now, window, sleep_deficit, circadian, shift_lag
        )
        _logger.info(
            "Daily scores computed: user_id=%s day=%s", user_id, local_now.date()
        )
        return DailyScores(
            user_id=user_id,
            day=local_now.date(),
            sleep_deficit=sleep_deficit,
            circadian=circadian,
            social_jetlag=self.get_social_jetlag(user_id, local_now),
            shift_rhythm=self.get_shift_rhythm(user_id, local_now),
            shift_lag=shift_lag,
            binge_risk=binge_risk,
            tonight_target=self._tonight_target(user_id, local_now, sleep_deficit),
        )

    def _window(self, user_id: UUID, local_now: datetime) -> _ScoringWindow:
        long_sleep = self._sleep_sessions(user_id, local_now, LONG_WINDOW_DAYS)
        long_shifts = self._shift_days(user_id, local_now, LONG_WINDOW_DAYS)
        week_start = local_now.date() - timedelta(days=WEEK_DAYS - 1)
        return _ScoringWindow(
            long_sleep=long_sleep,
            long_shifts=long_shifts,
            week_sleep=[
                session for session in long_sleep if session.date >= week_start
            ],
            week_shifts=[shift for shift in long_shifts if shift.date >= week_start],
        )

    def _binge_risk(  # noqa: PLR0913
        self,
        user_id: UUID,
        local_now: datetime,
        window: _ScoringWindow,
        sleep_deficit: SleepDeficit,
        circadian: CircadianPhase,
        shift_lag: ShiftLagMetrics,
    ) -> BingeRisk:
        meals = self.intake_repository.list_meal_logs(
            user_id,
            (local_now - timedelta(days=WEEK_DAYS)).astimezone(UTC),
            local_now.astimezone(UTC),
        )
        activity = self.intake_repository.get_activity(user_id, local_now.date())
        result = calculate_binge_risk(
            BingeRiskInputs(
                sleep_sessions=window.week_sleep,
                now=local_now,
                shift_days=window.week_shifts,
                meals=[
                    replace(meal, logged_at=meal.logged_at.astimezone(local_now.tzinfo))
                    for meal in meals
                ],
                circadian_alignment=(
                    circadian.alignment_score if circadian.data_sufficient else None
                ),
                sleep_debt_hours=(
                    sleep_deficit.weekly_deficit_hours
                    if sleep_deficit.data_sufficient
                    else None
                ),
                shift_lag_score=shift_lag.score if shift_lag.data_sufficient else None,
                activity_intensity=activity.intensity,
            )
        )
        if not result.data_sufficient:
            _logger.info("Binge risk baseline without sleep: user_id=%s", user_id)
        return result

    def _local_now(self, user_id: UUID, now: datetime | None) -> datetime:
        tz = ZoneInfo(self.user_settings.get_timezone(user_id))
        return (now or datetime.now(tz=UTC)).astimezone(tz)

    def _sleep_sessions(
        self, user_id: UUID, local_now: datetime, days: int
    ) -> list[SleepSession]:
        """Return localized sessions dated within the last ``days`` days."""
        tz = local_now.tzinfo
        first_day = local_now.date() - timedelta(days=days - 1)
        # Fetch from the evening before the window so overnight sleep is included.
        start = datetime.combine(first_day, time.min, tzinfo=tz) - timedelta(days=1)
        end = datetime.combine(local_now.date(), time.min, tzinfo=tz) + timedelta(
            days=1
        )
        sessions = self.sleep_repository.list_sleep_sessions(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )
        return [
            replace(
                session,
                start=session.start.astimezone(tz),
                end=session.end.astimezone(tz),
            )
            for session in sessions
            if first_day <= session.date <= local_now.date()
        ]

    def _shift_days(
        self, user_id: UUID, local_now: datetime, days: int, ahead: int = 0
    ) -> list[ShiftDay]:
        tz = local_now.tzinfo
        today = local_now.date()
        shifts = self.shift_repository.list_shift_days(
            user_id,
            today - timedelta(days=days - 1),
            today + timedelta(days=ahead),
        )
        return [
            replace(
                shift,
                start=shift.start.astimezone(tz) if shift.start else None,
                end=shift.end.astimezone(tz) if shift.end else None,
            )
            for shift in shifts
        ]

    def _sleep_deficit(
        self,
        user_id: UUID,
        sessions: Sequence[SleepSession],
        local_now: datetime,
        required: float,
    ) -> SleepDeficit:
        if not any(session.is_main for session in sessions):
            _logger.info("Sleep deficit insufficient data: user_id=%s", user_id)
            return SleepDeficit.insufficient(
                required,
                "No sleep logged in the last 7 days. Log your sleep to see your "
                "weekly sleep deficit.",
            )
        today = local_now.date()
        days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS)]
        return calculate_sleep_deficit(aggregate_main_sleep(sessions, days), required)

    def _circadian(
        self,
        user_id: UUID,
        sessions: Sequence[SleepSession],
        shifts: Sequence[ShiftDay],
        local_now: datetime,
        deficit: SleepDeficit,
    ) -> CircadianPhase:
        if not deficit.data_sufficient:
            _logger.info("Circadian insufficient data: user_id=%s", user_id)
            return CircadianPhase.insufficient(
                "No main sleep in the last 7 days. Log your sleep to see how well "
                "it lines up with your body clock."
            )
        summary = summarize_recent_sleep(
            sessions,
            sleep_debt_hours=deficit.weekly_deficit_hours,
            shift_type=circadian_shift_type(shifts, local_now),
        )
        if summary is None:
            _logger.info("Circadian insufficient data: user_id=%s", user_id)
            return CircadianPhase.insufficient(
                "Log your main sleep to see how well it lines up with your body clock."
            )
        return calculate_circadian_phase(summary)

    def _shift_lag(
        self,
        user_id: UUID,
        sessions: Sequence[SleepSession],
        shifts: Sequence[ShiftDay],
        local_now: datetime,
        circadian_midpoint_hours: float | None,
    ) -> ShiftLagMetrics:
        if not sessions:
            _logger.info("ShiftLag insufficient data: user_id=%s", user_id)
            return ShiftLagMetrics.insufficient(
                "Not enough data yet. Log your sleep and shifts to see your ShiftLag."
            )
        return calculate_shift_lag(
            sessions, shifts, local_now.date(), circadian_midpoint_hours
        )

    def _tonight_target(
        self, user_id: UUID, local_now: datetime, deficit: SleepDeficit
    ) -> TonightTarget:
        upcoming = self._shift_days(user_id, local_now, 1, ahead=UPCOMING_SHIFT_DAYS)
        starts = [
            shift.start for shift in upcoming if shift.is_work_day and shift.start
        ]
        target = calculate_tonight_target(deficit.net_balance_hours, starts, local_now)
        if not deficit.data_sufficient:
            return replace(target, data_sufficient=False)
        return target


def _midpoint_hours(circadian: CircadianPhase) -> float | None:
    if circadian.sleep_midpoint_minutes is None:
        return None
    return circadian.sleep_midpoint_minutes / 60


def _day_bounds(local_now: datetime) -> tuple[datetime, datetime]:
    """Return the user's current local day as a UTC ``[start, end)`` range."""
    start = datetime.combine(local_now.date(), time.min, tzinfo=local_now.tzinfo)
    return start.astimezone(UTC), (start + timedelta(days=1)).astimezone(UTC)
