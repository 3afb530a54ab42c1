"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

import pytest

from shift_coach.config import Settings
from shift_coach.containers import AppContainer
from shift_coach.domain.intake import (
    ActivitySnapshot,
    MealLog,
    MealTimingSnapshot,
    NutritionSnapshot,
)
from shift_coach.domain.scores import DailyScores
from shift_coach.domain.shifts import ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.services.precompute import DailyScoreJob, ScoreRepository
from shift_coach.services.scoring import (
    IntakeRepository,
    ScoringService,
    ShiftRepository,
    SleepRepository,
)
from shift_coach.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)


def sleep_session(  # noqa: PLR0913
    day: date,
    start_hour: float,
    hours: float,
    *,
    is_main: bool = True,
    quality: int | None = None,
    tz=UTC,
) -> SleepSession:
    """Build a session starting ``start_hour`` hours after midnight of ``day``."""
    start = datetime(day.year, day.month, day.day, tzinfo=tz) + timedelta(
        hours=start_hour
    )
    return SleepSession(
        date=day,
        start=start,
        end=start + timedelta(hours=hours),
        duration_hours=hours,
        quality=quality,
        is_main=is_main,
    )


def night_sleeps(
    end_day: date, days: int, start_hour: float = 23, hours: float = 8
) -> list[SleepSession]:
    """Build one main sleep per evening for ``days`` days ending on ``end_day``."""
    return [
        sleep_session(end_day - timedelta(days=offset), start_hour, hours)
        for offset in range(days)
    ]


def shift(day: date, category: str, start_hour: int, hours: int = 8) -> ShiftDay:
    start = datetime(day.year, day.month, day.day, start_hour, tzinfo=UTC)
    return ShiftDay(
        date=day,
        category=category,  # type: ignore[arg-type]
        start=start,
        end=start + timedelta(hours=hours),
    )


@dataclass
class InMemorySleepRepository(SleepRepository):
    """In-memory sleep repository for tests."""

    sessions: list[SleepSession] = field(default_factory=list)
    requests: list[tuple[datetime, datetime]] = field(default_factory=list)

    def list_sleep_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[SleepSession]:
        self.requests.append((start, end))
        return [
            session for session in self.sessions if start <= session.start < end
        ]


@dataclass
class InMemoryShiftRepository(ShiftRepository):
    """In-memory shift repository for tests."""

    shifts: list[ShiftDay] = field(default_factory=list)

    def list_shift_days(self, user_id: UUID, start: date, end: date) -> list[ShiftDay]:
        return [shift for shift in self.shifts if start <= shift.date <= end]


@dataclass
class InMemoryIntakeRepository(IntakeRepository):
    """In-memory intake repository for tests."""

    nutrition: NutritionSnapshot = field(default_factory=NutritionSnapshot)
    activity: ActivitySnapshot = field(default_factory=ActivitySnapshot)
    meal_timing: MealTimingSnapshot = field(default_factory=MealTimingSnapshot)
    meals: list[MealLog] = field(default_factory=list)

    def get_nutrition(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> NutritionSnapshot:
        return self.nutrition

    def get_activity(self, user_id: UUID, day: date) -> ActivitySnapshot:
        return self.activity

    def get_meal_timing(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> MealTimingSnapshot:
        return self.meal_timing

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLog]:
        return [meal for meal in self.meals if start <= meal.logged_at < end]


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    timezones: dict[UUID, str] = field(default_factory=dict)
    sleep_goals: dict[UUID, float] = field(default_factory=dict)

    def get_timezone(self, user_id: UUID) -> str | None:
        return self.timezones.get(user_id)

    def get_sleep_goal_hours(self, user_id: UUID) -> float | None:
        return self.sleep_goals.get(user_id)


@dataclass
class InMemoryScoreRepository(ScoreRepository):
    """In-memory score repository for tests."""

    user_ids: list[UUID] = field(default_factory=list)
    saved: list[DailyScores] = field(default_factory=list)

    def list_user_ids(self) -> list[UUID]:
        return self.user_ids

    def save_daily_scores(self, scores: DailyScores) -> None:
        self.saved.append(scores)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        admin_token="admin-token",
    )


@pytest.fixture
def sleep_repository() -> InMemorySleepRepository:
    return InMemorySleepRepository()


@pytest.fixture
def shift_repository() -> InMemoryShiftRepository:
    return InMemoryShiftRepository()


@pytest.fixture
def intake_repository() -> InMemoryIntakeRepository:
    return InMemoryIntakeRepository()


@pytest.fixture
def user_settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def score_repository() -> InMemoryScoreRepository:
    return InMemoryScoreRepository()


@pytest.fixture
def scoring_service(
    sleep_repository: InMemorySleepRepository,
    shift_repository: InMemoryShiftRepository,
    intake_repository: InMemoryIntakeRepository,
    user_settings_repository: InMemoryUserSettingsRepository,
) -> ScoringService:
    return ScoringService(
        sleep_repository=sleep_repository,
        shift_repository=shift_repository,
        intake_repository=intake_repository,
        user_settings=UserSettingsService(user_settings_repository),
    )


@pytest.fixture
def container(
    settings: Settings,
    scoring_service: ScoringService,
    score_repository: InMemoryScoreRepository,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        user_settings_service=scoring_service.user_settings,
        scoring_service=scoring_service,
        daily_score_job=DailyScoreJob(
            scoring_service=scoring_service, repository=score_repository
        ),
    )
