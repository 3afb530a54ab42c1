"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from shift_coach.adapters.supabase_intake_repository import SupabaseIntakeRepository
from shift_coach.adapters.supabase_score_repository import SupabaseScoreRepository
from shift_coach.adapters.supabase_shift_repository import SupabaseShiftRepository
from shift_coach.adapters.supabase_sleep_repository import SupabaseSleepRepository
from shift_coach.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from shift_coach.config import Settings, parse_user_ids
from shift_coach.services.precompute import DailyScoreJob
from shift_coach.services.scoring import ScoringService
from shift_coach.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_settings_service: UserSettingsService
    scoring_service: ScoringService
    daily_score_job: DailyScoreJob


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_settings_service = UserSettingsService(
        SupabaseUserSettingsRepository(supabase_client),
        default_timezone=resolved_settings.default_timezone,
        default_sleep_hours=resolved_settings.required_sleep_hours,
    )
    scoring_service = ScoringService(
        sleep_repository=SupabaseSleepRepository(supabase_client),
        shift_repository=SupabaseShiftRepository(supabase_client),
        intake_repository=SupabaseIntakeRepository(supabase_client),
        user_settings=user_settings_service,
        service_day_start_hour=resolved_settings.service_day_start_hour,
    )
    daily_score_job = DailyScoreJob(
        scoring_service=scoring_service,
        repository=SupabaseScoreRepository(supabase_client),
        allowed_user_ids=parse_user_ids(resolved_settings.precompute_user_ids),
    )
    return AppContainer(
        settings=resolved_settings,
        user_settings_service=user_settings_service,
        scoring_service=scoring_service,
        daily_score_job=daily_score_job,
    )
