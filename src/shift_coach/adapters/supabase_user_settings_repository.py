"""Supabase repository for user settings."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shift_coach.adapters.rows import parse_float
from shift_coach.services.user_settings import UserSettingsRepository


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the stored timezone for a user."""
        row = self._first("user_settings", "timezone", user_id)
        timezone_name = row.get("timezone") if row else None
        return timezone_name if isinstance(timezone_name, str) else None

    def get_sleep_goal_hours(self, user_id: UUID) -> float | None:
        """Return the nightly sleep goal from the user's profile."""
        row = self._first("profiles", "sleep_goal_h", user_id)
        return parse_float(row.get("sleep_goal_h")) if row else None

    def _first(
        self, table: str, columns: str, user_id: UUID
    ) -> dict[str, object] | None:
        response = (
            self.client.table(table)
            .select(columns)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]
