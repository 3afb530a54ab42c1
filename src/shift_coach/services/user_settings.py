"""User settings service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_logger = logging.getLogger(__name__)


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_timezone(self, user_id: UUID) -> str | None:
        """Return the user's timezone if set."""

    def get_sleep_goal_hours(self, user_id: UUID) -> float | None:
        """Return the user's nightly sleep goal if set."""


@dataclass
class UserSettingsService:
    """Service for per-user scoring settings."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"
    default_sleep_hours: float = 7.5

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone, or the default if unset or unknown."""
        timezone_name = self.repository.get_timezone(user_id)
        if not timezone_name:
            return self.default_timezone
        if not is_valid_timezone(timezone_name):
            _logger.warning(
                "Unknown timezone, using default: user_id=%s timezone=%s",
                user_id,
                timezone_name,
            )
            return self.default_timezone
        return timezone_name

    def get_required_sleep_hours(self, user_id: UUID) -> float:
        """Return the user's sleep goal, falling back to the default."""
        goal = self.repository.get_sleep_goal_hours(user_id)
        if goal is None or goal <= 0:
            return self.default_sleep_hours
        return goal


def is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True
