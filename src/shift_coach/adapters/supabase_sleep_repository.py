"""Supabase repository for sleep logs.

``sleep_logs`` exists in two generations: ``start_at``/``end_at``/``type`` and
the older ``start_ts``/``end_ts``/``naps``/``sleep_hours``. Both are read into
``SleepSession``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from shift_coach.adapters.rows import (
    parse_date,
    parse_float,
    parse_int,
    parse_timestamp,
)
from shift_coach.domain.sleep import SleepSession
from shift_coach.services.scoring import SleepRepository

_logger = logging.getLogger(__name__)

_CURRENT_COLUMNS = "date, start_at, end_at, type, quality"
_LEGACY_COLUMNS = "date, start_ts, end_ts, naps, sleep_hours, quality"
_ROW_LIMIT = 100
MIN_QUALITY = 1
MAX_QUALITY = 5


@dataclass
class SupabaseSleepRepository(SleepRepository):
    """Supabase implementation for sleep queries."""

    client: Client

    def list_sleep_sessions(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[SleepSession]:
        """Return sleep sessions starting in the time range, oldest first."""
        rows = self._select(user_id, start, end, _CURRENT_COLUMNS, "start_at")
        if not rows:
            rows = self._select(user_id, start, end, _LEGACY_COLUMNS, "start_ts")
        sessions = []
        for row in rows:
            session = _parse_row(row)
            if session is None:
                _logger.warning("Skipping malformed sleep log: user_id=%s", user_id)
                continue
            sessions.append(session)
        return sessions

    def _select(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
        columns: str,
        start_column: str,
    ) -> list[dict[str, object]]:
        response = (
            self.client.table("sleep_logs")
            .select(columns)
            .eq("user_id", str(user_id))
            .gte(start_column, start.isoformat())
            .lt(start_column, end.isoformat())
            .order(start_column, desc=False)
            .limit(_ROW_LIMIT)
            .execute()
        )
        return response.data or []


def _parse_row(row: dict[str, object]) -> SleepSession | None:
    start = parse_timestamp(row.get("start_at") or row.get("start_ts"))
    end = parse_timestamp(row.get("end_at") or row.get("end_ts"))
    if start is None or end is None or end <= start:
        return None
    if "type" in row:
        is_main = row.get("type") != "nap"
    else:
        is_main = not parse_int(row.get("naps"))
    duration = parse_float(row.get("sleep_hours"))
    if duration is None or duration <= 0:
        duration = (end - start).total_seconds() / 3600
    quality = parse_int(row.get("quality"))
    if quality is not None and not MIN_QUALITY <= quality <= MAX_QUALITY:
        quality = None
    return SleepSession(
        date=parse_date(row.get("date")) or start.date(),
        start=start,
        end=end,
        duration_hours=duration,
        quality=quality,
        is_main=is_main,
    )
