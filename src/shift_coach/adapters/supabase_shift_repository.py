"""Supabase repository for rota shifts."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from shift_coach.adapters.rows import parse_date, parse_timestamp
from shift_coach.domain.shifts import (
    ShiftCategory,
    ShiftDay,
    category_from_label,
    category_from_start,
)
from shift_coach.services.scoring import ShiftRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseShiftRepository(ShiftRepository):
    """Supabase implementation for shift queries."""

    client: Client

    def list_shift_days(self, user_id: UUID, start: date, end: date) -> list[ShiftDay]:
        """Return shifts dated within the inclusive range, oldest first."""
        response = (
            self.client.table("shifts")
            .select("date, label, start_ts, end_ts")
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        shifts = []
        for row in response.data or []:
            shift = _parse_row(row)
            if shift is None:
                _logger.warning("Skipping malformed shift: user_id=%s", user_id)
                continue
            shifts.append(shift)
        return shifts


def _parse_row(row: dict[str, object]) -> ShiftDay | None:
    day = parse_date(row.get("date"))
    if day is None:
        return None
    label = row.get("label") if isinstance(row.get("label"), str) else None
    start = parse_timestamp(row.get("start_ts"))
    end = parse_timestamp(row.get("end_ts"))
    if start is not None and end is not None and end <= start:
        start = end = None
    category = _category(label, start)
    if category == "off":
        return ShiftDay(date=day, category="off", label=label)
    return ShiftDay(date=day, category=category, start=start, end=end, label=label)


def _category(label: str | None, start: datetime | None) -> ShiftCategory:
    """Use the label when it names a shift type, else the start hour."""
    if label and label.strip().lower() == "off":
        return "off"
    category = category_from_label(label)
    if category == "off" and start is not None:
        return category_from_start(start)
    return category
