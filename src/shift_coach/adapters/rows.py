"""Helpers for reading loosely typed Supabase rows."""

from datetime import UTC, date, datetime, time


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def parse_clock(value: object) -> str | None:
    """Normalise an ``HH:MM`` or ``HH:MM:SS`` clock time to ``HH:MM``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = time.fromisoformat(value)
    except ValueError:
        return None
    return parsed.strftime("%H:%M")


def parse_date(value: object) -> date | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def parse_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def parse_int(value: object) -> int | None:
    number = parse_float(value)
    return None if number is None else int(number)
