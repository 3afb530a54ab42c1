"""Shift (rota) domain models."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

ShiftCategory = Literal["day", "night", "morning", "afternoon", "off"]


@dataclass(frozen=True)
class ShiftDay:
    """A rota entry for one calendar day."""

    date: date
    category: ShiftCategory
    start: datetime | None = None
    end: datetime | None = None
    label: str | None = None

    @property
    def is_work_day(self) -> bool:
        """Return True for any category other than off."""
        return self.category != "off"

    @property
    def has_times(self) -> bool:
        """Return True when a work shift has both start and end."""
        return self.is_work_day and self.start is not None and self.end is not None


def category_from_label(label: str | None) -> ShiftCategory:
    """Map a free-text rota label to a shift category."""
    if not label:
        return "off"
    normalized = label.strip().lower()
    if normalized == "off":
        return "off"
    if "night" in normalized:
        return "night"
    if "morning" in normalized or "early" in normalized:
        return "morning"
    if "afternoon" in normalized or "late" in normalized or "evening" in normalized:
        return "afternoon"
    if "day" in normalized:
        return "day"
    return "off"


def category_from_start(start: datetime) -> ShiftCategory:
    """Classify a custom shift by its start hour."""
    hour = start.hour
    if 5 <= hour < 9:
        return "morning"
    if 9 <= hour < 17:
        return "day"
    if 17 <= hour < 22:
        return "afternoon"
    return "night"
