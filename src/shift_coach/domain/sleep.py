"""Sleep domain models."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class SleepSession:
    """A single sleep period, either main sleep or a nap."""

    date: date
    start: datetime
    end: datetime
    duration_hours: float
    quality: int | None = None
    is_main: bool = True


@dataclass(frozen=True)
class SleepDay:
    """Total main sleep attributed to one calendar day."""

    date: date
    total_hours: float
