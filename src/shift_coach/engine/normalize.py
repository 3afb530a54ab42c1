"""Numeric helpers shared by every calculator."""

import math
from collections.abc import Sequence
from datetime import date, datetime, timedelta

import numpy as np

HOURS_PER_DAY = 24.0
MINUTES_PER_DAY = 1440.0


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return min(max(value, low), high)


def map_range(
    value: float, in_min: float, in_max: float, out_min: float, out_max: float
) -> float:
    """Clamp ``value`` into the input range and rescale it linearly.

    Output ranges may be inverted (``out_min > out_max``) so that larger inputs
    produce smaller scores.
    """
    low, high = min(in_min, in_max), max(in_min, in_max)
    clamped = clamp(value, low, high)
    width = (in_max - in_min) or 1.0
    ratio = (clamped - in_min) / width
    return out_min + ratio * (out_max - out_min)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def median(values: Sequence[float]) -> float:
    """Median; an even count averages the two middle values."""
    if not values:
        return 0.0
    return float(np.median(values))


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation, 0.0 below two samples."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def wrap_diff(a: float, b: float, period: float = HOURS_PER_DAY) -> float:
    """Absolute difference on a clock face, always within ``[0, period / 2]``.

    ``wrap_diff(23, 1) == 2``.
    """
    diff = abs(a - b) % period
    if diff > period / 2:
        diff = period - diff
    return diff


def signed_wrap_diff(a: float, b: float, period: float = HOURS_PER_DAY) -> float:
    """Signed clock difference ``a - b`` within ``[-period / 2, period / 2)``."""
    half = period / 2
    return ((a - b + half) % period) - half


def circular_mean(values: Sequence[float], period: float = HOURS_PER_DAY) -> float:
    """Mean of clock times so that 23:00 and 01:00 average to midnight."""
    if not values:
        return 0.0
    angles = [2 * math.pi * value / period for value in values]
    sin_sum = sum(math.sin(angle) for angle in angles)
    cos_sum = sum(math.cos(angle) for angle in angles)
    result = math.atan2(sin_sum, cos_sum) * period / (2 * math.pi)
    return result % period


def circular_stddev(values: Sequence[float], period: float = HOURS_PER_DAY) -> float:
    """Root-mean-square wrap-aware deviation around the circular mean."""
    if len(values) < 2:
        return 0.0
    centre = circular_mean(values, period)
    return math.sqrt(mean([wrap_diff(value, centre, period) ** 2 for value in values]))


def clock_hours(moment: datetime) -> float:
    """Wall-clock time of ``moment`` as hours from midnight (0-24)."""
    return moment.hour + moment.minute / 60 + moment.second / 3600


def clock_minutes(moment: datetime) -> float:
    """Wall-clock time of ``moment`` as minutes from midnight (0-1440)."""
    return moment.hour * 60 + moment.minute + moment.second / 60


def day_key(moment: datetime, boundary_hour: int = 0) -> date:
    """Return the day a moment belongs to when days start at ``boundary_hour``.

    With ``boundary_hour=7`` a moment at 02:00 belongs to the previous date.
    """
    return (moment - timedelta(hours=boundary_hour)).date()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive scores, like the dashboard does."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_score(value: float) -> int:
    """Round a score to the nearest integer, halves up."""
    return int(round_half_up(value))


def format_hours(hours: float) -> str:
    """Format a duration such as ``5.5`` as ``"5h 30m"``."""
    whole = math.floor(hours)
    minutes = round_score((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    if minutes == 0:
        return f"{whole}h"
    return f"{whole}h {minutes}m"
