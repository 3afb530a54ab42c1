"""Recommended sleep duration for tonight."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from shift_coach.domain.scores import TonightShiftCategory, TonightTarget
from shift_coach.engine.normalize import clamp, round_half_up

BASE_TARGET_HOURS = 7.5
TARGET_RANGE = (6.5, 9.0)
NIGHT_SHIFT_RANGE = (7.5, 8.5)
EARLY_SHIFT_FLOOR = 8.0
LOOKAHEAD = timedelta(hours=36)

STRONG_CATCH_UP_DEFICIT = 8.0
MILD_CATCH_UP_DEFICIT = 4.0
AHEAD_OF_TARGET_DEFICIT = -2.0


def categorize_shift_start(start: datetime) -> TonightShiftCategory:
    """Bucket a shift by the hour it starts."""
    hour = start.hour
    if 4 <= hour < 8:  # noqa: PLR2004
        return "early"
    if 8 <= hour < 17:  # noqa: PLR2004
        return "day"
    if 17 <= hour < 23:  # noqa: PLR2004
        return "late"
    return "night"


def next_shift_start(
    shift_starts: Iterable[datetime], now: datetime
) -> datetime | None:
    """Earliest shift start within the next 36 hours."""
    upcoming = [start for start in shift_starts if now <= start <= now + LOOKAHEAD]
    return min(upcoming) if upcoming else None


def calculate_tonight_target(
    weekly_deficit_hours: float,
    shift_starts: Iterable[datetime],
    now: datetime,
) -> TonightTarget:
    """Adjust the base target for sleep debt and the next shift.

    ``weekly_deficit_hours`` is signed: a negative balance means the user is
    ahead of their weekly sleep target.
    """
    target = BASE_TARGET_HOURS
    if weekly_deficit_hours >= STRONG_CATCH_UP_DEFICIT:
        target += 1.0
    elif weekly_deficit_hours >= MILD_CATCH_UP_DEFICIT:
        target += 0.5
    elif weekly_deficit_hours <= AHEAD_OF_TARGET_DEFICIT:
        target -= 0.5

    start = next_shift_start(shift_starts, now)
    category: TonightShiftCategory = "none"
    if start is not None:
        category = categorize_shift_start(start)
        if category == "early":
            target = max(target, EARLY_SHIFT_FLOOR)
        elif category == "night":
            target = clamp(target, *NIGHT_SHIFT_RANGE)

    target = round_half_up(clamp(target, *TARGET_RANGE), 1)
    return TonightTarget(
        target_hours=target,
        explanation=_explain(category, start, weekly_deficit_hours),
        shift_category=category,
        next_shift_start=start,
    )


def format_clock(moment: datetime) -> str:
    """Format a time as ``"6:30 AM"``."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"  # noqa: PLR2004
    return f"{hour}:{moment.minute:02d} {suffix}"


def _explain(
    category: TonightShiftCategory, start: datetime | None, deficit: float
) -> str:
    if start is None:
        return (
            "You don't have a shift starting soon, so we're aiming for your normal "
            "7-9 hours of sleep."
        )
    shift_time = format_clock(start)
    if category == "early" and deficit >= MILD_CATCH_UP_DEFICIT:
        return (
            f"You've built up about {deficit:.1f} hours of sleep debt and you have an "
            f"early shift at {shift_time}. Tonight's goal is a longer sleep to help "
            "you catch up."
        )
    if category == "early":
        return (
            f"You have an early shift at {shift_time}. A solid sleep tonight will "
            "protect your alertness in the morning."
        )
    if category == "night":
        return (
            f"You're working a night shift starting at {shift_time}. This target "
            "balances recovery with your upcoming shift so you don't over- or "
            "under-sleep."
        )
    if deficit >= MILD_CATCH_UP_DEFICIT:
        return (
            f"You're about {deficit:.1f} hours behind your weekly sleep target, so "
            "tonight's goal is slightly higher to help you recover."
        )
    return (
        "You're close to your weekly sleep target. Keeping a steady routine tonight "
        "will support your body clock."
    )
