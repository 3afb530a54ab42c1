"""Weekly sleep deficit over calendar days."""

from collections.abc import Sequence
from datetime import date

from shift_coach.domain.scores import (
    SleepDeficit,
    SleepDeficitCategory,
    SleepDeficitDay,
)
from shift_coach.domain.sleep import SleepDay, SleepSession
from shift_coach.engine.normalize import clamp, round_half_up

DEFAULT_REQUIRED_HOURS = 7.5
NET_BALANCE_RANGE = (-8.0, 20.0)

_WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def aggregate_main_sleep(
    sessions: Sequence[SleepSession], days: Sequence[date]
) -> list[SleepDay]:
    """Sum main-sleep hours per calendar day; days without sleep get 0."""
    totals = {day: 0.0 for day in days}
    for session in sessions:
        if not session.is_main:
            continue
        if session.date in totals:
            totals[session.date] += session.duration_hours
    return [SleepDay(date=day, total_hours=totals[day]) for day in days]


def calculate_sleep_deficit(
    sleep_days: Sequence[SleepDay], required_hours: float = DEFAULT_REQUIRED_HOURS
) -> SleepDeficit:
    """Return the weekly deficit for the supplied calendar days.

    Only sums what it is given: a window with no sleep at all must be caught
    by the caller and reported as insufficient data.
    """
    ordered = sorted(sleep_days, key=lambda day: day.date, reverse=True)
    daily = [
        SleepDeficitDay(
            date=day.date,
            label=_WEEKDAY_LABELS[day.date.weekday()],
            required=required_hours,
            actual=round_half_up(day.total_hours, 2),
            deficit=round_half_up(required_hours - day.total_hours, 2),
        )
        for day in ordered
    ]
    weekly_deficit = sum(max(0.0, required_hours - day.total_hours) for day in ordered)
    net_balance = clamp(
        sum(required_hours - day.total_hours for day in ordered), *NET_BALANCE_RANGE
    )
    category = _categorize(net_balance)
    return SleepDeficit(
        required_daily=required_hours,
        weekly_deficit_hours=round_half_up(weekly_deficit, 1),
        net_balance_hours=round_half_up(net_balance, 1),
        category=category,
        daily=daily,
        explanation=_explain(category, weekly_deficit),
    )


def _categorize(net_balance: float) -> SleepDeficitCategory:
    if net_balance <= -1:
        return "surplus"
    if net_balance < 3:
        return "low"
    if net_balance < 8:
        return "medium"
    return "high"


def _explain(category: SleepDeficitCategory, weekly_deficit: float) -> str:
    if category == "surplus":
        return "You've banked a little extra sleep this week."
    if category == "low":
        return "You're close to your sleep target this week."
    if category == "medium":
        return (
            f"You're about {weekly_deficit:.1f}h short of your sleep target "
            "this week."
        )
    return (
        f"You've built up {weekly_deficit:.1f}h of sleep debt this week. "
        "Prioritise longer sleeps over the next few days."
    )
