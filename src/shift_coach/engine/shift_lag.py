"""ShiftLag: the "jet lag" of shift work on a 0-100 scale.

The total is the sum of three parts:

* sleep debt (0-40) against the sleep need observed on days off,
* misalignment (0-40) from work overlapping the biological night,
* instability (0-20) from how much shift start times move around.
"""

from collections.abc import Sequence
from datetime import date, datetime, timedelta

from shift_coach.domain.scores import ShiftLagDrivers, ShiftLagLevel, ShiftLagMetrics
from shift_coach.domain.shifts import ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.normalize import (
    HOURS_PER_DAY,
    clamp,
    clock_hours,
    median,
    round_half_up,
    round_score,
    stddev,
)

DEFAULT_SLEEP_NEED_HOURS = 8.0
SLEEP_NEED_RANGE = (7.0, 9.0)
DEBT_WINDOW_DAYS = 7
OVERLAP_SHIFT_LIMIT = 5
INSTABILITY_WINDOW_DAYS = 14
MIN_INSTABILITY_SAMPLES = 2

BIOLOGICAL_NIGHT_HALF_WIDTH = 4.0
DEFAULT_NIGHT_WINDOW = (23.0, 7.0)

LOW_LEVEL_MAX = 20
MODERATE_LEVEL_MAX = 50
HEAVY_OVERLAP_HOURS = 4.0
HEAVY_DEBT_HOURS = 7.0
HEAVY_VARIABILITY_HOURS = 4.0

# Shift start estimates when only a label is known, checked in order.
LABEL_START_HOURS = (
    ("night", 22.0),
    ("morning", 6.0),
    ("early", 6.0),
    ("afternoon", 14.0),
    ("late", 14.0),
    ("evening", 16.0),
    ("day", 8.0),
)


def calculate_shift_lag(
    sleep_sessions: Sequence[SleepSession],
    shift_days: Sequence[ShiftDay],
    today: date,
    circadian_midpoint_hours: float | None = None,
) -> ShiftLagMetrics:
    """Score shift lag for the week ending ``today``.

    ``circadian_midpoint_hours`` is the sleep midpoint from a circadian
    calculation in the same run; without it the biological night defaults to
    23:00-07:00.
    """
    if not sleep_sessions and not shift_days:
        return ShiftLagMetrics.insufficient(
            "Not enough data yet. Log your sleep and shifts to see your ShiftLag."
        )

    work_days = [shift for shift in shift_days if shift.is_work_day]
    need = typical_sleep_need(sleep_sessions, {shift.date for shift in work_days})
    debt_hours = weekly_sleep_debt(sleep_sessions, need, today)
    sleep_debt_score = round_score(sleep_debt_points(debt_hours))

    night_window = biological_night(circadian_midpoint_hours)
    recent_with_times = sorted(
        (shift for shift in work_days if shift.has_times and shift.date <= today),
        key=lambda shift: shift.date,
        reverse=True,
    )[:OVERLAP_SHIFT_LIMIT]
    overlaps = [
        _night_overlap(shift.start, shift.end, night_window)
        for shift in recent_with_times
        if shift.start is not None and shift.end is not None
    ]
    avg_overlap = sum(overlaps) / len(overlaps) if overlaps else 0.0
    misalignment_score = round_score(misalignment_points(avg_overlap, bool(overlaps)))

    variability = start_time_variability(work_days, today)
    instability_score = round_score(instability_points(variability))

    total = round_score(
        clamp(sleep_debt_score + misalignment_score + instability_score, 0, 100)
    )
    level = shift_lag_level(total)
    debt_rounded = round_half_up(debt_hours, 1)
    overlap_rounded = round_half_up(avg_overlap, 1)
    variability_rounded = round_half_up(variability, 1)

    return ShiftLagMetrics(
        score=total,
        level=level,
        sleep_debt_score=sleep_debt_score,
        misalignment_score=misalignment_score,
        instability_score=instability_score,
        sleep_debt_hours=debt_rounded,
        avg_night_overlap_hours=overlap_rounded,
        shift_start_variability_hours=variability_rounded,
        explanation=_explain(level, total),
        drivers=_drivers(debt_rounded, overlap_rounded, variability_rounded),
        recommendations=_recommendations(
            level, debt_rounded, overlap_rounded, variability_rounded
        ),
    )


def shift_lag_level(score: float) -> ShiftLagLevel:
    if score <= LOW_LEVEL_MAX:
        return "low"
    if score <= MODERATE_LEVEL_MAX:
        return "moderate"
    return "high"


def typical_sleep_need(
    sleep_sessions: Sequence[SleepSession], work_dates: set[date]
) -> float:
    """Median main sleep on days off, clamped to 7-9 hours."""
    totals: dict[date, float] = {}
    for session in sleep_sessions:
        if not session.is_main or session.date in work_dates:
            continue
        totals[session.date] = totals.get(session.date, 0.0) + session.duration_hours
    off_day_sleep = [hours for hours in totals.values() if hours > 0]
    if not off_day_sleep:
        return DEFAULT_SLEEP_NEED_HOURS
    return clamp(median(off_day_sleep), *SLEEP_NEED_RANGE)


def weekly_sleep_debt(
    sleep_sessions: Sequence[SleepSession], need: float, today: date
) -> float:
    """Sum of per-day main-sleep shortfalls over the seven days ending ``today``."""
    days = [today - timedelta(days=offset) for offset in range(DEBT_WINDOW_DAYS)]
    totals = {day: 0.0 for day in days}
    for session in sleep_sessions:
        if session.is_main and session.date in totals:
            totals[session.date] += session.duration_hours
    return sum(max(0.0, need - hours) for hours in totals.values())


def sleep_debt_points(debt_hours: float) -> float:
    if debt_hours <= 3:  # noqa: PLR2004
        return 0.0
    if debt_hours <= 7:  # noqa: PLR2004
        return (debt_hours - 3) / 4 * 20
    if debt_hours <= 14:  # noqa: PLR2004
        return 20 + (debt_hours - 7) / 7 * 15
    return 40.0


def misalignment_points(avg_overlap_hours: float, has_shifts: bool = True) -> float:
    if not has_shifts:
        return 0.0
    if avg_overlap_hours <= 2:  # noqa: PLR2004
        return 5.0
    if avg_overlap_hours <= 4:  # noqa: PLR2004
        return 5 + (avg_overlap_hours - 2) / 2 * 10
    if avg_overlap_hours <= 6:  # noqa: PLR2004
        return 15 + (avg_overlap_hours - 4) / 2 * 10
    if avg_overlap_hours <= 8:  # noqa: PLR2004
        return 25 + (avg_overlap_hours - 6) / 2 * 10
    return 40.0


def instability_points(stddev_hours: float) -> float:
    if stddev_hours < 2:  # noqa: PLR2004
        return 0.0
    if stddev_hours < 4:  # noqa: PLR2004
        return (stddev_hours - 2) / 2 * 5
    if stddev_hours < 6:  # noqa: PLR2004
        return 5 + (stddev_hours - 4) / 2 * 5
    if stddev_hours < 8:  # noqa: PLR2004
        return 10 + (stddev_hours - 6) / 2 * 5
    return 20.0


def biological_night(midpoint_hours: float | None) -> tuple[float, float]:
    """Return ``(start, end)`` clock hours of the modelled biological night."""
    if midpoint_hours is None:
        return DEFAULT_NIGHT_WINDOW
    return (
        (midpoint_hours - BIOLOGICAL_NIGHT_HALF_WIDTH) % HOURS_PER_DAY,
        (midpoint_hours + BIOLOGICAL_NIGHT_HALF_WIDTH) % HOURS_PER_DAY,
    )


def start_time_variability(work_days: Sequence[ShiftDay], today: date) -> float:
    """Standard deviation in hours of recent shift start times."""
    cutoff = today - timedelta(days=INSTABILITY_WINDOW_DAYS - 1)
    starts = [
        start
        for start in (
            _start_hour(shift)
            for shift in work_days
            if cutoff <= shift.date <= today
        )
        if start is not None
    ]
    if len(starts) < MIN_INSTABILITY_SAMPLES:
        return 0.0
    return stddev(starts)


def _start_hour(shift: ShiftDay) -> float | None:
    if shift.start is not None:
        return clock_hours(shift.start)
    text = (shift.label or shift.category).lower()
    for keyword, hour in LABEL_START_HOURS:
        if keyword in text:
            return hour
    return None


def _night_overlap(
    shift_start: datetime, shift_end: datetime, night_window: tuple[float, float]
) -> float:
    start = clock_hours(shift_start)
    length = (shift_end - shift_start).total_seconds() / 3600
    end = start + length
    night_start, night_end = night_window
    night_length = (night_end - night_start) % HOURS_PER_DAY
    total = 0.0
    for offset in (-HOURS_PER_DAY, 0.0, HOURS_PER_DAY):
        window_start = night_start + offset
        window_end = window_start + night_length
        total += max(0.0, min(end, window_end) - max(start, window_start))
    return total


def _explain(level: ShiftLagLevel, score: int) -> str:
    if level == "low":
        return "Your body clock is coping well with your current shift pattern."
    if level == "moderate":
        return (
            f"You're carrying some shift lag ({score}/100) from recent sleep debt "
            "and shift timing changes."
        )
    return (
        f"Your body clock is significantly out of sync ({score}/100) due to night "
        "shifts during biological night, sleep debt, and schedule changes."
    )


def _drivers(debt: float, overlap: float, variability: float) -> ShiftLagDrivers:
    return ShiftLagDrivers(
        sleep_debt=(
            f"Sleep debt: {debt:.1f}h this week" if debt > 0 else "Sleep debt: On track"
        ),
        misalignment=(
            f"Night work during biological night: {overlap:.1f}h per shift"
            if overlap > 0
            else "Circadian alignment: Good"
        ),
        instability=(
            f"Schedule changes: {variability:.1f}h variation in start times"
            if variability > 0
            else "Schedule stability: Consistent"
        ),
    )


def _recommendations(
    level: ShiftLagLevel, debt: float, overlap: float, variability: float
) -> list[str]:
    if level == "high":
        recommendations = ["Prioritise a solid sleep block today (aim for 7-9 hours)"]
        if overlap > HEAVY_OVERLAP_HOURS:
            recommendations.append(
                "Use blackout curtains and avoid bright light 1-2h before daytime sleep"
            )
        if debt > HEAVY_DEBT_HOURS:
            recommendations.append(
                "Focus on catching up on sleep debt with longer sleep blocks "
                "when possible"
            )
        return recommendations
    if level == "moderate":
        recommendations = ["Try to keep wake-up time consistent for the next 3 days"]
        if variability > HEAVY_VARIABILITY_HOURS:
            recommendations.append("Minimise shift pattern changes where possible")
        return recommendations
    return ["Keep maintaining your current sleep and shift routine"]

