"""Circadian phase and alignment from recent main sleep."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from shift_coach.domain.scores import CircadianPhase, CircadianPhaseLabel
from shift_coach.domain.shifts import ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.normalize import (
    MINUTES_PER_DAY,
    circular_mean,
    circular_stddev,
    clamp,
    clock_minutes,
    map_range,
    round_half_up,
    round_score,
    signed_wrap_diff,
    wrap_diff,
)

CircadianShiftType = Literal["morning", "day", "evening", "night", "rotating", "off"]

IDEAL_MIDPOINT_MINUTES = 3 * 60
RECENT_SLEEP_LIMIT = 14

# Tunable factor curves: (input_low, input_high, score_at_low, score_at_high).
DURATION_CURVE = (4.0, 8.0, 0.0, 100.0)
TIMING_CURVE = (1.0, 6.0, 100.0, 0.0)
DEBT_CURVE = (2.0, 10.0, 100.0, 0.0)
CONSISTENCY_CURVE = (30.0, 150.0, 100.0, 0.0)

FACTOR_WEIGHTS = {
    "duration": 0.30,
    "timing": 0.30,
    "debt": 0.20,
    "consistency": 0.20,
}

SHIFT_ADJUSTMENT: dict[CircadianShiftType, int] = {
    "morning": 10,
    "day": 0,
    "evening": -5,
    "night": -15,
    "rotating": -12,
    "off": 0,
}

ALIGNED_WINDOW_HOURS = 1.0
INVERTED_THRESHOLD_HOURS = 6.0
STRONG_ALIGNMENT = 70
ROTATING_CATEGORY_COUNT = 3


@dataclass(frozen=True)
class CircadianInput:
    """Inputs for one circadian calculation."""

    sleep_start: datetime
    sleep_end: datetime
    avg_bedtime_minutes: float
    avg_wake_minutes: float
    bedtime_stddev_minutes: float
    sleep_duration_hours: float
    sleep_debt_hours: float
    shift_type: CircadianShiftType


def calculate_circadian_phase(data: CircadianInput) -> CircadianPhase:
    """Score body-clock alignment.

    Requires at least one dated main sleep; callers check before invoking.
    """
    midpoint = data.sleep_start + (data.sleep_end - data.sleep_start) / 2
    midpoint_minutes = clock_minutes(midpoint)
    latest_deviation = wrap_diff(
        midpoint_minutes, IDEAL_MIDPOINT_MINUTES, MINUTES_PER_DAY
    )
    habitual_midpoint = _habitual_midpoint(
        data.avg_bedtime_minutes, data.avg_wake_minutes
    )
    habitual_deviation = wrap_diff(
        habitual_midpoint, IDEAL_MIDPOINT_MINUTES, MINUTES_PER_DAY
    )
    deviation_hours = (latest_deviation + habitual_deviation) / 2 / 60

    duration_factor = map_range(data.sleep_duration_hours, *DURATION_CURVE)
    timing_factor = map_range(deviation_hours, *TIMING_CURVE)
    debt_factor = map_range(data.sleep_debt_hours, *DEBT_CURVE)
    consistency_factor = map_range(data.bedtime_stddev_minutes, *CONSISTENCY_CURVE)

    weighted = (
        duration_factor * FACTOR_WEIGHTS["duration"]
        + timing_factor * FACTOR_WEIGHTS["timing"]
        + debt_factor * FACTOR_WEIGHTS["debt"]
        + consistency_factor * FACTOR_WEIGHTS["consistency"]
    )
    adjustment = SHIFT_ADJUSTMENT[data.shift_type]
    alignment = round_score(clamp(weighted + adjustment, 0, 100))
    phase = _phase_label(midpoint_minutes)

    return CircadianPhase(
        alignment_score=alignment,
        phase=phase,
        sleep_midpoint_minutes=round_half_up(midpoint_minutes, 1),
        deviation_hours=round_half_up(deviation_hours, 1),
        duration_factor=round_half_up(duration_factor, 1),
        timing_factor=round_half_up(timing_factor, 1),
        debt_factor=round_half_up(debt_factor, 1),
        consistency_factor=round_half_up(consistency_factor, 1),
        shift_adjustment=adjustment,
        explanation=_explain(phase, alignment),
    )


def summarize_recent_sleep(
    sessions: Sequence[SleepSession],
    sleep_debt_hours: float,
    shift_type: CircadianShiftType,
) -> CircadianInput | None:
    """Build a calculator input from recent sessions, or None without main sleep."""
    main = sorted(
        (session for session in sessions if session.is_main),
        key=lambda session: session.start,
        reverse=True,
    )[:RECENT_SLEEP_LIMIT]
    if not main:
        return None
    latest = main[0]
    bedtimes = [clock_minutes(session.start) for session in main]
    wake_times = [clock_minutes(session.end) for session in main]
    return CircadianInput(
        sleep_start=latest.start,
        sleep_end=latest.end,
        avg_bedtime_minutes=circular_mean(bedtimes, MINUTES_PER_DAY),
        avg_wake_minutes=circular_mean(wake_times, MINUTES_PER_DAY),
        bedtime_stddev_minutes=circular_stddev(bedtimes, MINUTES_PER_DAY),
        sleep_duration_hours=latest.duration_hours,
        sleep_debt_hours=sleep_debt_hours,
        shift_type=shift_type,
    )


def circadian_shift_type(
    shift_days: Sequence[ShiftDay], today: datetime
) -> CircadianShiftType:
    """Pick the shift type that currently drives the body clock."""
    cutoff = today.date() - timedelta(days=6)
    recent = sorted(
        (
            shift
            for shift in shift_days
            if shift.is_work_day and cutoff <= shift.date <= today.date()
        ),
        key=lambda shift: shift.date,
        reverse=True,
    )
    if not recent:
        return "day"
    if len({shift.category for shift in recent}) >= ROTATING_CATEGORY_COUNT:
        return "rotating"
    latest = recent[0]
    if latest.category == "afternoon":
        return "evening"
    return latest.category


def _habitual_midpoint(avg_bedtime_minutes: float, avg_wake_minutes: float) -> float:
    span = (avg_wake_minutes - avg_bedtime_minutes) % MINUTES_PER_DAY
    return (avg_bedtime_minutes + span / 2) % MINUTES_PER_DAY


def _phase_label(midpoint_minutes: float) -> CircadianPhaseLabel:
    offset_hours = (
        signed_wrap_diff(midpoint_minutes, IDEAL_MIDPOINT_MINUTES, MINUTES_PER_DAY) / 60
    )
    if abs(offset_hours) <= ALIGNED_WINDOW_HOURS:
        return "aligned"
    if abs(offset_hours) > INVERTED_THRESHOLD_HOURS:
        return "inverted"
    if offset_hours < 0:
        return "advanced"
    return "delayed"


def _explain(phase: CircadianPhaseLabel, alignment: int) -> str:
    if phase == "aligned" and alignment >= STRONG_ALIGNMENT:
        return "Your sleep is centred close to your body clock's natural night."
    if phase == "advanced":
        return "Your sleep has shifted earlier than your body clock's natural night."
    if phase == "delayed":
        return "Your sleep has drifted later than your body clock's natural night."
    if phase == "inverted":
        return (
            "You're sleeping through the day, so your body clock is working "
            "against your sleep. Keep the room dark and your sleep times steady."
        )
    return (
        "Your sleep timing is close to ideal, but short or irregular sleep "
        "is dragging alignment down."
    )
