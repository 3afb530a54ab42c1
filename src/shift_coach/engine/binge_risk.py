"""Binge risk: an additive evidence score for overeating later today.

Points accumulate from sleep, shift pattern, activity, meal timing, circadian
state and time of day, then the total is clamped to 0-100. Each rule that
fires can add a short driver string; the first three are shown to the user.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from shift_coach.domain.intake import ActivityIntensity, MealLog
from shift_coach.domain.scores import BingeRisk, BingeRiskLevel
from shift_coach.domain.shifts import ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.normalize import clamp, format_hours, round_score

BASELINE_SCORE = 5
HIGH_LEVEL_MIN = 70
MEDIUM_LEVEL_MIN = 30
MAX_DRIVERS = 3

# (upper bound on last sleep hours, points, driver prefix)
SLEEP_DURATION_BANDS = (
    (4.0, 40, "Very low sleep"),
    (5.0, 35, "Low sleep"),
    (6.0, 25, "Low sleep"),
    (7.0, 15, "Moderate sleep"),
)
POOR_QUALITY_BELOW = 3
POOR_QUALITY_POINTS = 10

# (debt hours strictly above, points, driver prefix or None)
SLEEP_DEBT_BANDS = (
    (14.0, 20, "High sleep debt"),
    (7.0, 12, "Sleep debt"),
    (3.0, 6, None),
)

NIGHT_SHIFT_POINTS = 25
LONG_NIGHT_SHIFT_POINTS = 8
POST_NIGHT_POINTS = 20
POST_NIGHT_BEFORE_HOUR = 12
QUICK_TURNAROUND_POINTS = 15
QUICK_TURNAROUND_SHIFT_DAYS = 3
QUICK_TURNAROUND_MIN_WORK_DAYS = 2
QUICK_TURNAROUND_SLEEPS = 2
SHORT_SLEEP_HOURS = 6.0

INTENSITY_POINTS: dict[ActivityIntensity, tuple[int, str | None]] = {
    "intense": (15, "Intense shift (high physical demand)"),
    "busy": (10, "Busy shift (elevated activity)"),
    "moderate": (5, None),
}

# (fasting hours strictly above, points, driver prefix)
FASTING_BANDS = (
    (16.0, 20, "Very long fasting window"),
    (14.0, 15, "Long fasting window"),
    (12.0, 10, "Extended fasting"),
)
NO_MEALS_POINTS = 15
NIGHT_EATING_POINTS = 8
NIGHT_EATING_END_HOUR = 6

LOW_ALIGNMENT_BELOW = 50
LOW_ALIGNMENT_POINTS = 8
HIGH_SHIFT_LAG_ABOVE = 50
HIGH_SHIFT_LAG_POINTS = 6

PEAK_EVENING_POINTS = 8
EVENING_POINTS = 5


@dataclass(frozen=True)
class BingeRiskInputs:
    """Recent behaviour and context for one binge-risk calculation."""

    sleep_sessions: Sequence[SleepSession]
    now: datetime
    shift_days: Sequence[ShiftDay] = field(default_factory=list)
    meals: Sequence[MealLog] = field(default_factory=list)
    circadian_alignment: float | None = None
    sleep_debt_hours: float | None = None
    shift_lag_score: float | None = None
    activity_intensity: ActivityIntensity | None = None


def calculate_binge_risk(inputs: BingeRiskInputs) -> BingeRisk:
    """Return the binge-risk score, level and top drivers."""
    if not inputs.sleep_sessions:
        return BingeRisk(
            score=BASELINE_SCORE,
            level="low",
            drivers=["Not enough sleep, shift or meal data yet"],
            explanation=(
                "Binge risk stays low until we have a few days of sleep, shift and "
                "meal data. Log your rota and sleep to unlock personalised "
                "binge-risk coaching."
            ),
            data_sufficient=False,
        )

    now = inputs.now
    sleeps = sorted(
        inputs.sleep_sessions, key=lambda session: session.end, reverse=True
    )
    shifts = sorted(inputs.shift_days, key=lambda shift: shift.date, reverse=True)
    shift_by_date = {shift.date: shift for shift in shifts}
    last_sleep = next((session for session in sleeps if session.is_main), sleeps[0])

    points = 0
    drivers: list[str] = []

    for upper, band_points, prefix in SLEEP_DURATION_BANDS:
        if last_sleep.duration_hours < upper:
            points += band_points
            drivers.append(f"{prefix} ({format_hours(last_sleep.duration_hours)})")
            break
    if last_sleep.quality is not None and last_sleep.quality < POOR_QUALITY_BELOW:
        points += POOR_QUALITY_POINTS
        drivers.append("Poor sleep quality")

    debt = inputs.sleep_debt_hours or 0.0
    for lower, band_points, prefix in SLEEP_DEBT_BANDS:
        if debt > lower:
            points += band_points
            if prefix:
                drivers.append(f"{prefix} ({debt:.1f}h)")
            break

    today_shift = shift_by_date.get(now.date())
    yesterday_shift = shift_by_date.get(now.date() - timedelta(days=1))
    on_night_shift = today_shift is not None and today_shift.category == "night"
    if on_night_shift:
        points += NIGHT_SHIFT_POINTS + LONG_NIGHT_SHIFT_POINTS
        drivers.append("Night shift")
    elif (
        yesterday_shift is not None
        and yesterday_shift.category == "night"
        and now.hour < POST_NIGHT_BEFORE_HOUR
    ):
        points += POST_NIGHT_POINTS
        drivers.append("Post-night shift")

    if _quick_turnaround(shifts, sleeps):
        points += QUICK_TURNAROUND_POINTS
        drivers.append("Quick shift turnaround")

    if inputs.activity_intensity in INTENSITY_POINTS:
        intensity_points, driver = INTENSITY_POINTS[inputs.activity_intensity]
        points += intensity_points
        if driver:
            drivers.append(driver)

    last_meal = max(inputs.meals, key=lambda meal: meal.logged_at, default=None)
    if last_meal is None:
        points += NO_MEALS_POINTS
        drivers.append("No meals logged today")
    else:
        fasting_hours = (now - last_meal.logged_at).total_seconds() / 3600
        for lower, band_points, prefix in FASTING_BANDS:
            if fasting_hours > lower:
                points += band_points
                drivers.append(f"{prefix} ({round_score(fasting_hours)}h)")
                break
        if last_meal.logged_at.hour < NIGHT_EATING_END_HOUR:
            points += NIGHT_EATING_POINTS
            drivers.append("Eating during biological night")

    if (
        inputs.circadian_alignment is not None
        and inputs.circadian_alignment < LOW_ALIGNMENT_BELOW
    ):
        points += LOW_ALIGNMENT_POINTS
        drivers.append("Circadian misalignment")
    if (
        inputs.shift_lag_score is not None
        and inputs.shift_lag_score > HIGH_SHIFT_LAG_ABOVE
    ):
        points += HIGH_SHIFT_LAG_POINTS
        if not any("misalignment" in driver for driver in drivers):
            drivers.append("High shift lag")

    points += _time_of_day_points(now.hour)

    score = round_score(clamp(points, 0, 100))
    level = binge_risk_level(score)
    return BingeRisk(
        score=score,
        level=level,
        drivers=drivers[:MAX_DRIVERS],
        explanation=_explain(level, drivers, last_sleep.duration_hours, on_night_shift),
    )


def binge_risk_level(score: float) -> BingeRiskLevel:
    if score >= HIGH_LEVEL_MIN:
        return "high"
    if score >= MEDIUM_LEVEL_MIN:
        return "medium"
    return "low"


def _quick_turnaround(
    shifts: Sequence[ShiftDay], sleeps: Sequence[SleepSession]
) -> bool:
    recent_shifts = shifts[:QUICK_TURNAROUND_SHIFT_DAYS]
    work_days = sum(1 for shift in recent_shifts if shift.is_work_day)
    if work_days < QUICK_TURNAROUND_MIN_WORK_DAYS:
        return False
    return any(
        session.duration_hours < SHORT_SLEEP_HOURS
        for session in sleeps[:QUICK_TURNAROUND_SLEEPS]
    )


def _time_of_day_points(hour: int) -> int:
    if hour >= 20 or hour < 2:  # noqa: PLR2004
        return PEAK_EVENING_POINTS
    if hour >= 18 or hour < 4:  # noqa: PLR2004
        return EVENING_POINTS
    return 0


def _explain(
    level: BingeRiskLevel,
    drivers: Sequence[str],
    last_sleep_hours: float,
    on_night_shift: bool,
) -> str:
    slept = format_hours(last_sleep_hours)
    main_driver = drivers[0] if drivers else ""
    if level == "high":
        if on_night_shift:
            return (
                f"You're at high risk of overeating tonight. You got {slept} sleep "
                "and you're on nights. Eat every 3-4 hours to avoid bingeing."
            )
        if "fasting" in main_driver or "meal" in main_driver:
            return (
                f"High risk tonight. You slept {slept} and haven't eaten in a while. "
                "Have a meal now, then another in 3-4 hours."
            )
        return (
            f"High risk tonight. You slept {slept} and {main_driver.lower()}. "
            "Eat every 3-4 hours today."
        )
    if level == "medium":
        return f"Moderate risk. {_simplify(main_driver)}. Eat every 4-5 hours today."
    return (
        "Low risk. You're doing well. Keep eating regularly and getting enough sleep."
    )


def _simplify(driver: str) -> str:
    if not driver:
        return "You need to watch your eating"
    if "sleep" in driver:
        return "You're short on sleep"
    if "fasting" in driver or "meal" in driver:
        return "Long gap since last meal"
    if "debt" in driver:
        return "You're building sleep debt"
    if "shift" in driver:
        return "Your shift pattern is tough"
    return driver
