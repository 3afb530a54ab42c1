"""Shift Rhythm: a 0-10 blend of sleep, nutrition and activity adherence.

Every sub-score is 0-100. The heuristics are intentionally simple and the
curves live in module constants so they can be tuned without touching the
scoring code.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from shift_coach.domain.intake import (
    ActivitySnapshot,
    MealTimingSnapshot,
    MealWindow,
    MetricTarget,
    NutritionSnapshot,
)
from shift_coach.domain.scores import ShiftRhythmScore
from shift_coach.domain.shifts import ShiftCategory, ShiftDay
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.normalize import (
    circular_stddev,
    clamp,
    clock_hours,
    map_range,
    mean,
    round_half_up,
    round_score,
)

DEFAULT_SLEEP_TARGET_HOURS = 7.5
RECENT_SLEEP_LIMIT = 7

COMPOSITE_WEIGHTS = {"sleep": 0.6, "nutrition": 0.25, "activity": 0.15}
SLEEP_WEIGHTS = {
    "sleep": 0.35,
    "regularity": 0.25,
    "shift_pattern": 0.2,
    "recovery": 0.2,
}

SLEEP_SCORE_RANGE = (0.6, 1.1, 25.0, 100.0)  # fractions of the sleep target
REGULARITY_CURVE = (0.0, 3.5, 100.0, 40.0)

# Bedtime windows per shift: (start_hour, end_hour, score_at_start, score_at_end).
# Night and afternoon windows run past midnight, so early-hour bedtimes are
# shifted by 24h before mapping.
SHIFT_BEDTIME_WINDOWS: dict[ShiftCategory, tuple[float, float, float, float]] = {
    "night": (20.0, 26.0, 70.0, 100.0),
    "morning": (20.0, 23.0, 70.0, 95.0),
    "afternoon": (21.0, 24.0, 70.0, 90.0),
    "day": (21.0, 23.0, 70.0, 95.0),
}
WRAPPING_SHIFTS: frozenset[ShiftCategory] = frozenset({"night", "afternoon"})
OFF_DAY_ALIGNMENT = 80.0
UNKNOWN_SHIFT_ALIGNMENT = 70.0

RECOVERY_DURATION_CURVE = (5.0, 9.0, 30.0, 100.0)
RECOVERY_QUALITY_CURVE = (1.0, 5.0, 30.0, 100.0)
DEFAULT_QUALITY = 3
POST_NIGHT_PENALTY = 10.0

CALORIE_CURVE = (0.7, 1.1, 50.0, 100.0)
PROTEIN_CURVE = (0.8, 1.1, 60.0, 100.0)
CARBS_CURVE = (0.8, 1.15, 65.0, 100.0)
FAT_CURVE = (0.7, 1.2, 60.0, 98.0)
SAT_FAT_LIMIT_CURVE = (0.3, 1.0, 100.0, 55.0)
WATER_CURVE = (0.6, 1.0, 55.0, 100.0)
CAFFEINE_LIMIT_CURVE = (0.2, 1.1, 100.0, 50.0)
NEUTRAL_MACRO_SCORE = 80.0
NEUTRAL_WATER_SCORE = 80.0
NEUTRAL_CAFFEINE_SCORE = 85.0

DEFAULT_STEPS_GOAL = 10000
ACTIVITY_CURVE = (0.5, 1.1, 60.0, 100.0)
NEUTRAL_ACTIVE_MINUTES_SCORE = 80.0

MEAL_IN_WINDOW_SCORE = 100.0
MEAL_UNMATCHED_SCORE = 70.0
MEAL_DISTANCE_CURVE = (30.0, 180.0, 90.0, 60.0)  # minutes from window start
NEUTRAL_MEAL_TIMING_SCORE = 75.0


@dataclass(frozen=True)
class ShiftRhythmInputs:
    """Everything the rhythm engine reads for one user and day."""

    sleep_sessions: Sequence[SleepSession] = field(default_factory=list)
    shift_days: Sequence[ShiftDay] = field(default_factory=list)
    nutrition: NutritionSnapshot = field(default_factory=NutritionSnapshot)
    activity: ActivitySnapshot = field(default_factory=ActivitySnapshot)
    meal_timing: MealTimingSnapshot = field(default_factory=MealTimingSnapshot)
    sleep_target_hours: float | None = None


def calculate_shift_rhythm(inputs: ShiftRhythmInputs) -> ShiftRhythmScore:
    """Score the day's rhythm on a 0-10 scale."""
    target = inputs.sleep_target_hours or DEFAULT_SLEEP_TARGET_HOURS
    if target <= 0:
        target = DEFAULT_SLEEP_TARGET_HOURS
    recent = sorted(
        (session for session in inputs.sleep_sessions if session.is_main),
        key=lambda session: session.start,
        reverse=True,
    )[:RECENT_SLEEP_LIMIT]
    shift_by_date = {shift.date: shift.category for shift in inputs.shift_days}

    sleep_score = round_score(_sleep_score(recent, target))
    regularity_score = round_score(_regularity_score(recent))
    shift_pattern_score = round_score(_shift_pattern_score(recent, shift_by_date))
    recovery_score = round_score(_recovery_score(recent, shift_by_date))
    sleep_composite = clamp(
        sleep_score * SLEEP_WEIGHTS["sleep"]
        + regularity_score * SLEEP_WEIGHTS["regularity"]
        + shift_pattern_score * SLEEP_WEIGHTS["shift_pattern"]
        + recovery_score * SLEEP_WEIGHTS["recovery"],
        0,
        100,
    )

    nutrition_score = nutrition_adherence(inputs.nutrition)
    activity_score = activity_adherence(inputs.activity)
    meal_timing_score = meal_timing_adherence(inputs.meal_timing)

    total_100 = (
        sleep_composite * COMPOSITE_WEIGHTS["sleep"]
        + nutrition_score * COMPOSITE_WEIGHTS["nutrition"]
        + activity_score * COMPOSITE_WEIGHTS["activity"]
    )
    total_score = clamp(round_half_up(total_100 / 10, 1), 0, 10)

    return ShiftRhythmScore(
        sleep_score=sleep_score,
        regularity_score=regularity_score,
        shift_pattern_score=shift_pattern_score,
        recovery_score=recovery_score,
        nutrition_score=round_score(nutrition_score),
        activity_score=round_score(activity_score),
        meal_timing_score=round_score(meal_timing_score),
        total_score=total_score,
        message=shift_rhythm_message(total_score),
        data_sufficient=bool(recent),
    )


def shift_rhythm_message(score: float) -> str:
    """Dashboard copy for a 0-10 rhythm score."""
    if score >= 8.5:  # noqa: PLR2004
        return "Your rhythm is humming. Keep stacking consistent days."
    if score >= 7:  # noqa: PLR2004
        return "Your rhythm is syncing well today. Stay consistent."
    if score >= 5.5:  # noqa: PLR2004
        return "Your rhythm is holding, but sleep and meal timing could be tighter."
    if score >= 4:  # noqa: PLR2004
        return (
            "Your rhythm is off today; focus on a consistent sleep window "
            "and lighter late meals."
        )
    return "Rhythm reset required. Prioritise sleep and pre-shift routine tonight."


def _sleep_score(recent: Sequence[SleepSession], target: float) -> float:
    low, high, out_low, out_high = SLEEP_SCORE_RANGE
    average = mean([session.duration_hours for session in recent])
    return map_range(average, target * low, target * high, out_low, out_high)


def _regularity_score(recent: Sequence[SleepSession]) -> float:
    spread = circular_stddev([clock_hours(session.start) for session in recent])
    return map_range(spread, *REGULARITY_CURVE)


def _shift_pattern_score(
    recent: Sequence[SleepSession], shift_by_date: dict[date, ShiftCategory]
) -> float:
    return mean([_bedtime_alignment(session, shift_by_date) for session in recent])


def _bedtime_alignment(
    session: SleepSession, shift_by_date: dict[date, ShiftCategory]
) -> float:
    category = shift_by_date.get(session.date)
    if category is None:
        return UNKNOWN_SHIFT_ALIGNMENT
    if category == "off":
        return OFF_DAY_ALIGNMENT
    bedtime = float(session.start.hour)
    if category in WRAPPING_SHIFTS and bedtime < 12:  # noqa: PLR2004
        bedtime += 24
    return map_range(bedtime, *SHIFT_BEDTIME_WINDOWS[category])


def _recovery_score(
    recent: Sequence[SleepSession], shift_by_date: dict[date, ShiftCategory]
) -> float:
    scores = []
    for session in recent:
        quality = session.quality if session.quality is not None else DEFAULT_QUALITY
        duration_score = map_range(session.duration_hours, *RECOVERY_DURATION_CURVE)
        quality_score = map_range(quality, *RECOVERY_QUALITY_CURVE)
        previous = shift_by_date.get(session.date - timedelta(days=1))
        penalty = POST_NIGHT_PENALTY if previous == "night" else 0.0
        scores.append(
            clamp(duration_score * 0.6 + quality_score * 0.4 - penalty, 20, 100)
        )
    return mean(scores)


def nutrition_adherence(nutrition: NutritionSnapshot) -> float:
    """0-100 fit of calories, macros and hydration against targets."""
    calorie_target = nutrition.calorie_target or nutrition.adjusted_calories or 0
    consumed = nutrition.consumed_calories or 0
    calorie_ratio = consumed / calorie_target if calorie_target > 0 else 1.0
    calorie_score = map_range(calorie_ratio, *CALORIE_CURVE)

    macro_scores = [
        score
        for score in (
            _ratio_score(nutrition.protein, PROTEIN_CURVE),
            _ratio_score(nutrition.carbs, CARBS_CURVE),
            _ratio_score(nutrition.fat, FAT_CURVE),
            _ratio_score(nutrition.sat_fat, SAT_FAT_LIMIT_CURVE),
        )
        if score is not None
    ]
    macro_score = (
        clamp(mean(macro_scores), 40, 100) if macro_scores else NEUTRAL_MACRO_SCORE
    )

    water_score = _ratio_score(nutrition.water, WATER_CURVE, missing_consumed=0.0)
    caffeine_score = _ratio_score(
        nutrition.caffeine, CAFFEINE_LIMIT_CURVE, missing_consumed=0.0
    )
    hydration_score = clamp(
        (water_score if water_score is not None else NEUTRAL_WATER_SCORE) * 0.7
        + (caffeine_score if caffeine_score is not None else NEUTRAL_CAFFEINE_SCORE)
        * 0.3,
        40,
        100,
    )

    return clamp(
        calorie_score * 0.4 + macro_score * 0.4 + hydration_score * 0.2, 0, 100
    )


def _ratio_score(
    metric: MetricTarget | None,
    curve: tuple[float, float, float, float],
    missing_consumed: float | None = None,
) -> float | None:
    """Score consumed/target on a curve; None when the ratio is undefined."""
    if metric is None or not metric.target or metric.target <= 0:
        return None
    consumed = metric.consumed if metric.consumed is not None else missing_consumed
    if consumed is None:
        return None
    return map_range(consumed / metric.target, *curve)


def activity_adherence(activity: ActivitySnapshot) -> float:
    """0-100 blend of steps (75%) and active minutes (25%) against goals."""
    steps = activity.steps or 0
    goal = (
        activity.steps_goal if activity.steps_goal is not None else DEFAULT_STEPS_GOAL
    )
    steps_ratio = steps / goal if goal > 0 else 1.0
    steps_score = map_range(steps_ratio, *ACTIVITY_CURVE)

    if activity.active_minutes_goal:
        minutes_ratio = (activity.active_minutes or 0) / activity.active_minutes_goal
        minutes_score = map_range(minutes_ratio, *ACTIVITY_CURVE)
    else:
        minutes_score = NEUTRAL_ACTIVE_MINUTES_SCORE

    return clamp(steps_score * 0.75 + minutes_score * 0.25, 0, 100)


def meal_timing_adherence(meal_timing: MealTimingSnapshot) -> float:
    """0-100 fit of logged meals against recommended windows."""
    if not meal_timing.recommended or not meal_timing.actual:
        return NEUTRAL_MEAL_TIMING_SCORE
    windows = {window.slot.lower(): window for window in meal_timing.recommended}
    scores = []
    for entry in meal_timing.actual:
        window = windows.get(entry.slot.lower())
        if window is None:
            scores.append(MEAL_UNMATCHED_SCORE)
            continue
        occurrences = _window_occurrences(entry.timestamp, window)
        if any(start <= entry.timestamp <= end for start, end in occurrences):
            scores.append(MEAL_IN_WINDOW_SCORE)
            continue
        distance = min(
            abs((entry.timestamp - start).total_seconds()) / 60
            for start, _ in occurrences
        )
        scores.append(map_range(distance, *MEAL_DISTANCE_CURVE))
    return clamp(mean(scores), 40, 100)


def _window_occurrences(
    moment: datetime, window: MealWindow
) -> list[tuple[datetime, datetime]]:
    """Occurrences of ``window`` on the days either side of ``moment``.

    A window whose end is earlier than its start runs past midnight.
    """
    start = _at_clock(moment, window.window_start)
    end = _at_clock(moment, window.window_end)
    if end < start:
        end += timedelta(days=1)
    return [
        (start + timedelta(days=offset), end + timedelta(days=offset))
        for offset in (-1, 0, 1)
    ]


def _at_clock(moment: datetime, hhmm: str) -> datetime:
    hours, minutes = (int(part) for part in hhmm.split(":")[:2])
    return moment.replace(hour=hours, minute=minutes, second=0, microsecond=0)
