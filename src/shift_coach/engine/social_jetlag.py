"""Social jetlag: drift of the sleep midpoint from a personal baseline.

Sleep is grouped into service days that run from 07:00 to 07:00, so a
session starting at 02:00 belongs to the service day that began the previous
morning. Each service day's midpoint is halfway between its earliest start
and latest end, as a clock time. The baseline is the median midpoint of up to
seven recent days excluding today.
"""

from collections.abc import Sequence
from datetime import date, datetime

from shift_coach.domain.scores import SocialJetlag, SocialJetlagCategory
from shift_coach.domain.sleep import SleepSession
from shift_coach.engine.normalize import (
    clock_hours,
    day_key,
    mean,
    median,
    round_half_up,
    wrap_diff,
)

SERVICE_DAY_START_HOUR = 7
BASELINE_CANDIDATE_DAYS = 10
BASELINE_MAX_DAYS = 7
WEEKLY_DAYS = 7
MIN_SERVICE_DAYS = 2
MIN_BASELINE_DAYS = 2

LOW_THRESHOLD_HOURS = 1.5
MODERATE_THRESHOLD_HOURS = 3.5


def service_day_midpoints(
    sessions: Sequence[SleepSession],
    boundary_hour: int = SERVICE_DAY_START_HOUR,
) -> list[tuple[date, float]]:
    """Return ``(service_day, midpoint_clock_hours)`` pairs, oldest first."""
    grouped: dict[date, list[SleepSession]] = {}
    for session in sessions:
        if not session.is_main:
            continue
        grouped.setdefault(day_key(session.start, boundary_hour), []).append(session)

    midpoints = []
    for key, day_sessions in grouped.items():
        earliest = min(session.start for session in day_sessions)
        latest = max(session.end for session in day_sessions)
        midpoint = earliest + (latest - earliest) / 2
        midpoints.append((key, clock_hours(midpoint)))
    midpoints.sort(key=lambda item: item[0])
    return midpoints


def calculate_social_jetlag(
    sessions: Sequence[SleepSession],
    now: datetime,
    boundary_hour: int = SERVICE_DAY_START_HOUR,
) -> SocialJetlag:
    """Compare today's sleep midpoint against the personal baseline."""
    midpoints = service_day_midpoints(sessions, boundary_hour)
    if len(midpoints) < MIN_SERVICE_DAYS:
        return SocialJetlag.insufficient(
            "Not enough sleep data. Log at least 2 days of main sleep "
            "to calculate social jetlag."
        )

    today_key = day_key(now, boundary_hour)
    baseline_days = [item for item in midpoints if item[0] != today_key][
        -BASELINE_CANDIDATE_DAYS:
    ][:BASELINE_MAX_DAYS]
    if len(baseline_days) < MIN_BASELINE_DAYS:
        return SocialJetlag.insufficient(
            "Not enough baseline data. Keep logging main sleep for a few more days."
        )

    baseline = median([midpoint for _, midpoint in baseline_days])
    current = next(
        (midpoint for key, midpoint in midpoints if key == today_key),
        midpoints[-1][1],
    )
    current_misalignment = wrap_diff(current, baseline)
    weekly_average = mean(
        [wrap_diff(midpoint, baseline) for _, midpoint in midpoints[-WEEKLY_DAYS:]]
    )

    category = _categorize(current_misalignment)
    return SocialJetlag(
        current_misalignment_hours=round_half_up(current_misalignment, 1),
        weekly_average_misalignment_hours=round_half_up(weekly_average, 1),
        baseline_midpoint_clock=round_half_up(baseline, 2),
        current_midpoint_clock=round_half_up(current, 2),
        category=category,
        explanation=_explain(category, current_misalignment),
    )


def _categorize(hours: float) -> SocialJetlagCategory:
    if hours <= LOW_THRESHOLD_HOURS:
        return "low"
    if hours <= MODERATE_THRESHOLD_HOURS:
        return "moderate"
    return "high"


def _explain(category: SocialJetlagCategory, hours: float) -> str:
    if category == "low":
        return "Your sleep timing has stayed close to your usual rhythm this week."
    if category == "moderate":
        return (
            f"Your sleep midpoint has shifted by around {hours:.1f} hours "
            "due to recent shift changes."
        )
    return (
        f"Your body clock is heavily shifted (~{hours:.1f}h) from your usual "
        "pattern after recent day/night rotations."
    )
