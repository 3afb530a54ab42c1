"""Tests for the ShiftLag score."""

from datetime import date, timedelta

import pytest

from shift_coach.domain.shifts import ShiftDay
from shift_coach.engine.normalize import round_score
from shift_coach.engine.shift_lag import (
    biological_night,
    calculate_shift_lag,
    instability_points,
    misalignment_points,
    shift_lag_level,
    sleep_debt_points,
    start_time_variability,
    typical_sleep_need,
    weekly_sleep_debt,
)
from tests.conftest import night_sleeps, shift, sleep_session

TODAY = date(2024, 3, 10)


def _day(offset: int) -> date:
    return TODAY - timedelta(days=offset)


def test_no_sleep_and_no_shifts_is_insufficient() -> None:
    result = calculate_shift_lag([], [], TODAY)

    assert not result.data_sufficient
    assert result.score == 0
    assert result.drivers.sleep_debt == "No data"


def test_rested_sleeper_without_shifts_is_low() -> None:
    result = calculate_shift_lag(night_sleeps(TODAY, 7), [], TODAY)

    assert result.data_sufficient
    assert result.score == 0
    assert result.level == "low"
    assert result.drivers.sleep_debt == "Sleep debt: On track"
    assert result.drivers.misalignment == "Circadian alignment: Good"
    assert result.drivers.instability == "Schedule stability: Consistent"
    assert result.recommendations == [
        "Keep maintaining your current sleep and shift routine"
    ]


def test_run_of_night_shifts_is_high() -> None:
    shifts = [shift(_day(offset), "night", 22) for offset in range(5)]
    sleeps = [sleep_session(_day(offset), 8, 5) for offset in range(1, 5)]
    sleeps.append(sleep_session(TODAY, 8, 6))
    sleeps += [sleep_session(_day(offset), 23, 8) for offset in (5, 6)]

    result = calculate_shift_lag(sleeps, shifts, TODAY)

    assert result.sleep_debt_hours == 14.0
    assert result.sleep_debt_score == 35
    assert result.avg_night_overlap_hours == 7.0
    assert result.misalignment_score == 30
    assert result.instability_score == 0
    assert result.score == 65
    assert result.level == "high"
    assert "65/100" in result.explanation
    assert result.drivers.sleep_debt == "Sleep debt: 14.0h this week"
    assert len(result.recommendations) == 3


def test_personal_midpoint_moves_the_biological_night() -> None:
    shifts = [shift(TODAY, "day", 9)]

    default_night = calculate_shift_lag(night_sleeps(TODAY, 7), shifts, TODAY)
    daytime_night = calculate_shift_lag(
        night_sleeps(TODAY, 7), shifts, TODAY, circadian_midpoint_hours=13.0
    )

    assert default_night.avg_night_overlap_hours == 0
    assert default_night.misalignment_score == 5
    assert daytime_night.avg_night_overlap_hours == 8.0
    assert daytime_night.misalignment_score == 35


def test_biological_night_window() -> None:
    assert biological_night(None) == (23.0, 7.0)
    assert biological_night(13.0) == (9.0, 17.0)
    assert biological_night(2.0) == (22.0, 6.0)


def test_typical_sleep_need_uses_off_day_main_sleep_only() -> None:
    sessions = [
        sleep_session(_day(1), 0, 8),
        sleep_session(_day(1), 14, 1.5, is_main=False),
        sleep_session(TODAY, 9, 4),
    ]

    assert typical_sleep_need(sessions, {TODAY}) == 8.0
    assert typical_sleep_need([sleep_session(TODAY, 0, 11)], set()) == 9.0
    assert typical_sleep_need([], set()) == 8.0


def test_weekly_sleep_debt_counts_missing_days() -> None:
    sessions = night_sleeps(TODAY, 5)

    assert weekly_sleep_debt(sessions, 8.0, TODAY) == 16.0


def test_weekly_sleep_debt_ignores_naps() -> None:
    sessions = night_sleeps(TODAY, 5)
    sessions += [
        sleep_session(_day(offset), 14, 3, is_main=False) for offset in range(7)
    ]

    assert weekly_sleep_debt(sessions, 8.0, TODAY) == 16.0


def test_short_sleep_on_days_off_builds_debt_despite_naps() -> None:
    sleeps = [sleep_session(_day(offset), 0, 5) for offset in range(7)]
    naps = [
        sleep_session(_day(offset), 14, 3, is_main=False) for offset in range(7)
    ]

    without_naps = calculate_shift_lag(sleeps, [], TODAY)
    with_naps = calculate_shift_lag(sleeps + naps, [], TODAY)

    assert without_naps.sleep_debt_hours == 14.0
    assert without_naps.sleep_debt_score == 35
    assert without_naps.score == 35
    assert without_naps.level == "moderate"
    assert with_naps == without_naps


def test_start_time_variability() -> None:
    shifts = [
        shift(_day(2), "morning", 6),
        shift(_day(1), "afternoon", 14),
        shift(TODAY, "night", 22),
    ]

    assert start_time_variability(shifts, TODAY) == pytest.approx(6.532, abs=1e-3)
    assert start_time_variability(shifts[:1], TODAY) == 0.0


def test_start_time_variability_from_labels() -> None:
    shifts = [
        ShiftDay(date=_day(1), category="night", label="Night"),
        ShiftDay(date=TODAY, category="morning"),
    ]

    assert start_time_variability(shifts, TODAY) == 8.0
    assert instability_points(8.0) == 20.0


def test_component_point_curves() -> None:
    assert sleep_debt_points(3) == 0
    assert sleep_debt_points(5) == 10
    assert sleep_debt_points(20) == 40
    assert misalignment_points(0) == 5
    assert misalignment_points(0, has_shifts=False) == 0
    assert misalignment_points(9) == 40
    assert instability_points(1.5) == 0
    assert instability_points(5) == 7.5


def test_sleep_debt_score_never_falls_as_debt_grows() -> None:
    scores = [round_score(sleep_debt_points(step / 2)) for step in range(61)]

    assert scores == sorted(scores)
    assert scores[0] == 0
    assert scores[-1] == 40


def test_levels() -> None:
    assert shift_lag_level(20) == "low"
    assert shift_lag_level(21) == "moderate"
    assert shift_lag_level(50) == "moderate"
    assert shift_lag_level(51) == "high"
