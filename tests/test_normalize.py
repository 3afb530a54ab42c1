"""Tests for shared numeric helpers."""

from datetime import UTC, date, datetime

import pytest

from shift_coach.engine.normalize import (
    circular_mean,
    circular_stddev,
    day_key,
    format_hours,
    map_range,
    median,
    round_half_up,
    round_score,
    signed_wrap_diff,
    stddev,
    wrap_diff,
)


def test_map_range_clamps_and_inverts() -> None:
    assert map_range(5, 0, 10, 0, 100) == 50
    assert map_range(15, 0, 10, 0, 100) == 100
    assert map_range(0, 0, 4, 100, 0) == 100
    assert map_range(4, 0, 4, 100, 0) == 0


def test_map_range_degenerate_input_range() -> None:
    assert map_range(3, 2, 2, 0, 100) == 0


def test_median_and_stddev() -> None:
    assert median([]) == 0.0
    assert median([3, 1, 2]) == 2
    assert median([4, 1, 3, 2]) == 2.5
    assert stddev([5]) == 0.0
    assert stddev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


def test_wrap_diff_crosses_midnight() -> None:
    assert wrap_diff(23, 1) == 2
    assert wrap_diff(1, 23) == 2
    assert wrap_diff(6, 18) == 12
    assert signed_wrap_diff(1, 23) == 2
    assert signed_wrap_diff(23, 1) == -2


def test_wrap_diff_is_symmetric_and_bounded() -> None:
    clock = [step / 4 for step in range(0, 96, 3)]

    for a in clock:
        for b in clock:
            diff = wrap_diff(a, b)
            assert 0 <= diff <= 12
            assert diff == wrap_diff(b, a)


def test_circular_mean_of_times_around_midnight() -> None:
    result = circular_mean([23, 1])
    assert min(result, 24 - result) == pytest.approx(0.0, abs=1e-9)
    assert circular_mean([2, 4]) == pytest.approx(3.0)
    assert circular_stddev([23, 1]) == pytest.approx(1.0)


def test_round_half_up_matches_dashboard_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(-2.5) == -2
    assert round_score(84.5) == 85


def test_day_key_uses_boundary_hour() -> None:
    moment = datetime(2024, 3, 5, 2, 0, tzinfo=UTC)
    assert day_key(moment) == date(2024, 3, 5)
    assert day_key(moment, 7) == date(2024, 3, 4)


def test_format_hours() -> None:
    assert format_hours(5.5) == "5h 30m"
    assert format_hours(7) == "7h"
    assert format_hours(6.999) == "7h"
