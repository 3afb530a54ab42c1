"""Tests for Supabase adapter implementations."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import uuid4

from shift_coach.adapters.supabase_intake_repository import SupabaseIntakeRepository
from shift_coach.adapters.supabase_score_repository import SupabaseScoreRepository
from shift_coach.adapters.supabase_shift_repository import SupabaseShiftRepository
from shift_coach.adapters.supabase_sleep_repository import SupabaseSleepRepository
from shift_coach.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from shift_coach.domain.scores import (
    BingeRisk,
    CircadianPhase,
    DailyScores,
    ShiftLagMetrics,
    ShiftRhythmScore,
    SleepDeficit,
    SocialJetlag,
    TonightTarget,
)

START = datetime(2024, 3, 3, tzinfo=UTC)
END = datetime(2024, 3, 11, tzinfo=UTC)


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": []}
    )
    last_columns: str | None = None
    upserts: list[tuple[object, str | None]] = field(default_factory=list)
    last_filters: list[tuple[str, str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, columns: str) -> "FakeTable":
        self._action = "select"
        self.last_columns = columns
        return self

    def upsert(
        self, payload: dict[str, object], on_conflict: str | None = None
    ) -> "FakeTable":
        self._action = "upsert"
        self.upserts.append((payload, on_conflict))
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("eq", column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("gte", column, value))
        return self

    def lt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("lt", column, value))
        return self

    def lte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append(("lte", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_sleep_repository_reads_current_rows() -> None:
    client = FakeSupabaseClient()
    client.table("sleep_logs").queue(
        "select",
        [
            {
                "date": "2024-03-09",
                "start_at": "2024-03-09T23:00:00+00:00",
                "end_at": "2024-03-10T07:00:00+00:00",
                "type": "main",
                "quality": 4,
            },
            {
                "date": "2024-03-10",
                "start_at": "2024-03-10T14:00:00",
                "end_at": "2024-03-10T14:30:00",
                "type": "nap",
                "quality": 9,
            },
            {"date": "2024-03-10", "start_at": None, "end_at": None, "type": "main"},
        ],
    )

    sessions = SupabaseSleepRepository(client).list_sleep_sessions(
        uuid4(), START, END
    )

    assert len(sessions) == 2
    main, nap = sessions
    assert main.is_main
    assert main.duration_hours == 8.0
    assert main.quality == 4
    assert main.date == date(2024, 3, 9)
    assert not nap.is_main
    assert nap.quality is None
    assert nap.start.tzinfo is not None


def test_sleep_repository_falls_back_to_legacy_columns() -> None:
    client = FakeSupabaseClient()
    table = client.table("sleep_logs")
    table.queue("select", [])
    table.queue(
        "select",
        [
            {
                "date": None,
                "start_ts": "2024-03-09T23:00:00Z",
                "end_ts": "2024-03-10T06:00:00Z",
                "naps": 0,
                "sleep_hours": 6.5,
                "quality": None,
            }
        ],
    )

    sessions = SupabaseSleepRepository(client).list_sleep_sessions(
        uuid4(), START, END
    )

    assert table.last_columns is not None
    assert "start_ts" in table.last_columns
    assert len(sessions) == 1
    assert sessions[0].is_main
    assert sessions[0].duration_hours == 6.5
    assert sessions[0].date == date(2024, 3, 9)


def test_shift_repository_categorises_rows() -> None:
    client = FakeSupabaseClient()
    table = client.table("shifts")
    table.queue(
        "select",
        [
            {
                "date": "2024-03-08",
                "label": "Night",
                "start_ts": "2024-03-08T22:00:00+00:00",
                "end_ts": "2024-03-09T06:00:00+00:00",
            },
            {"date": "2024-03-09", "label": "OFF", "start_ts": None, "end_ts": None},
            {
                "date": "2024-03-10",
                "label": "Custom",
                "start_ts": "2024-03-10T07:00:00+00:00",
                "end_ts": "2024-03-10T15:00:00+00:00",
            },
            {
                "date": "2024-03-11",
                "label": "Day",
                "start_ts": "2024-03-11T09:00:00+00:00",
                "end_ts": "2024-03-11T08:00:00+00:00",
            },
            {"date": "not-a-date", "label": "Day"},
        ],
    )

    shifts = SupabaseShiftRepository(client).list_shift_days(
        uuid4(), date(2024, 3, 1), date(2024, 3, 11)
    )

    assert [shift.category for shift in shifts] == ["night", "off", "morning", "day"]
    assert shifts[0].has_times
    assert shifts[1].start is None
    assert shifts[3].start is None
    assert ("lte", "date", "2024-03-11") in table.last_filters


def test_intake_repository_nutrition_totals() -> None:
    client = FakeSupabaseClient()
    client.table("profiles").queue(
        "select",
        [
            {
                "calorie_target": 2000,
                "protein_target_g": 120,
                "water_target_ml": 2500,
                "caffeine_limit_mg": None,
            }
        ],
    )
    client.table("meal_logs").queue(
        "select",
        [
            {"calories": 600, "protein_g": 40, "carbs_g": 60},
            {"calories": "400", "protein_g": None, "carbs_g": 30},
        ],
    )
    client.table("water_logs").queue("select", [{"ml": 500}, {"ml": 750}])

    nutrition = SupabaseIntakeRepository(client).get_nutrition(uuid4(), START, END)

    assert nutrition.calorie_target == 2000
    assert nutrition.consumed_calories == 1000
    assert nutrition.protein is not None
    assert nutrition.protein.consumed == 40
    assert nutrition.carbs is None
    assert nutrition.water is not None
    assert nutrition.water.consumed == 1250
    assert nutrition.caffeine is None


def test_intake_repository_activity_defaults() -> None:
    client = FakeSupabaseClient()
    client.table("activity_logs").queue(
        "select",
        [
            {"steps": 4000, "active_minutes": 10, "shift_activity_level": "busy"},
            {"steps": 2000, "active_minutes": None, "shift_activity_level": "??"},
        ],
    )

    activity = SupabaseIntakeRepository(client).get_activity(
        uuid4(), date(2024, 3, 10)
    )

    assert activity.steps == 6000
    assert activity.active_minutes == 10
    assert activity.steps_goal == 10000
    assert activity.active_minutes_goal == 30
    assert activity.intensity == "busy"


def test_intake_repository_meal_timing_and_logs() -> None:
    client = FakeSupabaseClient()
    client.table("meal_schedule").queue(
        "select",
        [
            {"slot_label": "Breakfast", "window_start": "07:00", "window_end": None},
            {"slot_label": None, "window_start": "12:00", "window_end": "13:00"},
        ],
    )
    meals = client.table("meal_logs")
    meals.queue(
        "select",
        [
            {"slot_label": "Breakfast", "logged_at": "2024-03-10T07:30:00+00:00"},
            {"slot_label": None, "logged_at": None},
        ],
    )
    meals.queue(
        "select",
        [{"logged_at": "2024-03-10T07:30:00+00:00", "calories": None}],
    )
    repository = SupabaseIntakeRepository(client)

    timing = repository.get_meal_timing(uuid4(), START, END)
    logs = repository.list_meal_logs(uuid4(), START, END)

    assert len(timing.recommended) == 1
    assert timing.recommended[0].window_end == "07:00"
    assert [entry.slot for entry in timing.actual] == ["Breakfast"]
    assert len(logs) == 1
    assert logs[0].calories == 0.0


def test_intake_repository_skips_malformed_meal_windows(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("shift_coach"), "propagate", True)
    client = FakeSupabaseClient()
    client.table("meal_schedule").queue(
        "select",
        [
            {"slot_label": "Dinner", "window_start": "24:00", "window_end": "01:00"},
            {"slot_label": "Lunch", "window_start": "noon", "window_end": None},
            {"slot_label": "Night", "window_start": "23:00:00", "window_end": "01:00"},
        ],
    )
    client.table("meal_logs").queue("select", [])

    with caplog.at_level(logging.WARNING):
        timing = SupabaseIntakeRepository(client).get_meal_timing(
            uuid4(), START, END
        )

    assert [window.slot for window in timing.recommended] == ["Night"]
    assert timing.recommended[0].window_start == "23:00"
    assert timing.recommended[0].window_end == "01:00"
    assert caplog.text.count("Skipping meal window") == 2


def test_user_settings_repository() -> None:
    client = FakeSupabaseClient()
    client.table("user_settings").queue("select", [{"timezone": "Europe/Paris"}])
    client.table("profiles").queue("select", [{"sleep_goal_h": "8.5"}])
    repository = SupabaseUserSettingsRepository(client)

    assert repository.get_timezone(uuid4()) == "Europe/Paris"
    assert repository.get_sleep_goal_hours(uuid4()) == 8.5
    assert repository.get_timezone(uuid4()) is None


def test_score_repository_lists_valid_user_ids() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    client.table("profiles").queue(
        "select", [{"user_id": str(user_id)}, {"user_id": "bogus"}]
    )

    assert SupabaseScoreRepository(client).list_user_ids() == [user_id]


def _scores(*, sufficient: bool) -> DailyScores:
    user_id = uuid4()
    if sufficient:
        circadian = CircadianPhase(
            alignment_score=80,
            phase="aligned",
            sleep_midpoint_minutes=180.0,
            deviation_hours=0.0,
            duration_factor=100.0,
            timing_factor=100.0,
            debt_factor=100.0,
            consistency_factor=100.0,
            shift_adjustment=0,
        )
        binge = BingeRisk(score=20, level="low", drivers=[], explanation="Low risk.")
    else:
        circadian = CircadianPhase.insufficient("none")
        binge = BingeRisk(
            score=5, level="low", drivers=[], explanation="", data_sufficient=False
        )
    return DailyScores(
        user_id=user_id,
        day=date(2024, 3, 10),
        sleep_deficit=SleepDeficit.insufficient(7.5, "none"),
        circadian=circadian,
        social_jetlag=SocialJetlag.insufficient("none"),
        shift_rhythm=ShiftRhythmScore(
            sleep_score=80,
            regularity_score=80,
            shift_pattern_score=80,
            recovery_score=80,
            nutrition_score=80,
            activity_score=80,
            meal_timing_score=75,
            total_score=8.0,
            message="",
        ),
        shift_lag=ShiftLagMetrics.insufficient("none"),
        binge_risk=binge,
        tonight_target=TonightTarget(target_hours=7.5, explanation=""),
    )


def test_score_repository_upserts_sufficient_scores() -> None:
    client = FakeSupabaseClient()
    scores = _scores(sufficient=True)

    SupabaseScoreRepository(client).save_daily_scores(scores)

    rhythm_payload, on_conflict = client.table("shift_rhythm_scores").upserts[0]
    assert on_conflict == "user_id,date"
    assert rhythm_payload["user_id"] == str(scores.user_id)
    assert rhythm_payload["date"] == "2024-03-10"
    assert rhythm_payload["total_score"] == 8.0
    assert client.table("circadian_logs").upserts[0][0]["alignment_score"] == 80
    assert client.table("binge_risk_logs").upserts[0][0]["score"] == 20
    assert client.table("shiftlag_logs").upserts == []


def test_score_repository_skips_insufficient_scores() -> None:
    client = FakeSupabaseClient()

    SupabaseScoreRepository(client).save_daily_scores(_scores(sufficient=False))

    assert len(client.table("shift_rhythm_scores").upserts) == 1
    assert client.table("circadian_logs").upserts == []
    assert client.table("binge_risk_logs").upserts == []
