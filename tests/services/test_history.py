"""Tests for the SQLite history logger."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from cadence_cli.models.session.generator import generate_workout_plan
from cadence_cli.models.session.plan import SetRecord
from cadence_cli.models.session.recorder import FocusCompletion, WorkoutCompletion
from cadence_cli.services.history import HistoryLogger


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


@pytest.fixture()
def history(tmp_path) -> HistoryLogger:
    return HistoryLogger(tmp_path / "history.db")


def _workout(start_ms: int, name: str = "Legs") -> WorkoutCompletion:
    plan = generate_workout_plan([{"name": "Squat"}, {"name": "Lunge"}], name=name)
    plan.slots[0].items.extend([SetRecord(1, 5, 100.0, start_ms), SetRecord(2, 5, 100.0, start_ms)])
    plan.slots[1].items.append(SetRecord(1, 10, None, start_ms))
    return WorkoutCompletion.from_plan(plan, start_ms, start_ms + 1_800_000)


def test_default_path_in_data_dir(isolated_dirs):
    logger = HistoryLogger()
    assert logger.db_path == isolated_dirs / "data" / "history.db"
    assert logger.db_path.exists()


class TestFocus:
    def test_record_and_read_back(self, history):
        now = _ms(datetime.now())
        history.record(FocusCompletion(timestamp=now, slot_index=2, duration_planned=25))
        (row,) = history.get_recent_focus()
        assert row["slot_index"] == 2
        assert row["duration_minutes"] == 25
        assert datetime.fromisoformat(row["completed_at"]).tzinfo is not None

    def test_newest_first_and_limit(self, history):
        base = datetime.now() - timedelta(hours=3)
        for i in range(3):
            history.log_focus(FocusCompletion(_ms(base + timedelta(hours=i)), i, 25))
        rows = history.get_recent_focus(limit=2)
        assert [r["slot_index"] for r in rows] == [2, 1]

    def test_stats_window(self, history):
        now = datetime.now()
        history.log_focus(FocusCompletion(_ms(now - timedelta(days=10)), 0, 25))
        history.log_focus(FocusCompletion(_ms(now - timedelta(hours=1)), 0, 25))
        history.log_focus(FocusCompletion(_ms(now - timedelta(minutes=30)), 1, 50))
        stats = history.get_focus_stats(days=7)
        assert stats == {
            "days": 7,
            "completed_sessions": 2,
            "total_focus_minutes": 75,
            "total_focus_hours": 1.2,
        }

    def test_stats_empty(self, history):
        assert history.get_focus_stats()["completed_sessions"] == 0


class TestWorkout:
    def test_record_summary_row(self, history):
        history.record(_workout(_ms(datetime.now())))
        (row,) = history.get_recent_workouts()
        assert row["name"] == "Legs"
        assert row["duration_seconds"] == 1800
        assert row["exercises"] == 2
        assert row["sets_logged"] == 3
        assert row["total_volume"] == 1000.0
        assert "exercise_data" not in row
        assert "id" not in row

    def test_exercise_details(self, history):
        history.record(_workout(_ms(datetime.now())))
        (row,) = history.get_recent_workouts(include_exercises=True)
        squat, lunge = row["exercise_data"]
        assert squat["name"] == "Squat"
        assert [s["reps"] for s in squat["sets"]] == [5, 5]
        assert lunge["sets"][0]["weight"] is None

    def test_newest_first(self, history):
        now = datetime.now()
        history.record(_workout(_ms(now - timedelta(days=1)), name="Old"))
        history.record(_workout(_ms(now), name="New"))
        assert [r["name"] for r in history.get_recent_workouts()] == ["New", "Old"]


def test_unknown_event_type(history):
    with pytest.raises(TypeError):
        history.record("not an event")
