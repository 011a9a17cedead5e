"""Tests for session snapshots and their repositories."""

from __future__ import annotations

import json
import os
import stat
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from cadence_cli.models.session.constants import FOCUS_PHASES, WORKOUT_PHASES
from cadence_cli.models.session.generator import generate_focus_plan, generate_workout_plan
from cadence_cli.models.session.persistence import (
    InMemorySnapshotRepository,
    JsonFileSnapshotRepository,
    SessionPersistence,
    Snapshot,
)

NOW = 1_700_000_000_000


def _write(persistence, plan, **overrides):
    fields = {
        "plan_id": plan.id,
        "current_slot_index": 0,
        "current_sub_index": 0,
        "phase": "work_focus",
        "remaining_seconds": 100,
        "saved_at_epoch_ms": NOW,
    }
    fields.update(overrides)
    persistence.repository.save(json.dumps(fields))


class TestSnapshotModel:
    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            Snapshot(
                plan_id="p",
                current_slot_index=0,
                current_sub_index=0,
                phase="work_focus",
                remaining_seconds=1,
                saved_at_epoch_ms=0,
                running=True,
            )

    def test_negative_remaining_rejected(self):
        with pytest.raises(ValidationError):
            Snapshot(
                plan_id="p",
                current_slot_index=0,
                current_sub_index=0,
                phase="work_focus",
                remaining_seconds=-1,
                saved_at_epoch_ms=0,
            )


class TestSessionPersistence:
    def test_snapshot_then_restore(self, persistence, repository):
        plan = generate_focus_plan(120, 25, 5, 15, 4)
        persistence.snapshot(plan.id, 1, 0, "short_break", 42, NOW)
        assert repository.writes == 1

        snap = persistence.restore(plan, FOCUS_PHASES)
        assert snap.current_slot_index == 1
        assert snap.phase == "short_break"
        assert snap.remaining_seconds == 42

    def test_restore_nothing(self, persistence):
        plan = generate_focus_plan(120, 25, 5, 15, 4)
        assert persistence.restore(plan, FOCUS_PHASES) is None

    def test_malformed_json_is_cleared(self, persistence, repository):
        plan = generate_focus_plan(120, 25, 5, 15, 4)
        repository.save("{not json")
        assert persistence.restore(plan, FOCUS_PHASES) is None
        assert repository.blob is None

    def test_missing_field_is_cleared(self, persistence, repository):
        plan = generate_focus_plan(120, 25, 5, 15, 4)
        repository.save(json.dumps({"plan_id": plan.id, "phase": "work_focus"}))
        assert persistence.restore(plan, FOCUS_PHASES) is None
        assert repository.blob is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"plan_id": "other"},
            {"phase": "exercise_active"},
            {"phase": "complete"},
            {"current_slot_index": 9},
            {"current_sub_index": 2},
            {"phase": "sprinting"},
        ],
    )
    def test_focus_snapshot_mismatch_discarded(self, persistence, repository, overrides):
        plan = generate_focus_plan(120, 25, 5, 15, 4)
        _write(persistence, plan, **overrides)
        assert persistence.restore(plan, FOCUS_PHASES) is None
        assert repository.blob is None

    def test_workout_sub_index_bounds(self, persistence):
        plan = generate_workout_plan([{"name": "Squat", "sets_planned": 3}])
        _write(persistence, plan, phase="exercise_active", current_sub_index=2)
        assert persistence.restore(plan, WORKOUT_PHASES) is not None

        _write(persistence, plan, phase="exercise_active", current_sub_index=4)
        assert persistence.restore(plan, WORKOUT_PHASES) is None

    def test_write_failure_is_logged_not_raised(self, caplog):
        repository = MagicMock()
        repository.save.side_effect = OSError("disk full")
        persistence = SessionPersistence(repository)
        with caplog.at_level("ERROR"):
            snap = persistence.snapshot("p", 0, 0, "work_focus", 5, NOW)
        assert snap.remaining_seconds == 5
        assert "disk full" in caplog.text

    def test_peek_does_not_clear(self, persistence, repository):
        repository.save("garbage")
        assert persistence.peek() is None
        assert repository.blob == "garbage"


class TestJsonFileSnapshotRepository:
    def test_round_trip_and_clear(self, tmp_path):
        repo = JsonFileSnapshotRepository(tmp_path / "state", "focus")
        assert repo.load() is None
        repo.save('{"a": 1}')
        assert repo.state_file.name == "focus_session.json"
        assert repo.load() == '{"a": 1}'
        repo.clear()
        assert repo.load() is None
        repo.clear()

    def test_file_is_private(self, tmp_path):
        repo = JsonFileSnapshotRepository(tmp_path, "workout")
        repo.save("{}")
        mode = stat.S_IMODE(os.stat(repo.state_file).st_mode)
        assert mode == 0o600

    def test_no_temp_files_left(self, tmp_path):
        repo = JsonFileSnapshotRepository(tmp_path, "focus")
        repo.save("one")
        repo.save("two")
        assert [p.name for p in tmp_path.iterdir()] == ["focus_session.json"]


def test_in_memory_repository_counts_writes():
    repo = InMemorySnapshotRepository()
    repo.save("a")
    repo.save("b")
    repo.clear()
    assert repo.writes == 2
    assert repo.load() is None
