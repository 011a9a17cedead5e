"""Unit tests for services/config_service.py.

Uses a real ConfigService pointed at a tmp_path directory.
"""

from __future__ import annotations

import json
import os
import stat

import pytest

from cadence_cli.models.config_models import ExerciseTemplate, WorkoutTemplate
from cadence_cli.services.config_service import ConfigService, get_config_service


@pytest.fixture()
def svc(tmp_path) -> ConfigService:
    service = ConfigService(tmp_path / "config.json")
    _ = service.config
    return service


class TestLoadAndSave:
    def test_first_load_writes_defaults(self, svc):
        assert svc.config_path.exists()
        data = json.loads(svc.config_path.read_text())
        assert data["focus"]["work_minutes"] == 25

    def test_config_file_is_private(self, svc):
        mode = stat.S_IMODE(os.stat(svc.config_path).st_mode)
        assert mode == 0o600

    def test_invalid_file_raises_runtime_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"focus": {"work_minutes": "lots"}}')
        with pytest.raises(RuntimeError, match="Invalid config file"):
            ConfigService(path).load_config()

    def test_changes_survive_reload(self, svc):
        svc.set("focus.work_minutes", 50)
        reloaded = ConfigService(svc.config_path)
        assert reloaded.get("focus.work_minutes") == 50

    def test_save_without_config_raises(self, tmp_path):
        with pytest.raises(RuntimeError):
            ConfigService(tmp_path / "c.json").save_config()

    def test_default_location(self, isolated_dirs):
        service = ConfigService()
        assert service.config_path == isolated_dirs / "config" / "config.json"


class TestGetSet:
    def test_get_nested(self, svc):
        assert svc.get("focus.sessions_until_long_break") == 4
        assert svc.get("sound_enabled") is True

    def test_get_unknown_returns_none(self, svc):
        assert svc.get("focus.nope") is None
        assert svc.get("nope.deeper") is None

    def test_set_validates(self, svc):
        with pytest.raises(ValueError, match="focus.work_minutes"):
            svc.set("focus.work_minutes", 0)
        assert svc.get("focus.work_minutes") == 25

    def test_set_unknown_key(self, svc):
        with pytest.raises(KeyError):
            svc.set("focus.colour", "red")

    def test_set_bool(self, svc):
        svc.set("focus.auto_start_next_phase", True)
        assert svc.config.focus.auto_start_next_phase is True


class TestReset:
    def test_reset_single_key(self, svc):
        svc.set("focus.break_minutes", 9)
        svc.reset_config("focus.break_minutes")
        assert svc.get("focus.break_minutes") == 5

    def test_reset_everything(self, svc):
        svc.set("sound_enabled", False)
        svc.add_workout(WorkoutTemplate(name="Legs"))
        svc.reset_config()
        assert svc.get("sound_enabled") is True
        assert svc.config.workouts == {}

    def test_reset_unknown_key(self, svc):
        with pytest.raises(KeyError):
            svc.reset_config("focus.nope")


class TestWorkouts:
    def test_add_save_remove(self, svc):
        svc.add_workout(WorkoutTemplate(name="Legs"))
        with pytest.raises(ValueError):
            svc.add_workout(WorkoutTemplate(name="Legs"))

        updated = WorkoutTemplate(name="Legs", exercises=[ExerciseTemplate(name="Squat")])
        svc.save_workout(updated)
        reloaded = ConfigService(svc.config_path)
        assert reloaded.config.get_workout("Legs").exercises[0].name == "Squat"

        svc.remove_workout("Legs")
        assert "Legs" not in ConfigService(svc.config_path).config.workouts


def test_get_config_service_is_cached():
    assert get_config_service() is get_config_service()
