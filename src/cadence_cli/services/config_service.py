"""Configuration service for Cadence.

The single source of truth for ``config.json``: focus settings, presets and
saved workout templates. Values are addressed with dot-separated keys such as
``focus.work_minutes``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from cadence_cli.models.config_models import AppConfig, WorkoutTemplate
from cadence_cli.services.paths import config_dir


class ConfigService:
    """Loads, validates and saves the application configuration."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = Path(config_path) if config_path else config_dir() / "config.json"
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            self._config = AppConfig()
            self.save_config()
        except ValidationError as e:
            raise RuntimeError(f"Invalid config file {self.config_path}: {e}") from e
        except OSError as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self, key: str | None = None) -> None:
        """Reset the whole configuration, or a single key, to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return
        default_value = _lookup(AppConfig(), key)
        if default_value is None:
            raise KeyError(f"Unknown configuration key '{key}'")
        self.set(key, default_value)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key, or None."""
        return _lookup(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        The modified configuration is re-validated before it is saved.

        Raises:
            KeyError: If the key does not exist.
            ValueError: If the value fails validation.
        """
        if self.get(key) is None and not _is_model_field(self.config, key):
            raise KeyError(f"Unknown configuration key '{key}'")

        keys = key.split(".")
        config_dict = self.config.model_dump()
        current = config_dict
        for k in keys[:-1]:
            current = current[k]
        current[keys[-1]] = value

        try:
            self._config = AppConfig.model_validate(config_dict)
        except ValidationError as e:
            raise ValueError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e
        self.save_config()

    def add_workout(self, workout: WorkoutTemplate) -> None:
        self.config.add_workout(workout)
        self.save_config()

    def save_workout(self, workout: WorkoutTemplate) -> None:
        """Store a workout, replacing any template of the same name."""
        self.config.workouts[workout.name] = workout
        self.save_config()

    def remove_workout(self, name: str) -> None:
        self.config.remove_workout(name)
        self.save_config()


def _lookup(config: BaseModel, key: str) -> Any:
    value: Any = config
    for k in key.split("."):
        if isinstance(value, BaseModel):
            value = getattr(value, k, None)
        elif isinstance(value, dict):
            value = value.get(k)
        else:
            return None
    return value


def _is_model_field(config: BaseModel, key: str) -> bool:
    *parents, last = key.split(".")
    owner = _lookup(config, ".".join(parents)) if parents else config
    return isinstance(owner, BaseModel) and last in type(owner).model_fields


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
