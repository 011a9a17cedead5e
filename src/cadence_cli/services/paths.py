"""Per-user directories used by Cadence."""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

APP_NAME = "cadence_cli"


def config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


def data_dir() -> Path:
    """Directory for snapshots, stored plans and the history database."""
    return Path(user_data_dir(APP_NAME))
