"""Shared test fixtures and configuration.

Every test runs with platform directories redirected into *tmp_path*, so no
config, snapshot, history or log file ever lands in the real user profile.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from cadence_cli.models.session.persistence import (
    InMemorySnapshotRepository,
    SessionPersistence,
)
from cadence_cli.models.session.timing import VirtualClock


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path):
    """Point config, data and log directories at per-test temp dirs."""
    import cadence_cli.utils.logger as logger_mod
    from cadence_cli.services.config_service import get_config_service

    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    log_dir = tmp_path / "logs"

    get_config_service.cache_clear()
    logger_mod._logger = None
    with patch("cadence_cli.services.paths.user_config_dir", return_value=str(config_dir)):
        with patch("cadence_cli.services.paths.user_data_dir", return_value=str(data_dir)):
            with patch("cadence_cli.utils.logger.user_log_dir", return_value=str(log_dir)):
                yield tmp_path

    get_config_service.cache_clear()
    logger_mod._logger = None
    app_logger = logging.getLogger("cadence_cli")
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Engine collaborators
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture()
def repository() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


@pytest.fixture()
def persistence(repository) -> SessionPersistence:
    return SessionPersistence(repository)
