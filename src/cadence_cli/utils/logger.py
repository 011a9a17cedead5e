"""Application-wide logger writing a rotating file under platformdirs user_log_dir.

The file level defaults to DEBUG and can be lowered with ``CADENCE_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

from cadence_cli.services.paths import APP_NAME

_LOG_FILE = "cadence.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_LEVEL_ENV = "CADENCE_LOG_LEVEL"
_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_logger: logging.Logger | None = None


def _configured_level() -> int:
    value = os.environ.get(_LEVEL_ENV, "DEBUG").strip().upper()
    if value not in _VALID_LEVELS:
        return logging.DEBUG
    return getattr(logging, value)


def get_logger() -> logging.Logger:
    """Return the ``cadence_cli`` logger, attaching its file handler on first call.

    Engine modules log through ``logging.getLogger(__name__)`` and so end up
    in the same file once this has run.
    """
    global _logger
    if _logger is not None:
        return _logger

    log_dir = Path(user_log_dir(APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(_configured_level())
    if not logger.handlers:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / _LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return _logger
