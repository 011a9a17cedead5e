"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer

from cadence_cli.models.session.errors import (
    IllegalStateTransition,
    InvalidConfiguration,
    InvalidItem,
    UnknownSlot,
)
from cadence_cli.utils import exit_codes
from cadence_cli.utils.logger import get_logger
from cadence_cli.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def _exit_code_for(error: Exception) -> int:
    if isinstance(error, AppError):
        return error.exit_code
    if isinstance(error, IllegalStateTransition):
        return exit_codes.ERROR_INVALID_STATE
    if isinstance(error, UnknownSlot):
        return exit_codes.ERROR_NOT_FOUND
    if isinstance(error, (InvalidConfiguration, InvalidItem)):
        return exit_codes.ERROR_INVALID_ARGS
    return exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable):
    """Log the command and turn known errors into a message and an exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except (
            AppError,
            IllegalStateTransition,
            InvalidConfiguration,
            InvalidItem,
            UnknownSlot,
        ) as e:
            elapsed = time.monotonic() - start
            logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
            format_error(str(e))
            raise typer.Exit(code=_exit_code_for(e)) from e

        except typer.Exit:
            # --help, explicit Exit(0) and friends
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
