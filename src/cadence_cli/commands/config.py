"""Configuration management commands."""

from typing import Optional

import typer

from cadence_cli.commands.decorators import AppError, command_wrapper
from cadence_cli.services.config_service import get_config_service
from cadence_cli.utils import exit_codes
from cadence_cli.utils.ui.console import get_console
from cadence_cli.utils.ui.formatters import format_output, format_success

app = typer.Typer(help="Configuration management commands")
console = get_console()


def _parse_value(value: str) -> str | int | bool:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
) -> None:
    """Show the current configuration."""
    config = get_config_service().config.model_dump(exclude={"workouts"})
    config["presets"] = {
        name: f"{p.work_minutes}/{p.break_minutes}/{p.long_break_minutes}"
        for name, p in get_config_service().config.get_presets().items()
    }
    format_output(config, output, title="Configuration")


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., focus.work_minutes)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not found", exit_codes.ERROR_NOT_FOUND)
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., focus.work_minutes)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = _parse_value(value)
    try:
        get_config_service().set(key, parsed_value)
    except KeyError as e:
        raise AppError(str(e.args[0]), exit_codes.ERROR_NOT_FOUND) from e
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults. Saved workouts are lost on a full reset."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            raise typer.Exit(0)

    try:
        get_config_service().reset_config(key)
    except KeyError as e:
        raise AppError(str(e.args[0]), exit_codes.ERROR_NOT_FOUND) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
