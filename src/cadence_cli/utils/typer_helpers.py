"""Typer helper utilities."""

from difflib import get_close_matches

import click
import typer
from typer.core import TyperGroup

from cadence_cli.utils.ui.console import get_console


def _nested_matches(group: click.Group, attempted: str) -> list[str]:
    """Full paths of sub-commands called *attempted*, e.g. ``focus start``."""
    return [
        f"{name} {attempted}"
        for name, command in group.commands.items()
        if isinstance(command, click.Group) and attempted in command.commands
    ]


class SuggestingGroup(TyperGroup):
    """Typer group that answers a mistyped command with "Did you mean ...?".

    A sub-command typed without its group (``cadence start``) is answered with
    every group that has it (``cadence focus start``, ``cadence workout start``).
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if not args:
                raise
            attempted = args[0]
            suggestions = _nested_matches(self, attempted) or get_close_matches(
                attempted, list(self.commands), n=3, cutoff=0.6
            )
            if not suggestions:
                raise

            console = get_console()
            console.print(
                f'[red]Error:[/red] unknown command "{attempted}" for "{ctx.info_name}"'
            )
            console.print()
            if len(suggestions) == 1:
                console.print("[yellow]Did you mean this?[/yellow]")
            else:
                console.print("[yellow]Did you mean one of these?[/yellow]")
            for suggestion in suggestions:
                console.print(f"        {ctx.info_name} {suggestion}")
            raise typer.Exit(1) from e
