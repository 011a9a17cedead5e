"""Main entry point for Cadence."""

import typer
from rich.console import Console

from cadence_cli import __version__
from cadence_cli.commands import config, focus, history, workout
from cadence_cli.utils.typer_helpers import SuggestingGroup

app = typer.Typer(
    name="cadence",
    cls=SuggestingGroup,
    help="Focus timer and workout tracker for the terminal",
    no_args_is_help=True,
)

console = Console()

app.add_typer(focus.app, name="focus", help="Planned focus sessions with breaks")
app.add_typer(workout.app, name="workout", help="Workout templates and tracker")
app.add_typer(history.app, name="history", help="Completed sessions and workouts")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Cadence[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
