"""History commands: completed focus sessions and workouts."""

import typer

from cadence_cli.commands.decorators import command_wrapper
from cadence_cli.services.history import HistoryLogger
from cadence_cli.utils.ui.console import get_console
from cadence_cli.utils.ui.formatters import format_output

console = get_console()
app = typer.Typer(help="Completed focus sessions and workouts")


def get_history() -> HistoryLogger:
    return HistoryLogger()


@app.command("focus")
@command_wrapper
def focus_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum entries"),
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """List completed focus sessions, newest first."""
    rows = get_history().get_recent_focus(limit=limit)
    if not rows and output == "pretty":
        console.print("[dim]No focus sessions recorded yet[/dim]")
        return
    format_output(rows, output, title="Focus sessions")


@app.command("workout")
@command_wrapper
def workout_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum entries"),
    details: bool = typer.Option(False, "--details", help="Include logged sets"),
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """List completed workouts, newest first."""
    rows = get_history().get_recent_workouts(limit=limit, include_exercises=details)
    if not rows and output == "pretty":
        console.print("[dim]No workouts recorded yet[/dim]")
        return
    if details and output == "pretty":
        for row in rows:
            console.print(
                f"\n[bold cyan]{row['name'] or 'Workout'}[/bold cyan] "
                f"[dim]{row['start_time']}[/dim]"
            )
            for exercise in row["exercise_data"]:
                sets = ", ".join(
                    f"{s['reps'] if s['reps'] is not None else '-'}"
                    + (f"@{s['weight']:g}" if s["weight"] is not None else "")
                    for s in exercise["sets"]
                )
                console.print(f"  {exercise['name']}: {sets or '-'}")
        return
    format_output(rows, output, title="Workouts")


@app.command("stats")
@command_wrapper
def focus_stats(
    days: int = typer.Option(7, "--days", "-d", help="Days to look back"),
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """Totals for recent focus sessions."""
    format_output(get_history().get_focus_stats(days=days), output, title="Focus stats")
