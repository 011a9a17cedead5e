"""Workout commands: author workout templates and track a workout set by set."""

import typer
from pydantic import ValidationError
from rich.prompt import Confirm, FloatPrompt, IntPrompt
from rich.table import Table

from cadence_cli.commands.decorators import AppError, command_wrapper
from cadence_cli.models.config_models import ExerciseTemplate, WorkoutTemplate
from cadence_cli.models.session.display import (
    RESULT_LOG_SET,
    SessionDisplay,
    ring_on_transition,
    show_workout_summary,
)
from cadence_cli.models.session.engine import SessionEngine
from cadence_cli.models.session.errors import SessionError
from cadence_cli.models.session.generator import generate_workout_plan
from cadence_cli.models.session.recorder import WorkoutCompletion
from cadence_cli.models.session.timing import SystemClock
from cadence_cli.services.config_service import get_config_service
from cadence_cli.services.session_service import SessionService
from cadence_cli.utils import exit_codes
from cadence_cli.utils.ui.console import get_console
from cadence_cli.utils.ui.formatters import (
    format_output,
    format_relative_time,
    format_success,
)

console = get_console()
app = typer.Typer(help="Workout templates and the set-by-set workout tracker")

PHASE_NAMES = {
    "exercise_active": "Exercise",
    "rest_between_sets": "Rest",
}


def get_session_service() -> SessionService:
    return SessionService("workout")


def _get_workout(name: str) -> WorkoutTemplate:
    try:
        return get_config_service().config.get_workout(name)
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_NOT_FOUND) from e


def _describe_exercise(exercise: ExerciseTemplate) -> str:
    if exercise.reps_or_time == "time":
        work = f"{exercise.time_per_set}s"
    else:
        work = f"{exercise.target_reps or '?'} reps"
    detail = f"{exercise.sets_planned} x {work}, rest {exercise.rest_seconds}s"
    if exercise.is_bodyweight:
        detail += ", bodyweight"
    return detail


@app.command("create")
@command_wrapper
def create_workout(name: str = typer.Argument(..., help="Workout name")):
    """Create an empty workout template."""
    if not name.strip():
        raise AppError("Workout name cannot be empty", exit_codes.ERROR_INVALID_ARGS)
    try:
        get_config_service().add_workout(WorkoutTemplate(name=name.strip()))
    except ValueError as e:
        raise AppError(str(e), exit_codes.ERROR_INVALID_ARGS) from e
    format_success(f"Workout '{name.strip()}' created")
    console.print(f"Add exercises with 'cadence workout add-exercise \"{name.strip()}\" <exercise>'")


@app.command("add-exercise")
@command_wrapper
def add_exercise(
    workout: str = typer.Argument(..., help="Workout name"),
    exercise: str = typer.Argument(..., help="Exercise name"),
    sets: int = typer.Option(3, "--sets", "-s", help="Number of sets"),
    timed: bool = typer.Option(False, "--timed", help="Sets are timed instead of counted"),
    target_reps: str = typer.Option("8-12", "--reps", "-r", help="Target reps, e.g. 8-12"),
    time_per_set: int = typer.Option(30, "--time", "-t", help="Seconds per timed set"),
    rest: int = typer.Option(90, "--rest", help="Rest seconds after each set"),
    bodyweight: bool = typer.Option(False, "--bodyweight", help="No weight is logged"),
    notes: str = typer.Option("", "--notes", help="Notes for the exercise"),
):
    """Append an exercise to a workout template."""
    template = _get_workout(workout)
    try:
        new_exercise = ExerciseTemplate(
            name=exercise,
            sets_planned=sets,
            reps_or_time="time" if timed else "reps",
            target_reps=target_reps,
            time_per_set=time_per_set,
            rest_seconds=rest,
            is_bodyweight=bodyweight,
            notes=notes,
        )
    except ValidationError as e:
        message = "; ".join(err["msg"] for err in e.errors())
        raise AppError(f"Invalid exercise: {message}", exit_codes.ERROR_INVALID_ARGS) from e

    template.exercises.append(new_exercise)
    get_config_service().save_workout(template)
    format_success(f"Added {new_exercise.name} ({_describe_exercise(new_exercise)}) to '{workout}'")


@app.command("list")
@command_wrapper
def list_workouts(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """List workout templates."""
    workouts = get_config_service().config.workouts
    if output in ("json", "yaml"):
        format_output([w.model_dump() for w in workouts.values()], output)
        return
    if not workouts:
        console.print("[dim]No workouts yet. Create one with 'cadence workout create'.[/dim]")
        return

    table = Table(title="Workouts", header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Exercises")
    for template in workouts.values():
        exercises = "\n".join(
            f"{ex.name}: {_describe_exercise(ex)}" for ex in template.exercises
        )
        table.add_row(template.name, exercises or "[dim]-[/dim]")
    console.print(table)


@app.command("delete")
@command_wrapper
def delete_workout(
    name: str = typer.Argument(..., help="Workout name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a workout template."""
    _get_workout(name)
    if not yes and not Confirm.ask(f"Delete workout '{name}'?", default=False):
        raise typer.Exit(0)
    get_config_service().remove_workout(name)
    format_success(f"Workout '{name}' deleted")


def _ask_non_negative(prompt, label: str, **kwargs):
    while True:
        value = prompt.ask(label, console=console, **kwargs)
        if value >= 0:
            return value
        console.print("[prompt.invalid]Please enter 0 or more")


def _prompt_set(engine: SessionEngine) -> None:
    """Ask for reps and weight of the current set and log it."""
    slot = engine.plan.slots[engine.current_slot_index]
    set_number = len(slot.items) + 1
    console.print(f"\n[bold]{slot.name}[/bold] set {set_number} of {slot.sets_planned}")

    reps = None
    if slot.reps_or_time == "reps":
        reps = _ask_non_negative(IntPrompt, "Reps")
    weight = None
    if not slot.is_bodyweight:
        weight = _ask_non_negative(FloatPrompt, "Weight", default=0.0)
    try:
        engine.log_set(reps=reps, weight=weight or None)
    except SessionError as e:
        console.print(f"[red]Set not logged:[/red] {e}")


@app.command("start")
@command_wrapper
def start_workout(
    name: str = typer.Argument(..., help="Workout to run"),
    fresh: bool = typer.Option(False, "--fresh", help="Discard a saved session"),
):
    """Run a workout in the full-screen tracker, offering to resume a saved one."""
    service = get_session_service()
    stored = service.load_plan()
    in_progress = stored is not None and service.has_session_in_progress()

    if in_progress and not fresh:
        if stored.source != name:
            raise AppError(
                f"Workout '{stored.source}' is in progress. "
                "Resume it or run 'cadence workout cancel'.",
                exit_codes.ERROR_INVALID_STATE,
            )
        saved = service.persistence.peek()
        if not Confirm.ask(
            f"Resume the workout saved {format_relative_time(saved.saved_at_epoch_ms)}?",
            default=True,
        ):
            fresh = True

    if not in_progress or fresh:
        service.discard()
        template = _get_workout(name)
        plan = generate_workout_plan(template.exercises, name=template.name)
        service.save_plan(plan, source=name)
        stored = service.load_plan()

    config = get_config_service().config
    clock = SystemClock()
    engine = service.build_engine(stored, clock)
    if config.sound_enabled:
        ring_on_transition(engine, console)

    snapshot = engine.restore()
    if snapshot is None:
        engine.start()
        service.save_plan(engine.plan, engine.started_at_ms, name)
    else:
        console.print(
            f"[dim]Resuming {engine.plan.slots[snapshot.current_slot_index].name} "
            f"({PHASE_NAMES.get(snapshot.phase, snapshot.phase)})[/dim]"
        )

    display = SessionDisplay(console)
    try:
        while True:
            result = display.run(engine, clock)
            if result != RESULT_LOG_SET:
                break
            try:
                _prompt_set(engine)
            except KeyboardInterrupt:
                engine.pause()
                result = "interrupted"
                break
            if engine.is_complete:
                result = "completed"
                break
    finally:
        service.finish(engine, name)

    if result in ("stopped", "interrupted"):
        console.print("\n[yellow]Workout paused. State saved.[/yellow]")
        console.print(f"Use 'cadence workout start \"{name}\"' to continue.")
    elif result == "completed":
        show_workout_summary(
            WorkoutCompletion.from_plan(engine.plan, engine.started_at_ms, clock.now_ms()),
            console,
        )
    else:
        console.print("[yellow]Workout cancelled[/yellow]")


@app.command("status")
@command_wrapper
def workout_status(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """Show where the current workout stands."""
    status = get_session_service().status()
    if not status.in_progress:
        console.print("[dim]No workout in progress[/dim]")
        raise typer.Exit(0)

    plan = status.stored.plan
    snap = status.snapshot
    slot = plan.slots[snap.current_slot_index]
    data = {
        "workout": status.stored.source or plan.name,
        "exercise": f"{slot.name} ({snap.current_slot_index + 1}/{len(plan)})",
        "set": f"{min(snap.current_sub_index + 1, slot.sets_planned)}/{slot.sets_planned}",
        "phase": PHASE_NAMES.get(snap.phase, snap.phase),
        "sets_logged": sum(len(s.items) for s in plan.slots),
        "saved": format_relative_time(snap.saved_at_epoch_ms),
    }
    format_output(data, output, title="Workout in progress")


@app.command("cancel")
@command_wrapper
def cancel_workout(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Abandon the current workout. Logged sets are discarded."""
    service = get_session_service()
    if not service.has_session_in_progress():
        console.print("[yellow]No workout in progress[/yellow]")
        raise typer.Exit(0)
    if not yes and not Confirm.ask("Cancel the workout?", default=False):
        raise typer.Exit(0)
    service.discard()
    format_success("Workout cancelled")
