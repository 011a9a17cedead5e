"""Focus mode commands: plan a block of Pomodoro sessions and run it full screen."""

import typer
from rich.prompt import Confirm
from rich.markup import escape
from rich.table import Table

from cadence_cli.commands.decorators import AppError, command_wrapper
from cadence_cli.models.config_models import FocusSettings
from cadence_cli.models.session.display import (
    SessionDisplay,
    ring_on_transition,
    show_focus_summary,
)
from cadence_cli.models.session.generator import generate_focus_plan_from_config
from cadence_cli.models.session.items import ItemAssigner
from cadence_cli.models.session.plan import FocusTask, Plan
from cadence_cli.models.session.timing import SystemClock
from cadence_cli.services.config_service import get_config_service
from cadence_cli.services.plan_store import StoredPlan
from cadence_cli.services.session_service import SessionService
from cadence_cli.utils import exit_codes
from cadence_cli.utils.ui.console import get_console
from cadence_cli.utils.ui.formatters import (
    OUTPUT_FORMATS,
    format_output,
    format_relative_time,
    format_success,
)

console = get_console()
app = typer.Typer(help="Focus timer with planned work sessions and breaks")
task_app = typer.Typer(help="Assign tasks to focus sessions")
app.add_typer(task_app, name="task")

PHASE_NAMES = {
    "work_focus": "Focus",
    "short_break": "Short break",
    "long_break": "Long break",
}


def get_session_service() -> SessionService:
    return SessionService("focus")


def _load_stored(service: SessionService) -> StoredPlan:
    stored = service.load_plan()
    if stored is None:
        raise AppError(
            "No focus plan yet. Create one with 'cadence focus plan'.",
            exit_codes.ERROR_NOT_FOUND,
        )
    return stored


def _resolve_task(assigner: ItemAssigner, task_ref: str) -> FocusTask:
    """Find a task by id or unique id prefix."""
    matches = [task for task in assigner.all_items() if task.id.startswith(task_ref)]
    if not matches:
        raise AppError(f"Task '{task_ref}' not found", exit_codes.ERROR_NOT_FOUND)
    if len(matches) > 1:
        raise AppError(
            f"Task id '{task_ref}' is ambiguous; use more characters",
            exit_codes.ERROR_INVALID_ARGS,
        )
    return matches[0]


def _short_ids(plan: Plan) -> dict[str, str]:
    """Shortest prefix (at least 4 chars) that identifies each task."""
    ids = [task.id for slot in plan.slots for task in slot.items]
    result = {}
    for task_id in ids:
        for length in range(4, len(task_id) + 1):
            prefix = task_id[:length]
            if not any(other != task_id and other.startswith(prefix) for other in ids):
                result[task_id] = prefix
                break
        else:
            result[task_id] = task_id
    return result


def _render_plan(plan: Plan) -> None:
    short = _short_ids(plan)
    table = Table(title=plan.name or "Focus plan", header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Status")
    table.add_column("Tasks")
    for slot in plan.slots:
        tasks = "\n".join(
            f"{escape('[x]' if t.done else '[ ]')} {escape(t.text)} [dim]({short[t.id]})[/dim]"
            for t in slot.items
        )
        table.add_row(
            str(slot.index + 1),
            str((slot.planned_duration_seconds or 0) // 60),
            slot.status,
            tasks or "[dim]-[/dim]",
        )
    console.print(table)
    console.print(
        f"[dim]Breaks: {plan.break_minutes} min, long break {plan.long_break_minutes} min "
        f"after every {plan.sessions_until_long_break} sessions[/dim]"
    )


@app.command("plan")
@command_wrapper
def plan_focus(
    hours: float = typer.Option(None, "--hours", "-H", help="Time available in hours"),
    minutes: int = typer.Option(None, "--minutes", "-m", help="Time available in minutes"),
    preset: str = typer.Option(
        None, "--preset", "-p", help="Work/break preset (classic, extended)"
    ),
    work: int = typer.Option(None, "--work", help="Minutes per work session"),
    break_minutes: int = typer.Option(None, "--break", help="Minutes per short break"),
    long_break: int = typer.Option(None, "--long-break", help="Minutes per long break"),
    every: int = typer.Option(
        None, "--every", help="Sessions until a long break"
    ),
):
    """Generate a focus plan from the time you have."""
    service = get_session_service()
    if service.has_session_in_progress():
        raise AppError(
            "A focus session is in progress. Finish it or run 'cadence focus cancel'.",
            exit_codes.ERROR_INVALID_STATE,
        )

    config = get_config_service().config
    settings = config.focus.model_dump()

    if preset:
        presets = config.get_presets()
        if preset not in presets:
            raise AppError(
                f"Unknown preset '{preset}'. Available: {', '.join(presets)}",
                exit_codes.ERROR_INVALID_ARGS,
            )
        chosen = presets[preset]
        settings.update(
            work_minutes=chosen.work_minutes,
            break_minutes=chosen.break_minutes,
            long_break_minutes=chosen.long_break_minutes,
        )

    if hours is not None:
        settings["total_minutes"] = int(round(hours * 60))
    if minutes is not None:
        settings["total_minutes"] = minutes
    overrides = {
        "work_minutes": work,
        "break_minutes": break_minutes,
        "long_break_minutes": long_break,
        "sessions_until_long_break": every,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    # Range checks happen in the generator
    plan = generate_focus_plan_from_config(FocusSettings.model_construct(**settings))

    previous = service.load_plan()
    if previous and any(slot.items for slot in previous.plan.slots):
        if not Confirm.ask("Replace the current plan and its tasks?", default=False):
            raise typer.Exit(0)

    service.persistence.clear()
    service.save_plan(plan)
    format_success(f"Planned {plan.name}")
    _render_plan(plan)


@app.command("show")
@command_wrapper
def show_plan(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """Show the current focus plan and its tasks."""
    plan = _load_stored(get_session_service()).plan
    if output in OUTPUT_FORMATS and output not in ("pretty", "table"):
        format_output(plan.to_dict(), output)
        return
    _render_plan(plan)


@task_app.command("add")
@command_wrapper
def add_task(
    session: int = typer.Argument(..., help="Session number (1-based)"),
    text: str = typer.Argument(..., help="Task description"),
):
    """Add a task to a focus session."""
    service = get_session_service()
    stored = _load_stored(service)
    plan = stored.plan
    if session < 1 or session > len(plan):
        raise AppError(
            f"Session must be between 1 and {len(plan)}", exit_codes.ERROR_INVALID_ARGS
        )
    task = ItemAssigner(plan).add_item(plan.slots[session - 1].id, text)
    service.save_plan(plan, stored.started_at_ms, stored.source)
    format_success(f"Added '{task.text}' to session {session} ({task.id[:8]})")


@task_app.command("move")
@command_wrapper
def move_task(
    task_ref: str = typer.Argument(..., help="Task id or id prefix"),
    direction: str = typer.Argument(..., help="up (earlier session) or down (later)"),
):
    """Move a task to the previous or next session."""
    if direction not in ("up", "down"):
        raise AppError("Direction must be 'up' or 'down'", exit_codes.ERROR_INVALID_ARGS)

    service = get_session_service()
    stored = _load_stored(service)
    plan = stored.plan
    assigner = ItemAssigner(plan)
    task = _resolve_task(assigner, task_ref)
    source, _ = assigner.find(task.id)

    target = assigner.move_item(task.id, source.id, -1 if direction == "up" else 1)
    if target is None or target.id == source.id:
        console.print(f"[yellow]'{task.text}' is already in session {source.index + 1}[/yellow]")
        return
    service.save_plan(plan, stored.started_at_ms, stored.source)
    format_success(f"Moved '{task.text}' to session {target.index + 1}")


@task_app.command("toggle")
@command_wrapper
def toggle_task(task_ref: str = typer.Argument(..., help="Task id or id prefix")):
    """Mark a task done or not done."""
    service = get_session_service()
    stored = _load_stored(service)
    plan = stored.plan
    assigner = ItemAssigner(plan)
    task = assigner.toggle_item(_resolve_task(assigner, task_ref).id)
    service.save_plan(plan, stored.started_at_ms, stored.source)
    format_success(f"'{task.text}' marked {'done' if task.done else 'not done'}")


@task_app.command("delete")
@command_wrapper
def delete_task(task_ref: str = typer.Argument(..., help="Task id or id prefix")):
    """Remove a task from the plan."""
    service = get_session_service()
    stored = _load_stored(service)
    plan = stored.plan
    assigner = ItemAssigner(plan)
    task = _resolve_task(assigner, task_ref)
    assigner.delete_item(task.id)
    service.save_plan(plan, stored.started_at_ms, stored.source)
    format_success(f"Deleted '{task.text}'")


@app.command("start")
@command_wrapper
def start_focus():
    """Run the focus plan in a full-screen timer, resuming a saved session."""
    service = get_session_service()
    stored = _load_stored(service)

    config = get_config_service().config
    clock = SystemClock()
    engine = service.build_engine(
        stored, clock, auto_start=config.focus.auto_start_next_phase
    )
    if config.sound_enabled:
        ring_on_transition(engine, console)

    snapshot = engine.restore()
    if snapshot:
        console.print(
            f"[dim]Resuming session {snapshot.current_slot_index + 1} "
            f"({PHASE_NAMES.get(snapshot.phase, snapshot.phase)}), "
            f"saved {format_relative_time(snapshot.saved_at_epoch_ms)}[/dim]"
        )
    else:
        engine.start()
        service.save_plan(engine.plan, engine.started_at_ms, stored.source)

    try:
        result = SessionDisplay(console).run(engine, clock)
    finally:
        service.finish(engine, stored.source)

    if result in ("stopped", "interrupted"):
        console.print("\n[yellow]Session paused. State saved.[/yellow]")
        console.print("Use 'cadence focus start' to continue.")
        return
    show_focus_summary(engine, console)


@app.command("status")
@command_wrapper
def focus_status(
    output: str = typer.Option("pretty", "--output", "-o", help="pretty, json or yaml"),
):
    """Show where the current focus session stands."""
    status = get_session_service().status()
    if status.stored is None:
        console.print("[dim]No focus plan[/dim]")
        raise typer.Exit(0)

    plan = status.stored.plan
    data = {
        "plan": plan.name,
        "sessions": len(plan),
        "in_progress": status.in_progress,
    }
    if status.snapshot:
        snap = status.snapshot
        data.update(
            session=snap.current_slot_index + 1,
            phase=PHASE_NAMES.get(snap.phase, snap.phase),
            remaining=f"{snap.remaining_seconds // 60}:{snap.remaining_seconds % 60:02d}",
            saved=format_relative_time(snap.saved_at_epoch_ms),
        )
    format_output(data, output, title="Focus session")


@app.command("cancel")
@command_wrapper
def cancel_focus(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Abandon the current focus session. The plan and its tasks are kept."""
    service = get_session_service()
    if not service.has_session_in_progress():
        console.print("[yellow]No focus session in progress[/yellow]")
        raise typer.Exit(0)
    if not yes and not Confirm.ask("Cancel the focus session?", default=False):
        raise typer.Exit(0)
    service.discard()
    format_success("Focus session cancelled")
