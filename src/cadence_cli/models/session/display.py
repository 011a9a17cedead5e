"""Full-screen live display for focus and workout sessions."""

from __future__ import annotations

import time
from collections.abc import Callable

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .constants import (
    PHASE_COMPLETE,
    PHASE_EXERCISE_ACTIVE,
    PHASE_LONG_BREAK,
    PHASE_REST_BETWEEN_SETS,
    PHASE_SHORT_BREAK,
    PHASE_WORK_FOCUS,
)
from .engine import PhaseTransitionNotification, SessionEngine, SessionView
from .errors import SessionError
from .keyboard import open_key_reader
from .recorder import WorkoutCompletion
from .timing import SystemClock

PHASE_STYLES = {
    PHASE_WORK_FOCUS: ("🍅", "FOCUS", "cyan"),
    PHASE_SHORT_BREAK: ("☕", "SHORT BREAK", "green"),
    PHASE_LONG_BREAK: ("🌴", "LONG BREAK", "green"),
    PHASE_EXERCISE_ACTIVE: ("💪", "EXERCISE", "cyan"),
    PHASE_REST_BETWEEN_SETS: ("⏱️ ", "REST", "yellow"),
    PHASE_COMPLETE: ("✓", "COMPLETE", "green"),
}

# Values returned by SessionDisplay.run
RESULT_COMPLETED = "completed"
RESULT_CANCELLED = "cancelled"
RESULT_STOPPED = "stopped"
RESULT_INTERRUPTED = "interrupted"
RESULT_LOG_SET = "log"


def format_seconds(seconds: int) -> str:
    mins, secs = divmod(max(0, seconds), 60)
    return f"{mins:02d}:{secs:02d}"


class SessionDisplay:
    """Renders a :class:`SessionEngine` and feeds it keyboard commands."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.message: str | None = None

    def create_layout(self, engine: SessionEngine) -> Layout:
        view = engine.view()
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        emoji, title, color = PHASE_STYLES[view.phase]
        if view.in_progress and not view.running and view.phase_duration_seconds:
            title = f"{title} (PAUSED)"
            color = "yellow"
        header_text = Text(f"{emoji}  {title}", style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))

        layout["body"].update(
            Align.center(self._create_body_content(engine, view), vertical="middle")
        )
        layout["footer"].update(
            Align.center(self._create_footer_text(engine, view), vertical="middle")
        )
        return layout

    def _create_body_content(self, engine: SessionEngine, view: SessionView) -> Group:
        components = []
        slot = engine.plan.slots[view.slot_index]

        if engine.plan.is_focus:
            label = f"Session {view.slot_index + 1} of {view.slots_total}"
            if view.phase in (PHASE_SHORT_BREAK, PHASE_LONG_BREAK):
                label = f"After session {view.slot_index + 1} of {view.slots_total}"
        else:
            label = f"{slot.name}  ·  set {min(view.sub_index + 1, slot.sets_planned)} of {slot.sets_planned}"
            if slot.target_reps and slot.reps_or_time == "reps":
                label += f"  ·  target {slot.target_reps}"
        components.append(Text(label, style="bold white", justify="center"))
        components.append(Text(""))

        if view.phase_duration_seconds:
            remaining = view.remaining_seconds
            if not view.running:
                timer_color = "yellow"
            elif remaining < 60:
                timer_color = "red"
            else:
                timer_color = "cyan"
            components.append(
                Text(format_seconds(remaining), style=f"bold {timer_color}", justify="center")
            )
            components.append(Text(""))

            bar_width = 40
            progress_pct = int(view.progress * 100)
            filled = int(bar_width * view.progress)
            progress_text = Text(justify="center")
            progress_text.append(
                "▓" * filled + "░" * (bar_width - filled) + f"  {progress_pct}%",
                style="dim",
            )
            components.append(progress_text)
        elif view.phase == PHASE_EXERCISE_ACTIVE:
            components.append(
                Text("Untimed set: press 'l' when done", style="bold cyan", justify="center")
            )

        if engine.plan.is_focus and view.phase == PHASE_WORK_FOCUS and slot.items:
            components.append(Text(""))
            for task in slot.items:
                mark = "[x]" if task.done else "[ ]"
                style = "dim strike" if task.done else "white"
                components.append(Text(f"{mark} {task.text}", style=style, justify="center"))

        if not engine.plan.is_focus and slot.items:
            last = slot.items[-1]
            detail = f"Last set: {last.reps if last.reps is not None else '-'} reps"
            if last.weight is not None:
                detail += f" @ {last.weight:g}"
            components.append(Text(""))
            components.append(Text(detail, style="dim", justify="center"))

        components.append(Text(""))
        components.append(
            Text(
                f"{view.slots_completed}/{view.slots_total} completed",
                style="dim",
                justify="center",
            )
        )

        if self.message:
            components.append(Text(self.message, style="red", justify="center"))

        return Group(*components)

    def _create_footer_text(self, engine: SessionEngine, view: SessionView) -> Text:
        start_hint = "pause" if view.running else "start"
        if engine.plan.is_focus:
            hints = (
                f"space {start_hint}  •  r reset  •  c complete  •  s skip  •  "
                "q quit  •  x cancel"
            )
        else:
            hints = (
                f"space {start_hint}  •  l log set  •  s skip rest  •  r reset  •  "
                "q quit  •  x cancel"
            )
        return Text(hints, style="dim", justify="center")

    def handle_key(self, engine: SessionEngine, key: str) -> str | None:
        """Apply one keypress. Returns a result string when the loop should exit."""
        self.message = None
        try:
            if key == " ":
                if engine.running:
                    engine.pause()
                else:
                    engine.start()
            elif key == "r":
                engine.reset()
            elif key == "c" and engine.plan.is_focus:
                engine.complete_current_unit()
            elif key == "s":
                engine.skip_phase()
            elif key == "l" and not engine.plan.is_focus:
                if engine.phase != PHASE_EXERCISE_ACTIVE:
                    self.message = "Skip or finish the rest before logging a set"
                    return None
                engine.pause()
                return RESULT_LOG_SET
            elif key == "q":
                engine.pause()
                return RESULT_STOPPED
            elif key == "x":
                engine.cancel()
                return RESULT_CANCELLED
        except SessionError as e:
            self.message = str(e)
        if engine.is_complete:
            return RESULT_COMPLETED
        return None

    def run(
        self,
        engine: SessionEngine,
        clock: SystemClock,
        key_reader_factory: Callable = open_key_reader,
        refresh_interval: float = 0.1,
    ) -> str:
        """Drive the engine until the session ends or the user leaves.

        Returns 'completed', 'cancelled', 'stopped', 'interrupted' or 'log'.
        """
        keyboard = key_reader_factory()
        try:
            with Live(
                self.create_layout(engine),
                console=self.console,
                refresh_per_second=4,
                screen=True,
            ) as live:
                while True:
                    key = keyboard.get_key()
                    if key:
                        result = self.handle_key(engine, key)
                        if result:
                            return result

                    clock.run_pending()
                    if engine.is_complete:
                        live.update(self.create_layout(engine))
                        time.sleep(1)
                        return RESULT_COMPLETED

                    live.update(self.create_layout(engine))
                    time.sleep(refresh_interval)

        except KeyboardInterrupt:
            engine.pause()
            return RESULT_INTERRUPTED
        finally:
            keyboard.stop()


def ring_on_transition(engine: SessionEngine, console: Console) -> None:
    """Sound the terminal bell whenever the phase changes."""

    def ring(event) -> None:
        if isinstance(event, PhaseTransitionNotification):
            console.bell()

    engine.subscribe(ring)


def show_focus_summary(engine: SessionEngine, console: Console | None = None):
    """Panel shown after a focus session ends."""
    console = console or Console()
    plan = engine.plan
    done = plan.completed_count()
    tasks = [t for slot in plan.slots for t in slot.items]
    finished_tasks = sum(1 for t in tasks if t.done)

    if engine.is_complete:
        heading = "[bold green]🎉 Focus plan complete![/bold green]"
        border = "green"
    else:
        heading = "[yellow]Focus session stopped[/yellow]"
        border = "yellow"

    console.print(
        Panel(
            f"""{heading}

Sessions: {done}/{len(plan)} × {plan.work_minutes} minutes
Tasks done: {finished_tasks}/{len(tasks)}""",
            border_style=border,
            padding=(1, 2),
        )
    )


def show_workout_summary(completion: WorkoutCompletion, console: Console | None = None):
    """Panel shown after a workout is finished."""
    console = console or Console()
    minutes, seconds = divmod(completion.duration_seconds, 60)
    lines = [
        f"  {log.name}: {len(log.sets)} sets"
        + (f", volume {log.volume:g}" if log.volume else "")
        for log in completion.exercise_data
    ]
    console.print(
        Panel(
            "[bold green]🎉 Workout complete![/bold green]\n\n"
            + "\n".join(lines)
            + f"\n\nDuration: {minutes}m {seconds:02d}s"
            + f"\nTotal volume: {completion.total_volume:g}",
            border_style="green",
            padding=(1, 2),
        )
    )
