"""Unit tests for the live session display.

Covers layout rendering, keypress handling and the run loop with a scripted
key reader, plus the summary panels.
"""

from __future__ import annotations

from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console
from rich.layout import Layout

from cadence_cli.models.session.display import (
    RESULT_CANCELLED,
    RESULT_COMPLETED,
    RESULT_INTERRUPTED,
    RESULT_LOG_SET,
    RESULT_STOPPED,
    SessionDisplay,
    format_seconds,
    ring_on_transition,
    show_focus_summary,
    show_workout_summary,
)
from cadence_cli.models.session.engine import SessionEngine
from cadence_cli.models.session.generator import generate_focus_plan, generate_workout_plan
from cadence_cli.models.session.plan import SetRecord
from cadence_cli.models.session.recorder import WorkoutCompletion
from cadence_cli.models.session.scheduler import FocusScheduler, WorkoutScheduler


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _string_console() -> tuple[Console, StringIO]:
    buf = StringIO()
    return Console(file=buf, force_terminal=False, no_color=True, width=100), buf


def _render(console: Console, buf: StringIO, renderable) -> str:
    console.print(renderable)
    return buf.getvalue()


class ScriptedKeys:
    """Key reader that replays a fixed list of keys, then returns None."""

    def __init__(self, keys):
        self.keys = list(keys)
        self.stopped = False

    def get_key(self):
        return self.keys.pop(0) if self.keys else None

    def stop(self):
        self.stopped = True


@pytest.fixture()
def focus(clock, persistence):
    plan = generate_focus_plan(90, 25, 5, 15, 4)
    return SessionEngine(plan, FocusScheduler(), clock=clock, persistence=persistence)


@pytest.fixture()
def workout(clock, persistence):
    plan = generate_workout_plan(
        [{"name": "Squat", "sets_planned": 2, "rest_seconds": 60, "target_reps": "5"}]
    )
    return SessionEngine(plan, WorkoutScheduler(), clock=clock, persistence=persistence)


def test_format_seconds():
    assert format_seconds(0) == "00:00"
    assert format_seconds(1500) == "25:00"
    assert format_seconds(61) == "01:01"
    assert format_seconds(-5) == "00:00"


# ===========================================================================
# Layout
# ===========================================================================


class TestCreateLayout:
    def test_returns_layout_with_sections(self, focus):
        layout = SessionDisplay().create_layout(focus)
        assert isinstance(layout, Layout)
        for name in ("header", "body", "footer"):
            assert layout[name] is not None

    def test_focus_body_shows_timer_and_tasks(self, focus):
        focus.items.add_item(focus.plan.slots[0].id, "Write docs")
        focus.start()
        console, buf = _string_console()
        display = SessionDisplay(console=console)
        out = _render(console, buf, display._create_body_content(focus, focus.view()))
        assert "25:00" in out
        assert "Session 1 of 3" in out
        assert "[ ] Write docs" in out

    def test_paused_header(self, focus, clock):
        focus.start()
        clock.advance(5)
        focus.pause()
        console, buf = _string_console()
        out = _render(console, buf, SessionDisplay(console=console).create_layout(focus))
        assert "PAUSED" in out

    def test_break_label(self, focus):
        focus.start()
        focus.skip_phase()
        console, buf = _string_console()
        out = _render(
            console, buf, SessionDisplay(console=console)._create_body_content(focus, focus.view())
        )
        assert "After session 1 of 3" in out
        assert "05:00" in out

    def test_untimed_set_hint(self, workout):
        workout.start()
        console, buf = _string_console()
        display = SessionDisplay(console=console)
        out = _render(console, buf, display._create_body_content(workout, workout.view()))
        assert "Squat" in out
        assert "set 1 of 2" in out
        assert "target 5" in out
        assert "press 'l'" in out

    def test_last_set_shown(self, workout):
        workout.start()
        workout.log_set(5, 100)
        console, buf = _string_console()
        display = SessionDisplay(console=console)
        out = _render(console, buf, display._create_body_content(workout, workout.view()))
        assert "Last set: 5 reps @ 100" in out

    def test_footer_hints_depend_on_kind(self, focus, workout):
        display = SessionDisplay()
        assert "c complete" in display._create_footer_text(focus, focus.view()).plain
        workout_hints = display._create_footer_text(workout, workout.view()).plain
        assert "l log set" in workout_hints

    def test_error_message_rendered(self, focus):
        console, buf = _string_console()
        display = SessionDisplay(console=console)
        display.message = "Something went wrong"
        out = _render(console, buf, display._create_body_content(focus, focus.view()))
        assert "Something went wrong" in out


# ===========================================================================
# Key handling
# ===========================================================================


class TestHandleKey:
    def test_space_toggles(self, focus):
        display = SessionDisplay()
        assert display.handle_key(focus, " ") is None
        assert focus.running is True
        display.handle_key(focus, " ")
        assert focus.running is False

    def test_skip_and_reset(self, focus, clock):
        display = SessionDisplay()
        display.handle_key(focus, " ")
        clock.advance(10)
        display.handle_key(focus, "r")
        assert focus.remaining_seconds == 25 * 60
        display.handle_key(focus, "s")
        assert focus.phase == "short_break"

    def test_complete_last_block_returns_completed(self, clock, persistence):
        plan = generate_focus_plan(30, 25, 5, 15, 4)
        engine = SessionEngine(plan, FocusScheduler(), clock=clock, persistence=persistence)
        display = SessionDisplay()
        display.handle_key(engine, " ")
        assert display.handle_key(engine, "c") == RESULT_COMPLETED

    def test_quit_pauses(self, focus):
        display = SessionDisplay()
        display.handle_key(focus, " ")
        assert display.handle_key(focus, "q") == RESULT_STOPPED
        assert focus.running is False
        assert focus.is_in_progress

    def test_cancel(self, focus):
        display = SessionDisplay()
        display.handle_key(focus, " ")
        assert display.handle_key(focus, "x") == RESULT_CANCELLED
        assert focus.is_cancelled

    def test_session_error_becomes_message(self, focus):
        display = SessionDisplay()
        assert display.handle_key(focus, "s") is None
        assert display.message == "Session has not been started"

    def test_log_key_in_workout(self, workout):
        display = SessionDisplay()
        display.handle_key(workout, " ")
        assert display.handle_key(workout, "l") == RESULT_LOG_SET

    def test_log_key_during_rest_shows_message(self, workout):
        display = SessionDisplay()
        display.handle_key(workout, " ")
        workout.log_set(5)
        assert display.handle_key(workout, "l") is None
        assert "rest" in display.message

    def test_complete_key_ignored_for_workout(self, workout):
        display = SessionDisplay()
        display.handle_key(workout, " ")
        assert display.handle_key(workout, "c") is None
        assert workout.plan.slots[0].items == []
        assert workout.phase == "exercise_active"

    def test_log_key_ignored_for_focus(self, focus):
        display = SessionDisplay()
        display.handle_key(focus, " ")
        assert display.handle_key(focus, "l") is None

    def test_unknown_key_clears_message(self, focus):
        display = SessionDisplay()
        display.message = "old"
        display.handle_key(focus, "z")
        assert display.message is None


# ===========================================================================
# Run loop
# ===========================================================================


class TestRun:
    def test_quit_key_stops_loop(self, focus):
        console, _ = _string_console()
        keys = ScriptedKeys([" ", "q"])
        poll = MagicMock()
        result = SessionDisplay(console=console).run(
            focus, poll, key_reader_factory=lambda: keys, refresh_interval=0
        )
        assert result == RESULT_STOPPED
        assert keys.stopped is True
        assert focus.running is False

    def test_completion_detected_after_poll(self, clock, persistence):
        plan = generate_focus_plan(30, 25, 5, 15, 4)
        engine = SessionEngine(plan, FocusScheduler(), clock=clock, persistence=persistence)
        engine.start()
        console, _ = _string_console()
        poll = MagicMock()
        poll.run_pending.side_effect = lambda: clock.advance(25 * 60)

        with patch("cadence_cli.models.session.display.time.sleep"):
            result = SessionDisplay(console=console).run(
                engine, poll, key_reader_factory=lambda: ScriptedKeys([])
            )
        assert result == RESULT_COMPLETED

    def test_keyboard_interrupt_pauses(self, focus):
        focus.start()
        console, _ = _string_console()
        keys = ScriptedKeys([])
        poll = MagicMock()
        poll.run_pending.side_effect = KeyboardInterrupt
        result = SessionDisplay(console=console).run(
            focus, poll, key_reader_factory=lambda: keys
        )
        assert result == RESULT_INTERRUPTED
        assert focus.running is False
        assert keys.stopped is True


# ===========================================================================
# Bell and summaries
# ===========================================================================


def test_ring_on_transition(focus):
    console = MagicMock()
    ring_on_transition(focus, console)
    focus.items.add_item(focus.plan.slots[0].id, "Task")
    console.bell.assert_not_called()
    focus.start()
    focus.skip_phase()
    console.bell.assert_called_once()


def test_focus_summary_complete(clock, persistence):
    plan = generate_focus_plan(30, 25, 5, 15, 4)
    engine = SessionEngine(plan, FocusScheduler(), clock=clock, persistence=persistence)
    engine.items.add_item(plan.slots[0].id, "Task")
    engine.items.toggle_item(plan.slots[0].items[0].id)
    engine.start()
    engine.complete_current_unit()
    console, buf = _string_console()
    show_focus_summary(engine, console)
    out = buf.getvalue()
    assert "Focus plan complete" in out
    assert "1/1" in out
    assert "Tasks done: 1/1" in out


def test_focus_summary_stopped(focus):
    focus.start()
    console, buf = _string_console()
    show_focus_summary(focus, console)
    assert "stopped" in buf.getvalue()


def test_workout_summary():
    plan = generate_workout_plan([{"name": "Squat"}])
    plan.slots[0].items.append(SetRecord(1, 5, 100.0, 0))
    completion = WorkoutCompletion.from_plan(plan, 0, 754_000)
    console, buf = _string_console()
    show_workout_summary(completion, console)
    out = buf.getvalue()
    assert "Squat: 1 sets, volume 500" in out
    assert "12m 34s" in out
