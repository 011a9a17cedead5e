"""Phase, status and action constants shared by the session engine."""

from __future__ import annotations

from typing import Literal

Phase = Literal[
    "work_focus",
    "short_break",
    "long_break",
    "exercise_active",
    "rest_between_sets",
    "complete",
]
PlanKind = Literal["focus", "workout"]
SlotKind = Literal["work", "exercise"]
SlotStatus = Literal["pending", "active", "completed"]
RepsOrTime = Literal["reps", "time"]

PHASE_WORK_FOCUS = "work_focus"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"
PHASE_EXERCISE_ACTIVE = "exercise_active"
PHASE_REST_BETWEEN_SETS = "rest_between_sets"
PHASE_COMPLETE = "complete"

FOCUS_PHASES: frozenset[str] = frozenset(
    {PHASE_WORK_FOCUS, PHASE_SHORT_BREAK, PHASE_LONG_BREAK, PHASE_COMPLETE}
)
WORKOUT_PHASES: frozenset[str] = frozenset(
    {PHASE_EXERCISE_ACTIVE, PHASE_REST_BETWEEN_SETS, PHASE_COMPLETE}
)
BREAK_PHASES: frozenset[str] = frozenset(
    {PHASE_SHORT_BREAK, PHASE_LONG_BREAK, PHASE_REST_BETWEEN_SETS}
)

PLAN_FOCUS = "focus"
PLAN_WORKOUT = "workout"

SLOT_WORK = "work"
SLOT_EXERCISE = "exercise"

STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

ITEM_ADDED = "added"
ITEM_MOVED = "moved"
ITEM_TOGGLED = "toggled"
ITEM_DELETED = "deleted"

TICK_INTERVAL_SECONDS = 1.0
