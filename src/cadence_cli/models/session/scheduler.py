"""Phase scheduling strategies for focus and workout sessions.

A scheduler decides what comes next when the countdown expires or the user
completes a unit of work. It mutates the :class:`SessionCursor` and slot
statuses and reports the outcome as a :class:`Transition`; the engine takes
care of the clock, persistence and notifications.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .constants import (
    BREAK_PHASES,
    FOCUS_PHASES,
    PHASE_COMPLETE,
    PHASE_EXERCISE_ACTIVE,
    PHASE_LONG_BREAK,
    PHASE_REST_BETWEEN_SETS,
    PHASE_SHORT_BREAK,
    PHASE_WORK_FOCUS,
    PLAN_FOCUS,
    PLAN_WORKOUT,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PENDING,
    WORKOUT_PHASES,
    Phase,
    PlanKind,
)
from .errors import IllegalStateTransition
from .plan import Plan, SetRecord


@dataclass
class SessionCursor:
    """Position of a running session inside its plan."""

    slot_index: int = 0
    sub_index: int = 0
    phase: Phase = PHASE_WORK_FOCUS


@dataclass(frozen=True)
class Transition:
    """Outcome of a scheduling decision."""

    previous_phase: Phase
    phase: Phase
    slot_index: int
    completed_slot_index: int | None = None
    work_completed: bool = False
    finished: bool = False
    auto_start: bool = False
    set_record: SetRecord | None = None


class PhaseScheduler(ABC):
    """Strategy interface shared by the focus and workout state machines."""

    kind: PlanKind
    phases: frozenset[str]
    initial_phase: Phase

    def begin(self, plan: Plan, cursor: SessionCursor) -> None:
        """Enter the first phase of slot 0."""
        plan.reset_statuses()
        cursor.slot_index = 0
        cursor.sub_index = 0
        cursor.phase = self.initial_phase
        plan.slots[0].status = STATUS_ACTIVE

    def apply_cursor(self, plan: Plan, cursor: SessionCursor) -> None:
        """Rebuild slot statuses from a restored cursor."""
        for slot in plan.slots:
            if slot.index < cursor.slot_index:
                slot.status = STATUS_COMPLETED
            elif slot.index > cursor.slot_index:
                slot.status = STATUS_PENDING
            elif self._cursor_slot_done(cursor):
                slot.status = STATUS_COMPLETED
            else:
                slot.status = STATUS_ACTIVE

    def _cursor_slot_done(self, cursor: SessionCursor) -> bool:
        return False

    @abstractmethod
    def phase_duration(self, plan: Plan, cursor: SessionCursor) -> int:
        """Planned seconds of the current phase; 0 for an untimed phase."""

    @abstractmethod
    def next_on_expire(self, plan: Plan, cursor: SessionCursor, now_ms: int) -> Transition:
        """The countdown of the current phase reached zero."""

    @abstractmethod
    def next_on_unit_complete(
        self,
        plan: Plan,
        cursor: SessionCursor,
        now_ms: int,
        reps: int | None = None,
        weight: float | None = None,
    ) -> Transition:
        """The user completed the current unit of work."""

    @abstractmethod
    def skip(self, plan: Plan, cursor: SessionCursor) -> Transition:
        """The user skipped the current phase."""

    def _guard(self, cursor: SessionCursor) -> None:
        if cursor.phase == PHASE_COMPLETE:
            raise IllegalStateTransition("Session is already complete")

    def _finish(self, cursor: SessionCursor, previous: Phase, **kwargs) -> Transition:
        cursor.phase = PHASE_COMPLETE
        return Transition(
            previous_phase=previous,
            phase=PHASE_COMPLETE,
            slot_index=cursor.slot_index,
            finished=True,
            **kwargs,
        )


class FocusScheduler(PhaseScheduler):
    """Work blocks separated by short breaks, with a long break every N blocks."""

    kind = PLAN_FOCUS
    phases = FOCUS_PHASES
    initial_phase = PHASE_WORK_FOCUS

    def __init__(self, auto_start: bool = False):
        self.auto_start = auto_start

    def _cursor_slot_done(self, cursor: SessionCursor) -> bool:
        # During a break the cursor still points at the slot just finished
        return cursor.phase in BREAK_PHASES

    def break_phase_after(self, plan: Plan, completed_work: int) -> Phase:
        """Break kind following the *completed_work*-th work block (1-based)."""
        if completed_work % plan.sessions_until_long_break == 0:
            return PHASE_LONG_BREAK
        return PHASE_SHORT_BREAK

    def phase_duration(self, plan: Plan, cursor: SessionCursor) -> int:
        if cursor.phase == PHASE_WORK_FOCUS:
            return plan.slots[cursor.slot_index].planned_duration_seconds or 0
        if cursor.phase == PHASE_SHORT_BREAK:
            return plan.break_minutes * 60
        if cursor.phase == PHASE_LONG_BREAK:
            return plan.long_break_minutes * 60
        return 0

    def next_on_expire(self, plan: Plan, cursor: SessionCursor, now_ms: int) -> Transition:
        self._guard(cursor)
        if cursor.phase == PHASE_WORK_FOCUS:
            return self._finish_work(plan, cursor, skipped=False)
        return self._end_break(plan, cursor)

    def next_on_unit_complete(
        self,
        plan: Plan,
        cursor: SessionCursor,
        now_ms: int,
        reps: int | None = None,
        weight: float | None = None,
    ) -> Transition:
        return self.next_on_expire(plan, cursor, now_ms)

    def skip(self, plan: Plan, cursor: SessionCursor) -> Transition:
        self._guard(cursor)
        if cursor.phase == PHASE_WORK_FOCUS:
            return self._finish_work(plan, cursor, skipped=True)
        return self._end_break(plan, cursor)

    def _finish_work(self, plan: Plan, cursor: SessionCursor, skipped: bool) -> Transition:
        previous = cursor.phase
        index = cursor.slot_index
        plan.slots[index].status = STATUS_COMPLETED

        if index >= len(plan.slots) - 1:
            # The last block never gets a trailing break
            return self._finish(
                cursor,
                previous,
                completed_slot_index=index,
                work_completed=not skipped,
            )

        cursor.phase = self.break_phase_after(plan, index + 1)
        return Transition(
            previous_phase=previous,
            phase=cursor.phase,
            slot_index=index,
            completed_slot_index=index,
            work_completed=not skipped,
            auto_start=self.auto_start,
        )

    def _end_break(self, plan: Plan, cursor: SessionCursor) -> Transition:
        previous = cursor.phase
        next_index = cursor.slot_index + 1
        if next_index >= len(plan.slots):
            return self._finish(cursor, previous)

        cursor.slot_index = next_index
        cursor.sub_index = 0
        cursor.phase = PHASE_WORK_FOCUS
        plan.slots[next_index].status = STATUS_ACTIVE
        return Transition(
            previous_phase=previous,
            phase=PHASE_WORK_FOCUS,
            slot_index=next_index,
            auto_start=self.auto_start,
        )


class WorkoutScheduler(PhaseScheduler):
    """Sets of each exercise in order, with optional rest between them."""

    kind = PLAN_WORKOUT
    phases = WORKOUT_PHASES
    initial_phase = PHASE_EXERCISE_ACTIVE

    def rest_seconds(self, plan: Plan, cursor: SessionCursor) -> int:
        """Rest owed by the set just logged.

        Crossing into a new exercise rests for the finished exercise's time.
        """
        if cursor.sub_index == 0 and cursor.slot_index > 0:
            return plan.slots[cursor.slot_index - 1].rest_seconds
        return plan.slots[cursor.slot_index].rest_seconds

    def phase_duration(self, plan: Plan, cursor: SessionCursor) -> int:
        if cursor.phase == PHASE_EXERCISE_ACTIVE:
            return plan.slots[cursor.slot_index].planned_duration_seconds or 0
        if cursor.phase == PHASE_REST_BETWEEN_SETS:
            return self.rest_seconds(plan, cursor)
        return 0

    def next_on_expire(self, plan: Plan, cursor: SessionCursor, now_ms: int) -> Transition:
        self._guard(cursor)
        if cursor.phase == PHASE_EXERCISE_ACTIVE:
            # A timed set ran out: log it without reps or weight
            return self.next_on_unit_complete(plan, cursor, now_ms)
        return self._end_rest(cursor)

    def next_on_unit_complete(
        self,
        plan: Plan,
        cursor: SessionCursor,
        now_ms: int,
        reps: int | None = None,
        weight: float | None = None,
    ) -> Transition:
        self._guard(cursor)
        if cursor.phase != PHASE_EXERCISE_ACTIVE:
            raise IllegalStateTransition("Cannot log a set while resting")

        previous = cursor.phase
        slot = plan.slots[cursor.slot_index]
        record = SetRecord(
            set_number=len(slot.items) + 1,
            reps=reps,
            weight=None if slot.is_bodyweight else weight,
            timestamp=now_ms,
        )
        slot.items.append(record)

        if len(slot.items) < slot.sets_planned:
            cursor.sub_index = len(slot.items)
            return self._rest_or_continue(plan, cursor, previous, record)

        slot.status = STATUS_COMPLETED
        if cursor.slot_index + 1 < len(plan.slots):
            cursor.slot_index += 1
            cursor.sub_index = 0
            plan.slots[cursor.slot_index].status = STATUS_ACTIVE
            return self._rest_or_continue(
                plan, cursor, previous, record, completed_slot_index=slot.index
            )

        return self._finish(
            cursor, previous, completed_slot_index=slot.index, set_record=record
        )

    def skip(self, plan: Plan, cursor: SessionCursor) -> Transition:
        self._guard(cursor)
        if cursor.phase != PHASE_REST_BETWEEN_SETS:
            raise IllegalStateTransition("Only rest can be skipped")
        return self._end_rest(cursor)

    def _rest_or_continue(
        self,
        plan: Plan,
        cursor: SessionCursor,
        previous: Phase,
        record: SetRecord,
        completed_slot_index: int | None = None,
    ) -> Transition:
        # Zero rest never produces an observable rest phase
        resting = self.rest_seconds(plan, cursor) > 0
        cursor.phase = PHASE_REST_BETWEEN_SETS if resting else PHASE_EXERCISE_ACTIVE
        return Transition(
            previous_phase=previous,
            phase=cursor.phase,
            slot_index=cursor.slot_index,
            completed_slot_index=completed_slot_index,
            auto_start=resting,
            set_record=record,
        )

    def _end_rest(self, cursor: SessionCursor) -> Transition:
        previous = cursor.phase
        cursor.phase = PHASE_EXERCISE_ACTIVE
        return Transition(
            previous_phase=previous,
            phase=PHASE_EXERCISE_ACTIVE,
            slot_index=cursor.slot_index,
        )


def scheduler_for(plan: Plan, auto_start: bool = False) -> PhaseScheduler:
    """Pick the strategy matching the plan kind."""
    if plan.kind == PLAN_FOCUS:
        return FocusScheduler(auto_start=auto_start)
    return WorkoutScheduler()
