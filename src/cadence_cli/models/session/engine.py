"""Session engine: one countdown, one plan, one scheduling strategy."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .clock import SessionClock
from .constants import PHASE_COMPLETE, PLAN_FOCUS, PLAN_WORKOUT, TICK_INTERVAL_SECONDS, Phase
from .errors import IllegalStateTransition, InvalidConfiguration, InvalidItem
from .items import ItemAssigner, ItemMutationEvent
from .persistence import SessionPersistence, Snapshot
from .plan import Plan
from .recorder import CompletionRecorder, FocusCompletion, WorkoutCompletion
from .scheduler import PhaseScheduler, SessionCursor, Transition
from .timing import Clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseTransitionNotification:
    """Sent to subscribers whenever the phase changes."""

    previous_phase: Phase
    phase: Phase
    slot_index: int


@dataclass(frozen=True)
class SessionView:
    """Read-only picture of the engine for rendering."""

    plan_id: str
    kind: str
    phase: Phase
    slot_index: int
    sub_index: int
    remaining_seconds: int
    phase_duration_seconds: int
    running: bool
    started: bool
    in_progress: bool
    complete: bool
    cancelled: bool
    slots_completed: int
    slots_total: int

    @property
    def progress(self) -> float:
        """Fraction of the current phase already elapsed (0.0 - 1.0)."""
        if self.phase_duration_seconds <= 0:
            return 0.0
        elapsed = self.phase_duration_seconds - self.remaining_seconds
        return max(0.0, min(1.0, elapsed / self.phase_duration_seconds))


SessionEvent = PhaseTransitionNotification | ItemMutationEvent
Listener = Callable[[SessionEvent], None]


class SessionEngine:
    """Drives a plan through its phases.

    The engine owns the countdown and the cursor; the scheduler decides what
    follows each phase. Every change is persisted before listeners and the
    completion recorder hear about it, and the next tick is scheduled last.

    Args:
        plan: The plan to execute. Its slot statuses and items are mutated.
        scheduler: Strategy matching ``plan.kind``.
        clock: Time source used for ticking and timestamps.
        persistence: Snapshot writer for this session type.
        recorder: Receives completion events. Optional.
        started_at_ms: When the session started, if it is being resumed.
    """

    def __init__(
        self,
        plan: Plan,
        scheduler: PhaseScheduler,
        *,
        clock: Clock,
        persistence: SessionPersistence,
        recorder: CompletionRecorder | None = None,
        started_at_ms: int | None = None,
    ):
        if not plan.slots:
            raise InvalidConfiguration("A plan needs at least one slot")
        if scheduler.kind != plan.kind:
            raise InvalidConfiguration(
                f"{type(scheduler).__name__} cannot run a {plan.kind} plan"
            )

        self._plan = plan
        self._scheduler = scheduler
        self._clock = clock
        self._persistence = persistence
        self._recorder = recorder
        self._started_at_ms = started_at_ms

        self._cursor = SessionCursor(phase=scheduler.initial_phase)
        self._countdown = SessionClock()
        self._countdown.load(scheduler.phase_duration(plan, self._cursor))
        self._tick_handle: int | None = None
        self._listeners: list[Listener] = []
        self._started = False
        self._cancelled = False
        self._items = ItemAssigner(plan, on_change=self._notify) if plan.is_focus else None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def plan(self) -> Plan:
        return self._plan

    @property
    def phase(self) -> Phase:
        return self._cursor.phase

    @property
    def current_slot_index(self) -> int:
        return self._cursor.slot_index

    @property
    def current_sub_index(self) -> int:
        return self._cursor.sub_index

    @property
    def remaining_seconds(self) -> int:
        return self._countdown.remaining_seconds

    @property
    def phase_duration_seconds(self) -> int:
        return self._countdown.phase_duration_seconds

    @property
    def running(self) -> bool:
        return self._countdown.running

    @property
    def recorder(self) -> CompletionRecorder | None:
        return self._recorder

    @property
    def started_at_ms(self) -> int | None:
        return self._started_at_ms

    @property
    def is_complete(self) -> bool:
        return self._cursor.phase == PHASE_COMPLETE

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_in_progress(self) -> bool:
        return self._started and not self.is_complete and not self._cancelled

    @property
    def items(self) -> ItemAssigner:
        """Task assignment for focus plans."""
        if self._items is None:
            raise IllegalStateTransition("Workout plans have no assignable tasks")
        return self._items

    def view(self) -> SessionView:
        return SessionView(
            plan_id=self._plan.id,
            kind=self._plan.kind,
            phase=self._cursor.phase,
            slot_index=self._cursor.slot_index,
            sub_index=self._cursor.sub_index,
            remaining_seconds=self._countdown.remaining_seconds,
            phase_duration_seconds=self._countdown.phase_duration_seconds,
            running=self._countdown.running,
            started=self._started,
            in_progress=self.is_in_progress,
            complete=self.is_complete,
            cancelled=self._cancelled,
            slots_completed=self._plan.completed_count(),
            slots_total=len(self._plan),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def restore(self) -> Snapshot | None:
        """Resume from the stored snapshot, paused. Returns None for a fresh start."""
        if self._started or self._cancelled:
            raise IllegalStateTransition("Restore is only possible before the session starts")

        snap = self._persistence.restore(self._plan, self._scheduler.phases)
        if snap is None:
            return None

        self._cursor.slot_index = snap.current_slot_index
        self._cursor.sub_index = snap.current_sub_index
        self._cursor.phase = snap.phase
        self._scheduler.apply_cursor(self._plan, self._cursor)
        self._countdown.load(
            self._scheduler.phase_duration(self._plan, self._cursor),
            snap.remaining_seconds,
        )
        self._started = True
        if self._started_at_ms is None:
            self._started_at_ms = self._earliest_set_timestamp() or self._clock.now_ms()
        logger.info(
            "Restored %s session at slot %d (%s, %ds left)",
            self._plan.kind,
            snap.current_slot_index,
            snap.phase,
            snap.remaining_seconds,
        )
        return snap

    def start(self) -> bool:
        """Begin the session or resume the countdown.

        Returns True if the countdown is now running. An untimed phase (a
        rep-based set) never runs; the session is still in progress.
        """
        self._ensure_active()
        if not self._started:
            self._scheduler.begin(self._plan, self._cursor)
            self._countdown.load(self._scheduler.phase_duration(self._plan, self._cursor))
            self._started = True
            if self._started_at_ms is None:
                self._started_at_ms = self._clock.now_ms()
            logger.info("Started %s session %s", self._plan.kind, self._plan.id)

        if self._countdown.running:
            return True
        running = self._countdown.start()
        self._persist()
        if running:
            self._schedule_tick()
        return running

    def pause(self) -> None:
        self._cancel_tick()
        self._countdown.pause()
        self._persist()

    def reset(self) -> None:
        """Put the current phase back to its full duration, paused."""
        self._ensure_active()
        self._cancel_tick()
        self._countdown.reset()
        self._persist()

    def cancel(self) -> None:
        """Abandon the session. The snapshot is removed and nothing else is allowed."""
        if self._cancelled:
            return
        self._cancel_tick()
        self._countdown.stop()
        self._cancelled = True
        self._persistence.clear()
        logger.info("Cancelled %s session %s", self._plan.kind, self._plan.id)

    def complete_current_unit(self) -> None:
        """Finish the current work block or set now, or end the current break."""
        self._ensure_in_progress()
        self._apply(
            self._scheduler.next_on_unit_complete(
                self._plan, self._cursor, self._clock.now_ms()
            )
        )

    def log_set(self, reps: int | None = None, weight: float | None = None) -> None:
        """Record the current set of a workout."""
        if self._plan.kind != PLAN_WORKOUT:
            raise IllegalStateTransition("Sets can only be logged in a workout")
        if reps is not None and (isinstance(reps, bool) or not isinstance(reps, int) or reps < 0):
            raise InvalidItem(f"reps must be a non-negative integer, got {reps!r}")
        if weight is not None and weight < 0:
            raise InvalidItem(f"weight must not be negative, got {weight!r}")
        self._ensure_in_progress()
        self._apply(
            self._scheduler.next_on_unit_complete(
                self._plan, self._cursor, self._clock.now_ms(), reps=reps, weight=weight
            )
        )

    def skip_phase(self) -> None:
        self._ensure_in_progress()
        self._apply(self._scheduler.skip(self._plan, self._cursor))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_active(self) -> None:
        if self._cancelled:
            raise IllegalStateTransition("Session was cancelled")
        if self.is_complete:
            raise IllegalStateTransition("Session is already complete")

    def _ensure_in_progress(self) -> None:
        self._ensure_active()
        if not self._started:
            raise IllegalStateTransition("Session has not been started")

    def _on_tick(self) -> None:
        if not self._countdown.running:
            self._cancel_tick()
            return
        expired = self._countdown.tick()
        if expired is None:
            self._persist()
            return
        logger.debug("Phase %s expired after %ds", self._cursor.phase, expired.phase_duration_seconds)
        self._apply(
            self._scheduler.next_on_expire(self._plan, self._cursor, self._clock.now_ms())
        )

    def _apply(self, transition: Transition) -> None:
        self._cancel_tick()
        now = self._clock.now_ms()

        if transition.finished:
            self._countdown.stop()
            self._persistence.clear()
        else:
            self._countdown.load(self._scheduler.phase_duration(self._plan, self._cursor))
            if transition.auto_start:
                self._countdown.start()
            self._persist()

        self._emit_completions(transition, now)
        logger.info(
            "Phase %s -> %s (slot %d)",
            transition.previous_phase,
            transition.phase,
            transition.slot_index,
        )
        self._notify(
            PhaseTransitionNotification(
                previous_phase=transition.previous_phase,
                phase=transition.phase,
                slot_index=transition.slot_index,
            )
        )

        if self._countdown.running:
            self._schedule_tick()

    def _emit_completions(self, transition: Transition, now: int) -> None:
        if self._recorder is None:
            return
        if self._plan.kind == PLAN_FOCUS and transition.work_completed:
            slot = self._plan.slots[transition.completed_slot_index]
            self._recorder.emit(
                FocusCompletion(
                    timestamp=now,
                    slot_index=slot.index,
                    duration_planned=(slot.planned_duration_seconds or 0) // 60,
                )
            )
        elif self._plan.kind == PLAN_WORKOUT and transition.finished:
            start = self._started_at_ms if self._started_at_ms is not None else now
            self._recorder.emit(WorkoutCompletion.from_plan(self._plan, start, now))

    def _persist(self) -> None:
        if not self.is_in_progress:
            return
        self._persistence.snapshot(
            plan_id=self._plan.id,
            current_slot_index=self._cursor.slot_index,
            current_sub_index=self._cursor.sub_index,
            phase=self._cursor.phase,
            remaining_seconds=self._countdown.remaining_seconds,
            saved_at_epoch_ms=self._clock.now_ms(),
        )

    def _notify(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", type(event).__name__)

    def _schedule_tick(self) -> None:
        if self._tick_handle is None:
            self._tick_handle = self._clock.schedule_every(TICK_INTERVAL_SECONDS, self._on_tick)

    def _cancel_tick(self) -> None:
        self._clock.cancel(self._tick_handle)
        self._tick_handle = None

    def _earliest_set_timestamp(self) -> int | None:
        stamps = [
            item.timestamp
            for slot in self._plan.slots
            if slot.is_exercise
            for item in slot.items
        ]
        return min(stamps) if stamps else None
