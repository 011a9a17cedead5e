"""Completion events and their fire-and-forget delivery."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from threading import Lock

from .plan import Plan, SetRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FocusCompletion:
    """A work block finished (not skipped)."""

    timestamp: int  # epoch milliseconds
    slot_index: int
    duration_planned: int  # minutes


@dataclass(frozen=True)
class ExerciseLog:
    slot_id: str
    name: str
    sets: tuple[SetRecord, ...] = ()

    @property
    def volume(self) -> float:
        return sum(s.volume for s in self.sets)


@dataclass(frozen=True)
class WorkoutCompletion:
    """Aggregate record of a whole workout."""

    exercise_data: tuple[ExerciseLog, ...]
    start_time: int  # epoch milliseconds
    end_time: int
    duration_seconds: int
    plan_name: str = ""

    @property
    def total_volume(self) -> float:
        return sum(log.volume for log in self.exercise_data)

    @property
    def sets_logged(self) -> int:
        return sum(len(log.sets) for log in self.exercise_data)

    @classmethod
    def from_plan(cls, plan: Plan, start_time: int, end_time: int) -> WorkoutCompletion:
        return cls(
            exercise_data=tuple(
                ExerciseLog(slot_id=slot.id, name=slot.name, sets=tuple(slot.items))
                for slot in plan.slots
            ),
            start_time=start_time,
            end_time=end_time,
            duration_seconds=max(0, (end_time - start_time) // 1000),
            plan_name=plan.name,
        )


CompletionEvent = FocusCompletion | WorkoutCompletion
Consumer = Callable[[CompletionEvent], None]


@dataclass
class CompletionRecorder:
    """Hands completion events to consumers on a background worker.

    A slow or failing consumer never blocks the engine: delivery happens on a
    single worker thread and consumer errors are only logged.
    """

    consumers: list[Consumer] = field(default_factory=list)
    _executor: ThreadPoolExecutor | None = field(default=None, init=False, repr=False)
    _pending: set[Future] = field(default_factory=set, init=False, repr=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def add_consumer(self, consumer: Consumer) -> None:
        self.consumers.append(consumer)

    def emit(self, event: CompletionEvent) -> None:
        if not self.consumers:
            return
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="cadence-recorder"
                )
            future = self._executor.submit(self._deliver, event, list(self.consumers))
            self._pending.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    @staticmethod
    def _deliver(event: CompletionEvent, consumers: list[Consumer]) -> None:
        for consumer in consumers:
            try:
                consumer(event)
            except Exception:
                logger.exception(
                    "Completion consumer %r failed for %s",
                    consumer,
                    type(event).__name__,
                )

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued deliveries. Returns False if the timeout expired."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self, timeout: float | None = None) -> None:
        self.flush(timeout)
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)
