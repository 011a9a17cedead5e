"""Wires stored plans, snapshots and history into a session engine.

One :class:`SessionService` exists per session type ("focus" or "workout").
It owns the file-backed collaborators; the engine itself only sees the
injected clock, persistence and recorder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from cadence_cli.models.session.engine import SessionEngine
from cadence_cli.models.session.persistence import (
    JsonFileSnapshotRepository,
    SessionPersistence,
    Snapshot,
)
from cadence_cli.models.session.plan import Plan
from cadence_cli.models.session.recorder import CompletionRecorder
from cadence_cli.models.session.scheduler import scheduler_for
from cadence_cli.models.session.timing import Clock
from cadence_cli.services.history import HistoryLogger
from cadence_cli.services.paths import data_dir
from cadence_cli.services.plan_store import PlanStore, StoredPlan

logger = logging.getLogger(__name__)


@dataclass
class SessionStatus:
    """What ``status`` commands report without starting a clock."""

    stored: StoredPlan | None
    snapshot: Snapshot | None

    @property
    def in_progress(self) -> bool:
        return self.snapshot is not None


class SessionService:
    """Stored plan, snapshot and history for one session type."""

    def __init__(
        self,
        session_type: str,
        state_dir: Path | None = None,
        history: HistoryLogger | None = None,
    ):
        self.session_type = session_type
        self.state_dir = Path(state_dir) if state_dir else data_dir()
        self.plans = PlanStore(self.state_dir, session_type)
        self.persistence = SessionPersistence(
            JsonFileSnapshotRepository(self.state_dir, session_type)
        )
        self._history = history

    @property
    def history(self) -> HistoryLogger:
        if self._history is None:
            self._history = HistoryLogger(self.state_dir / "history.db")
        return self._history

    def load_plan(self) -> StoredPlan | None:
        return self.plans.load()

    def save_plan(self, plan: Plan, started_at_ms: int | None = None, source: str | None = None):
        self.plans.save(StoredPlan(plan=plan, started_at_ms=started_at_ms, source=source))

    def status(self) -> SessionStatus:
        """Stored plan and its snapshot, if the snapshot still matches the plan."""
        stored = self.plans.load()
        snapshot = None
        if stored is not None:
            snapshot = self.persistence.peek()
            if snapshot is not None and snapshot.plan_id != stored.plan.id:
                snapshot = None
        return SessionStatus(stored=stored, snapshot=snapshot)

    def has_session_in_progress(self) -> bool:
        return self.status().in_progress

    def build_engine(
        self,
        stored: StoredPlan,
        clock: Clock,
        auto_start: bool = False,
    ) -> SessionEngine:
        """Create an engine for *stored* that keeps the plan file up to date."""
        recorder = CompletionRecorder([self.history.record])
        engine = SessionEngine(
            stored.plan,
            scheduler_for(stored.plan, auto_start=auto_start),
            clock=clock,
            persistence=self.persistence,
            recorder=recorder,
            started_at_ms=stored.started_at_ms,
        )

        def save_plan(_event) -> None:
            if engine.is_in_progress:
                self.save_plan(engine.plan, engine.started_at_ms, stored.source)

        engine.subscribe(save_plan)
        return engine

    def finish(self, engine: SessionEngine, source: str | None = None) -> None:
        """Flush history and store the plan once the live loop has exited.

        A focus plan survives completion and cancellation so its tasks can be
        reused; a finished workout plan is dropped.
        """
        if engine.recorder is not None:
            engine.recorder.close(timeout=5)

        if engine.is_in_progress:
            self.save_plan(engine.plan, engine.started_at_ms, source)
        elif engine.plan.is_focus:
            engine.plan.reset_statuses()
            self.save_plan(engine.plan, None, source)
        else:
            self.plans.clear()

    def discard(self) -> None:
        """Drop the snapshot and, for workouts, the stored plan."""
        self.persistence.clear()
        stored = self.plans.load()
        if stored is None:
            return
        if stored.plan.is_focus:
            stored.plan.reset_statuses()
            self.save_plan(stored.plan, None, stored.source)
        else:
            self.plans.clear()
        logger.info("Discarded %s session", self.session_type)
