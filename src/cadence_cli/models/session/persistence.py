"""Snapshot persistence for resuming interrupted sessions."""

from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import PHASE_COMPLETE, PHASE_EXERCISE_ACTIVE, PHASE_REST_BETWEEN_SETS, Phase
from .plan import Plan

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """The entire resumable state of a session. Nothing else is stored."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    plan_id: str = Field(..., min_length=1)
    current_slot_index: int = Field(..., ge=0)
    current_sub_index: int = Field(..., ge=0)
    phase: Phase
    remaining_seconds: int = Field(..., ge=0)
    saved_at_epoch_ms: int = Field(..., ge=0)


class SnapshotRepository(ABC):
    """Stores a single serialized snapshot blob."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored blob, or None if nothing is stored."""

    @abstractmethod
    def save(self, blob: str) -> None:
        """Overwrite the stored blob."""

    @abstractmethod
    def clear(self) -> None:
        """Delete the stored blob. No error if it does not exist."""


class InMemorySnapshotRepository(SnapshotRepository):
    """Keeps the blob in memory. Useful for tests and embedding."""

    def __init__(self, blob: str | None = None):
        self.blob = blob
        self.writes = 0

    def load(self) -> str | None:
        return self.blob

    def save(self, blob: str) -> None:
        self.blob = blob
        self.writes += 1

    def clear(self) -> None:
        self.blob = None


class JsonFileSnapshotRepository(SnapshotRepository):
    """One JSON file per session type, replaced atomically on every write."""

    def __init__(self, state_dir: Path, session_type: str):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file = self.state_dir / f"{session_type}_session.json"

    def load(self) -> str | None:
        if not self.state_file.exists():
            return None
        return self.state_file.read_text(encoding="utf-8")

    def save(self, blob: str) -> None:
        fd, tmp_path = tempfile.mkstemp(
            dir=self.state_dir, prefix=f".{self.state_file.stem}-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.state_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.state_file.unlink(missing_ok=True)


class SessionPersistence:
    """Writes, validates and clears the snapshot of one engine instance.

    Neither writing nor restoring ever raises: a failed write costs at most
    one tick of progress, and an unreadable snapshot means a fresh start.
    """

    def __init__(self, repository: SnapshotRepository):
        self.repository = repository

    def snapshot(
        self,
        plan_id: str,
        current_slot_index: int,
        current_sub_index: int,
        phase: Phase,
        remaining_seconds: int,
        saved_at_epoch_ms: int,
    ) -> Snapshot:
        snap = Snapshot(
            plan_id=plan_id,
            current_slot_index=current_slot_index,
            current_sub_index=current_sub_index,
            phase=phase,
            remaining_seconds=remaining_seconds,
            saved_at_epoch_ms=saved_at_epoch_ms,
        )
        try:
            self.repository.save(snap.model_dump_json())
        except OSError as e:
            logger.error("Failed to write session snapshot: %s", e)
        return snap

    def peek(self) -> Snapshot | None:
        """Parse the stored snapshot without checking it against a plan."""
        try:
            blob = self.repository.load()
        except OSError as e:
            logger.warning("Could not read session snapshot: %s", e)
            return None
        if not blob:
            return None
        try:
            return Snapshot.model_validate_json(blob)
        except (ValidationError, ValueError) as e:
            logger.warning("Discarding unreadable session snapshot: %s", e)
            return None

    def restore(self, plan: Plan, phases: frozenset[str]) -> Snapshot | None:
        """Return the stored snapshot if it belongs to *plan*, else None.

        Invalid snapshots are cleared so they are not offered again.
        """
        snap = self.peek()
        if snap is None:
            if self._has_blob():
                self.clear()
            return None

        problem = _validate_against_plan(snap, plan, phases)
        if problem:
            logger.warning("Discarding session snapshot: %s", problem)
            self.clear()
            return None
        return snap

    def _has_blob(self) -> bool:
        try:
            return bool(self.repository.load())
        except OSError:
            return False

    def clear(self) -> None:
        try:
            self.repository.clear()
        except OSError as e:
            logger.error("Failed to clear session snapshot: %s", e)


def _validate_against_plan(snap: Snapshot, plan: Plan, phases: frozenset[str]) -> str | None:
    if snap.plan_id != plan.id:
        return f"plan id {snap.plan_id} does not match {plan.id}"
    if snap.phase not in phases:
        return f"phase {snap.phase} is not valid for a {plan.kind} plan"
    if snap.phase == PHASE_COMPLETE:
        return "session already complete"
    if snap.current_slot_index >= len(plan.slots):
        return f"slot index {snap.current_slot_index} out of range"
    slot = plan.slots[snap.current_slot_index]
    if snap.phase in (PHASE_EXERCISE_ACTIVE, PHASE_REST_BETWEEN_SETS):
        if snap.current_sub_index > slot.sets_planned:
            return f"set index {snap.current_sub_index} out of range"
    elif snap.current_sub_index != 0:
        return f"sub index {snap.current_sub_index} out of range"
    return None
