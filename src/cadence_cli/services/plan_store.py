"""Storage for the active plan of each session type.

The engine snapshot only records *where* a session is. The plan itself, with
its tasks and logged sets, is kept here so a session can be resumed from a
new process.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from cadence_cli.models.session.plan import Plan

logger = logging.getLogger(__name__)


@dataclass
class StoredPlan:
    """A plan together with the bookkeeping needed to resume it."""

    plan: Plan
    started_at_ms: int | None = None
    source: str | None = None  # workout template name

    def to_dict(self) -> dict:
        return {
            "plan": self.plan.to_dict(),
            "started_at_ms": self.started_at_ms,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StoredPlan:
        return cls(
            plan=Plan.from_dict(data["plan"]),
            started_at_ms=data.get("started_at_ms"),
            source=data.get("source"),
        )


class PlanStore:
    """Keeps ``<session_type>_plan.json`` in the data directory."""

    def __init__(self, state_dir: Path, session_type: str):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file = self.state_dir / f"{session_type}_plan.json"

    def save(self, stored: StoredPlan) -> None:
        tmp_file = self.state_file.with_suffix(".json.tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(stored.to_dict(), f, indent=2)
        tmp_file.chmod(0o600)
        tmp_file.replace(self.state_file)

    def load(self) -> StoredPlan | None:
        """Load the stored plan. Returns None if the file is missing or invalid."""
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, encoding="utf-8") as f:
                return StoredPlan.from_dict(json.load(f))
        except (json.JSONDecodeError, TypeError, KeyError, ValueError) as e:
            logger.warning("Ignoring unreadable plan file %s: %s", self.state_file, e)
            return None

    def clear(self) -> None:
        self.state_file.unlink(missing_ok=True)
