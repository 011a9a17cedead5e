"""Session history stored in SQLite.

The session engine only emits completion events; this module is the
collaborator that records them. :meth:`HistoryLogger.record` is meant to be
registered as a :class:`CompletionRecorder` consumer, so it runs on the
recorder's worker thread and opens its own connection per call.
"""

import json
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from cadence_cli.models.session.recorder import (
    CompletionEvent,
    FocusCompletion,
    WorkoutCompletion,
)
from cadence_cli.services.paths import data_dir


def _iso(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).astimezone().isoformat()


class HistoryLogger:
    """Persists focus and workout completions."""

    def __init__(self, db_path: Path | None = None):
        if db_path is None:
            db_path = data_dir() / "history.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS focus_completions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    completed_at TEXT NOT NULL,
                    slot_index INTEGER NOT NULL,
                    duration_minutes INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS workout_completions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    duration_seconds INTEGER NOT NULL,
                    exercises INTEGER NOT NULL,
                    sets_logged INTEGER NOT NULL,
                    total_volume REAL NOT NULL,
                    exercise_data TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_focus_completed_at
                ON focus_completions(completed_at)
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_workout_start
                ON workout_completions(start_time)
                """
            )
            conn.commit()

    def record(self, event: CompletionEvent) -> None:
        """Store any completion event."""
        if isinstance(event, FocusCompletion):
            self.log_focus(event)
        elif isinstance(event, WorkoutCompletion):
            self.log_workout(event)
        else:
            raise TypeError(f"Unsupported completion event: {type(event).__name__}")

    def log_focus(self, event: FocusCompletion) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO focus_completions (completed_at, slot_index, duration_minutes)
                VALUES (?, ?, ?)
                """,
                (_iso(event.timestamp), event.slot_index, event.duration_planned),
            )
            conn.commit()

    def log_workout(self, event: WorkoutCompletion) -> None:
        exercise_data = [
            {
                "slot_id": log.slot_id,
                "name": log.name,
                "sets": [record.to_dict() for record in log.sets],
            }
            for log in event.exercise_data
        ]
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO workout_completions (
                    name, start_time, end_time, duration_seconds,
                    exercises, sets_logged, total_volume, exercise_data
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.plan_name,
                    _iso(event.start_time),
                    _iso(event.end_time),
                    event.duration_seconds,
                    len(event.exercise_data),
                    event.sets_logged,
                    event.total_volume,
                    json.dumps(exercise_data),
                ),
            )
            conn.commit()

    def get_recent_focus(self, limit: int = 20) -> list[dict[str, Any]]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                """
                SELECT completed_at, slot_index, duration_minutes
                FROM focus_completions
                ORDER BY completed_at DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            )
            return [dict(row) for row in cursor.fetchall()]

    def get_recent_workouts(
        self, limit: int = 20, include_exercises: bool = False
    ) -> list[dict[str, Any]]:
        """
        Get recent workouts, newest first.

        Args:
            limit: Maximum number of workouts to return
            include_exercises: Decode the per-exercise set logs as well

        Returns:
            List of workout dictionaries
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute(
                """
                SELECT * FROM workout_completions
                ORDER BY start_time DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            )
            rows = [dict(row) for row in cursor.fetchall()]

        for row in rows:
            data = row.pop("exercise_data")
            row.pop("id", None)
            if include_exercises:
                row["exercise_data"] = json.loads(data)
        return rows

    def get_focus_stats(self, days: int = 7) -> dict[str, Any]:
        """Totals for focus blocks completed in the last *days* days."""
        cutoff = (datetime.now().astimezone() - timedelta(days=days)).isoformat()

        with sqlite3.connect(self.db_path) as conn:
            count, minutes = conn.execute(
                """
                SELECT COUNT(*), COALESCE(SUM(duration_minutes), 0)
                FROM focus_completions
                WHERE completed_at >= ?
                """,
                (cutoff,),
            ).fetchone()

        return {
            "days": days,
            "completed_sessions": count,
            "total_focus_minutes": minutes,
            "total_focus_hours": round(minutes / 60, 1),
        }
