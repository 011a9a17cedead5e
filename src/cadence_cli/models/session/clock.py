"""The single live countdown of a session."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhaseExpired:
    """Signal returned by :meth:`SessionClock.tick` when the countdown hits zero."""

    phase_duration_seconds: int


class SessionClock:
    """Countdown with start/pause/reset, decremented one second per tick.

    The clock knows nothing about phases; the engine loads a duration for each
    phase and reacts to :class:`PhaseExpired`. A duration of zero marks an
    untimed phase (a rep-based set) which never runs.
    """

    def __init__(self) -> None:
        self.phase_duration_seconds = 0
        self.remaining_seconds = 0
        self.running = False

    def __repr__(self) -> str:
        return (
            f"SessionClock(remaining={self.remaining_seconds}, "
            f"duration={self.phase_duration_seconds}, running={self.running})"
        )

    @property
    def is_timed(self) -> bool:
        return self.phase_duration_seconds > 0

    def load(self, duration_seconds: int | None, remaining_seconds: int | None = None) -> None:
        """Seed the clock for a new phase. Always leaves it stopped."""
        duration = max(0, int(duration_seconds or 0))
        self.phase_duration_seconds = duration
        if remaining_seconds is None:
            remaining_seconds = duration
        self.remaining_seconds = max(0, int(remaining_seconds))
        self.running = False

    def start(self) -> bool:
        """Start counting down. Returns False for an untimed phase."""
        if not self.is_timed:
            self.running = False
            return False
        if self.remaining_seconds == 0:
            self.remaining_seconds = self.phase_duration_seconds
        self.running = True
        return True

    def pause(self) -> None:
        self.running = False

    def reset(self) -> None:
        self.remaining_seconds = self.phase_duration_seconds
        self.running = False

    def stop(self) -> None:
        self.remaining_seconds = 0
        self.running = False

    def tick(self) -> PhaseExpired | None:
        """Advance one second. Returns :class:`PhaseExpired` on reaching zero."""
        if not self.running:
            return None
        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds == 0:
            self.running = False
            return PhaseExpired(self.phase_duration_seconds)
        return None
