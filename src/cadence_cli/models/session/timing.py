"""Time sources injected into the session engine.

``SystemClock`` is poll-driven: the display loop calls :meth:`run_pending`
between keyboard reads, so tick callbacks always run on the caller's thread.
``VirtualClock`` is fast-forwarded explicitly and is what tests use.
"""

from __future__ import annotations

import itertools
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class _Timer:
    handle: int
    interval: float
    callback: Callable[[], None]
    next_due: float


class Clock(ABC):
    """Abstract time source with a repeating-callback scheduler."""

    def __init__(self) -> None:
        self._timers: dict[int, _Timer] = {}
        self._handles = itertools.count(1)

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a monotonic scale, used for scheduling."""

    @abstractmethod
    def now_ms(self) -> int:
        """Wall-clock time as epoch milliseconds."""

    def schedule_every(self, interval: float, callback: Callable[[], None]) -> int:
        """Call *callback* every *interval* seconds until cancelled."""
        handle = next(self._handles)
        self._timers[handle] = _Timer(
            handle=handle,
            interval=interval,
            callback=callback,
            next_due=self.monotonic() + interval,
        )
        return handle

    def cancel(self, handle: int | None) -> None:
        if handle is not None:
            self._timers.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def _fire_due(self, now: float, catch_up: bool) -> int:
        fired = 0
        for timer in sorted(self._timers.values(), key=lambda t: t.next_due):
            while timer.handle in self._timers and timer.next_due <= now:
                if catch_up:
                    timer.next_due += timer.interval
                else:
                    timer.next_due = now + timer.interval
                timer.callback()
                fired += 1
                if not catch_up:
                    break
        return fired


class SystemClock(Clock):
    """Real time. Fires at most one callback per timer per poll.

    A stalled loop does not replay missed intervals: each callback stands for
    exactly one second of countdown, like a browser interval timer.
    """

    def monotonic(self) -> float:
        return time.monotonic()

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def run_pending(self) -> int:
        """Fire every timer whose interval has elapsed. Returns the count fired."""
        return self._fire_due(self.monotonic(), catch_up=False)


class VirtualClock(Clock):
    """Deterministic clock for tests and simulations."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        super().__init__()
        self._now = 0.0
        self._start_ms = start_ms

    def monotonic(self) -> float:
        return self._now

    def now_ms(self) -> int:
        return self._start_ms + int(round(self._now * 1000))

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every interval that elapses on the way."""
        target = self._now + seconds
        fired = 0
        while True:
            due = [t.next_due for t in self._timers.values() if t.next_due <= target]
            if not due:
                break
            self._now = max(self._now, min(due))
            fired += self._fire_due(self._now, catch_up=True)
        self._now = target
        return fired
