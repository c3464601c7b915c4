"""Time sources for Morseboard.

Instants are plain float seconds; subtracting two instants gives a duration.
``MonotonicClock`` is what the application uses, ``ManualClock`` is moved by
hand and lets tests and replays drive the engine deterministically.
"""
import time
from typing import Protocol


class Clock(Protocol):
    """Anything with a ``now()`` returning monotonic seconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Clock backed by ``time.monotonic``."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def set(self, instant: float) -> None:
        """Jump to ``instant``. Going backwards is refused."""
        if instant < self._now:
            raise ValueError(f"Clock cannot go backwards ({instant} < {self._now})")
        self._now = float(instant)

    def advance(self, seconds: float) -> float:
        """Move forward by ``seconds`` and return the new instant."""
        self.set(self._now + seconds)
        return self._now
