"""One-shot timers on the host loop.

The engine never sleeps or spawns threads. Everything that has to happen
later (the 10 ms tick, the deferred side-tone stop) is posted to whatever
loop owns the UI: Tkinter's ``after``, an asyncio loop, or ManualScheduler
when time is driven by hand.
"""
import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol

from mb_clock import ManualClock


class Scheduler(Protocol):
    """Post ``callback`` to run once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Any: ...
    def cancel(self, handle: Any) -> None: ...


class TkScheduler:
    """Scheduler backed by a Tk widget's ``after`` queue."""

    def __init__(self, widget):
        self.widget = widget

    def call_later(self, delay: float, callback: Callable[[], None]) -> str:
        return self.widget.after(max(0, int(round(delay * 1000))), callback)

    def cancel(self, handle: str) -> None:
        self.widget.after_cancel(handle)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop if loop is not None else asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class _Timer:
    __slots__ = ('due', 'seq', 'callback', 'cancelled')

    def __init__(self, due: float, seq: int, callback: Callable[[], None]):
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def __lt__(self, other: '_Timer') -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class ManualScheduler:
    """Deterministic scheduler driven together with a ManualClock.

    ``advance``/``run_until`` fire due callbacks in time order, moving the
    clock to each callback's due time before calling it. Callbacks may post
    new timers; those run in the same pass if they fall due in the window.
    """
    def __init__(self, clock: ManualClock):
        self.clock = clock
        self._heap: List[_Timer] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Timer:
        timer = _Timer(self.clock.now() + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._heap, timer)
        return timer

    def cancel(self, handle: _Timer) -> None:
        handle.cancelled = True

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for t in self._heap if not t.cancelled)

    def run_until(self, instant: float) -> None:
        while self._heap and self._heap[0].due <= instant:
            timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            if timer.due > self.clock.now():
                self.clock.set(timer.due)
            timer.callback()
        if instant > self.clock.now():
            self.clock.set(instant)

    def advance(self, seconds: float) -> None:
        self.run_until(self.clock.now() + seconds)
