from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def __call__(self) -> float:
        return self._now

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += seconds
        return self._now


class Handle:
    __slots__ = ("deadline", "callback", "args", "cancelled")

    def __init__(self, deadline: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.deadline = deadline
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Delayed callbacks that run only when the owner calls run_due().

    Nothing runs on another thread: the game loop (or each HTTP request)
    pumps the scheduler, so callbacks never race the code that scheduled them.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock: Clock = clock if clock is not None else time.monotonic
        self._heap: List[Tuple[float, int, Handle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self.clock()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Handle:
        handle = Handle(self.clock() + max(0.0, delay), callback, args)
        heapq.heappush(self._heap, (handle.deadline, next(self._seq), handle))
        return handle

    def cancel(self, handle: Handle) -> None:
        handle.cancel()

    def cancel_all(self) -> int:
        dropped = 0
        for _, _, handle in self._heap:
            if not handle.cancelled:
                handle.cancel()
                dropped += 1
        self._heap.clear()
        return dropped

    def postpone(self, seconds: float) -> None:
        """Pushes every pending deadline back by `seconds`."""
        if seconds <= 0:
            return
        # A uniform shift keeps heap order.
        self._heap = [(deadline + seconds, seq, h) for deadline, seq, h in self._heap]
        for _, _, h in self._heap:
            h.deadline += seconds

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def next_deadline(self) -> Optional[float]:
        self._discard_cancelled()
        return self._heap[0][0] if self._heap else None

    def run_due(self) -> int:
        """Runs every callback whose deadline has passed, earliest first. Returns how many ran."""
        ran = 0
        while True:
            self._discard_cancelled()
            if not self._heap or self._heap[0][0] > self.clock():
                return ran
            _, _, handle = heapq.heappop(self._heap)
            handle.cancelled = True
            handle.callback(*handle.args)
            ran += 1

    def _discard_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)
