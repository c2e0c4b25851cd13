"""
Timer abstraction for periodic and one-shot tasks.

The engine, alarm registry and notifier never talk to a clock directly; they
receive a scheduler. `ManualScheduler` runs on simulated time (headless runs
and tests), `anamon.ui.qt_scheduler.QtScheduler` runs on the Qt event loop.
"""

import heapq
import itertools
from typing import Callable, Optional


class TaskHandle:
    """
    Cancel handle for a scheduled task.

    cancel() is idempotent and safe to call from inside the task itself.
    """
    def __init__(self, canceller: Optional[Callable[[], None]] = None):
        self._canceller = canceller
        self.active = True

    def cancel(self):
        if not self.active:
            return
        self.active = False
        if self._canceller is not None:
            self._canceller()
            self._canceller = None


class Scheduler:
    """Interface shared by the manual and Qt schedulers."""

    def now(self) -> float:
        raise NotImplementedError

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        raise NotImplementedError

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        raise NotImplementedError


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler driven by advance().

    Tasks fire in deadline order; ties fire in scheduling order.
    """
    def __init__(self, start_time: float = 0.0):
        self._time = start_time
        self._queue = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._time

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle()
        self._push(self._time + max(0.0, delay), None, callback, handle)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        handle = TaskHandle()
        self._push(self._time + interval, interval, callback, handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of live tasks still queued."""
        return sum(1 for entry in self._queue if entry[4].active)

    def advance(self, seconds: float):
        """Move simulated time forward, firing every task that comes due."""
        if seconds < 0:
            raise ValueError(f"Cannot advance by negative time: {seconds}")
        end = self._time + seconds
        while self._queue and self._queue[0][0] <= end:
            deadline, _, interval, callback, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._time = deadline
            if interval is None:
                handle.active = False
            else:
                self._push(deadline + interval, interval, callback, handle)
            callback()
        self._time = end

    def _push(self, deadline, interval, callback, handle):
        heapq.heappush(self._queue, (deadline, next(self._counter), interval, callback, handle))
