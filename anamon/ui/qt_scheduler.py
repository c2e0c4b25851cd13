import time
from typing import Callable

from PySide6.QtCore import QObject, QTimer

from anamon.core.scheduler import Scheduler, TaskHandle


class QtScheduler(Scheduler):
    """
    Scheduler backed by QTimer on the GUI event loop.
    Timers are parented to `parent` and kept alive until they finish or are cancelled.
    """
    def __init__(self, parent: QObject = None):
        self.parent = parent
        self._timers = set()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        timer = self._make_timer(delay, single_shot=True)
        handle = TaskHandle(lambda: self._discard(timer))

        def fire():
            if not handle.active:
                return
            handle.active = False
            self._discard(timer)
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        timer = self._make_timer(interval, single_shot=False)
        handle = TaskHandle(lambda: self._discard(timer))

        def fire():
            if handle.active:
                callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def _make_timer(self, seconds: float, single_shot: bool) -> QTimer:
        timer = QTimer(self.parent)
        timer.setSingleShot(single_shot)
        timer.setInterval(max(0, int(round(seconds * 1000))))
        self._timers.add(timer)
        return timer

    def _discard(self, timer: QTimer):
        timer.stop()
        self._timers.discard(timer)
