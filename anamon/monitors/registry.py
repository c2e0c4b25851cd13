from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from anamon.core.constants import MAX_ALARMS, SILENCE_SECONDS
from anamon.core.enums import AlarmPriority
from anamon.core.scheduler import Scheduler, TaskHandle
from .alarms import AlarmCondition


@dataclass(frozen=True)
class Alarm:
    id: int  # Creation timestamp (ms since epoch), unique per registry
    priority: AlarmPriority
    title: str
    message: str
    fired_at: datetime

    @property
    def key(self):
        return (self.title, self.priority)

    @property
    def text(self) -> str:
        return f"{self.title}: {self.message}"


class AlarmRegistry:
    """
    Visible alarm list with acknowledgement semantics.

    - One entry per (title, priority); repeats of an active alarm are ignored.
    - Newest first, capped at `max_alarms`.
    - silence() drops non-critical entries and mutes audio until the
      auto-expiry task fires; reset() clears everything.
    Listeners are called with the registry after every change.
    """
    def __init__(self, scheduler: Scheduler, max_alarms: int = MAX_ALARMS,
                 silence_seconds: float = SILENCE_SECONDS,
                 clock: Callable[[], datetime] = datetime.now):
        self.scheduler = scheduler
        self.max_alarms = max_alarms
        self.silence_seconds = silence_seconds
        self.clock = clock

        self.alarms: List[Alarm] = []
        self.silenced = False
        self.silenced_until: Optional[float] = None
        self._unsilence_task: Optional[TaskHandle] = None
        self._last_id = 0
        self._listeners = []

    def __len__(self):
        return len(self.alarms)

    def __iter__(self):
        return iter(self.alarms)

    def add_listener(self, callback: Callable[["AlarmRegistry"], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def is_empty(self) -> bool:
        return not self.alarms

    def contains(self, title: str, priority: AlarmPriority) -> bool:
        return any(a.key == (title, priority) for a in self.alarms)

    def highest_priority(self) -> Optional[AlarmPriority]:
        if not self.alarms:
            return None
        return max((a.priority for a in self.alarms), key=lambda p: p.rank)

    def silence_remaining(self) -> float:
        """Seconds left before audio un-mutes (0 when not silenced)."""
        if not self.silenced or self.silenced_until is None:
            return 0.0
        return max(0.0, self.silenced_until - self.scheduler.now())

    def record(self, condition: AlarmCondition) -> Optional[Alarm]:
        """Insert a new alarm at the front unless the same one is already listed."""
        priority, title, message = condition
        if self.contains(title, priority):
            return None

        fired_at = self.clock()
        alarm = Alarm(self._next_id(fired_at), priority, title, message, fired_at)
        self.alarms.insert(0, alarm)
        if len(self.alarms) > self.max_alarms:
            del self.alarms[self.max_alarms:]
        self._notify()
        return alarm

    def record_all(self, conditions: Iterable[AlarmCondition]) -> List[Alarm]:
        added = []
        for condition in conditions:
            alarm = self.record(condition)
            if alarm is not None:
                added.append(alarm)
        return added

    def resolve(self, active_conditions: Iterable[AlarmCondition]) -> List[Alarm]:
        """Drop alarms whose condition is no longer present. Returns removed alarms."""
        active = {c.key for c in active_conditions}
        removed = [a for a in self.alarms if a.key not in active]
        if removed:
            self.alarms = [a for a in self.alarms if a.key in active]
            self._notify()
        return removed

    def reset(self):
        """Clear all alarms and un-silence."""
        self._cancel_unsilence()
        self.alarms = []
        self.silenced = False
        self.silenced_until = None
        self._notify()

    def silence(self):
        """Mute audio for `silence_seconds` and discard non-critical alarms."""
        self._cancel_unsilence()
        self.silenced = True
        self.silenced_until = self.scheduler.now() + self.silence_seconds
        self._unsilence_task = self.scheduler.call_later(self.silence_seconds, self._expire_silence)
        self.alarms = [a for a in self.alarms if a.priority is AlarmPriority.CRITICAL]
        self._notify()

    def _expire_silence(self):
        self._unsilence_task = None
        self.silenced = False
        self.silenced_until = None
        self._notify()

    def _cancel_unsilence(self):
        if self._unsilence_task is not None:
            self._unsilence_task.cancel()
            self._unsilence_task = None

    def _next_id(self, fired_at: datetime) -> int:
        # Two alarms raised in the same millisecond still get distinct ids.
        alarm_id = max(int(fired_at.timestamp() * 1000), self._last_id + 1)
        self._last_id = alarm_id
        return alarm_id

    def _notify(self):
        for callback in list(self._listeners):
            callback(self)
