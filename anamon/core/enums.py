from enum import Enum


class AlarmPriority(Enum):
    """Alarm priority, ordered by rank."""
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return 2 if self is AlarmPriority.CRITICAL else 1


class CardStatus(Enum):
    """Visual state of a vital sign card"""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
