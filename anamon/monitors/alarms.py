from dataclasses import dataclass
from typing import List, NamedTuple, Optional

from anamon.core.enums import AlarmPriority, CardStatus
from anamon.core.utils import round_half_up


@dataclass(frozen=True)
class AlarmLimit:
    """Warning and critical bounds for one parameter. None disables a side."""
    low: Optional[float] = None
    high: Optional[float] = None
    critical_low: Optional[float] = None
    critical_high: Optional[float] = None

    def is_critical(self, value: float) -> bool:
        return _outside(value, self.critical_low, self.critical_high)

    def is_warning(self, value: float) -> bool:
        return _outside(value, self.low, self.high)


def _outside(value, low, high) -> bool:
    if low is not None and value < low:
        return True
    if high is not None and value > high:
        return True
    return False


ALARM_LIMITS = {
    'heart_rate': AlarmLimit(low=50, high=100, critical_low=40, critical_high=130),
    'systolic': AlarmLimit(low=90, high=140, critical_low=70, critical_high=180),
    'spo2': AlarmLimit(low=94, critical_low=90),
    'co2': AlarmLimit(low=30, high=45, critical_low=25, critical_high=55),
    'temperature': AlarmLimit(low=36.0, high=37.5, critical_low=35.0, critical_high=38.5),
    'peak_pressure': AlarmLimit(high=30, critical_high=40),
}


class AlarmCondition(NamedTuple):
    priority: AlarmPriority
    title: str
    message: str

    @property
    def key(self):
        return (self.title, self.priority)


# (parameter, critical title, warning title, message formatter)
_ALARM_RULES = (
    ('heart_rate', "Heart Rate Critical", "Heart Rate Abnormal",
     lambda v: f"{round_half_up(v.heart_rate)} bpm"),
    ('spo2', "SpO₂ Critical", "SpO₂ Low",
     lambda v: f"{round_half_up(v.spo2)}%"),
    ('systolic', "Blood Pressure Critical", "Blood Pressure Abnormal",
     lambda v: f"{round_half_up(v.systolic)}/{round_half_up(v.diastolic)} mmHg"),
    ('co2', "CO₂ Critical", "CO₂ Abnormal",
     lambda v: f"{round_half_up(v.co2)} mmHg"),
    ('temperature', "Temperature Critical", "Temperature Abnormal",
     lambda v: f"{v.temperature:.1f}°C"),
    ('peak_pressure', "High Airway Pressure", "Elevated Airway Pressure",
     lambda v: f"{round_half_up(v.peak_pressure)} cmH₂O"),
)


def evaluate(vitals, limits: dict = None) -> List[AlarmCondition]:
    """
    Check vitals against the threshold table.

    Each parameter yields at most one condition: critical bounds are checked
    first and a critical hit suppresses the warning check.
    """
    limits = ALARM_LIMITS if limits is None else limits
    conditions = []
    for name, critical_title, warning_title, fmt in _ALARM_RULES:
        limit = limits.get(name)
        if limit is None:
            continue
        value = getattr(vitals, name)
        if limit.is_critical(value):
            conditions.append(AlarmCondition(AlarmPriority.CRITICAL, critical_title, fmt(vitals)))
        elif limit.is_warning(value):
            conditions.append(AlarmCondition(AlarmPriority.WARNING, warning_title, fmt(vitals)))
    return conditions


def classify(value: float, limit: AlarmLimit) -> CardStatus:
    """Card colour for a single value, critical first."""
    if limit.is_critical(value):
        return CardStatus.CRITICAL
    if limit.is_warning(value):
        return CardStatus.WARNING
    return CardStatus.NORMAL
