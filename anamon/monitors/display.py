"""
Text projections of the simulation for the monitor screen.

Everything here is pure formatting so the Qt widgets only copy strings into
labels. Rounding rules: integers for HR/BP/SpO2/CO2/pressures, one decimal
for temperature and agent concentrations, "1:X.X" for the I:E ratio.
"""

from typing import Dict, List, NamedTuple

from anamon.core.constants import MAC_REFERENCE_PERCENT
from anamon.core.enums import CardStatus
from anamon.core.state import CONTROL_RANGES
from anamon.core.utils import round_half_up
from .alarms import ALARM_LIMITS, classify

NO_ALARMS_TEXT = "All parameters normal"

# Vital card -> parameter whose limits colour it
CARD_PARAMETERS = {
    'hr': 'heart_rate',
    'bp': 'systolic',
    'spo2': 'spo2',
    'co2': 'co2',
    'temp': 'temperature',
    'pressure': 'peak_pressure',
}


def format_vitals(vitals, derived, controls) -> Dict[str, str]:
    sys = round_half_up(vitals.systolic)
    dia = round_half_up(vitals.diastolic)
    hr = round_half_up(vitals.heart_rate)
    spo2 = round_half_up(vitals.spo2)
    co2 = round_half_up(vitals.co2)
    return {
        'hr': f"{hr}",
        'ecg_rate': f"{hr} bpm",
        'bp': f"{sys}/{dia}",
        'map': f"{round_half_up((sys + 2 * dia) / 3)}",
        'spo2': f"{spo2}",
        'pleth': f"{spo2}%",
        'co2': f"{co2}",
        'capno': f"{co2} mmHg",
        'temp': f"{vitals.temperature:.1f}",
        'pressure': f"{round_half_up(vitals.mean_pressure)}",
        'peak_pressure': f"{round_half_up(vitals.peak_pressure)}",
        'inspired_agent': f"{derived.inspired_agent:.1f}",
        'expired_agent': f"{derived.expired_agent:.1f}",
        'ie_ratio': f"1:{derived.ie_ratio:.1f}",
        'mac': f"{controls.anesthetic_agent / MAC_REFERENCE_PERCENT:.1f}",
    }


def card_statuses(vitals, limits: dict = None) -> Dict[str, CardStatus]:
    limits = ALARM_LIMITS if limits is None else limits
    return {
        card: classify(getattr(vitals, param), limits[param])
        for card, param in CARD_PARAMETERS.items()
    }


def format_control(name: str, value: float) -> str:
    """Slider label, e.g. '500 mL' or '2.5 L/min'."""
    return f"{value:g} {CONTROL_RANGES[name].unit}"


class AlarmRow(NamedTuple):
    priority: str
    time: str
    text: str


def alarm_rows(alarms) -> List[AlarmRow]:
    """Rows for the alarm list, newest first."""
    return [
        AlarmRow(a.priority.value, a.fired_at.strftime("%H:%M:%S"), a.text)
        for a in alarms
    ]


def format_clock(seconds: float) -> str:
    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
