from dataclasses import dataclass, field
from typing import Dict, Optional

from .constants import (
    TICK_SECONDS,
    FRAME_INTERVAL_MS,
    MAX_ALARMS,
    SILENCE_SECONDS,
)


@dataclass
class SimulationConfig:
    """Configuration for the simulation engine."""
    tick_seconds: float = TICK_SECONDS  # Simulated seconds per vitals tick
    frame_interval_ms: int = FRAME_INTERVAL_MS  # Waveform redraw period

    # Alarm lifecycle.
    max_alarms: int = MAX_ALARMS
    silence_seconds: float = SILENCE_SECONDS
    # False keeps alarms until reset (monitor acknowledgement semantics).
    auto_resolve_alarms: bool = False

    # Initial control overrides, e.g. {"fio2": 21.0}.
    controls: Dict[str, float] = field(default_factory=dict)

    # Runtime settings.
    rng_seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """Build a config from a JSON-style dict, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise TypeError(f"Config must be a JSON object, got {type(data).__name__}")
        known = {name for name in cls.__dataclass_fields__}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "controls" in kwargs:
            kwargs["controls"] = dict(kwargs["controls"])
        return cls(**kwargs)

    def validate(self) -> "SimulationConfig":
        """Raise KeyError/ValueError/TypeError for settings the engine cannot run with."""
        if self.tick_seconds <= 0:
            raise ValueError(f"tick_seconds must be positive, got {self.tick_seconds}")
        for name, value in self.controls.items():
            if name not in CONTROL_RANGES:
                raise KeyError(f"Unknown control: {name}")
            float(value)
        return self


@dataclass(frozen=True)
class ControlRange:
    """Operator control bounds (slider min/max/step)."""
    minimum: float
    maximum: float
    step: float
    unit: str
    label: str


CONTROL_RANGES = {
    "tidal_volume": ControlRange(200.0, 1000.0, 10.0, "mL", "Tidal volume"),
    "respiratory_rate": ControlRange(6.0, 30.0, 1.0, "bpm", "Resp rate"),
    "peep": ControlRange(0.0, 20.0, 1.0, "cmH₂O", "PEEP"),
    "fio2": ControlRange(21.0, 100.0, 1.0, "%", "FiO₂"),
    "fresh_gas_flow": ControlRange(0.5, 10.0, 0.5, "L/min", "Fresh gas flow"),
    "anesthetic_agent": ControlRange(0.0, 8.0, 0.1, "%", "Sevoflurane"),
}


@dataclass
class ControlSettings:
    """Operator-set ventilator and vaporizer settings."""
    tidal_volume: float = 500.0      # mL
    respiratory_rate: float = 12.0   # breaths/min
    peep: float = 5.0                # cmH2O
    fio2: float = 40.0               # %
    fresh_gas_flow: float = 2.0      # L/min
    anesthetic_agent: float = 2.0    # Vaporizer dial (%)

    @property
    def minute_ventilation(self) -> float:
        """Minute ventilation (L/min)."""
        return (self.tidal_volume / 1000.0) * self.respiratory_rate


@dataclass(slots=True)
class VitalsState:
    """Current vital signs. Mutated only by the simulation engine."""
    heart_rate: float = 95.0     # bpm
    systolic: float = 120.0      # mmHg
    diastolic: float = 80.0      # mmHg
    spo2: float = 98.0           # %
    co2: float = 38.0            # EtCO2 (mmHg)
    temperature: float = 36.5    # °C
    peak_pressure: float = 18.0  # cmH2O
    mean_pressure: float = 15.0  # cmH2O


@dataclass(slots=True)
class DerivedValues:
    """Gas analyser and ventilator values computed each tick."""
    inspired_agent: float = 0.5  # Fi agent (%)
    expired_agent: float = 1.8   # Et agent (%)
    ie_ratio: float = 2.0        # 1:X


@dataclass(slots=True)
class SimulationSnapshot:
    """Copy of the simulation at the end of a tick."""
    time: float
    vitals: VitalsState
    derived: DerivedValues
    controls: ControlSettings
    alarm_count: int = 0
