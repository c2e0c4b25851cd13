from collections import deque
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import copy

import numpy as np

from .state import (
    SimulationConfig,
    ControlSettings,
    VitalsState,
    DerivedValues,
    SimulationSnapshot,
    CONTROL_RANGES,
)
from .constants import (
    VITAL_TUNING,
    MAC_REFERENCE_PERCENT,
    HR_BASELINE,
    HR_DEPTH_GAIN,
    SYS_BASELINE,
    SYS_DEPTH_GAIN,
    PULSE_PRESSURE,
    SPO2_FIO2_STEPS,
    SPO2_LOW_FIO2,
    SPO2_LOW_FIO2_BASE,
    SPO2_LOW_FIO2_SPAN,
    SPO2_LOW_FIO2_GAIN,
    SPO2_HYPOXIC_TARGET,
    CO2_MV_BANDS,
    CO2_HYPERVENTILATION_TARGET,
    BASELINE_TEMP_C,
    TEMP_DRIFT_C_PER_HOUR,
    LUNG_COMPLIANCE,
    MEAN_PRESSURE_FRACTION,
    INSPIRED_AGENT_FRACTION,
    EXPIRED_AGENT_FRACTION,
    IE_RATIO_BASELINE,
)
from .scheduler import Scheduler, ManualScheduler, TaskHandle
from .recorder import DataRecorder
from .utils import clamp, clamp_optional, relax, symmetric_noise
from anamon.monitors.alarms import AlarmCondition, evaluate
from anamon.monitors.registry import Alarm, AlarmRegistry


@dataclass
class StepResult:
    """Outcome of one simulation step."""
    snapshot: SimulationSnapshot
    conditions: List[AlarmCondition] = field(default_factory=list)
    new_alarms: List[Alarm] = field(default_factory=list)
    resolved_alarms: List[Alarm] = field(default_factory=list)


class SimulationEngine:
    """
    Vitals simulation context.

    Owns controls, vitals, derived gas values, the alarm registry and the
    random source. Each step relaxes every vital toward a target computed
    from the current controls, then evaluates and records alarms.

    State management:
    - `vitals`, `derived` and `controls` are live objects for the UI.
    - `output_buffer` keeps copies of recent ticks.
    """
    def __init__(self, config: SimulationConfig = None, rng=None,
                 scheduler: Scheduler = None, clock: Callable = None):
        self.config = config if config is not None else SimulationConfig()
        if self.config.tick_seconds <= 0:
            raise ValueError(f"tick_seconds must be positive, got {self.config.tick_seconds}")
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()

        # Random number generator for noise.
        self.rng = rng if rng is not None else np.random.default_rng(self.config.rng_seed)

        self.vitals = VitalsState()
        self.derived = DerivedValues()
        self.controls = ControlSettings()
        for name, value in self.config.controls.items():
            self.set_control(name, value)

        registry_kwargs = {}
        if clock is not None:
            registry_kwargs["clock"] = clock
        self.alarms = AlarmRegistry(
            self.scheduler,
            max_alarms=self.config.max_alarms,
            silence_seconds=self.config.silence_seconds,
            **registry_kwargs,
        )

        self.time_elapsed = 0.0
        self.running = False
        self._ticker: Optional[TaskHandle] = None
        self._step_listeners = []

        # Output buffer (ring buffer for UI/trends).
        self.output_buffer = deque(maxlen=1000)
        self.recorder: Optional[DataRecorder] = None

    # Controls.

    def set_control(self, name: str, value: float) -> float:
        """
        Apply an operator control change, clamped to the control range.
        Returns the value actually stored.
        """
        if name not in CONTROL_RANGES:
            raise KeyError(f"Unknown control: {name}")
        rng = CONTROL_RANGES[name]
        stored = clamp(float(value), rng.minimum, rng.maximum)
        setattr(self.controls, name, stored)
        return stored

    @property
    def anesthetic_depth(self) -> float:
        """Depth of anesthesia as MAC equivalents."""
        return self.controls.anesthetic_agent / MAC_REFERENCE_PERCENT

    # Lifecycle.

    def start(self):
        """Start the periodic tick on the scheduler."""
        self.running = True
        if self._ticker is None or not self._ticker.active:
            self._ticker = self.scheduler.call_every(self.config.tick_seconds, self.step)

    def stop(self):
        """Stop ticking. Alarm and silence state are kept."""
        self.running = False
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def add_step_listener(self, callback: Callable[[StepResult], None]):
        self._step_listeners.append(callback)

    def reset_alarms(self):
        self.alarms.reset()

    def silence_alarms(self):
        self.alarms.silence()

    # Simulation.

    def step(self) -> Optional[StepResult]:
        """
        Advance one tick, then evaluate and record alarms.
        """
        if not self.running:
            return None

        self.tick()
        conditions = self.evaluate_alarms()

        resolved = []
        if self.config.auto_resolve_alarms:
            resolved = self.alarms.resolve(conditions)
        new_alarms = self.alarms.record_all(conditions)

        snapshot = self.get_latest_state()
        self.output_buffer.append(snapshot)
        if self.recorder:
            self.recorder.log(snapshot)

        result = StepResult(snapshot, conditions, new_alarms, resolved)
        for callback in list(self._step_listeners):
            callback(result)
        return result

    def tick(self):
        """Relax all vitals and derived values one tick toward their targets."""
        self.time_elapsed += self.config.tick_seconds
        depth = self.anesthetic_depth

        self._step_hemodynamics(depth)
        self._step_oxygenation()
        self._step_ventilation()
        self._step_temperature()
        self._step_airway_pressures()
        self._step_agents()

    def evaluate_alarms(self) -> List[AlarmCondition]:
        return evaluate(self.vitals)

    def get_latest_state(self) -> SimulationSnapshot:
        """Return a copy of the current state."""
        return SimulationSnapshot(
            time=self.time_elapsed,
            vitals=copy.copy(self.vitals),
            derived=copy.copy(self.derived),
            controls=copy.copy(self.controls),
            alarm_count=len(self.alarms),
        )

    # Recording.

    def start_recording(self, output_dir: str = ".", sample_interval_sec: float = 0.0):
        self.stop_recording()
        self.recorder = DataRecorder(output_dir=output_dir, sample_interval_sec=sample_interval_sec)
        self.recorder.start()

    def stop_recording(self):
        if self.recorder:
            self.recorder.stop()
            self.recorder = None

    # Per-parameter models.

    def _noise(self, name: str) -> float:
        return symmetric_noise(self.rng, VITAL_TUNING[name].noise)

    def _relax_vital(self, obj, name: str, target: float):
        tuning = VITAL_TUNING[name]
        value = relax(getattr(obj, name), target, tuning.rate)
        setattr(obj, name, clamp_optional(value, tuning.low, tuning.high))

    def _assign_vital(self, obj, name: str, value: float):
        tuning = VITAL_TUNING[name]
        setattr(obj, name, clamp_optional(value, tuning.low, tuning.high))

    def _step_hemodynamics(self, depth: float):
        """HR and BP fall with anesthetic depth (negative chronotropy, vasodilation)."""
        v = self.vitals
        target_hr = HR_BASELINE - depth * HR_DEPTH_GAIN + self._noise("heart_rate")
        self._relax_vital(v, "heart_rate", target_hr)

        target_sys = SYS_BASELINE - depth * SYS_DEPTH_GAIN + self._noise("systolic")
        self._relax_vital(v, "systolic", target_sys)

        self._assign_vital(v, "diastolic", v.systolic - PULSE_PRESSURE + self._noise("diastolic"))

    def spo2_target(self) -> float:
        fio2 = self.controls.fio2
        for min_fio2, target, noise in SPO2_FIO2_STEPS:
            if fio2 >= min_fio2:
                return target + symmetric_noise(self.rng, noise)
        if fio2 >= SPO2_LOW_FIO2:
            return SPO2_LOW_FIO2_BASE + (fio2 - SPO2_LOW_FIO2) / SPO2_LOW_FIO2_SPAN * SPO2_LOW_FIO2_GAIN
        return SPO2_HYPOXIC_TARGET

    def _step_oxygenation(self):
        self._relax_vital(self.vitals, "spo2", self.spo2_target())

    def co2_target(self) -> float:
        """EtCO2 falls as minute ventilation rises."""
        mv = self.controls.minute_ventilation
        for bound, inclusive, target in CO2_MV_BANDS:
            if mv < bound or (inclusive and mv == bound):
                return target
        return CO2_HYPERVENTILATION_TARGET

    def _step_ventilation(self):
        self._relax_vital(self.vitals, "co2", self.co2_target())

    def _step_temperature(self):
        # Slow passive cooling under anesthesia.
        drift = (self.time_elapsed / 3600.0) * TEMP_DRIFT_C_PER_HOUR
        target = BASELINE_TEMP_C - drift + self._noise("temperature")
        self._relax_vital(self.vitals, "temperature", target)

    def _step_airway_pressures(self):
        v = self.vitals
        c = self.controls
        peak = c.tidal_volume / LUNG_COMPLIANCE + c.peep + self._noise("peak_pressure")
        self._assign_vital(v, "peak_pressure", peak)
        self._assign_vital(v, "mean_pressure",
                           v.peak_pressure * MEAN_PRESSURE_FRACTION + self._noise("mean_pressure"))

    def _step_agents(self):
        """Inspired agent tracks the dial diluted by fresh gas; expired lags behind uptake."""
        d = self.derived
        agent = self.controls.anesthetic_agent
        self._relax_vital(d, "inspired_agent", agent * INSPIRED_AGENT_FRACTION)
        self._relax_vital(d, "expired_agent", agent * EXPIRED_AGENT_FRACTION)
        self._assign_vital(d, "ie_ratio", IE_RATIO_BASELINE + self._noise("ie_ratio"))
