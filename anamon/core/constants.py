"""
Physiological and Numerical Constants for AnaMon.

This module centralizes the magic numbers of the vitals model and alarm policy.

NOTE: Only add constants here that are ACTIVELY IMPORTED elsewhere.
"""

from dataclasses import dataclass

# Timing.

# Vitals tick period (seconds of simulated time per engine step)
TICK_SECONDS = 2.0

# Waveform frame period (ms), ~60 Hz
FRAME_INTERVAL_MS = 16

# Alarm registry.

# Maximum number of alarms kept visible (oldest dropped first)
MAX_ALARMS = 8

# Silence auto-expiry (seconds)
SILENCE_SECONDS = 120.0

# Pharmacology (simplified).

# Reference vaporizer potency for 1.0 MAC (%)
MAC_REFERENCE_PERCENT = 2.0

# Respiratory mechanics.

# Static lung compliance (mL/cmH2O)
LUNG_COMPLIANCE = 50.0

# Mean airway pressure as a fraction of peak pressure
MEAN_PRESSURE_FRACTION = 0.7

# Temperature.

# Baseline core temperature (°C)
BASELINE_TEMP_C = 36.5

# Passive heat loss under anesthesia (°C per simulated hour)
TEMP_DRIFT_C_PER_HOUR = 0.5


@dataclass(frozen=True)
class VitalTuning:
    """Relaxation and noise parameters for one simulated parameter."""
    rate: float = 1.0          # Fraction of (target - current) applied per tick
    noise: float = 0.0         # Total width of the uniform noise band
    low: float = None          # Hard clamp (None = unbounded)
    high: float = None


# Heart rate (bpm): reduced ~20 bpm per MAC
HR_BASELINE = 75.0
HR_DEPTH_GAIN = 20.0

# Systolic pressure (mmHg): reduced ~25 mmHg per MAC
SYS_BASELINE = 120.0
SYS_DEPTH_GAIN = 25.0

# Diastolic pressure follows systolic with a fixed pulse pressure
PULSE_PRESSURE = 40.0

# Agent concentrations as fractions of the vaporizer dial
INSPIRED_AGENT_FRACTION = 0.3
EXPIRED_AGENT_FRACTION = 0.85

# Baseline I:E ratio (1:X)
IE_RATIO_BASELINE = 2.0

VITAL_TUNING = {
    "heart_rate": VitalTuning(rate=0.08, noise=3.0, low=40.0, high=130.0),
    "systolic": VitalTuning(rate=0.08, noise=4.0, low=60.0, high=180.0),
    "diastolic": VitalTuning(noise=4.0, low=35.0, high=100.0),
    "spo2": VitalTuning(rate=0.1, low=85.0, high=100.0),
    "co2": VitalTuning(rate=0.1, low=20.0, high=60.0),
    "temperature": VitalTuning(rate=0.02, noise=0.1, low=35.0, high=38.0),
    "peak_pressure": VitalTuning(noise=2.0, low=5.0, high=50.0),
    "mean_pressure": VitalTuning(noise=1.0),
    "inspired_agent": VitalTuning(rate=0.15),
    "expired_agent": VitalTuning(rate=0.08),
    "ie_ratio": VitalTuning(noise=0.2),
}

# SpO2 target as a step function of FiO2 (%).
# (min_fio2, target, noise_width); below 30% the target interpolates 94 -> 97.
SPO2_FIO2_STEPS = (
    (40.0, 99.0, 0.5),
    (30.0, 97.0, 1.0),
)
SPO2_LOW_FIO2 = 21.0
SPO2_LOW_FIO2_BASE = 94.0
SPO2_LOW_FIO2_SPAN = 9.0
SPO2_LOW_FIO2_GAIN = 3.0
SPO2_HYPOXIC_TARGET = 98.0

# EtCO2 target (mmHg) from minute ventilation (L/min).
# (upper_bound, inclusive, target); anything above the last band hyperventilates.
CO2_MV_BANDS = (
    (4.0, False, 50.0),   # Hypoventilation
    (5.0, False, 45.0),
    (7.0, True, 38.0),    # Normal
    (9.0, True, 33.0),
)
CO2_HYPERVENTILATION_TARGET = 28.0


@dataclass(frozen=True)
class ToneProfile:
    """Alarm tone burst played on every loop interval."""
    frequency_hz: float
    duration_sec: float
    gain: float
    interval_sec: float


CRITICAL_TONE = ToneProfile(frequency_hz=1000.0, duration_sec=0.1, gain=0.3, interval_sec=0.5)
WARNING_TONE = ToneProfile(frequency_hz=600.0, duration_sec=0.15, gain=0.2, interval_sec=1.5)

# Waveform traces.

# Samples per sweep before the trace restarts
TRACE_MAX_POINTS = 300

# Phase advance per frame at reference rate
WAVEFORM_PHASE_STEP = 0.008
WAVEFORM_REFERENCE_HR = 75.0
WAVEFORM_REFERENCE_RR = 12.0
