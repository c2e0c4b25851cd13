from dataclasses import dataclass
from typing import List

import numpy as np

from anamon.core.constants import TRACE_MAX_POINTS, WAVEFORM_PHASE_STEP

_TEMPLATE_RESOLUTION = 500


@dataclass
class WaveformContext:
    """Inputs a waveform needs for one frame."""
    heart_rate: float = 75.0
    respiratory_rate: float = 12.0
    spo2: float = 98.0

    @classmethod
    def from_engine(cls, engine) -> "WaveformContext":
        return cls(
            heart_rate=engine.vitals.heart_rate,
            respiratory_rate=engine.controls.respiratory_rate,
            spo2=engine.vitals.spo2,
        )


def build_template(shape, resolution: int = _TEMPLATE_RESOLUTION) -> np.ndarray:
    """Sample a one-cycle shape function on a uniform phase grid."""
    phase_arr = np.linspace(0.0, 1.0, resolution, endpoint=False)
    return np.array([shape(p) for p in phase_arr])


class WaveformGenerator:
    """
    Base for cyclic monitor waveforms.

    Subclasses provide the one-cycle template, the noise band and how fast
    the phase advances for the current vitals.
    """
    noise: float = 0.0

    def __init__(self, rng: np.random.Generator = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.phase = 0.0
        self._template = self.template()
        self._template_max_index = self._template.size - 1

    def template(self) -> np.ndarray:
        raise NotImplementedError

    def speed(self, ctx: WaveformContext) -> float:
        """Cycles per reference period; 1.0 at the reference rate."""
        return 1.0

    def amplitude(self, ctx: WaveformContext) -> float:
        return 1.0

    def produce_sample(self, ctx: WaveformContext) -> float:
        """Return the next sample and advance the phase."""
        idx = int(self.phase * self._template_max_index)
        value = self._template[idx] * self.amplitude(ctx)
        if self.noise > 0.0:
            value += self.rng.uniform(-self.noise / 2.0, self.noise / 2.0)
        self.phase = (self.phase + WAVEFORM_PHASE_STEP * self.speed(ctx)) % 1.0
        return float(value)


class WaveformTrace:
    """
    Sweep buffer behind one plot.

    Samples accumulate left to right; after `max_points` the sweep restarts
    from an empty trace.
    """
    def __init__(self, generator: WaveformGenerator, max_points: int = TRACE_MAX_POINTS):
        self.generator = generator
        self.max_points = max_points
        self.data: List[float] = []
        self.draw_position = 0

    def advance(self, ctx: WaveformContext) -> float:
        value = self.generator.produce_sample(ctx)
        self.data.append(value)
        self.draw_position += 1
        if self.draw_position >= self.max_points:
            self.data = []
            self.draw_position = 0
        return value
