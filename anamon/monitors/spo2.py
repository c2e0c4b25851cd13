import numpy as np

from anamon.core.constants import WAVEFORM_REFERENCE_HR
from .waveform import WaveformGenerator, WaveformContext, build_template


def _pleth_shape(t: float) -> float:
    # Systolic upstroke then a small dicrotic wave.
    if t < 0.3:
        return np.sin(t / 0.3 * np.pi) * 0.8
    if t < 0.5:
        return 0.2 * np.sin((t - 0.3) / 0.2 * np.pi)
    return 0.0


_PLETH_TEMPLATE = build_template(_pleth_shape)


class PlethWaveform(WaveformGenerator):
    """
    Plethysmograph trace.
    Pulses with the heart rate; amplitude scales with saturation.
    """
    noise = 0.05

    def template(self) -> np.ndarray:
        return _PLETH_TEMPLATE

    def speed(self, ctx: WaveformContext) -> float:
        return ctx.heart_rate / WAVEFORM_REFERENCE_HR

    def amplitude(self, ctx: WaveformContext) -> float:
        return ctx.spo2 / 100.0
