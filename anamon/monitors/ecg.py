import numpy as np

from anamon.core.constants import WAVEFORM_REFERENCE_HR
from .waveform import WaveformGenerator, WaveformContext, build_template


def _ecg_shape(t: float) -> float:
    """Piecewise PQRST complex over one beat."""
    if 0.1 < t < 0.2:
        return 0.15 * np.sin((t - 0.1) * np.pi / 0.1)   # P wave
    if 0.3 < t < 0.4:
        qrs_t = (t - 0.3) / 0.1
        if qrs_t < 0.3:
            return -0.2                                  # Q
        if qrs_t < 0.5:
            return 1.0                                   # R
        return -0.3                                      # S
    if 0.5 < t < 0.7:
        return 0.25 * np.sin((t - 0.5) * np.pi / 0.2)   # T wave
    return 0.0


_ECG_TEMPLATE = build_template(_ecg_shape)


class ECGWaveform(WaveformGenerator):
    """Lead II trace; sweep speed follows heart rate."""
    noise = 0.02

    def template(self) -> np.ndarray:
        return _ECG_TEMPLATE

    def speed(self, ctx: WaveformContext) -> float:
        return ctx.heart_rate / WAVEFORM_REFERENCE_HR
