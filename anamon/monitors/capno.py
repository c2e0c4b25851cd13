import numpy as np

from anamon.core.constants import WAVEFORM_REFERENCE_RR
from .waveform import WaveformGenerator, WaveformContext, build_template


def _capno_shape(t: float) -> float:
    """
    One breath, normalised to the plateau:
    inspiratory baseline, expiratory upstroke, alveolar plateau, downstroke.
    """
    if t < 0.3:
        return 0.0
    if t < 0.5:
        return (t - 0.3) / 0.2
    if t < 0.8:
        return 1.0
    return 1.0 - (t - 0.8) / 0.2


_CAPNO_TEMPLATE = build_template(_capno_shape)


class CapnoWaveform(WaveformGenerator):
    """Capnogram; sweep speed follows the ventilator rate."""
    noise = 0.03

    def template(self) -> np.ndarray:
        return _CAPNO_TEMPLATE

    def speed(self, ctx: WaveformContext) -> float:
        return ctx.respiratory_rate / WAVEFORM_REFERENCE_RR
