import numpy as np

from anamon.core.constants import CRITICAL_TONE, WARNING_TONE, ToneProfile
from anamon.core.enums import AlarmPriority

TONES = {
    AlarmPriority.CRITICAL: CRITICAL_TONE,
    AlarmPriority.WARNING: WARNING_TONE,
}

_FADE_SEC = 0.005


def synthesize_tone(tone: ToneProfile, sample_rate: int = 44100) -> np.ndarray:
    """
    Render one tone burst as 16-bit mono PCM.
    Short linear fades at both ends avoid clicks.
    """
    n = max(1, int(tone.duration_sec * sample_rate))
    t = np.arange(n) / sample_rate
    wave = np.sin(2.0 * np.pi * tone.frequency_hz * t) * tone.gain

    fade = min(n // 2, int(_FADE_SEC * sample_rate))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade)
        wave[:fade] *= ramp
        wave[-fade:] *= ramp[::-1]
    return (np.clip(wave, -1.0, 1.0) * 32767).astype(np.int16)


class NullToneSink:
    """Tone sink used when no audio device is available."""
    def play(self, tone: ToneProfile):
        pass


class AlarmNotifier:
    """
    Drives the audible alarm from the registry state.

    A single loop slot plays the tone of the highest priority present
    (critical > warning). The loop stops when the list empties or the
    registry is silenced, and restarts when silence expires.
    """
    def __init__(self, registry, scheduler, sink=None):
        self.registry = registry
        self.scheduler = scheduler
        self.sink = sink if sink is not None else NullToneSink()

        self._loop = None
        self.loop_priority = None
        registry.add_listener(self._on_registry_changed)

    @property
    def is_sounding(self) -> bool:
        return self._loop is not None and self._loop.active

    def detach(self):
        self.stop()
        self.registry.remove_listener(self._on_registry_changed)

    def refresh(self):
        """Match the loop to the current alarm set."""
        if self.registry.silenced or self.registry.is_empty():
            self.stop()
            return

        priority = self.registry.highest_priority()
        if self.is_sounding and priority is self.loop_priority:
            return

        self.stop()
        tone = TONES[priority]
        self.loop_priority = priority
        self._loop = self.scheduler.call_every(tone.interval_sec, lambda: self._beep(tone))

    def stop(self):
        if self._loop is not None:
            self._loop.cancel()
            self._loop = None
        self.loop_priority = None

    def _beep(self, tone: ToneProfile):
        if self.registry.silenced:
            return
        self.sink.play(tone)

    def _on_registry_changed(self, _registry):
        self.refresh()
