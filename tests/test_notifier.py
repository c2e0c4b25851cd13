import numpy as np
import pytest

from anamon.core.constants import CRITICAL_TONE, WARNING_TONE
from anamon.core.enums import AlarmPriority
from anamon.monitors.alarms import AlarmCondition
from anamon.monitors.notifier import AlarmNotifier, synthesize_tone
from anamon.monitors.registry import AlarmRegistry
from conftest import SteppingClock

CRIT = AlarmCondition(AlarmPriority.CRITICAL, "Heart Rate Critical", "35 bpm")
WARN = AlarmCondition(AlarmPriority.WARNING, "CO₂ Abnormal", "47 mmHg")


@pytest.fixture
def registry(scheduler):
    return AlarmRegistry(scheduler, clock=SteppingClock())


@pytest.fixture
def notifier(registry, scheduler, tone_sink):
    return AlarmNotifier(registry, scheduler, tone_sink)


def frequencies(sink):
    return [tone.frequency_hz for tone in sink.played]


class TestLoop:
    def test_quiet_when_empty(self, notifier, scheduler, tone_sink):
        scheduler.advance(10.0)
        assert not notifier.is_sounding
        assert tone_sink.played == []

    def test_warning_tone_every_one_and_a_half_seconds(self, notifier, registry, scheduler, tone_sink):
        registry.record(WARN)
        assert notifier.loop_priority is AlarmPriority.WARNING
        scheduler.advance(1.0)
        assert tone_sink.played == []
        scheduler.advance(0.5)
        assert tone_sink.played == [WARNING_TONE]
        scheduler.advance(3.0)
        assert frequencies(tone_sink) == [600.0, 600.0, 600.0]

    def test_critical_tone_every_half_second(self, notifier, registry, scheduler, tone_sink):
        registry.record(CRIT)
        scheduler.advance(2.0)
        assert tone_sink.played == [CRITICAL_TONE] * 4

    def test_critical_replaces_warning_loop(self, notifier, registry, scheduler, tone_sink):
        registry.record(WARN)
        registry.record(CRIT)
        scheduler.advance(1.5)
        assert frequencies(tone_sink) == [1000.0, 1000.0, 1000.0]
        assert scheduler.pending == 1

    def test_same_priority_keeps_running_loop(self, notifier, registry, scheduler, tone_sink):
        registry.record(CRIT)
        scheduler.advance(0.25)
        registry.record(AlarmCondition(AlarmPriority.CRITICAL, "SpO₂ Critical", "88%"))
        scheduler.advance(0.25)
        assert len(tone_sink.played) == 1

    def test_reset_stops_tone(self, notifier, registry, scheduler, tone_sink):
        registry.record(CRIT)
        registry.reset()
        scheduler.advance(5.0)
        assert tone_sink.played == []
        assert not notifier.is_sounding


class TestSilence:
    def test_silence_mutes_then_resumes(self, notifier, registry, scheduler, tone_sink):
        registry.record(CRIT)
        registry.record(WARN)
        registry.silence()

        scheduler.advance(120.0)
        assert tone_sink.played == []
        assert not registry.silenced

        # Critical alarm survived the silence, so its loop restarts
        scheduler.advance(0.5)
        assert tone_sink.played == [CRITICAL_TONE]

    def test_warnings_only_stay_quiet_after_silence(self, notifier, registry, scheduler, tone_sink):
        registry.record(WARN)
        registry.silence()
        scheduler.advance(200.0)
        assert registry.is_empty()
        assert tone_sink.played == []

    def test_new_alarm_while_silenced_does_not_sound(self, notifier, registry, scheduler, tone_sink):
        registry.silence()
        registry.record(CRIT)
        scheduler.advance(60.0)
        assert tone_sink.played == []

    def test_detach(self, notifier, registry, scheduler, tone_sink):
        registry.record(CRIT)
        notifier.detach()
        registry.record(WARN)
        scheduler.advance(5.0)
        assert tone_sink.played == []


class TestSynthesis:
    def test_critical_burst(self):
        pcm = synthesize_tone(CRITICAL_TONE)
        assert pcm.dtype == np.int16
        assert pcm.size == 4410
        assert np.abs(pcm).max() <= int(0.3 * 32767) + 1
        # Faded ends
        assert abs(int(pcm[0])) < 100
        assert abs(int(pcm[-1])) < 100

    def test_warning_burst_length(self):
        pcm = synthesize_tone(WARNING_TONE, sample_rate=8000)
        assert pcm.size == 1200
