from PySide6.QtCore import QBuffer, QByteArray, QIODevice

from anamon.core.constants import ToneProfile
from anamon.monitors.notifier import synthesize_tone

_SAMPLE_RATE = 44100


class QtToneSink:
    """
    Plays alarm bursts through QtMultimedia.

    If no audio output is available the sink prints once and stays silent;
    the rest of the monitor keeps running.
    """
    def __init__(self):
        self.available = False
        self._sink = None
        self._buffer = None
        self._cache = {}
        try:
            from PySide6.QtMultimedia import QAudioFormat, QAudioSink, QMediaDevices
        except ImportError as e:
            print(f"Audio unavailable, alarms will be silent: {e}")
            return

        device = QMediaDevices.defaultAudioOutput()
        if device.isNull():
            print("Audio unavailable, alarms will be silent: no output device")
            return

        fmt = QAudioFormat()
        fmt.setSampleRate(_SAMPLE_RATE)
        fmt.setChannelCount(1)
        fmt.setSampleFormat(QAudioFormat.SampleFormat.Int16)
        self._sink = QAudioSink(device, fmt)
        self.available = True

    def play(self, tone: ToneProfile):
        if not self.available:
            return
        pcm = self._cache.get(tone)
        if pcm is None:
            pcm = QByteArray(synthesize_tone(tone, _SAMPLE_RATE).tobytes())
            self._cache[tone] = pcm

        self._sink.stop()
        self._buffer = QBuffer()
        self._buffer.setData(pcm)
        self._buffer.open(QIODevice.ReadOnly)
        self._sink.start(self._buffer)
