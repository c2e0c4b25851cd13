from datetime import datetime, timedelta
from pathlib import Path
import os
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Widget tests run without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from anamon.core.engine import SimulationEngine
from anamon.core.scheduler import ManualScheduler
from anamon.core.state import SimulationConfig


class MidpointRng:
    """Noise source that always returns the centre of the band (zero noise)."""
    def uniform(self, low, high):
        return (low + high) / 2.0


class RecordingToneSink:
    def __init__(self):
        self.played = []

    def play(self, tone):
        self.played.append(tone)


class SteppingClock:
    """Wall clock that advances one second per call."""
    def __init__(self, start=datetime(2024, 1, 1, 8, 0, 0)):
        self.current = start

    def __call__(self):
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def tone_sink():
    return RecordingToneSink()


@pytest.fixture
def engine_factory(scheduler):
    """Build engines on the shared manual scheduler."""
    def _factory(config=None, rng=None, start=True, **controls):
        config = config or SimulationConfig(rng_seed=1234)
        if controls:
            config.controls.update(controls)
        engine = SimulationEngine(config, rng=rng, scheduler=scheduler, clock=SteppingClock())
        if start:
            engine.start()
        return engine

    return _factory


@pytest.fixture
def engine(engine_factory):
    """Seeded, running engine with default controls."""
    return engine_factory()


@pytest.fixture
def quiet_engine(engine_factory):
    """Running engine with all noise pinned to zero."""
    return engine_factory(rng=MidpointRng())


@pytest.fixture
def advance_ticks():
    """Helper to step an engine a number of ticks."""
    def _advance(engine, ticks):
        result = None
        for _ in range(ticks):
            result = engine.step()
        return result

    return _advance
