"""
Simulation engine tests: relaxation targets, clamp ranges and the fused
tick + alarm step.
"""

import itertools

import pytest

from anamon.core.constants import VITAL_TUNING
from anamon.core.enums import AlarmPriority
from anamon.core.state import SimulationConfig, CONTROL_RANGES
from anamon.monitors.alarms import AlarmCondition
from conftest import MidpointRng

CLAMPED_VITALS = ("heart_rate", "systolic", "diastolic", "spo2", "co2", "temperature", "peak_pressure")


def assert_in_clamp_range(vitals):
    for name in CLAMPED_VITALS:
        tuning = VITAL_TUNING[name]
        value = getattr(vitals, name)
        assert tuning.low <= value <= tuning.high, f"{name}={value} outside [{tuning.low}, {tuning.high}]"


class TestClampRanges:
    @pytest.mark.parametrize(
        "extremes",
        list(itertools.product(*[(r.minimum, r.maximum) for r in CONTROL_RANGES.values()])),
    )
    def test_vitals_stay_in_range_at_control_extremes(self, engine_factory, extremes):
        controls = dict(zip(CONTROL_RANGES, extremes))
        engine = engine_factory(**controls)
        for _ in range(60):
            engine.step()
            assert_in_clamp_range(engine.vitals)

    def test_long_run_with_noise(self, engine, advance_ticks):
        # ~3 simulated hours, enough for the temperature drift to hit its floor
        for _ in range(5400):
            engine.step()
        assert_in_clamp_range(engine.vitals)
        assert engine.vitals.temperature == pytest.approx(35.0, abs=0.05)


class TestTargets:
    def test_no_agent_relaxes_to_baseline(self, engine_factory, advance_ticks):
        engine = engine_factory(rng=MidpointRng(), anesthetic_agent=0.0)
        assert engine.anesthetic_depth == 0.0
        advance_ticks(engine, 200)
        assert engine.vitals.heart_rate == pytest.approx(75.0, abs=0.01)
        assert engine.vitals.systolic == pytest.approx(120.0, abs=0.01)
        assert engine.vitals.diastolic == pytest.approx(80.0, abs=0.01)

    def test_one_mac_lowers_hr_and_bp(self, quiet_engine, advance_ticks):
        advance_ticks(quiet_engine, 200)
        assert quiet_engine.vitals.heart_rate == pytest.approx(55.0, abs=0.01)
        assert quiet_engine.vitals.systolic == pytest.approx(95.0, abs=0.01)

    def test_deep_anesthesia_hits_hr_floor(self, engine_factory, advance_ticks):
        engine = engine_factory(rng=MidpointRng(), anesthetic_agent=4.0)
        advance_ticks(engine, 200)
        assert engine.vitals.heart_rate == 40.0

    def test_hypoventilation_raises_co2(self, engine_factory, advance_ticks):
        engine = engine_factory(rng=MidpointRng(), fio2=21.0, tidal_volume=300.0, respiratory_rate=10.0)
        assert engine.controls.minute_ventilation == pytest.approx(3.0)
        assert engine.co2_target() == 50.0
        previous = engine.vitals.co2
        for _ in range(100):
            engine.step()
            assert previous <= engine.vitals.co2 <= 60.0
            previous = engine.vitals.co2
        assert engine.vitals.co2 == pytest.approx(50.0, abs=0.01)

    @pytest.mark.parametrize("tidal_volume, expected", [
        (300.0, 50.0),
        (400.0, 45.0),
        (500.0, 38.0),
        (700.0, 38.0),
        (800.0, 33.0),
        (900.0, 33.0),
        (1000.0, 28.0),
    ])
    def test_co2_bands(self, engine_factory, tidal_volume, expected):
        engine = engine_factory(tidal_volume=tidal_volume, respiratory_rate=10.0)
        assert engine.co2_target() == expected

    @pytest.mark.parametrize("fio2, expected", [
        (21.0, 94.0),
        (25.5, 95.5),
        (30.0, 97.0),
        (40.0, 99.0),
        (100.0, 99.0),
    ])
    def test_spo2_steps(self, engine_factory, fio2, expected):
        engine = engine_factory(rng=MidpointRng(), fio2=fio2)
        assert engine.spo2_target() == pytest.approx(expected)

    def test_single_tick_values(self, quiet_engine):
        quiet_engine.step()
        v = quiet_engine.vitals
        d = quiet_engine.derived

        assert v.heart_rate == pytest.approx(95.0 + (55.0 - 95.0) * 0.08)
        assert v.systolic == pytest.approx(120.0 + (95.0 - 120.0) * 0.08)
        assert v.diastolic == pytest.approx(v.systolic - 40.0)
        assert v.spo2 == pytest.approx(98.0 + (99.0 - 98.0) * 0.1)
        assert v.peak_pressure == pytest.approx(500.0 / 50.0 + 5.0)
        assert v.mean_pressure == pytest.approx(15.0 * 0.7)

        assert d.inspired_agent == pytest.approx(0.5 + (0.6 - 0.5) * 0.15)
        assert d.expired_agent == pytest.approx(1.8 + (1.7 - 1.8) * 0.08)
        assert d.ie_ratio == pytest.approx(2.0)

    def test_temperature_drifts_down(self, quiet_engine, advance_ticks):
        advance_ticks(quiet_engine, 1800)  # one simulated hour
        assert quiet_engine.time_elapsed == pytest.approx(3600.0)
        assert 36.0 < quiet_engine.vitals.temperature < 36.5

    def test_noise_is_bounded(self, engine, advance_ticks):
        for _ in range(200):
            engine.step()
            assert 1.9 <= engine.derived.ie_ratio <= 2.1
            assert engine.vitals.diastolic - (engine.vitals.systolic - 40.0) <= 2.0 + 1e-9

    def test_same_seed_is_reproducible(self, engine_factory, advance_ticks):
        a = engine_factory(config=SimulationConfig(rng_seed=7))
        b = engine_factory(config=SimulationConfig(rng_seed=7))
        advance_ticks(a, 50)
        advance_ticks(b, 50)
        assert a.vitals == b.vitals
        assert a.derived == b.derived


class TestControls:
    def test_set_control_clamps_to_range(self, engine):
        assert engine.set_control("fio2", 10.0) == 21.0
        assert engine.set_control("tidal_volume", 5000) == 1000.0
        assert engine.controls.tidal_volume == 1000.0

    def test_unknown_control(self, engine):
        with pytest.raises(KeyError):
            engine.set_control("nitrous", 50.0)

    def test_config_overrides_controls(self, engine_factory):
        engine = engine_factory(config=SimulationConfig(controls={"peep": 12.0}))
        assert engine.controls.peep == 12.0

    @pytest.mark.parametrize("config, error", [
        (SimulationConfig(tick_seconds=-1.0), ValueError),
        (SimulationConfig(controls={"nitrous": 50.0}), KeyError),
        (SimulationConfig(controls={"fio2": "high"}), ValueError),
    ])
    def test_config_validation(self, config, error):
        with pytest.raises(error):
            config.validate()

    def test_from_dict_requires_object(self):
        with pytest.raises(TypeError):
            SimulationConfig.from_dict([1, 2, 3])
        assert SimulationConfig.from_dict({"controls": {"peep": 8}}).validate().controls == {"peep": 8}

    def test_invalid_tick_period(self, scheduler):
        from anamon.core.engine import SimulationEngine
        with pytest.raises(ValueError):
            SimulationEngine(SimulationConfig(tick_seconds=0.0), scheduler=scheduler)


class TestStep:
    def test_step_requires_running(self, engine_factory):
        engine = engine_factory(start=False)
        assert engine.step() is None
        assert engine.time_elapsed == 0.0

    def test_forced_bradycardia_alarm(self, quiet_engine):
        quiet_engine.vitals.heart_rate = 35.0
        conditions = quiet_engine.evaluate_alarms()
        assert conditions == [AlarmCondition(AlarmPriority.CRITICAL, "Heart Rate Critical", "35 bpm")]

    def test_step_records_alarms(self, engine_factory):
        engine = engine_factory(rng=MidpointRng(), anesthetic_agent=6.0)
        engine.vitals.heart_rate = 40.0
        result = engine.step()
        titles = [a.title for a in result.new_alarms]
        assert "Heart Rate Abnormal" in titles
        assert result.snapshot.alarm_count == len(engine.alarms)

        # The same condition on the next tick does not add a duplicate
        again = engine.step()
        assert "Heart Rate Abnormal" not in [a.title for a in again.new_alarms]

    def test_stale_alarms_persist_by_default(self, quiet_engine):
        quiet_engine.alarms.record(AlarmCondition(AlarmPriority.CRITICAL, "Heart Rate Critical", "35 bpm"))
        result = quiet_engine.step()
        assert result.conditions == []
        assert quiet_engine.alarms.contains("Heart Rate Critical", AlarmPriority.CRITICAL)

    def test_auto_resolve_clears_stale_alarms(self, engine_factory):
        engine = engine_factory(config=SimulationConfig(auto_resolve_alarms=True), rng=MidpointRng())
        engine.alarms.record(AlarmCondition(AlarmPriority.CRITICAL, "Heart Rate Critical", "35 bpm"))
        result = engine.step()
        assert [a.title for a in result.resolved_alarms] == ["Heart Rate Critical"]
        assert engine.alarms.is_empty()

    def test_ticker_runs_on_scheduler(self, engine, scheduler):
        results = []
        engine.add_step_listener(results.append)
        scheduler.advance(10.0)
        assert len(results) == 5
        assert engine.time_elapsed == pytest.approx(10.0)

        engine.stop()
        scheduler.advance(10.0)
        assert len(results) == 5

    def test_output_buffer_holds_copies(self, engine, advance_ticks):
        advance_ticks(engine, 3)
        first = engine.output_buffer[0]
        assert first.time == pytest.approx(2.0)
        assert first.vitals is not engine.vitals
        assert len(engine.output_buffer) == 3
