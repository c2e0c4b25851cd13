from datetime import datetime

import pytest

from anamon.core.enums import AlarmPriority
from anamon.monitors.alarms import AlarmCondition
from anamon.monitors.registry import AlarmRegistry
from conftest import SteppingClock


def critical(title, message="x"):
    return AlarmCondition(AlarmPriority.CRITICAL, title, message)


def warning(title, message="x"):
    return AlarmCondition(AlarmPriority.WARNING, title, message)


@pytest.fixture
def registry(scheduler):
    return AlarmRegistry(scheduler, clock=SteppingClock())


class TestRecord:
    def test_record_inserts_newest_first(self, registry):
        registry.record(warning("A"))
        registry.record(critical("B"))
        assert [a.title for a in registry] == ["B", "A"]
        assert registry.highest_priority() is AlarmPriority.CRITICAL

    def test_same_title_and_priority_is_ignored(self, registry):
        first = registry.record(warning("Heart Rate Abnormal", "45 bpm"))
        again = registry.record(warning("Heart Rate Abnormal", "47 bpm"))
        assert first is not None
        assert again is None
        assert len(registry) == 1
        assert registry.alarms[0].message == "45 bpm"

    def test_same_title_other_priority_is_distinct(self, registry):
        registry.record(warning("SpO₂"))
        registry.record(critical("SpO₂"))
        assert len(registry) == 2

    def test_list_is_capped(self, registry):
        for i in range(9):
            registry.record(warning(f"Alarm {i}"))
        titles = [a.title for a in registry]
        assert titles == [f"Alarm {i}" for i in range(8, 0, -1)]

    def test_ids_are_unique_with_a_frozen_clock(self, scheduler):
        frozen = datetime(2024, 1, 1, 8, 0, 0)
        registry = AlarmRegistry(scheduler, clock=lambda: frozen)
        ids = [registry.record(warning(f"Alarm {i}")).id for i in range(5)]
        assert len(set(ids)) == 5
        assert ids == sorted(ids)

    def test_alarm_text_and_time(self, registry):
        alarm = registry.record(critical("Heart Rate Critical", "35 bpm"))
        assert alarm.text == "Heart Rate Critical: 35 bpm"
        assert alarm.fired_at == datetime(2024, 1, 1, 8, 0, 0)

    def test_record_all_returns_only_new(self, registry):
        registry.record(warning("A"))
        added = registry.record_all([warning("A"), critical("B")])
        assert [a.title for a in added] == ["B"]

    def test_empty_registry(self, registry):
        assert registry.is_empty()
        assert registry.highest_priority() is None


class TestSilence:
    def test_silence_keeps_only_critical(self, registry):
        registry.record(warning("A"))
        registry.record(critical("B"))
        registry.record(warning("C"))
        registry.silence()
        assert [a.title for a in registry] == ["B"]
        assert registry.silenced

    def test_silence_expires(self, registry, scheduler):
        registry.silence()
        assert registry.silence_remaining() == pytest.approx(120.0)

        scheduler.advance(119.0)
        assert registry.silenced
        assert registry.silence_remaining() == pytest.approx(1.0)

        scheduler.advance(1.0)
        assert not registry.silenced
        assert registry.silence_remaining() == 0.0

    def test_silencing_again_restarts_the_countdown(self, registry, scheduler):
        registry.silence()
        scheduler.advance(60.0)
        registry.silence()
        scheduler.advance(61.0)
        assert registry.silenced
        scheduler.advance(59.0)
        assert not registry.silenced
        assert scheduler.pending == 0

    def test_alarms_recorded_while_silenced_are_listed(self, registry):
        registry.silence()
        registry.record(warning("A"))
        assert len(registry) == 1


class TestResetAndResolve:
    def test_reset_clears_everything(self, registry, scheduler):
        registry.record(critical("A"))
        registry.silence()
        registry.reset()
        assert registry.is_empty()
        assert not registry.silenced
        assert scheduler.pending == 0

    def test_resolve_drops_inactive(self, registry):
        registry.record(warning("A"))
        registry.record(critical("B"))
        removed = registry.resolve([critical("B")])
        assert [a.title for a in removed] == ["A"]
        assert [a.title for a in registry] == ["B"]

    def test_resolve_priority_change(self, registry):
        registry.record(warning("HR"))
        registry.resolve([critical("HR")])
        assert registry.is_empty()


class TestListeners:
    def test_listeners_see_changes(self, registry, scheduler):
        seen = []
        registry.add_listener(lambda r: seen.append(len(r)))

        registry.record(warning("A"))
        registry.record(warning("A"))  # duplicate, no change
        registry.record(critical("B"))
        registry.silence()
        scheduler.advance(120.0)
        registry.reset()

        assert seen == [1, 2, 1, 1, 0]

    def test_remove_listener(self, registry):
        seen = []
        listener = seen.append
        registry.add_listener(listener)
        registry.remove_listener(listener)
        registry.record(warning("A"))
        assert seen == []
