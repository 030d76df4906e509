import pytest

from tutorlog.config import time_slots_from_rules
from tutorlog.slots import ConfigError, TimeSlot, classify_time_slot, slots_from_config, validate_slots


@pytest.fixture
def slots():
    return time_slots_from_rules()


def test_default_slots(slots):
    assert len(slots) == 9
    assert slots[0] == TimeSlot("10:00-11:00", 600, 660, "#4A90E2")
    assert slots[-1].label == "18:00-19:00"


@pytest.mark.parametrize("minutes, label", [
    (600, "10:00-11:00"),
    (659, "10:00-11:00"),
    (660, "11:00-12:00"),
    (645, "10:00-11:00"),
    (1139, "18:00-19:00"),
])
def test_classify_boundaries(slots, minutes, label):
    assert classify_time_slot(minutes, slots).label == label


@pytest.mark.parametrize("minutes", [None, 0, 599, 1140, 1439])
def test_classify_outside(slots, minutes):
    assert classify_time_slot(minutes, slots) is None


def test_at_most_one_slot_per_minute(slots):
    for m in range(24 * 60):
        assert sum(1 for s in slots if s.contains(m)) <= 1


def test_slots_from_config_accepts_minutes_and_generates_label():
    got = slots_from_config([{"start": 480, "end": "09:30"}])
    assert got == [TimeSlot("08:00-09:30", 480, 570, "")]


@pytest.mark.parametrize("items", [
    [{"label": "a", "start": "11:00", "end": "10:00"}],
    [{"label": "a", "start": "10:00", "end": "11:00"}, {"label": "b", "start": "10:30", "end": "12:00"}],
    [{"label": "a", "start": "10:00", "end": "11:00"}, {"label": "a", "start": "11:00", "end": "12:00"}],
    [{"label": "a", "start": "10:00"}],
    [{"label": "a", "start": "ten", "end": "11:00"}],
    [{"label": "a", "start": "23:00", "end": "25:00"}],
])
def test_bad_slot_tables(items):
    with pytest.raises(ConfigError):
        slots_from_config(items)


def test_validate_slots_allows_gaps():
    table = [TimeSlot("a", 600, 660), TimeSlot("b", 720, 780)]
    assert validate_slots(table) == table
