from types import SimpleNamespace

import pytest

from ejournal.services.time_slots import (
    PLACEHOLDER,
    SlotTable,
    TimeRange,
    effective_slots,
    format_slot,
    normalize_time,
    resolve_slot,
)


def slot(number, start, end, class_id=None):
    return SimpleNamespace(slot_number=number, start_time=start, end_time=end, class_id=class_id)


SLOTS = [
    slot(1, "08:30", "09:15"),
    slot(2, "09:30", "10:15"),
    slot(3, "10:00", "10:45"),
    slot(3, "10:15", "11:00", class_id=10),
    slot(7, "14:30", "15:15", class_id=10),
]


def test_class_override_wins_over_default():
    assert resolve_slot(SLOTS, 3, 10) == TimeRange("10:15", "11:00")
    assert resolve_slot(SLOTS, 3, 11) == TimeRange("10:00", "10:45")
    assert resolve_slot(SLOTS, 3) == TimeRange("10:00", "10:45")


def test_unknown_slot_renders_placeholder():
    rng = resolve_slot(SLOTS, 5, 10)
    assert rng is None
    assert format_slot(rng) == PLACEHOLDER
    assert format_slot(resolve_slot(SLOTS, 1, 10)) == "08:30-09:15"


def test_effective_slots_merge_defaults_and_overrides():
    table = SlotTable(SLOTS)
    effective = table.effective(10)
    assert [s.slot_number for s in effective] == [1, 2, 3, 7]
    assert [s.is_override for s in effective] == [False, False, True, True]
    # an override-only slot does not leak into other classes
    assert [s.slot_number for s in effective_slots(SLOTS, 11)] == [1, 2, 3]


def test_slot_for_times_uses_class_times():
    table = SlotTable(SLOTS)
    assert table.slot_for_times("10:15", "11:00", 10) == 3
    assert table.slot_for_times("10:00", "10:45", 10) is None
    assert table.slot_for_times("10:00", "10:45", 11) == 3
    assert table.slot_for_times("8:30", "09:15:00") == 1


def test_later_record_replaces_earlier_one():
    table = SlotTable([slot(1, "08:30", "09:15"), slot(1, "08:00", "08:45")])
    assert table.resolve(1) == TimeRange("08:00", "08:45")


@pytest.mark.parametrize(
    "raw, expected",
    [("8:05", "08:05"), ("08:05", "08:05"), ("08:05:00", "08:05"), (" 23:59 ", "23:59")],
)
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "8", "24:00", "12:60", "ab:cd", "1:2:3:4"])
def test_normalize_time_rejects_garbage(raw):
    with pytest.raises(ValueError):
        normalize_time(raw)
