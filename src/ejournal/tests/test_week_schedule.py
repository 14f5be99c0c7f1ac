from datetime import date, datetime
from types import SimpleNamespace

from ejournal.services.time_slots import SlotTable
from ejournal.services.week_schedule import (
    build_week_grid,
    entries_for_day,
    lesson_over,
    matches_day,
    partition_week,
    week_dates,
    week_start,
)

MONDAY = date(2024, 5, 6)


def entry(id, day_of_week, start, end="23:00", schedule_date=None):
    return SimpleNamespace(
        id=id, day_of_week=day_of_week, schedule_date=schedule_date, start_time=start, end_time=end
    )


def ids(entries):
    return [e.id for e in entries]


def test_week_start_is_monday():
    assert week_start(date(2024, 5, 9)) == MONDAY
    assert week_start(date(2024, 5, 12)) == MONDAY
    assert week_start(MONDAY) == MONDAY
    assert week_start(datetime(2024, 5, 8, 13, 30)) == MONDAY
    assert week_dates(date(2024, 5, 8))[-1] == date(2024, 5, 12)


def test_dated_entry_only_matches_its_date():
    dated = entry(1, 1, "08:00", schedule_date=MONDAY)
    assert matches_day(dated, MONDAY)
    assert not matches_day(dated, date(2024, 5, 13))

    weekly = entry(2, 1, "08:00")
    assert matches_day(weekly, MONDAY)
    assert matches_day(weekly, date(2024, 5, 13))
    assert not matches_day(weekly, date(2024, 5, 7))


def test_partition_sorts_each_day_by_start_time():
    entries = [entry(1, 1, "09:00"), entry(2, 1, "08:00", schedule_date=MONDAY)]
    buckets = partition_week(entries, date(2024, 5, 8))

    assert [b.date for b in buckets][0] == MONDAY
    assert [b.day_of_week for b in buckets] == [1, 2, 3, 4, 5, 6, 7]
    assert ids(buckets[0].entries) == [2, 1]
    assert all(not b.entries for b in buckets[1:])


def test_partition_drops_dated_entries_of_other_weeks():
    entries = [entry(1, 3, "10:00", schedule_date=date(2024, 5, 15)), entry(2, 3, "11:00")]
    buckets = partition_week(entries, MONDAY)
    assert ids(buckets[2].entries) == [2]


def test_equal_start_times_keep_input_order():
    entries = [entry(5, 2, "10:00"), entry(3, 2, "10:00"), entry(4, 2, "09:00")]
    assert ids(entries_for_day(entries, date(2024, 5, 7))) == [4, 5, 3]


def test_grid_places_lessons_by_effective_slot():
    table = SlotTable(
        [
            SimpleNamespace(slot_number=1, start_time="08:30", end_time="09:15", class_id=None),
            SimpleNamespace(slot_number=2, start_time="09:30", end_time="10:15", class_id=None),
            SimpleNamespace(slot_number=2, start_time="09:40", end_time="10:25", class_id=7),
        ]
    )
    entries = [
        entry(1, 1, "09:40", "10:25"),
        entry(2, 3, "08:30", "09:15"),
        entry(3, 4, "12:00", "12:45"),  # fits no slot
    ]

    grid = build_week_grid(entries, MONDAY, table, class_id=7)

    assert grid.days[0] == MONDAY
    assert [r.slot_number for r in grid.rows] == [0, 1, 2]
    assert grid.rows[0].time is None
    assert all(c is None for c in grid.rows[0].cells)
    assert grid.rows[1].cells[2].id == 2
    assert grid.rows[2].cells[0].id == 1
    assert str(grid.rows[2].time) == "09:40-10:25"


def test_grid_is_empty_without_placeable_lessons():
    grid = build_week_grid([entry(1, 1, "12:00", "12:45")], MONDAY, SlotTable())
    assert grid.rows == []
    assert len(grid.days) == 7


def test_lesson_over():
    now = datetime(2024, 5, 6, 9, 30)
    assert not lesson_over(MONDAY, "09:45", now)
    assert lesson_over(MONDAY, "09:30", now)
    assert lesson_over(MONDAY, "09:15", now)
    # other days and undated lessons are not time-checked
    assert lesson_over(date(2024, 5, 7), "09:45", now)
    assert lesson_over(None, "09:45", now)
