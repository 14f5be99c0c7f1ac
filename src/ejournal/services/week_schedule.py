"""Week/day partitioning of lessons and the slot grid built on top of it."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Optional, Protocol, Sequence

from ejournal.services.time_slots import SlotTable, TimeRange

DAYS_IN_WEEK = 7


class EntryLike(Protocol):
    day_of_week: int
    schedule_date: Optional[date]
    start_time: str
    end_time: str


@dataclass
class DayBucket:
    date: date
    day_of_week: int
    entries: list[Any] = field(default_factory=list)


@dataclass
class GridRow:
    slot_number: int
    time: Optional[TimeRange]
    cells: list[Optional[Any]]


@dataclass
class WeekGrid:
    days: list[date]
    rows: list[GridRow]


def iso_day(d: date) -> int:
    """Day number with Monday = 1 and Sunday = 7."""
    return d.isoweekday()


def week_start(d: date) -> date:
    """Monday of the week containing ``d``."""
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.isoweekday() - 1)


def week_dates(d: date) -> list[date]:
    monday = week_start(d)
    return [monday + timedelta(days=i) for i in range(DAYS_IN_WEEK)]


def _entry_date(entry: EntryLike) -> Optional[date]:
    value = entry.schedule_date
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def matches_day(entry: EntryLike, day: date) -> bool:
    """A dated entry matches only its own date; an undated one matches its weekday."""
    dated = _entry_date(entry)
    if dated is not None:
        return dated == day
    return entry.day_of_week == iso_day(day)


def entries_for_day(entries: Iterable[EntryLike], day: date) -> list[Any]:
    # sorted() is stable, so ties keep their input order.
    return sorted((e for e in entries if matches_day(e, day)), key=lambda e: e.start_time)


def partition_week(entries: Sequence[EntryLike], start: date) -> list[DayBucket]:
    """Split ``entries`` into seven buckets, Monday first, each sorted by start time."""
    return [
        DayBucket(date=d, day_of_week=iso_day(d), entries=entries_for_day(entries, d))
        for d in week_dates(start)
    ]


def build_week_grid(
    entries: Sequence[EntryLike],
    start: date,
    slots: SlotTable,
    class_id: Optional[int] = None,
) -> WeekGrid:
    """Lay out a week as slot rows by day columns.

    Rows run from slot 0 to the highest slot number any lesson of the week
    occupies. A lesson occupies slot N when its start and end equal N's
    effective time range for ``class_id``.
    """
    buckets = partition_week(entries, start)
    days = [b.date for b in buckets]

    placed: dict[tuple[int, int], Any] = {}
    max_slot = -1
    for col, bucket in enumerate(buckets):
        for entry in bucket.entries:
            n = slots.slot_for_times(entry.start_time, entry.end_time, class_id)
            if n is None:
                continue
            placed.setdefault((n, col), entry)
            max_slot = max(max_slot, n)

    rows = [
        GridRow(
            slot_number=n,
            time=slots.resolve(n, class_id),
            cells=[placed.get((n, col)) for col in range(DAYS_IN_WEEK)],
        )
        for n in range(max_slot + 1)
    ]
    return WeekGrid(days=days, rows=rows)


def lesson_over(schedule_date: Optional[date], end_time: str, now: datetime) -> bool:
    """False only for a lesson dated today whose end time is still ahead of ``now``.

    Undated lessons and lessons on other days are not time-checked.
    """
    if schedule_date is None or schedule_date != now.date():
        return True
    hours, minutes = (int(p) for p in end_time.split(":")[:2])
    return now.time() >= time(hours, minutes)
