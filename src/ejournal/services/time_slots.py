"""Lesson time-slot resolution.

A class may override the school-wide default time of any numbered slot.
The effective time of slot N for class C is C's override when one exists,
else the default for N, else nothing (rendered as :data:`PLACEHOLDER`).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

PLACEHOLDER = "—"

# Seeded by ``ejournal seed-time-slots`` when the defaults table is empty.
DEFAULT_SLOT_TIMES: tuple[tuple[int, str, str], ...] = (
    (0, "08:00", "08:25"),
    (1, "08:30", "09:15"),
    (2, "09:30", "10:15"),
    (3, "10:30", "11:15"),
    (4, "11:30", "12:15"),
    (5, "12:30", "13:15"),
    (6, "13:30", "14:15"),
    (7, "14:30", "15:15"),
    (8, "15:30", "16:15"),
)


class SlotLike(Protocol):
    slot_number: int
    start_time: str
    end_time: str
    class_id: Optional[int]


@dataclass(frozen=True)
class TimeRange:
    start_time: str
    end_time: str

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


@dataclass(frozen=True)
class EffectiveSlot:
    slot_number: int
    start_time: str
    end_time: str
    is_override: bool


def normalize_time(value: str) -> str:
    """Return ``value`` as zero-padded ``HH:MM``; accepts ``H:MM`` and ``HH:MM:SS``."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"invalid time {value!r}, expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"invalid time {value!r}, expected HH:MM")
    return f"{hours:02d}:{minutes:02d}"


class SlotTable:
    """In-memory index of default and per-class slot records."""

    def __init__(self, slots: Iterable[SlotLike] = ()):
        self._defaults: dict[int, TimeRange] = {}
        self._overrides: dict[tuple[int, int], TimeRange] = {}
        for slot in slots:
            self.add(slot.slot_number, slot.start_time, slot.end_time, slot.class_id)

    def add(self, slot_number: int, start_time: str, end_time: str, class_id: Optional[int] = None) -> None:
        rng = TimeRange(normalize_time(start_time), normalize_time(end_time))
        if class_id is None:
            self._defaults[slot_number] = rng
        else:
            self._overrides[(class_id, slot_number)] = rng

    def resolve(self, slot_number: int, class_id: Optional[int] = None) -> Optional[TimeRange]:
        if class_id is not None:
            override = self._overrides.get((class_id, slot_number))
            if override is not None:
                return override
        return self._defaults.get(slot_number)

    def is_override(self, slot_number: int, class_id: Optional[int]) -> bool:
        return class_id is not None and (class_id, slot_number) in self._overrides

    def slot_numbers(self, class_id: Optional[int] = None) -> list[int]:
        numbers = set(self._defaults)
        if class_id is not None:
            numbers.update(n for (c, n) in self._overrides if c == class_id)
        return sorted(numbers)

    def effective(self, class_id: Optional[int] = None) -> list[EffectiveSlot]:
        out = []
        for n in self.slot_numbers(class_id):
            rng = self.resolve(n, class_id)
            out.append(EffectiveSlot(n, rng.start_time, rng.end_time, self.is_override(n, class_id)))
        return out

    def slot_for_times(self, start_time: str, end_time: str, class_id: Optional[int] = None) -> Optional[int]:
        """Slot number whose effective range equals ``start_time``-``end_time``."""
        wanted = TimeRange(normalize_time(start_time), normalize_time(end_time))
        for n in self.slot_numbers(class_id):
            if self.resolve(n, class_id) == wanted:
                return n
        return None


def resolve_slot(slots: Iterable[SlotLike], slot_number: int, class_id: Optional[int] = None) -> Optional[TimeRange]:
    return SlotTable(slots).resolve(slot_number, class_id)


def format_slot(rng: Optional[TimeRange]) -> str:
    return str(rng) if rng is not None else PLACEHOLDER


def effective_slots(slots: Iterable[SlotLike], class_id: Optional[int] = None) -> list[EffectiveSlot]:
    return SlotTable(slots).effective(class_id)
