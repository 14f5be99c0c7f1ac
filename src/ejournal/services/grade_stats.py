"""Grade averages and attendance lookups over already-loaded records."""
from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Protocol, Sequence, Union

from ejournal.services.time_slots import PLACEHOLDER

Average = Union[float, str]

GRADE_WEIGHTS: dict[str, int] = {
    "test": 2,
    "exam": 3,
    "project": 2,
    "homework": 1,
    "classwork": 1,
}


class GradeLike(Protocol):
    student_id: int
    subject_id: int
    class_id: int
    grade: int
    grade_type: str
    created_at: datetime


class AttendanceLike(Protocol):
    student_id: int
    schedule_id: int
    status: str


def _day(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _type_name(grade_type) -> str:
    return getattr(grade_type, "value", grade_type)


def filter_grades(
    records: Iterable[GradeLike],
    student_id: Optional[int] = None,
    *,
    subject_id: Optional[int] = None,
    class_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[GradeLike]:
    out = []
    for r in records:
        if student_id is not None and r.student_id != student_id:
            continue
        if subject_id is not None and r.subject_id != subject_id:
            continue
        if class_id is not None and r.class_id != class_id:
            continue
        if date_from is not None and _day(r.created_at) < date_from:
            continue
        if date_to is not None and _day(r.created_at) > date_to:
            continue
        out.append(r)
    return out


def average_grade(student_id: int, records: Iterable[GradeLike], **filters) -> Average:
    """Mean grade of a student over the filtered records, or ``"—"`` when none match."""
    matched = filter_grades(records, student_id, **filters)
    if not matched:
        return PLACEHOLDER
    return sum(r.grade for r in matched) / len(matched)


def weighted_average_grade(student_id: int, records: Iterable[GradeLike], **filters) -> Average:
    matched = filter_grades(records, student_id, **filters)
    if not matched:
        return PLACEHOLDER
    total = weight = 0
    for r in matched:
        w = GRADE_WEIGHTS.get(_type_name(r.grade_type), 1)
        total += r.grade * w
        weight += w
    return total / weight


def format_average(value: Average) -> str:
    if isinstance(value, str):
        return value
    # an exact half rounds up: 4.25 shows as "4.3"
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def student_subject_averages(
    records: Sequence[GradeLike],
    student_ids: Iterable[int],
    **filters,
) -> dict[int, dict[str, str]]:
    """Per-student averages keyed by subject id (as str) plus an ``"overall"`` entry."""
    result: dict[int, dict[str, str]] = {}
    for sid in student_ids:
        own = filter_grades(records, sid, **filters)
        row = {
            str(subject_id): format_average(average_grade(sid, own, subject_id=subject_id))
            for subject_id in sorted({r.subject_id for r in own})
        }
        row["overall"] = format_average(average_grade(sid, own))
        result[sid] = row
    return result


def is_present(student_id: int, schedule_id: int, attendance: Iterable[AttendanceLike]) -> bool:
    """Attendance for one student and lesson; no record counts as present."""
    for record in attendance:
        if record.student_id == student_id and record.schedule_id == schedule_id:
            return getattr(record.status, "value", record.status) == "present"
    return True


def attendance_sheet(
    student_ids: Iterable[int],
    schedule_id: int,
    attendance: Sequence[AttendanceLike],
) -> dict[int, bool]:
    return {sid: is_present(sid, schedule_id, attendance) for sid in student_ids}
