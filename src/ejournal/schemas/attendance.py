from __future__ import annotations

from typing import Optional

from ejournal.db.models.attendance import AttendanceStatus
from ejournal.schemas.base import APIModel


class AttendanceIn(APIModel):
    student_id: int
    schedule_id: int
    status: AttendanceStatus
    comment: Optional[str] = None


class AttendanceOut(AttendanceIn):
    id: int


class SheetRowOut(APIModel):
    student_id: int
    present: bool
