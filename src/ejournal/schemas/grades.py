from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import Field

from ejournal.db.models.grades import GradeType
from ejournal.schemas.base import APIModel


class GradeCreate(APIModel):
    student_id: int
    subject_id: int
    class_id: int
    schedule_id: Optional[int] = None
    grade: int = Field(..., ge=1, le=5)
    grade_type: GradeType = GradeType.CLASSWORK
    comment: Optional[str] = None
    date: Optional[dt.date] = None


class GradeUpdate(APIModel):
    grade: Optional[int] = Field(default=None, ge=1, le=5)
    grade_type: Optional[GradeType] = None
    comment: Optional[str] = None
    schedule_id: Optional[int] = None


class GradeOut(APIModel):
    id: int
    student_id: int
    subject_id: int
    class_id: int
    teacher_id: int
    schedule_id: Optional[int] = None
    grade: int
    grade_type: GradeType
    comment: Optional[str] = None
    created_at: datetime
