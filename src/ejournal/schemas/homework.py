from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from ejournal.schemas.base import APIModel


class HomeworkIn(APIModel):
    title: str = Field(..., min_length=1)
    description: str
    subject_id: int
    class_id: int
    schedule_id: Optional[int] = None
    due_date: date


class HomeworkUpdate(APIModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    schedule_id: Optional[int] = None


class HomeworkOut(HomeworkIn):
    id: int
    teacher_id: int
    created_at: datetime


class SubmissionIn(APIModel):
    homework_id: int
    submission_text: Optional[str] = None
    file_url: Optional[str] = None


class SubmissionGradeIn(APIModel):
    grade: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = None


class SubmissionOut(APIModel):
    id: int
    homework_id: int
    student_id: int
    submission_text: Optional[str] = None
    file_url: Optional[str] = None
    submitted_at: datetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
