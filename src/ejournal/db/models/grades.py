from __future__ import annotations

import enum
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin, str_enum


class GradeType(str, enum.Enum):
    CLASSWORK = "classwork"
    HOMEWORK = "homework"
    TEST = "test"
    EXAM = "exam"
    PROJECT = "project"


class Grade(TimestampMixin, Base):
    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint("grade BETWEEN 1 AND 5", name="grade_range"),
        sa.Index("ix_grades_class_subject", "class_id", "subject_id"),
    )

    NOTE: ClassVar[str] = "description=Grades (1-5) given to students, optionally tied to a lesson."

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    schedule_id: Mapped[Optional[int]] = mapped_column(ForeignKey("schedules.id", ondelete="SET NULL"))
    grade: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    grade_type: Mapped[GradeType] = mapped_column(str_enum(GradeType, "grade_type"), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(sa.Text)
