from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin, utcnow


class Homework(TimestampMixin, Base):
    __tablename__ = "homework"

    NOTE: ClassVar[str] = "description=Homework assigned to a class for a subject, optionally attached to a lesson."

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(sa.Text, nullable=False)
    description: Mapped[str] = mapped_column(sa.Text, nullable=False)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    schedule_id: Mapped[Optional[int]] = mapped_column(ForeignKey("schedules.id", ondelete="SET NULL"))
    due_date: Mapped[date] = mapped_column(sa.Date, nullable=False)


class HomeworkSubmission(Base):
    __tablename__ = "homework_submissions"
    __table_args__ = (UniqueConstraint("homework_id", "student_id", name="uq_homework_submissions_pair"),)

    NOTE: ClassVar[str] = "description=Student submissions for homework, with optional grade and feedback."

    id: Mapped[int] = mapped_column(primary_key=True)
    homework_id: Mapped[int] = mapped_column(ForeignKey("homework.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    submission_text: Mapped[Optional[str]] = mapped_column(sa.Text)
    file_url: Mapped[Optional[str]] = mapped_column(sa.Text)
    submitted_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now(), nullable=False
    )
    grade: Mapped[Optional[int]] = mapped_column(sa.Integer)
    feedback: Mapped[Optional[str]] = mapped_column(sa.Text)
