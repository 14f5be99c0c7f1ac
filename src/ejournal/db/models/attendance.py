from __future__ import annotations

import enum
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin, str_enum


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"


class Attendance(TimestampMixin, Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("student_id", "schedule_id", name="uq_attendance_student_schedule"),)

    NOTE: ClassVar[str] = (
        "description=Attendance marks per student and lesson. "
        "A missing record means the student was present."
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    schedule_id: Mapped[int] = mapped_column(ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(str_enum(AttendanceStatus, "attendance_status"), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(sa.Text)
