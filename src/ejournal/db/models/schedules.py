from __future__ import annotations

import enum
from datetime import date
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, str_enum


class ScheduleStatus(str, enum.Enum):
    NOT_CONDUCTED = "not_conducted"
    CONDUCTED = "conducted"
    CANCELLED = "cancelled"


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="day_of_week_range"),
        sa.Index("ix_schedules_class_day", "class_id", "day_of_week"),
    )

    NOTE: ClassVar[str] = (
        "description=Lessons. A lesson with schedule_date happens on that date only; "
        "otherwise it repeats weekly on day_of_week (1=Monday .. 7=Sunday)."
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    schedule_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    start_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
    room: Mapped[Optional[str]] = mapped_column(sa.Text)
    subgroup_id: Mapped[Optional[int]] = mapped_column(ForeignKey("subgroups.id", ondelete="SET NULL"))
    status: Mapped[ScheduleStatus] = mapped_column(
        str_enum(ScheduleStatus, "schedule_status"),
        nullable=False,
        default=ScheduleStatus.NOT_CONDUCTED,
    )
