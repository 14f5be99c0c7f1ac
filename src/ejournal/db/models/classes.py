from __future__ import annotations

from typing import ClassVar

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin


class SchoolClass(TimestampMixin, Base):
    __tablename__ = "classes"

    NOTE: ClassVar[str] = "description=School classes (forms) for an academic year."

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    school_id: Mapped[int] = mapped_column(ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    grade_level: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    academic_year: Mapped[str] = mapped_column(sa.String(16), nullable=False)


class StudentClass(Base):
    __tablename__ = "student_classes"
    __table_args__ = (UniqueConstraint("student_id", "class_id", name="uq_student_classes_pair"),)

    NOTE: ClassVar[str] = "description=Enrollment of students into classes."

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
