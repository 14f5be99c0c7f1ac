from __future__ import annotations

from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin


class Subgroup(TimestampMixin, Base):
    __tablename__ = "subgroups"

    NOTE: ClassVar[str] = "description=Subgroups splitting a class for some lessons (e.g. language groups)."

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    school_id: Mapped[int] = mapped_column(ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)


class StudentSubgroup(Base):
    __tablename__ = "student_subgroups"
    __table_args__ = (UniqueConstraint("student_id", "subgroup_id", name="uq_student_subgroups_pair"),)

    NOTE: ClassVar[str] = "description=Membership of students in subgroups."

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subgroup_id: Mapped[int] = mapped_column(ForeignKey("subgroups.id", ondelete="CASCADE"), nullable=False)
