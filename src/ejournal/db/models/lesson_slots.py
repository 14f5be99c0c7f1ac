from __future__ import annotations

from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base


class LessonSlot(Base):
    """A numbered lesson period. ``class_id`` is NULL for the school-wide default."""

    __tablename__ = "lesson_slots"
    __table_args__ = (
        UniqueConstraint("class_id", "slot_number", name="uq_lesson_slots_class_slot"),
        # NULLs are distinct in unique constraints, so defaults need their own index.
        sa.Index(
            "ux_lesson_slots_default_slot_number",
            "slot_number",
            unique=True,
            postgresql_where=sa.text("class_id IS NULL"),
            sqlite_where=sa.text("class_id IS NULL"),
        ),
        CheckConstraint("slot_number >= 0", name="slot_number_non_negative"),
    )

    NOTE: ClassVar[str] = (
        "description=Lesson time slots. Rows without class_id are defaults; "
        "rows with class_id override the default for that class."
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    class_id: Mapped[Optional[int]] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"))
    slot_number: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
