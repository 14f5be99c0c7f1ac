from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.db.models import LessonSlot, SchoolClass, User, UserRoleEnum
from ejournal.db.queries import class_school_id
from ejournal.services.time_slots import SlotTable

R = UserRoleEnum


def get_now() -> datetime:
    """Local wall-clock time; overridden in tests."""
    return datetime.now()


async def get_class_or_404(session: AsyncSession, class_id: int) -> SchoolClass:
    cls = await session.get(SchoolClass, class_id)
    if cls is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Class not found")
    return cls


async def check_school_scope(session: AsyncSession, user: User, class_id: int, action: str) -> None:
    """A school_admin may only touch classes of their own school."""
    if user.effective_role != R.SCHOOL_ADMIN:
        return
    if await class_school_id(session, class_id) != user.school_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=f"You can only {action} schedules for your school")


async def load_slot_table(session: AsyncSession, class_id: Optional[int] = None) -> SlotTable:
    stmt = select(LessonSlot)
    if class_id is None:
        stmt = stmt.where(LessonSlot.class_id.is_(None))
    else:
        stmt = stmt.where(or_(LessonSlot.class_id.is_(None), LessonSlot.class_id == class_id))
    return SlotTable((await session.execute(stmt)).scalars().all())
