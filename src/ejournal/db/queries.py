# src/ejournal/db/queries.py
"""Lookups shared by several routers (enrollments, family links, role assignments)."""
from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.db.models import (
    ParentStudent,
    Schedule,
    SchoolClass,
    StudentClass,
    StudentSubgroup,
    Subgroup,
    TeacherSubject,
    UserRole,
    UserRoleEnum,
)


async def _ids(session: AsyncSession, stmt) -> list[int]:
    return list((await session.execute(stmt)).scalars().all())


async def assigned_roles(session: AsyncSession, user_id: int) -> list[UserRoleEnum]:
    return await _ids(session, select(UserRole.role).where(UserRole.user_id == user_id))


async def student_class_ids(session: AsyncSession, student_ids: Iterable[int]) -> list[int]:
    ids = list(student_ids)
    if not ids:
        return []
    return await _ids(
        session, select(StudentClass.class_id).where(StudentClass.student_id.in_(ids)).distinct()
    )


async def class_student_ids(session: AsyncSession, class_id: int) -> list[int]:
    return await _ids(
        session,
        select(StudentClass.student_id).where(StudentClass.class_id == class_id).order_by(StudentClass.student_id),
    )


async def student_subgroup_ids(session: AsyncSession, student_id: int) -> list[int]:
    return await _ids(session, select(StudentSubgroup.subgroup_id).where(StudentSubgroup.student_id == student_id))


async def children_ids(session: AsyncSession, parent_id: int) -> list[int]:
    return await _ids(session, select(ParentStudent.student_id).where(ParentStudent.parent_id == parent_id))


async def parent_ids(session: AsyncSession, student_id: int) -> list[int]:
    return await _ids(session, select(ParentStudent.parent_id).where(ParentStudent.student_id == student_id))


async def class_teacher_class_ids(session: AsyncSession, user_id: int) -> list[int]:
    return await _ids(
        session,
        select(UserRole.class_id).where(
            UserRole.user_id == user_id,
            UserRole.role == UserRoleEnum.CLASS_TEACHER,
            UserRole.class_id.is_not(None),
        ),
    )


async def class_school_id(session: AsyncSession, class_id: int) -> Optional[int]:
    cls = await session.get(SchoolClass, class_id)
    return cls.school_id if cls else None


async def subgroup_names(session: AsyncSession, schedules: Iterable[Schedule]) -> dict[int, str]:
    ids = {s.subgroup_id for s in schedules if s.subgroup_id is not None}
    if not ids:
        return {}
    rows = await session.execute(select(Subgroup.id, Subgroup.name).where(Subgroup.id.in_(ids)))
    return {sid: name for sid, name in rows.all()}


async def ensure_teacher_subject(session: AsyncSession, teacher_id: int, subject_id: int) -> bool:
    """Link ``teacher_id`` to ``subject_id`` unless already linked; returns whether a link was added."""
    existing = await session.execute(
        select(TeacherSubject.id).where(
            TeacherSubject.teacher_id == teacher_id, TeacherSubject.subject_id == subject_id
        )
    )
    if existing.first() is not None:
        return False
    session.add(TeacherSubject(teacher_id=teacher_id, subject_id=subject_id))
    return True
