from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import require_attendance_writer, require_auth, require_staff
from ejournal.db.models import (
    Attendance,
    AttendanceStatus,
    Schedule,
    StudentSubgroup,
    User,
    UserRoleEnum,
)
from ejournal.db.queries import children_ids, class_student_ids, parent_ids
from ejournal.db.session import get_session
from ejournal.schemas.attendance import AttendanceIn, AttendanceOut, SheetRowOut
from ejournal.services.audit import log_action, notify
from ejournal.services.grade_stats import attendance_sheet

router = APIRouter(prefix="/api/attendance", tags=["attendance"])

R = UserRoleEnum


async def lesson_student_ids(session: AsyncSession, schedule: Schedule) -> list[int]:
    """Students expected at a lesson: the class, narrowed to the subgroup if it has one."""
    students = await class_student_ids(session, schedule.class_id)
    if schedule.subgroup_id is None:
        return students
    members = set(
        (
            await session.execute(
                select(StudentSubgroup.student_id).where(StudentSubgroup.subgroup_id == schedule.subgroup_id)
            )
        ).scalars().all()
    )
    return [s for s in students if s in members]


@router.get("", response_model=list[AttendanceOut])
async def list_attendance(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    schedule_id: Optional[int] = Query(default=None, alias="scheduleId"),
    student_id: Optional[int] = Query(default=None, alias="studentId"),
    class_id: Optional[int] = Query(default=None, alias="classId"),
) -> list[AttendanceOut]:
    role = user.effective_role
    stmt = select(Attendance)

    if role == R.STUDENT:
        if student_id is not None and student_id != user.id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only view your own attendance")
        student_id = user.id
    elif role == R.PARENT:
        kids = await children_ids(session, user.id)
        if student_id is not None and student_id not in kids:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only view your children's attendance")
        if student_id is None:
            stmt = stmt.where(Attendance.student_id.in_(kids))

    if student_id is not None:
        stmt = stmt.where(Attendance.student_id == student_id)
    if schedule_id is not None:
        stmt = stmt.where(Attendance.schedule_id == schedule_id)
    if class_id is not None:
        stmt = stmt.join(Schedule, Schedule.id == Attendance.schedule_id).where(Schedule.class_id == class_id)
    records = (await session.execute(stmt.order_by(Attendance.id))).scalars().all()
    return [AttendanceOut.model_validate(r) for r in records]


@router.get("/sheet", response_model=list[SheetRowOut])
async def lesson_sheet(
    _user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
    schedule_id: int = Query(..., alias="scheduleId"),
) -> list[SheetRowOut]:
    """Presence of every expected student; students without a record count as present."""
    schedule = await session.get(Schedule, schedule_id)
    if schedule is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    students = await lesson_student_ids(session, schedule)
    records = (
        await session.execute(select(Attendance).where(Attendance.schedule_id == schedule_id))
    ).scalars().all()
    sheet = attendance_sheet(students, schedule_id, records)
    return [SheetRowOut(student_id=sid, present=present) for sid, present in sheet.items()]


@router.post("", response_model=AttendanceOut)
async def record_attendance(
    payload: AttendanceIn,
    request: Request,
    user: User = Depends(require_attendance_writer),
    session: AsyncSession = Depends(get_session),
) -> AttendanceOut:
    """Create or replace the mark for one student and lesson; absences notify the parents."""
    schedule = await session.get(Schedule, payload.schedule_id)
    if schedule is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    if user.effective_role == R.TEACHER and schedule.teacher_id != user.id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only mark attendance for your own lessons")

    found = await session.execute(
        select(Attendance).where(
            Attendance.student_id == payload.student_id, Attendance.schedule_id == payload.schedule_id
        )
    )
    record = found.scalars().first()
    if record is None:
        record = Attendance(student_id=payload.student_id, schedule_id=payload.schedule_id)
        session.add(record)
    record.status = payload.status
    record.comment = payload.comment
    await session.flush()

    if payload.status != AttendanceStatus.PRESENT:
        student = await session.get(User, payload.student_id)
        name = f"{student.first_name} {student.last_name}" if student else f"student {payload.student_id}"
        notify(
            session,
            await parent_ids(session, payload.student_id),
            "Absence",
            f"{name} was absent from the lesson at {schedule.start_time}",
        )
    log_action(
        session, user.id, "attendance_created",
        f"Attendance {payload.status.value} for student {payload.student_id}, schedule {payload.schedule_id}",
        request,
    )
    await session.commit()
    return AttendanceOut.model_validate(record)
