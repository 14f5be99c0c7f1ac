from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.api.deps import check_school_scope, get_class_or_404, get_now, load_slot_table
from ejournal.app_logger import get_logger
from ejournal.auth.deps import SCHOOL_STAFF, require_admin, require_auth, require_roles
from ejournal.db.models import Schedule, ScheduleStatus, SchoolClass, User, UserRoleEnum
from ejournal.db.queries import (
    children_ids,
    class_teacher_class_ids,
    ensure_teacher_subject,
    student_class_ids,
    student_subgroup_ids,
    subgroup_names,
)
from ejournal.db.session import get_session
from ejournal.schemas.schedules import (
    DayOut,
    GridOut,
    GridRowOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleStatusIn,
    ScheduleUpdate,
    WeekOut,
)
from ejournal.services.audit import log_action
from ejournal.services.time_slots import format_slot
from ejournal.services.week_schedule import build_week_grid, lesson_over, partition_week, week_start

router = APIRouter(prefix="/api/schedules", tags=["schedules"])
log = get_logger("schedules")

R = UserRoleEnum

# null on any other field means "leave unchanged"
_NULLABLE_SCHEDULE_FIELDS = frozenset({"schedule_date", "room", "subgroup_id"})

require_status_editor = require_roles(
    any_of=(R.TEACHER, R.CLASS_TEACHER, R.SCHOOL_ADMIN, R.SUPER_ADMIN, R.PRINCIPAL, R.VICE_PRINCIPAL)
)
ORDER = (Schedule.day_of_week, Schedule.start_time, Schedule.id)


async def visible_schedules(session: AsyncSession, user: User) -> list[Schedule]:
    """Lessons the user sees when no explicit filter is given, scoped by active role."""
    role = user.effective_role
    stmt = select(Schedule)

    if role == R.SUPER_ADMIN:
        pass
    elif role in SCHOOL_STAFF:
        if user.school_id is None:
            return []
        stmt = stmt.join(SchoolClass, SchoolClass.id == Schedule.class_id).where(
            SchoolClass.school_id == user.school_id
        )
    elif role == R.TEACHER:
        stmt = stmt.where(Schedule.teacher_id == user.id)
    elif role == R.CLASS_TEACHER:
        stmt = stmt.where(Schedule.class_id.in_(await class_teacher_class_ids(session, user.id)))
    elif role == R.STUDENT:
        # whole-class lessons plus lessons of the student's own subgroups
        class_ids = await student_class_ids(session, [user.id])
        subgroups = await student_subgroup_ids(session, user.id)
        stmt = stmt.where(
            Schedule.class_id.in_(class_ids),
            or_(Schedule.subgroup_id.is_(None), Schedule.subgroup_id.in_(subgroups)),
        )
    elif role == R.PARENT:
        kids = await children_ids(session, user.id)
        stmt = stmt.where(Schedule.class_id.in_(await student_class_ids(session, kids)))
    else:
        return []

    return list((await session.execute(stmt.order_by(*ORDER))).scalars().all())


async def find_schedules(
    session: AsyncSession,
    user: User,
    *,
    class_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    subject_id: Optional[int] = None,
    school_id: Optional[int] = None,
) -> list[Schedule]:
    if class_id is None and teacher_id is None and subject_id is None and school_id is None:
        return await visible_schedules(session, user)

    stmt = select(Schedule)
    if class_id is not None:
        stmt = stmt.where(Schedule.class_id == class_id)
    if teacher_id is not None:
        stmt = stmt.where(Schedule.teacher_id == teacher_id)
    if subject_id is not None:
        stmt = stmt.where(Schedule.subject_id == subject_id)
    if school_id is not None:
        stmt = stmt.join(SchoolClass, SchoolClass.id == Schedule.class_id).where(SchoolClass.school_id == school_id)
    return list((await session.execute(stmt.order_by(*ORDER))).scalars().all())


async def to_out(session: AsyncSession, schedules: Sequence[Schedule]) -> list[ScheduleOut]:
    names = await subgroup_names(session, schedules)
    out = []
    for s in schedules:
        item = ScheduleOut.model_validate(s)
        item.subgroup_name = names.get(s.subgroup_id) if s.subgroup_id is not None else None
        out.append(item)
    return out


async def _get_or_404(session: AsyncSession, schedule_id: int) -> Schedule:
    schedule = await session.get(Schedule, schedule_id)
    if schedule is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return schedule


@router.get("", response_model=list[ScheduleOut])
async def list_schedules(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    class_id: Optional[int] = Query(default=None, alias="classId"),
    teacher_id: Optional[int] = Query(default=None, alias="teacherId"),
    subject_id: Optional[int] = Query(default=None, alias="subjectId"),
    school_id: Optional[int] = Query(default=None, alias="schoolId"),
    schedule_date: Optional[date] = Query(default=None, alias="scheduleDate"),
) -> list[ScheduleOut]:
    """List lessons.

    Without class/teacher/subject/school filters the result is scoped to the
    caller's active role. ``scheduleDate`` keeps only lessons dated exactly
    that day; weekly lessons without a date never match it.
    """
    schedules = await find_schedules(
        session, user, class_id=class_id, teacher_id=teacher_id, subject_id=subject_id, school_id=school_id
    )
    if schedule_date is not None:
        schedules = [s for s in schedules if s.schedule_date == schedule_date]
    return await to_out(session, schedules)


@router.get("/week", response_model=WeekOut)
async def week_view(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    day: Optional[date] = Query(default=None, alias="date"),
    class_id: Optional[int] = Query(default=None, alias="classId"),
    teacher_id: Optional[int] = Query(default=None, alias="teacherId"),
    now: datetime = Depends(get_now),
) -> WeekOut:
    """Seven day buckets, Monday first, for the week containing ``date`` (default: today)."""
    schedules = await find_schedules(session, user, class_id=class_id, teacher_id=teacher_id)
    monday = week_start(day or now.date())
    buckets = partition_week(schedules, monday)
    out = {s.id: s for s in await to_out(session, schedules)}
    return WeekOut(
        week_start=monday,
        days=[
            DayOut(date=b.date, day_of_week=b.day_of_week, entries=[out[e.id] for e in b.entries])
            for b in buckets
        ],
    )


@router.get("/grid", response_model=GridOut)
async def grid_view(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    class_id: int = Query(..., alias="classId"),
    day: Optional[date] = Query(default=None, alias="date"),
    now: datetime = Depends(get_now),
) -> GridOut:
    """A class's week laid out as lesson-slot rows by weekday columns."""
    await get_class_or_404(session, class_id)
    schedules = await find_schedules(session, user, class_id=class_id)
    slots = await load_slot_table(session, class_id)
    grid = build_week_grid(schedules, day or now.date(), slots, class_id)
    out = {s.id: s for s in await to_out(session, schedules)}
    return GridOut(
        class_id=class_id,
        days=grid.days,
        rows=[
            GridRowOut(
                slot_number=row.slot_number,
                start_time=row.time.start_time if row.time else None,
                end_time=row.time.end_time if row.time else None,
                label=format_slot(row.time),
                cells=[out[c.id] if c is not None else None for c in row.cells],
            )
            for row in grid.rows
        ],
    )


@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(
    schedule_id: int,
    _user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    schedule = await _get_or_404(session, schedule_id)
    return (await to_out(session, [schedule]))[0]


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    payload: ScheduleCreate,
    request: Request,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    await get_class_or_404(session, payload.class_id)
    await check_school_scope(session, user, payload.class_id, "create")

    schedule = Schedule(**payload.model_dump())
    session.add(schedule)
    if await ensure_teacher_subject(session, payload.teacher_id, payload.subject_id):
        log.info("teacher %s assigned to subject %s", payload.teacher_id, payload.subject_id)
    await session.flush()
    log_action(
        session, user.id, "schedule_created",
        f"Created schedule entry for {payload.schedule_date or 'unspecified date'}", request,
    )
    await session.commit()
    return (await to_out(session, [schedule]))[0]


@router.patch("/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    request: Request,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    schedule = await _get_or_404(session, schedule_id)
    await check_school_scope(session, user, schedule.class_id, "update")

    data = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_SCHEDULE_FIELDS
    }
    start = data.get("start_time", schedule.start_time)
    end = data.get("end_time", schedule.end_time)
    if end <= start:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="endTime must be after startTime")
    if data.get("schedule_date") is not None:
        data["day_of_week"] = data["schedule_date"].isoweekday()

    for k, v in data.items():
        setattr(schedule, k, v)
    log_action(session, user.id, "schedule_updated", f"Updated schedule entry ID {schedule_id}", request)
    await session.commit()
    return (await to_out(session, [schedule]))[0]


@router.delete("/{schedule_id}", response_model=ScheduleOut)
async def delete_schedule(
    schedule_id: int,
    request: Request,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    schedule = await _get_or_404(session, schedule_id)
    await check_school_scope(session, user, schedule.class_id, "delete")

    deleted = (await to_out(session, [schedule]))[0]
    await session.delete(schedule)
    log_action(
        session, user.id, "schedule_deleted",
        f"Deleted schedule entry for {schedule.schedule_date or 'unspecified date'}, class ID: {schedule.class_id}",
        request,
    )
    await session.commit()
    return deleted


@router.patch("/{schedule_id}/status", response_model=ScheduleOut)
async def update_schedule_status(
    schedule_id: int,
    payload: ScheduleStatusIn,
    request: Request,
    user: User = Depends(require_status_editor),
    session: AsyncSession = Depends(get_session),
    now: datetime = Depends(get_now),
) -> ScheduleOut:
    """Mark a lesson conducted or not conducted.

    Teachers may only mark their own lessons. A lesson dated today cannot be
    marked conducted before its end time.
    """
    schedule = await _get_or_404(session, schedule_id)
    if user.effective_role == R.TEACHER and schedule.teacher_id != user.id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only update schedules where you are the teacher")
    await check_school_scope(session, user, schedule.class_id, "update")

    if payload.status not in (ScheduleStatus.CONDUCTED.value, ScheduleStatus.NOT_CONDUCTED.value):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail="Invalid status. Must be 'conducted' or 'not_conducted'"
        )
    new_status = ScheduleStatus(payload.status)
    if new_status == ScheduleStatus.CONDUCTED and not lesson_over(schedule.schedule_date, schedule.end_time, now):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Cannot mark lesson as conducted before it ends")

    schedule.status = new_status
    log_action(
        session, user.id, "schedule_status_updated",
        f"Updated schedule {schedule_id} status to {new_status.value}", request,
    )
    await session.commit()
    return (await to_out(session, [schedule]))[0]
