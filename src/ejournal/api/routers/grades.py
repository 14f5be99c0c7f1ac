from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import TEACHING_STAFF, require_auth, require_roles, require_teacher
from ejournal.db.models import Grade, Subject, User, UserRoleEnum
from ejournal.db.queries import children_ids, class_student_ids
from ejournal.db.session import get_session
from ejournal.schemas.grades import GradeCreate, GradeOut, GradeUpdate
from ejournal.services.audit import log_action, notify
from ejournal.services.grade_stats import student_subject_averages

router = APIRouter(prefix="/api", tags=["grades"])

R = UserRoleEnum
CLASS_VIEWERS = frozenset({R.SUPER_ADMIN, *TEACHING_STAFF})


async def _check_student_access(session: AsyncSession, user: User, student_id: int) -> None:
    role = user.effective_role
    if role == R.STUDENT and user.id != student_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only view your own grades")
    if role == R.PARENT and student_id not in await children_ids(session, user.id):
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only view your children's grades")


async def _subject_name(session: AsyncSession, subject_id: int) -> str:
    subject = await session.get(Subject, subject_id)
    return subject.name if subject else f"subject {subject_id}"


async def _own_grade_or_error(session: AsyncSession, user: User, grade_id: int) -> Grade:
    grade = await session.get(Grade, grade_id)
    if grade is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Grade not found")
    if grade.teacher_id != user.id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only modify grades you have given")
    return grade


@router.get("/grades", response_model=list[GradeOut])
async def list_grades(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    student_id: Optional[int] = Query(default=None, alias="studentId"),
    class_id: Optional[int] = Query(default=None, alias="classId"),
    subject_id: Optional[int] = Query(default=None, alias="subjectId"),
) -> list[GradeOut]:
    """Grades by student, class or subject.

    Students see only their own grades and parents only their children's;
    class- and subject-wide queries are limited to teaching staff.
    """
    stmt = select(Grade)
    role = user.effective_role

    if student_id is not None:
        await _check_student_access(session, user, student_id)
        stmt = stmt.where(Grade.student_id == student_id)
    elif class_id is not None or subject_id is not None:
        if role not in CLASS_VIEWERS:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Forbidden")
        if class_id is not None:
            stmt = stmt.where(Grade.class_id == class_id)
    elif role == R.STUDENT:
        stmt = stmt.where(Grade.student_id == user.id)
    elif role == R.PARENT:
        stmt = stmt.where(Grade.student_id.in_(await children_ids(session, user.id)))
    else:
        return []

    if subject_id is not None:
        stmt = stmt.where(Grade.subject_id == subject_id)
    grades = (await session.execute(stmt.order_by(Grade.created_at, Grade.id))).scalars().all()
    return [GradeOut.model_validate(g) for g in grades]


@router.post("/grades", response_model=GradeOut, status_code=status.HTTP_201_CREATED)
async def create_grade(
    payload: GradeCreate,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> GradeOut:
    """Give a grade as the calling teacher; ``date`` backdates it to that lesson day."""
    data = payload.model_dump(exclude={"date"})
    grade = Grade(**data, teacher_id=user.id)
    if payload.date is not None:
        grade.created_at = datetime.combine(payload.date, time(12, 0), tzinfo=timezone.utc)
    session.add(grade)
    await session.flush()

    subject = await _subject_name(session, grade.subject_id)
    notify(session, [grade.student_id], "New grade", f"You received a {grade.grade} in {subject}")
    log_action(
        session, user.id, "grade_created",
        f"Grade {grade.grade} for student {grade.student_id} in {subject}", request,
    )
    await session.commit()
    return GradeOut.model_validate(grade)


async def _update_grade(session: AsyncSession, user: User, grade_id: int, payload: GradeUpdate, request: Request) -> Grade:
    grade = await _own_grade_or_error(session, user, grade_id)
    for k, v in payload.model_dump(exclude_unset=True).items():
        if k in ("grade", "grade_type") and v is None:
            continue
        setattr(grade, k, v)

    subject = await _subject_name(session, grade.subject_id)
    notify(session, [grade.student_id], "Grade updated", f"Your grade in {subject} was changed to {grade.grade}")
    log_action(session, user.id, "grade_updated", f"Grade {grade_id} updated", request)
    await session.commit()
    return grade


@router.put("/grades/{grade_id}", response_model=GradeOut)
async def replace_grade(
    grade_id: int,
    payload: GradeUpdate,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> GradeOut:
    return GradeOut.model_validate(await _update_grade(session, user, grade_id, payload, request))


@router.patch("/grades/{grade_id}", response_model=GradeOut)
async def patch_grade(
    grade_id: int,
    payload: GradeUpdate,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> GradeOut:
    return GradeOut.model_validate(await _update_grade(session, user, grade_id, payload, request))


@router.delete("/grades/{grade_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_grade(
    grade_id: int,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> Response:
    grade = await _own_grade_or_error(session, user, grade_id)
    subject = await _subject_name(session, grade.subject_id)
    await session.delete(grade)
    notify(session, [grade.student_id], "Grade removed", f"A grade in {subject} was removed")
    log_action(session, user.id, "grade_deleted", f"Grade {grade_id} deleted", request)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/student-subject-averages", response_model=dict[str, dict[str, str]])
async def class_averages(
    _user: User = Depends(require_roles(any_of=tuple(CLASS_VIEWERS))),
    session: AsyncSession = Depends(get_session),
    class_id: int = Query(..., alias="classId"),
    from_date: Optional[date] = Query(default=None, alias="fromDate"),
    to_date: Optional[date] = Query(default=None, alias="toDate"),
) -> dict[str, dict[str, str]]:
    """Average per subject and overall for every student of a class (``"—"`` when ungraded)."""
    students = await class_student_ids(session, class_id)
    grades = (await session.execute(select(Grade).where(Grade.class_id == class_id))).scalars().all()
    averages = student_subject_averages(grades, students, date_from=from_date, date_to=to_date)
    return {str(sid): row for sid, row in averages.items()}
