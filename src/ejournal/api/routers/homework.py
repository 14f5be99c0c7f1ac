from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import require_auth, require_roles, require_teacher
from ejournal.db.models import Homework, HomeworkSubmission, User, UserRoleEnum
from ejournal.db.queries import children_ids, class_student_ids, student_class_ids
from ejournal.db.session import get_session
from ejournal.schemas.homework import (
    HomeworkIn,
    HomeworkOut,
    HomeworkUpdate,
    SubmissionGradeIn,
    SubmissionIn,
    SubmissionOut,
)
from ejournal.services.audit import log_action, notify

router = APIRouter(prefix="/api", tags=["homework"])

R = UserRoleEnum


async def _homework_or_404(session: AsyncSession, homework_id: int) -> Homework:
    hw = await session.get(Homework, homework_id)
    if hw is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Homework not found")
    return hw


def _check_author(user: User, hw: Homework) -> None:
    if hw.teacher_id != user.id and user.role != R.SUPER_ADMIN:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only modify your own homework")


@router.get("/homework", response_model=list[HomeworkOut])
async def list_homework(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    class_id: Optional[int] = Query(default=None, alias="classId"),
) -> list[HomeworkOut]:
    """Homework for a class, or by default what concerns the caller's active role."""
    stmt = select(Homework)
    role = user.effective_role
    if class_id is not None:
        stmt = stmt.where(Homework.class_id == class_id)
    elif role in (R.TEACHER, R.CLASS_TEACHER):
        stmt = stmt.where(Homework.teacher_id == user.id)
    elif role == R.STUDENT:
        stmt = stmt.where(Homework.class_id.in_(await student_class_ids(session, [user.id])))
    elif role == R.PARENT:
        kids = await children_ids(session, user.id)
        stmt = stmt.where(Homework.class_id.in_(await student_class_ids(session, kids)))
    items = (await session.execute(stmt.order_by(Homework.due_date, Homework.id))).scalars().all()
    return [HomeworkOut.model_validate(h) for h in items]


@router.post("/homework", response_model=HomeworkOut, status_code=status.HTTP_201_CREATED)
async def create_homework(
    payload: HomeworkIn,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> HomeworkOut:
    hw = Homework(**payload.model_dump(), teacher_id=user.id)
    session.add(hw)
    await session.flush()
    notify(
        session,
        await class_student_ids(session, hw.class_id),
        "New homework",
        f"{hw.title} (due {hw.due_date.isoformat()})",
    )
    log_action(session, user.id, "homework_created", f"Homework {hw.id} for class {hw.class_id}", request)
    await session.commit()
    return HomeworkOut.model_validate(hw)


@router.patch("/homework/{homework_id}", response_model=HomeworkOut)
async def update_homework(
    homework_id: int,
    payload: HomeworkUpdate,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> HomeworkOut:
    hw = await _homework_or_404(session, homework_id)
    _check_author(user, hw)
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(hw, k, v)
    log_action(session, user.id, "homework_updated", f"Homework {homework_id} updated", request)
    await session.commit()
    return HomeworkOut.model_validate(hw)


@router.delete("/homework/{homework_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_homework(
    homework_id: int,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> Response:
    hw = await _homework_or_404(session, homework_id)
    _check_author(user, hw)
    await session.delete(hw)
    log_action(session, user.id, "homework_deleted", f"Homework {homework_id} deleted", request)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/homework-submissions", response_model=list[SubmissionOut])
async def list_submissions(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
    homework_id: Optional[int] = Query(default=None, alias="homeworkId"),
) -> list[SubmissionOut]:
    stmt = select(HomeworkSubmission)
    if user.effective_role == R.STUDENT:
        stmt = stmt.where(HomeworkSubmission.student_id == user.id)
    elif user.effective_role == R.PARENT:
        stmt = stmt.where(HomeworkSubmission.student_id.in_(await children_ids(session, user.id)))
    if homework_id is not None:
        stmt = stmt.where(HomeworkSubmission.homework_id == homework_id)
    items = (await session.execute(stmt.order_by(HomeworkSubmission.id))).scalars().all()
    return [SubmissionOut.model_validate(s) for s in items]


@router.post("/homework-submissions", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
async def submit_homework(
    payload: SubmissionIn,
    request: Request,
    user: User = Depends(require_roles(any_of=(R.STUDENT,))),
    session: AsyncSession = Depends(get_session),
) -> SubmissionOut:
    hw = await _homework_or_404(session, payload.homework_id)
    submission = HomeworkSubmission(**payload.model_dump(), student_id=user.id)
    session.add(submission)
    await session.flush()
    notify(session, [hw.teacher_id], "Homework submitted", f"{user.first_name} {user.last_name} submitted {hw.title}")
    log_action(session, user.id, "homework_submitted", f"Submission {submission.id} for homework {hw.id}", request)
    await session.commit()
    return SubmissionOut.model_validate(submission)


@router.post("/homework-submissions/{submission_id}/grade", response_model=SubmissionOut)
async def grade_submission(
    submission_id: int,
    payload: SubmissionGradeIn,
    request: Request,
    user: User = Depends(require_teacher),
    session: AsyncSession = Depends(get_session),
) -> SubmissionOut:
    submission = await session.get(HomeworkSubmission, submission_id)
    if submission is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Submission not found")
    hw = await _homework_or_404(session, submission.homework_id)
    _check_author(user, hw)
    submission.grade = payload.grade
    submission.feedback = payload.feedback
    notify(session, [submission.student_id], "Homework graded", f"{hw.title}: {payload.grade}")
    log_action(session, user.id, "homework_graded", f"Submission {submission_id} graded {payload.grade}", request)
    await session.commit()
    return SubmissionOut.model_validate(submission)
