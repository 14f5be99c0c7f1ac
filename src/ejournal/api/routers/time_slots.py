from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.api.deps import check_school_scope, get_class_or_404, load_slot_table
from ejournal.auth.deps import require_admin, require_auth, require_super_admin
from ejournal.db.models import LessonSlot, User
from ejournal.db.session import get_session
from ejournal.schemas.time_slots import EffectiveSlotOut, ResolvedSlotOut, TimeSlotIn, TimeSlotOut
from ejournal.services.audit import log_action
from ejournal.services.time_slots import format_slot

router = APIRouter(prefix="/api", tags=["time-slots"])


async def _slots(session: AsyncSession, class_id: Optional[int]) -> list[LessonSlot]:
    stmt = select(LessonSlot).order_by(LessonSlot.slot_number)
    if class_id is None:
        stmt = stmt.where(LessonSlot.class_id.is_(None))
    else:
        stmt = stmt.where(LessonSlot.class_id == class_id)
    return list((await session.execute(stmt)).scalars().all())


async def upsert_slot(session: AsyncSession, class_id: Optional[int], payload: TimeSlotIn) -> LessonSlot:
    """Insert or replace the slot ``payload.slot_number`` for ``class_id`` (None = default)."""
    existing = next((s for s in await _slots(session, class_id) if s.slot_number == payload.slot_number), None)
    if existing is None:
        existing = LessonSlot(class_id=class_id, slot_number=payload.slot_number)
        session.add(existing)
    existing.start_time = payload.start_time
    existing.end_time = payload.end_time
    await session.flush()
    return existing


@router.get("/time-slots/defaults", response_model=list[TimeSlotOut])
async def list_default_slots(
    _user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> list[TimeSlotOut]:
    return [TimeSlotOut.model_validate(s) for s in await _slots(session, None)]


@router.post("/time-slots/defaults", response_model=TimeSlotOut)
async def set_default_slot(
    payload: TimeSlotIn,
    request: Request,
    user: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
) -> TimeSlotOut:
    slot = await upsert_slot(session, None, payload)
    log_action(
        session, user.id, "time_slot_default_updated",
        f"Default slot {payload.slot_number} set to {payload.start_time}-{payload.end_time}", request,
    )
    await session.commit()
    return TimeSlotOut.model_validate(slot)


@router.get("/class/{class_id}/time-slots", response_model=list[TimeSlotOut])
async def list_class_slots(
    class_id: int,
    _user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> list[TimeSlotOut]:
    """Overrides configured for the class only (defaults are listed separately)."""
    await get_class_or_404(session, class_id)
    return [TimeSlotOut.model_validate(s) for s in await _slots(session, class_id)]


@router.post("/class/{class_id}/time-slots", response_model=TimeSlotOut)
async def set_class_slot(
    class_id: int,
    payload: TimeSlotIn,
    request: Request,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> TimeSlotOut:
    await get_class_or_404(session, class_id)
    await check_school_scope(session, user, class_id, "configure")
    slot = await upsert_slot(session, class_id, payload)
    log_action(
        session, user.id, "class_time_slot_updated",
        f"Class {class_id} slot {payload.slot_number} set to {payload.start_time}-{payload.end_time}", request,
    )
    await session.commit()
    return TimeSlotOut.model_validate(slot)


@router.delete(
    "/class/{class_id}/time-slots/{slot_number}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def reset_class_slot(
    class_id: int,
    slot_number: int,
    request: Request,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Response:
    """Drop the class override so the slot falls back to the default."""
    await check_school_scope(session, user, class_id, "configure")
    slot = next((s for s in await _slots(session, class_id) if s.slot_number == slot_number), None)
    if slot is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Class time slot not found")
    await session.delete(slot)
    log_action(session, user.id, "class_time_slot_reset", f"Class {class_id} slot {slot_number} reset", request)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/class/{class_id}/time-slots/effective", response_model=list[EffectiveSlotOut])
async def effective_class_slots(
    class_id: int,
    _user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> list[EffectiveSlotOut]:
    table = await load_slot_table(session, class_id)
    return [
        EffectiveSlotOut(
            slot_number=s.slot_number, start_time=s.start_time, end_time=s.end_time, is_override=s.is_override
        )
        for s in table.effective(class_id)
    ]


@router.get("/class/{class_id}/time-slots/{slot_number}/resolve", response_model=ResolvedSlotOut)
async def resolve_class_slot(
    class_id: int,
    slot_number: int,
    _user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> ResolvedSlotOut:
    """Effective time of one slot; an unknown slot resolves to the placeholder label."""
    rng = (await load_slot_table(session, class_id)).resolve(slot_number, class_id)
    return ResolvedSlotOut(
        slot_number=slot_number,
        class_id=class_id,
        start_time=rng.start_time if rng else None,
        end_time=rng.end_time if rng else None,
        label=format_slot(rng),
    )
