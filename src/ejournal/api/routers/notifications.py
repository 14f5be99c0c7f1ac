from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import require_auth
from ejournal.db.models import Notification, User
from ejournal.db.session import get_session
from ejournal.schemas.base import Message
from ejournal.schemas.notifications import NotificationCount, NotificationOut

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def list_notifications(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> list[NotificationOut]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return [NotificationOut.model_validate(n) for n in (await session.execute(stmt)).scalars().all()]


@router.get("/count", response_model=NotificationCount)
async def unread_count(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> NotificationCount:
    stmt = select(func.count(Notification.id)).where(
        Notification.user_id == user.id, Notification.is_read.is_(False)
    )
    return NotificationCount(count=(await session.execute(stmt)).scalar_one())


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> NotificationOut:
    note = await session.get(Notification, notification_id)
    if note is None or note.user_id != user.id:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Notification not found")
    note.is_read = True
    await session.commit()
    return NotificationOut.model_validate(note)


@router.post("/read-all", response_model=Message)
async def mark_all_read(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> Message:
    await session.execute(
        update(Notification).where(Notification.user_id == user.id).values(is_read=True)
    )
    await session.commit()
    return Message(message="All notifications marked as read")
