from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import require_admin
from ejournal.db.models import SystemLog, User, UserRoleEnum
from ejournal.db.session import get_session
from ejournal.schemas.notifications import SystemLogOut

router = APIRouter(prefix="/api/system-logs", tags=["system-logs"])


@router.get("", response_model=list[SystemLogOut])
async def list_system_logs(
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    action: Optional[str] = Query(default=None),
    user_id: Optional[int] = Query(default=None, alias="userId"),
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[SystemLogOut]:
    """Most recent audit entries first. A school_admin sees entries of users from their school."""
    stmt = select(SystemLog)
    if admin.role != UserRoleEnum.SUPER_ADMIN:
        stmt = stmt.join(User, User.id == SystemLog.user_id).where(User.school_id == admin.school_id)
    if action:
        stmt = stmt.where(SystemLog.action == action)
    if user_id is not None:
        stmt = stmt.where(SystemLog.user_id == user_id)
    stmt = stmt.order_by(SystemLog.created_at.desc(), SystemLog.id.desc()).limit(limit)
    return [SystemLogOut.model_validate(r) for r in (await session.execute(stmt)).scalars().all()]
