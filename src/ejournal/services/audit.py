"""Side effects shared by the write endpoints: audit rows and notifications.

Both helpers only ``add`` to the session; the caller's commit persists them
together with the change they describe.
"""
from __future__ import annotations

from typing import Iterable, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.app_logger import get_logger
from ejournal.db.models import Notification, SystemLog

log = get_logger("audit")


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def log_action(
    session: AsyncSession,
    user_id: Optional[int],
    action: str,
    details: Optional[str] = None,
    request: Optional[Request] = None,
) -> SystemLog:
    entry = SystemLog(user_id=user_id, action=action, details=details, ip_address=client_ip(request))
    session.add(entry)
    log.info("%s by user %s: %s", action, user_id, details or "")
    return entry


def notify(session: AsyncSession, user_ids: Iterable[int], title: str, content: str) -> list[Notification]:
    notes = [Notification(user_id=uid, title=title, content=content, is_read=False) for uid in user_ids]
    session.add_all(notes)
    return notes
