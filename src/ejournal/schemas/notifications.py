from __future__ import annotations

from datetime import datetime
from typing import Optional

from ejournal.schemas.base import APIModel


class NotificationOut(APIModel):
    id: int
    user_id: int
    title: str
    content: str
    is_read: bool
    created_at: datetime


class NotificationCount(APIModel):
    count: int


class SystemLogOut(APIModel):
    id: int
    user_id: Optional[int] = None
    action: str
    details: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
