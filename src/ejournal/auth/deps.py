# src/ejournal/auth/deps.py
from __future__ import annotations

from typing import Callable, Optional, Sequence

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.app_logger import get_logger
from ejournal.db.models import User, UserRoleEnum
from ejournal.db.queries import assigned_roles
from ejournal.db.session import get_session
from ejournal.services.role_access import role_allows

log = get_logger("auth")

SESSION_USER_KEY = "user_id"


class AuthError(HTTPException):
    def __init__(self, detail: str = "Unauthorized", code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(status_code=code, detail=detail)


class StaleSessionError(Exception):
    """The session cookie names a user that no longer exists."""

    def __init__(self, user_id: int):
        super().__init__(f"Failed to deserialize user {user_id}")
        self.user_id = user_id


def login_session(request: Request, user: User) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request) -> None:
    request.session.clear()


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = await session.get(User, user_id)
    if user is None:
        raise StaleSessionError(user_id)
    return user


async def require_auth(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthError("Unauthorized")
    return user


def require_roles(*, any_of: Sequence[UserRoleEnum]) -> Callable:
    """Dependency admitting users that hold any of ``any_of`` (see ``role_allows``)."""
    allowed = frozenset(any_of)

    async def _dep(
        user: User = Depends(require_auth),
        session: AsyncSession = Depends(get_session),
    ) -> User:
        if role_allows(allowed, primary=user.role, active=user.active_role):
            return user
        if role_allows(allowed, primary=user.role, assigned=await assigned_roles(session, user.id)):
            return user
        log.info("user %s denied, needs one of %s", user.id, sorted(r.value for r in allowed))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden - Insufficient permissions")

    return _dep


R = UserRoleEnum
ADMINS = (R.SUPER_ADMIN, R.SCHOOL_ADMIN)
SCHOOL_STAFF = (R.SCHOOL_ADMIN, R.PRINCIPAL, R.VICE_PRINCIPAL)
TEACHING_STAFF = (R.TEACHER, R.CLASS_TEACHER, R.SCHOOL_ADMIN, R.PRINCIPAL, R.VICE_PRINCIPAL)

require_admin = require_roles(any_of=ADMINS)
require_super_admin = require_roles(any_of=(R.SUPER_ADMIN,))
require_teacher = require_roles(any_of=(R.TEACHER, R.CLASS_TEACHER))
require_attendance_writer = require_roles(any_of=(R.TEACHER, R.CLASS_TEACHER, R.SCHOOL_ADMIN))
require_staff = require_roles(any_of=TEACHING_STAFF)
