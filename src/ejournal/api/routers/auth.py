from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import get_current_user, login_session, logout_session, require_auth
from ejournal.auth.passwords import verify_password
from ejournal.db.models import User
from ejournal.db.session import get_session
from ejournal.schemas.base import Message
from ejournal.schemas.users import LoginIn, UserCreate, UserOut
from ejournal.services.accounts import check_can_create, create_user
from ejournal.services.audit import log_action

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    request: Request,
    actor: Optional[User] = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    """Create an account. Anonymous callers may only bootstrap a super_admin and are logged in as it."""
    check_can_create(actor, payload.role, payload.school_id)
    user = await create_user(session, payload)
    if actor is not None:
        log_action(
            session, actor.id, "user_created",
            f"Created user {user.username} with role {user.role.value}", request,
        )
    await session.commit()
    if actor is None:
        login_session(request, user)
    return UserOut.model_validate(user)


@router.post("/login", response_model=UserOut)
async def login(
    payload: LoginIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    user = (await session.execute(select(User).where(User.username == payload.username))).scalars().first()
    if user is None or not verify_password(payload.password, user.password):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    login_session(request, user)
    log_action(session, user.id, "user_login", f"User {user.username} logged in", request)
    await session.commit()
    return UserOut.model_validate(user)


@router.post("/logout", response_model=Message)
async def logout(
    request: Request,
    user: Optional[User] = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Message:
    if user is not None:
        log_action(session, user.id, "user_logout", f"User {user.username} logged out", request)
        await session.commit()
    logout_session(request)
    return Message(message="Logged out")


@router.get("/user", response_model=UserOut)
async def current_user(user: User = Depends(require_auth)) -> UserOut:
    return UserOut.model_validate(user)
