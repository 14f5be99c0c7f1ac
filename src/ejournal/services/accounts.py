"""User account creation rules shared by registration and the users admin API."""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.passwords import hash_password
from ejournal.db.models import User, UserRole, UserRoleEnum
from ejournal.schemas.users import UserCreate

R = UserRoleEnum


def check_can_create(actor: Optional[User], role: UserRoleEnum, school_id: Optional[int]) -> None:
    """Raise 403 unless ``actor`` may create an account with ``role`` in ``school_id``.

    Anonymous callers may only bootstrap a super_admin. Only a super_admin
    creates other super_admins or school_admins, and a school_admin only
    creates accounts in their own school.
    """
    if actor is None:
        if role != R.SUPER_ADMIN:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Authentication required to register users")
        return
    if actor.role == R.SUPER_ADMIN:
        return
    if role in (R.SUPER_ADMIN, R.SCHOOL_ADMIN):
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Not allowed to create a user with this role")
    if school_id != actor.school_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only create users for your own school")


async def username_taken(session: AsyncSession, username: str) -> bool:
    found = await session.execute(select(User.id).where(User.username == username))
    return found.first() is not None


async def create_user(session: AsyncSession, payload: UserCreate) -> User:
    """Insert the user plus a default, active assignment of their primary role."""
    if await username_taken(session, payload.username):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    data = payload.model_dump(exclude={"password"})
    user = User(**data, password=hash_password(payload.password), active_role=payload.role)
    session.add(user)
    await session.flush()
    session.add(
        UserRole(
            user_id=user.id,
            role=payload.role,
            school_id=payload.school_id,
            is_active=True,
            is_default=True,
        )
    )
    return user
