from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import SCHOOL_STAFF, require_auth, require_roles
from ejournal.auth.passwords import hash_password
from ejournal.db.models import User, UserRoleEnum
from ejournal.db.session import get_session
from ejournal.schemas.users import UserCreate, UserOut, UserUpdate
from ejournal.services.accounts import check_can_create, create_user
from ejournal.services.audit import log_action

router = APIRouter(prefix="/api/users", tags=["users"])

R = UserRoleEnum

# null on any other field means "leave unchanged"
_NULLABLE_USER_FIELDS = frozenset({"phone", "school_id"})
require_user_admin = require_roles(any_of=(R.SUPER_ADMIN, *SCHOOL_STAFF))


def _check_same_school(actor: User, target: User) -> None:
    if actor.role != R.SUPER_ADMIN and target.school_id != actor.school_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="User belongs to another school")


@router.get("", response_model=list[UserOut])
async def list_users(
    actor: User = Depends(require_user_admin),
    session: AsyncSession = Depends(get_session),
    role: Optional[UserRoleEnum] = Query(default=None),
    school_id: Optional[int] = Query(default=None, alias="schoolId"),
) -> list[UserOut]:
    """Users visible to the caller: everyone for super_admin, otherwise the caller's school."""
    stmt = select(User)
    if actor.role != R.SUPER_ADMIN:
        stmt = stmt.where(User.school_id == actor.school_id)
    elif school_id is not None:
        stmt = stmt.where(User.school_id == school_id)
    if role is not None:
        stmt = stmt.where(User.role == role)
    users = (await session.execute(stmt.order_by(User.id))).scalars().all()
    return [UserOut.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    actor: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserOut.model_validate(user)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user_route(
    payload: UserCreate,
    request: Request,
    actor: User = Depends(require_user_admin),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    check_can_create(actor, payload.role, payload.school_id)
    user = await create_user(session, payload)
    log_action(session, actor.id, "user_created", f"Created user {user.username} with role {user.role.value}", request)
    await session.commit()
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    actor: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    """Users edit their own profile; admins edit accounts of their school."""
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")

    data = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_USER_FIELDS
    }
    if actor.id != user.id:
        if actor.role not in (R.SUPER_ADMIN, R.SCHOOL_ADMIN):
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Forbidden - Insufficient permissions")
        _check_same_school(actor, user)
    if "role" in data and data["role"] != user.role and actor.role != R.SUPER_ADMIN:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Cannot change user role")

    if "password" in data:
        data["password"] = hash_password(data["password"])
    for k, v in data.items():
        setattr(user, k, v)
    log_action(session, actor.id, "user_updated", f"Updated user {user.username}", request)
    await session.commit()
    return UserOut.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_user(
    user_id: int,
    request: Request,
    actor: User = Depends(require_roles(any_of=(R.SUPER_ADMIN, R.SCHOOL_ADMIN))),
    session: AsyncSession = Depends(get_session),
) -> Response:
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    if user.id == actor.id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    _check_same_school(actor, user)
    await session.delete(user)
    log_action(session, actor.id, "user_deleted", f"Deleted user {user.username}", request)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
