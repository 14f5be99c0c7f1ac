from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ejournal.auth.deps import require_admin, require_auth
from ejournal.db.models import User, UserRole, UserRoleEnum
from ejournal.db.session import get_session
from ejournal.schemas.users import (
    ActiveRoleIn,
    MenuItemOut,
    MenuOut,
    SwitchRoleIn,
    UserOut,
    UserRoleCreate,
    UserRoleOut,
)
from ejournal.services.audit import log_action
from ejournal.services.role_access import FALLBACK_ROLE, visible_items

router = APIRouter(prefix="/api", tags=["roles"])

R = UserRoleEnum


async def _roles_of(session: AsyncSession, user_id: int) -> list[UserRole]:
    stmt = select(UserRole).where(UserRole.user_id == user_id).order_by(UserRole.id)
    return list((await session.execute(stmt)).scalars().all())


async def activate_role(session: AsyncSession, user: User, role: UserRoleEnum) -> User:
    """Make ``role`` the user's active role.

    The role must be one of the user's assignments or their primary role,
    otherwise 403 and the current role stays active. The matching assignment
    becomes the only active one and the user's school follows it.
    """
    assignments = await _roles_of(session, user.id)
    match = next((a for a in assignments if a.role == role), None)
    if match is None and role != user.role:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You do not have this role")

    await session.execute(update(UserRole).where(UserRole.user_id == user.id).values(is_active=False))
    if match is not None:
        match.is_active = True
        if match.school_id is not None:
            user.school_id = match.school_id
    user.active_role = role
    return user


@router.get("/my-roles", response_model=list[UserRoleOut])
async def my_roles(
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> list[UserRoleOut]:
    return [UserRoleOut.model_validate(r) for r in await _roles_of(session, user.id)]


@router.post("/switch-role", response_model=UserOut)
async def switch_role(
    payload: SwitchRoleIn,
    request: Request,
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    if payload.role is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="Role is required")
    previous = user.effective_role
    await activate_role(session, user, payload.role)
    log_action(
        session, user.id, "role_switched",
        f"Switched role from {previous.value} to {payload.role.value}", request,
    )
    await session.commit()
    await session.refresh(user)
    return UserOut.model_validate(user)


@router.put("/users/{user_id}/active-role", response_model=UserOut)
async def set_active_role(
    user_id: int,
    payload: ActiveRoleIn,
    request: Request,
    user: User = Depends(require_auth),
    session: AsyncSession = Depends(get_session),
) -> UserOut:
    if user.id != user_id:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only change your own active role")
    await activate_role(session, user, payload.active_role)
    log_action(session, user.id, "role_switched", f"Active role set to {payload.active_role.value}", request)
    await session.commit()
    await session.refresh(user)
    return UserOut.model_validate(user)


@router.get("/menu", response_model=MenuOut)
async def menu(user: User = Depends(require_auth)) -> MenuOut:
    """Navigation items for the caller's active role."""
    role = user.active_role or user.role or FALLBACK_ROLE
    return MenuOut(
        role=role,
        items=[MenuItemOut(id=i.id, label=i.label, href=i.href) for i in visible_items(role)],
    )


@router.get("/user-roles/{user_id}", response_model=list[UserRoleOut])
async def list_user_roles(
    user_id: int,
    _admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> list[UserRoleOut]:
    return [UserRoleOut.model_validate(r) for r in await _roles_of(session, user_id)]


@router.post("/user-roles", response_model=UserRoleOut, status_code=status.HTTP_201_CREATED)
async def add_user_role(
    payload: UserRoleCreate,
    request: Request,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRoleOut:
    target = await session.get(User, payload.user_id)
    if target is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="User not found")
    if admin.role != R.SUPER_ADMIN:
        if payload.role in (R.SUPER_ADMIN, R.SCHOOL_ADMIN):
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Not allowed to assign this role")
        if payload.school_id is not None and payload.school_id != admin.school_id:
            raise HTTPException(status.HTTP_403_FORBIDDEN, detail="You can only assign roles in your own school")
    if payload.role == R.CLASS_TEACHER and payload.class_id is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="classId is required for class_teacher")

    assignment = UserRole(**payload.model_dump(), is_active=False, is_default=False)
    session.add(assignment)
    await session.flush()
    log_action(
        session, admin.id, "user_role_added",
        f"Role {payload.role.value} added to user {payload.user_id}", request,
    )
    await session.commit()
    return UserRoleOut.model_validate(assignment)


@router.delete("/user-roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def remove_user_role(
    role_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Response:
    assignment = await session.get(UserRole, role_id)
    if assignment is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Role assignment not found")
    if assignment.is_default:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail="The default role cannot be removed")

    owner = await session.get(User, assignment.user_id)
    if owner is not None and assignment.is_active:
        # fall back to the primary role
        await activate_role(session, owner, owner.role)
    await session.delete(assignment)
    log_action(
        session, admin.id, "user_role_removed",
        f"Role {assignment.role.value} removed from user {assignment.user_id}", request,
    )
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
