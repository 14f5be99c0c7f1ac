"""Role to navigation-menu mapping and the role check shared by the API guards."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ejournal.db.models.users import UserRoleEnum

R = UserRoleEnum


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    href: str


MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/"),
    MenuItem("schools", "Schools", "/schools"),
    MenuItem("users", "Users", "/users"),
    MenuItem("user-roles", "User roles", "/user-roles"),
    MenuItem("schedule", "Schedule", "/schedule"),
    MenuItem("homework", "Homework", "/homework"),
    MenuItem("grades", "Grades", "/grades"),
    MenuItem("messages", "Messages", "/messages"),
    MenuItem("documents", "Documents", "/documents"),
    MenuItem("analytics", "Analytics", "/analytics"),
    MenuItem("notifications", "Notifications", "/notifications"),
    MenuItem("settings", "Settings", "/settings"),
    MenuItem("support", "Support", "/support"),
)

_SCHOOL_LEADERSHIP = frozenset(
    {"dashboard", "users", "schedule", "grades", "analytics", "messages", "documents", "settings", "support"}
)

ROLE_ACCESS: dict[UserRoleEnum, frozenset[str]] = {
    R.SUPER_ADMIN: frozenset(
        {"dashboard", "schools", "users", "user-roles", "analytics", "messages", "notifications", "settings", "support"}
    ),
    R.SCHOOL_ADMIN: frozenset(
        {
            "dashboard", "users", "user-roles", "schedule", "homework", "grades",
            "analytics", "messages", "notifications", "settings", "support",
        }
    ),
    R.TEACHER: frozenset({"dashboard", "schedule", "homework", "messages", "documents", "support"}),
    R.CLASS_TEACHER: frozenset({"dashboard", "schedule", "homework", "grades", "messages", "documents", "support"}),
    R.STUDENT: frozenset({"dashboard", "schedule", "homework", "grades", "messages", "documents", "support"}),
    R.PARENT: frozenset({"dashboard", "grades", "messages", "documents", "support"}),
    R.PRINCIPAL: _SCHOOL_LEADERSHIP,
    R.VICE_PRINCIPAL: _SCHOOL_LEADERSHIP,
}

# Least-privileged role, used for unknown or missing roles.
FALLBACK_ROLE = R.STUDENT

RoleLike = Union[UserRoleEnum, str, None]


def coerce_role(role: RoleLike) -> Optional[UserRoleEnum]:
    if role is None or isinstance(role, UserRoleEnum):
        return role
    try:
        return UserRoleEnum(role)
    except ValueError:
        return None


def visible_items(role: RoleLike) -> list[MenuItem]:
    allowed = ROLE_ACCESS[coerce_role(role) or FALLBACK_ROLE]
    return [item for item in MENU_ITEMS if item.id in allowed]


def role_allows(
    allowed: Iterable[UserRoleEnum],
    *,
    primary: RoleLike,
    active: RoleLike = None,
    assigned: Iterable[RoleLike] = (),
) -> bool:
    """Whether a user passes a guard that admits ``allowed`` roles.

    Passes when the active role is admitted, the primary role is super_admin
    or admitted, or any of the user's role assignments is admitted.
    """
    allowed = set(allowed)
    active_role = coerce_role(active)
    primary_role = coerce_role(primary)
    if active_role is not None and active_role in allowed:
        return True
    if primary_role == R.SUPER_ADMIN or (primary_role is not None and primary_role in allowed):
        return True
    return any(coerce_role(r) in allowed for r in assigned)
