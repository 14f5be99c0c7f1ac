from __future__ import annotations

import enum
from typing import ClassVar, Optional

import sqlalchemy as sa
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ejournal.db.base import Base, TimestampMixin, str_enum


class UserRoleEnum(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    PRINCIPAL = "principal"
    VICE_PRINCIPAL = "vice_principal"
    CLASS_TEACHER = "class_teacher"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    NOTE: ClassVar[str] = (
        "description=Accounts of every person using the journal. "
        "role is the primary role; active_role is the role currently governing menus and permissions."
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(sa.String(64), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(sa.Text, nullable=False)
    first_name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    last_name: Mapped[str] = mapped_column(sa.Text, nullable=False)
    email: Mapped[str] = mapped_column(sa.Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.Text)
    role: Mapped[UserRoleEnum] = mapped_column(
        str_enum(UserRoleEnum, "user_role"), nullable=False, default=UserRoleEnum.STUDENT
    )
    active_role: Mapped[Optional[UserRoleEnum]] = mapped_column(str_enum(UserRoleEnum, "user_role"))
    school_id: Mapped[Optional[int]] = mapped_column(ForeignKey("schools.id", ondelete="SET NULL"))

    @property
    def effective_role(self) -> UserRoleEnum:
        return self.active_role or self.role


class UserRole(TimestampMixin, Base):
    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", "school_id", "class_id", name="uq_user_roles_assignment"),
    )

    NOTE: ClassVar[str] = (
        "description=Role assignments of a user. Exactly one assignment is active at a time; "
        "class_id binds a class_teacher assignment to its class."
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role: Mapped[UserRoleEnum] = mapped_column(str_enum(UserRoleEnum, "user_role"), nullable=False)
    school_id: Mapped[Optional[int]] = mapped_column(ForeignKey("schools.id", ondelete="CASCADE"))
    class_id: Mapped[Optional[int]] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"))
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    is_default: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
