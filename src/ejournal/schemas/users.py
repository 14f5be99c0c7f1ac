from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ejournal.db.models.users import UserRoleEnum
from ejournal.schemas.base import APIModel


class UserBase(APIModel):
    username: str = Field(..., min_length=3, max_length=64)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    role: UserRoleEnum = UserRoleEnum.STUDENT
    school_id: Optional[int] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)


class UserUpdate(APIModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[UserRoleEnum] = None
    school_id: Optional[int] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserOut(APIModel):
    id: int
    username: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: UserRoleEnum
    active_role: Optional[UserRoleEnum] = None
    school_id: Optional[int] = None
    created_at: datetime


class LoginIn(APIModel):
    username: str
    password: str


class UserRoleCreate(APIModel):
    user_id: int
    role: UserRoleEnum
    school_id: Optional[int] = None
    class_id: Optional[int] = None


class UserRoleOut(APIModel):
    id: int
    user_id: int
    role: UserRoleEnum
    school_id: Optional[int] = None
    class_id: Optional[int] = None
    is_active: bool
    is_default: bool


class SwitchRoleIn(APIModel):
    role: Optional[UserRoleEnum] = None


class ActiveRoleIn(APIModel):
    active_role: UserRoleEnum


class MenuItemOut(APIModel):
    id: str
    label: str
    href: str


class MenuOut(APIModel):
    role: UserRoleEnum
    items: list[MenuItemOut]
