# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["user", "admin"]


def _normalize_name(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty")
    return v


class UserRegister(SQLModel):
    """
    Sign-up payload.

    The account is created in Supabase Auth; the profile row keeps
    the email, display name and role.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return _normalize_name(v)


class UserLogin(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdate(SQLModel):
    """
    Partial update for profile edits.
    Currently, only `name` is editable.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return _normalize_name(v)


class UserRoleUpdate(SQLModel):
    """Admin-only role change. Allowed values enforced by Literal."""

    model_config = ConfigDict(extra="forbid")

    role: Role


class UserRead(SQLModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    created_at: datetime


class TokenRead(SQLModel):
    """Supabase access token handed back after a successful sign-in."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
