# app/models/user.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.models.product import utcnow


class User(SQLModel, table=True):
    """
    Shop user profile.

    Identity:
      - id: the Supabase Auth user id (UUID from the JWT "sub")

    Role:
      - "user" | "admin"
      - guests have no row and no token

    Passwords are not stored here; Supabase Auth owns them.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
        description="Login email, stored lower-case",
    )

    name: str = Field(
        max_length=50,
        description="Display name; first part of the email by default",
    )

    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )
