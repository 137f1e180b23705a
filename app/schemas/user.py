# app/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _normalize_display_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("display_name cannot be empty")
    return v


class SignInRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class SignUpRequest(SQLModel):
    """
    Payload for account creation.

    display_name is attached to the auth identity as metadata; the
    profile row picks it up the first time the session is seen.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)
    display_name: str | None = Field(default=None, max_length=100)

    @field_validator("display_name")
    @classmethod
    def normalize_display_name(cls, v: str | None) -> str | None:
        return _normalize_display_name(v)


class ProfileUpdate(SQLModel):
    """
    Profile edit. Only display_name is editable.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: str = Field(max_length=100)

    @field_validator("display_name")
    @classmethod
    def normalize_display_name(cls, v: str) -> str:
        return _normalize_display_name(v)


class ProfileRead(SQLModel):
    """Profile row as stored in public.profiles."""

    id: uuid.UUID
    email: str
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SessionUser(SQLModel):
    """
    In-memory view of the signed-in user.

    display_name resolves to the profile's value, falling back to the
    display_name stored in the auth identity's metadata.
    """

    id: uuid.UUID
    email: str | None = None
    display_name: str | None = None


class SessionState(SQLModel):
    """What the UI needs to render the auth area."""

    loading: bool
    user: SessionUser | None = None
