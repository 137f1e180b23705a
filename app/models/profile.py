# app/models/profile.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import func
from sqlmodel import SQLModel, Field


class Profile(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match Supabase auth.users.id

    Supabase Auth stores credentials in its own schema. This table only
    mirrors identity, email and the chosen display name. Rows are created
    lazily the first time a session is seen and never deleted here.
    """

    __tablename__ = "profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    email: str = Field(
        index=True,
        description="Email from Supabase auth.users",
    )

    display_name: str | None = Field(
        default=None,
        max_length=100,
    )

    avatar_url: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
        sa_column_kwargs={"server_default": func.now()},
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )
