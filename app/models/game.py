# app/models/game.py
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import UniqueConstraint, func, text
from sqlmodel import SQLModel, Field


class Game(SQLModel, table=True):
    """
    A single tracked title owned by one user.

    Partitions:
      - is_wishlist = False -> owned collection
      - is_wishlist = True  -> wishlist

    (user_id, title, platform) is unique per partition. Title comparison
    is case-insensitive, which the table cannot express on its own; the
    collection manager checks it before every write.
    """

    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("user_id", "title", "platform", "is_wishlist"),
    )

    # Rows arrive through PostgREST without an id; the database assigns it.
    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        sa_column_kwargs={"server_default": text("gen_random_uuid()")},
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Owner; matches Supabase auth.users.id",
    )

    title: str = Field(min_length=1, index=True)

    platform: str = Field(
        index=True,
        description="One of the canonical platform names",
    )

    cover_url: str | None = None

    condition: str = Field(
        default="CIB",
        description="Sealed | CIB | Disc Only | Digital | Opened",
    )

    purchase_price: float = Field(default=0, ge=0)
    current_value: float = Field(default=0, ge=0)

    release_date: date | None = None
    release_year: int
    publisher: str | None = None
    notes: str | None = None

    is_favorite: bool = Field(default=False)
    is_wishlist: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"server_default": func.now()},
    )
