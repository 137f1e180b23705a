# app/schemas/game.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, computed_field, field_validator
from sqlmodel import SQLModel, Field

from app.core.platforms import ALL_PLATFORMS

Condition = Literal["Sealed", "CIB", "Disc Only", "Digital", "Opened"]
Partition = Literal["collection", "favorites", "wishlist"]
SortKey = Literal["alphabetical", "platform", "price-high", "price-low", "newest", "oldest"]
Trend = Literal["up", "down", "flat"]

PLACEHOLDER_COVER = "/placeholder.svg?height=300&width=200"


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    return v.strip()


class GameDraft(SQLModel):
    """
    Payload for adding a game (not yet persisted).

    Title/platform are only stripped here; emptiness and membership in
    the canonical platform list are checked by the collection manager so
    that they surface as a GameValidationError notification.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = ""
    platform: str = ""
    cover_url: str | None = None
    condition: Condition | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    current_value: float | None = Field(default=None, ge=0)
    release_date: date | None = None
    release_year: int | None = None
    publisher: str | None = None
    notes: str | None = None

    @field_validator("title", "platform")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class GamePatch(SQLModel):
    """
    Partial update for an existing game.
    Only fields explicitly sent are written (exclude_unset).
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    platform: str | None = None
    cover_url: str | None = None
    condition: Condition | None = None
    purchase_price: float | None = Field(default=None, ge=0)
    current_value: float | None = Field(default=None, ge=0)
    release_date: date | None = None
    release_year: int | None = None
    publisher: str | None = None
    notes: str | None = None
    is_favorite: bool | None = None
    is_wishlist: bool | None = None

    @field_validator("title", "platform")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class GameRead(SQLModel):
    """
    A stored game as returned by the store, plus its value trend.

    Instances are treated as immutable snapshots; the collection manager
    replaces them wholesale after each confirmed write.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    platform: str
    cover_url: str = PLACEHOLDER_COVER
    condition: str = "CIB"
    purchase_price: float = 0
    current_value: float = 0
    release_date: date | None = None
    release_year: int
    publisher: str | None = None
    notes: str | None = None
    is_favorite: bool = False
    is_wishlist: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("cover_url", mode="before")
    @classmethod
    def default_cover(cls, v: str | None) -> str:
        return v or PLACEHOLDER_COVER

    @field_validator("purchase_price", "current_value", mode="before")
    @classmethod
    def default_money(cls, v: float | None) -> float:
        return v or 0

    @computed_field
    @property
    def value_change(self) -> float:
        return round(self.current_value - self.purchase_price, 2)

    @computed_field
    @property
    def value_change_pct(self) -> float | None:
        if not self.purchase_price:
            return None
        return round((self.current_value - self.purchase_price) / self.purchase_price * 100, 1)

    @computed_field
    @property
    def trend(self) -> Trend:
        if self.current_value > self.purchase_price:
            return "up"
        if self.current_value < self.purchase_price:
            return "down"
        return "flat"


class ViewFilter(SQLModel):
    """
    Client-side view of the collection: tab, search box, platform
    dropdown and sort dropdown.
    """

    partition: Partition = "collection"
    search_text: str = ""
    platform: str = ALL_PLATFORMS
    sort_key: SortKey = "alphabetical"


class CollectionSummary(SQLModel):
    """Header counters for the three tabs plus owned-collection value."""

    collection_count: int
    favorites_count: int
    wishlist_count: int
    total_purchase_price: float
    total_current_value: float
