# app/schemas/metadata.py
from datetime import date

from sqlmodel import SQLModel


class SearchHit(SQLModel):
    """One RAWG search result, platforms already normalized."""

    id: int
    title: str
    cover_url: str
    release_date: date | None = None
    release_year: int | None = None
    platforms: list[str] = []
    rating: float | None = None
    slug: str | None = None


class SearchResponse(SQLModel):
    """
    Search results tagged with the query they answer.

    stale=True means a newer query was submitted while this one was in
    flight; the client should drop the results.
    """

    query: str
    stale: bool = False
    results: list[SearchHit] = []


class GameDetails(SQLModel):
    """
    Prefill for the add-game form built from a RAWG detail payload.
    Every field can be edited before the draft is submitted.
    """

    id: str
    title: str
    cover_url: str
    release_date: date | None = None
    release_year: int
    platform: str
    available_platforms: list[str] = []
    publisher: str = ""
    condition: str = "Opened"
    purchase_price: float = 0
    current_value: float = 0
    notes: str = ""
    is_favorite: bool = False
    is_wishlist: bool = False
