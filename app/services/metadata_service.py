# app/services/metadata_service.py
"""
RAWG game metadata lookup.

Used only by the add-game flow: searching by title and prefilling the
form from one result. Both calls are best effort. A failed search returns
no results and a failed detail fetch returns None, so the user can always
fall back to typing the game in by hand.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

import requests

from app.core.config import Settings
from app.core.platforms import PREFILL_CONDITION, normalize_platforms
from app.schemas.game import PLACEHOLDER_COVER
from app.schemas.metadata import GameDetails, SearchHit, SearchResponse

logger = logging.getLogger(__name__)

NOTES_PREVIEW_CHARS = 200

_LOOKUP_ERRORS = (requests.RequestException, ValueError, KeyError, TypeError)


def _parse_release_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _platform_names(payload: dict[str, Any]) -> list[str]:
    entries = payload.get("platforms") or []
    return normalize_platforms([entry["platform"]["name"] for entry in entries])


class SearchTracker:
    """
    Remembers the most recent search query.

    Requests are never cancelled; instead a result whose query is no
    longer the latest one is flagged stale and dropped by the caller.
    """

    def __init__(self) -> None:
        self.latest_query: str | None = None

    def submit(self, query: str) -> None:
        self.latest_query = query

    def is_stale(self, query: str) -> bool:
        return query != self.latest_query


class MetadataService:
    """RAWG client: title search and detail prefill.

    Args:
        api_key:   RAWG API key.
        base_url:  RAWG API root, e.g. ``https://api.rawg.io/api``.
        page_size: Number of search hits requested.
        timeout:   HTTP request timeout in seconds.
        min_chars: Queries shorter than this never hit the network.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        page_size: int = 6,
        timeout: float = 10.0,
        min_chars: int = 3,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._timeout = timeout
        self._min_chars = min_chars
        self._session = session or requests.Session()
        self.tracker = SearchTracker()

    @classmethod
    def from_settings(cls, settings: Settings) -> MetadataService:
        return cls(
            api_key=settings.RAWG_API_KEY,
            base_url=settings.RAWG_BASE_URL,
            page_size=settings.RAWG_PAGE_SIZE,
            timeout=settings.RAWG_TIMEOUT,
            min_chars=settings.SEARCH_MIN_CHARS,
        )

    def close(self) -> None:
        self._session.close()

    def _get(self, path: str, **params: Any) -> dict[str, Any]:
        resp = self._session.get(
            f"{self._base_url}{path}",
            params={"key": self._api_key, **params},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, query: str) -> list[SearchHit]:
        """Search RAWG by title. Returns [] for short queries or on any error."""
        query = (query or "").strip()
        if len(query) < self._min_chars:
            return []

        try:
            data = self._get("/games", search=query, page_size=self._page_size)
            hits = []
            for game in data.get("results") or []:
                released = _parse_release_date(game.get("released"))
                hits.append(
                    SearchHit(
                        id=game["id"],
                        title=game["name"],
                        cover_url=game.get("background_image") or PLACEHOLDER_COVER,
                        release_date=released,
                        release_year=released.year if released else None,
                        platforms=_platform_names(game),
                        rating=game.get("rating"),
                        slug=game.get("slug"),
                    )
                )
        except _LOOKUP_ERRORS as e:
            logger.error("RAWG search failed for %r: %s", query, e)
            return []

        logger.debug("RAWG search %r: %d hits", query, len(hits))
        return hits

    def search_latest(self, query: str) -> SearchResponse:
        """
        Search and tag the answer with whether a newer query arrived
        meanwhile. Stale answers carry no results.
        """
        self.tracker.submit(query)
        results = self.search(query)
        if self.tracker.is_stale(query):
            logger.debug("RAWG search %r superseded by %r", query, self.tracker.latest_query)
            return SearchResponse(query=query, stale=True, results=[])
        return SearchResponse(query=query, results=results)

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def get_details(self, game_id: int | str) -> GameDetails | None:
        """
        Build an add-game prefill from one RAWG game.

        Returns None on any failure; callers switch to manual entry.
        """
        try:
            game = self._get(f"/games/{game_id}")
            released = _parse_release_date(game.get("released"))
            platforms = _platform_names(game)
            publishers = game.get("publishers") or []
            description = game.get("description_raw") or ""

            return GameDetails(
                id=str(game["id"]),
                title=game["name"],
                cover_url=game.get("background_image") or PLACEHOLDER_COVER,
                release_date=released,
                release_year=released.year if released else date.today().year,
                platform=platforms[0] if platforms else "",
                available_platforms=platforms,
                publisher=publishers[0]["name"] if publishers else "",
                condition=PREFILL_CONDITION,
                notes=description[:NOTES_PREVIEW_CHARS] + "..." if description else "",
            )
        except _LOOKUP_ERRORS as e:
            logger.error("RAWG details failed for %s: %s", game_id, e)
            return None
