# app/services/collection_manager.py
import logging
import uuid
from datetime import date
from functools import cmp_to_key
from typing import Any

from app.core.errors import DuplicateGameError, GameValidationError, NotFoundError
from app.core.platforms import ALL_PLATFORMS, DEFAULT_CONDITION, is_canonical_platform
from app.repositories.game_repo import GameRepository
from app.schemas.game import CollectionSummary, GameDraft, GamePatch, GameRead, ViewFilter
from app.schemas.user import SessionUser

logger = logging.getLogger(__name__)

# Columns the store declares NOT NULL; an explicit None in a patch is dropped.
NON_NULLABLE_FIELDS = frozenset(
    {
        "title",
        "platform",
        "condition",
        "purchase_price",
        "current_value",
        "release_year",
        "is_favorite",
        "is_wishlist",
    }
)


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_games(a: GameRead, b: GameRead, sort_key: str) -> int:
    by_title = _cmp(a.title.casefold(), b.title.casefold())

    if sort_key == "platform":
        return _cmp(a.platform.casefold(), b.platform.casefold()) or by_title

    if sort_key in ("price-high", "price-low"):
        # Wishlist items have no meaningful price.
        if a.is_wishlist or b.is_wishlist:
            return by_title
        diff = _cmp(a.current_value, b.current_value)
        if sort_key == "price-high":
            diff = -diff
        return diff or by_title

    if sort_key in ("newest", "oldest"):
        diff = _cmp(a.release_year, b.release_year)
        if sort_key == "newest":
            diff = -diff
        return diff or by_title

    return by_title


def _in_partition(game: GameRead, partition: str) -> bool:
    if partition == "favorites":
        return game.is_favorite and not game.is_wishlist
    if partition == "wishlist":
        return game.is_wishlist
    return not game.is_wishlist


def derive_view(games: list[GameRead], view_filter: ViewFilter) -> list[GameRead]:
    """
    Filter and sort `games` for display.

    Pure: same games (in the same order) and same filter always give the
    same list. Never touches the store.

    Steps:
      1. partition (collection / favorites / wishlist)
      2. case-insensitive title substring search
      3. exact platform match, unless platform is "all"
      4. sort by sort_key, ties broken by title (case-insensitive)
    """
    needle = view_filter.search_text.strip().casefold()
    platform = view_filter.platform or ALL_PLATFORMS

    selected = [
        game
        for game in games
        if _in_partition(game, view_filter.partition)
        and needle in game.title.casefold()
        and (platform == ALL_PLATFORMS or game.platform == platform)
    ]
    return sorted(selected, key=cmp_to_key(lambda a, b: _compare_games(a, b, view_filter.sort_key)))


class CollectionManager:
    """
    In-memory game collection for the signed-in user.

    Responsibilities:
      - load the owner's games from the store
      - add / edit / favorite / move / delete, each confirmed by the store
        before the in-memory list changes
      - enforce the (title, platform) uniqueness per partition before writes
      - derive filtered and sorted views

    The duplicate check and the write are two separate store calls. Two
    sessions of the same user adding the same game at the same moment can
    both pass the check; no locking is attempted.
    """

    def __init__(self, repo: GameRepository):
        self.repo = repo
        self.games: list[GameRead] = []
        self.is_loaded = False
        self.owner_id: uuid.UUID | None = None

    # ----- Session -----

    def on_session_change(self, user: SessionUser | None) -> None:
        """Forget the previous owner's games when the signed-in user changes."""
        new_owner = user.id if user is not None else None
        if new_owner != self.owner_id:
            logger.info("collection: owner changed %s -> %s", self.owner_id, new_owner)
            self.owner_id = new_owner
            self.games = []
            self.is_loaded = False

    # ----- Helpers -----

    def get(self, game_id: uuid.UUID) -> GameRead:
        for game in self.games:
            if game.id == game_id:
                return game
        raise NotFoundError("This game is not in your collection.")

    def _replace(self, saved: GameRead) -> None:
        self.games = [saved if game.id == saved.id else game for game in self.games]

    def _forget(self, game_id: uuid.UUID) -> None:
        self.games = [game for game in self.games if game.id != game_id]

    @staticmethod
    def _validate(title: str | None, platform: str | None) -> None:
        if not title or not title.strip():
            raise GameValidationError("Title is required.")
        if not is_canonical_platform(platform):
            raise GameValidationError(f"Unknown platform: {platform or '(none)'}.")

    def _ensure_unique(
        self,
        title: str,
        platform: str,
        is_wishlist: bool,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        if self.repo.exists_duplicate(title, platform, is_wishlist, exclude_id=exclude_id):
            raise DuplicateGameError(title, platform, is_wishlist)

    def _write(self, current: GameRead, changes: dict[str, Any]) -> GameRead:
        try:
            saved = self.repo.update_by_id(current.id, changes, current=current)
        except NotFoundError:
            self._forget(current.id)
            raise
        self._replace(saved)
        return saved

    # ----- Operations -----

    def load(self) -> list[GameRead]:
        """
        Replace the in-memory list with the owner's games (newest first).

        On failure the previous list is kept as-is.
        """
        games = self.repo.list_by_owner()
        self.games = games
        self.is_loaded = True
        return games

    def add(self, draft: GameDraft, is_wishlist: bool = False) -> GameRead:
        """
        Persist a new game, then append the stored row.

        Defaults: condition CIB, prices 0, not a favorite, release year from
        the release date or the current year.

        Raises:
            GameValidationError: empty title or unknown platform.
            DuplicateGameError: (title, platform) already in that partition.
        """
        self._validate(draft.title, draft.platform)
        self._ensure_unique(draft.title, draft.platform, is_wishlist)

        record = draft.model_dump(mode="json")
        record.update(
            condition=draft.condition or DEFAULT_CONDITION,
            purchase_price=draft.purchase_price or 0,
            current_value=draft.current_value or 0,
            release_year=draft.release_year
            or (draft.release_date.year if draft.release_date else date.today().year),
            is_favorite=False,
            is_wishlist=is_wishlist,
        )

        saved = self.repo.insert(record)
        self.games = [*self.games, saved]
        logger.info("collection: added %s (%s) wishlist=%s", saved.title, saved.platform, is_wishlist)
        return saved

    def update(self, game_id: uuid.UUID, patch: GamePatch) -> GameRead:
        """
        Apply a partial edit.

        A new title, platform or partition is checked for duplicates first,
        ignoring the game itself.

        Raises:
            NotFoundError: the game is gone (or not owned).
            DuplicateGameError / GameValidationError
        """
        current = self.get(game_id)
        changes = {
            key: value
            for key, value in patch.model_dump(mode="json", exclude_unset=True).items()
            if value is not None or key not in NON_NULLABLE_FIELDS
        }
        if not changes:
            return current

        title = changes.get("title", current.title)
        platform = changes.get("platform", current.platform)
        is_wishlist = changes.get("is_wishlist", current.is_wishlist)

        if (title, platform, is_wishlist) != (current.title, current.platform, current.is_wishlist):
            self._validate(title, platform)
            self._ensure_unique(title, platform, is_wishlist, exclude_id=game_id)

        return self._write(current, changes)

    def toggle_favorite(self, game_id: uuid.UUID) -> GameRead:
        """
        Flip is_favorite.

        Allowed on wishlist items too; favorites only display owned games,
        so the flag is simply not shown until the game is moved.
        """
        current = self.get(game_id)
        return self.update(game_id, GamePatch(is_favorite=not current.is_favorite))

    def move_to_collection(self, game_id: uuid.UUID) -> GameRead:
        """
        Move a wishlist game into the owned collection.

        Raises:
            DuplicateGameError: the collection already has (title, platform);
                the game stays on the wishlist.
        """
        current = self.get(game_id)
        if not current.is_wishlist:
            return current

        self._ensure_unique(current.title, current.platform, False, exclude_id=game_id)
        saved = self._write(current, {"is_wishlist": False})
        logger.info("collection: moved %s to collection", saved.title)
        return saved

    def remove(self, game_id: uuid.UUID) -> None:
        """
        Delete a game, then drop it from memory.

        Raises:
            NotFoundError: the store deleted nothing.
        """
        try:
            self.repo.delete_by_id(game_id)
        except NotFoundError:
            self._forget(game_id)
            raise
        self._forget(game_id)
        logger.info("collection: removed %s", game_id)

    # ----- Views -----

    def view(self, view_filter: ViewFilter) -> list[GameRead]:
        return derive_view(self.games, view_filter)

    def summary(self) -> CollectionSummary:
        owned = [game for game in self.games if not game.is_wishlist]
        return CollectionSummary(
            collection_count=len(owned),
            favorites_count=sum(1 for game in owned if game.is_favorite),
            wishlist_count=len(self.games) - len(owned),
            total_purchase_price=round(sum(game.purchase_price for game in owned), 2),
            total_current_value=round(sum(game.current_value for game in owned), 2),
        )
