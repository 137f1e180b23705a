# app/repositories/game_repo.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx
from supabase import Client, PostgrestAPIError

from app.core.auth import require_owner_id
from app.core.errors import DuplicateGameError, NotFoundError, StoreUnavailableError
from app.schemas.game import GameRead

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _conflict(row: dict[str, Any]) -> DuplicateGameError:
    return DuplicateGameError(
        row.get("title") or "This game",
        row.get("platform") or "this platform",
        bool(row.get("is_wishlist")),
    )


class GameRepository:
    """
    Owner-scoped data access for the `games` table.

    Responsibilities:
      - resolve the signed-in owner before every call
      - constrain every query and mutation to that owner's rows
      - translate store failures into StoreUnavailableError
      - no business rules (duplicates, defaults) here
    """

    TABLE = "games"

    def __init__(self, client: Client):
        self.client = client

    def _execute(self, query, action: str, on_conflict: DuplicateGameError | None = None):
        try:
            return query.execute()
        except PostgrestAPIError as e:
            if on_conflict is not None and e.code == UNIQUE_VIOLATION:
                logger.info("games: %s hit the unique key: %s", action, e)
                raise on_conflict from e
            logger.error("games: %s failed: %s", action, e)
            raise StoreUnavailableError(f"Failed to {action}.") from e
        except httpx.HTTPError as e:
            logger.error("games: %s failed: %s", action, e)
            raise StoreUnavailableError(f"Failed to {action}.") from e

    # ----- Queries -----

    def list_by_owner(self) -> list[GameRead]:
        """All games of the current owner, newest created first."""
        owner_id = require_owner_id(self.client)
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=True)
        )
        response = self._execute(query, "load your game collection")
        rows = response.data or []
        logger.info("games: loaded %d rows for %s", len(rows), owner_id)
        return [GameRead.model_validate(row) for row in rows]

    def exists_duplicate(
        self,
        title: str,
        platform: str,
        is_wishlist: bool,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        """
        True if the owner already has (title, platform) in the partition.

        `ilike` without wildcards is a case-insensitive match, but a title
        containing % or _ would match more than itself, so candidates are
        compared again with casefold().
        """
        owner_id = require_owner_id(self.client)
        query = (
            self.client.table(self.TABLE)
            .select("id, title")
            .eq("user_id", owner_id)
            .ilike("title", title)
            .eq("platform", platform)
            .eq("is_wishlist", is_wishlist)
        )
        if exclude_id is not None:
            query = query.neq("id", str(exclude_id))

        response = self._execute(query, "check for duplicates")
        wanted = title.casefold()
        return any((row.get("title") or "").casefold() == wanted for row in response.data or [])

    # ----- Mutations -----

    def insert(self, record: dict[str, Any]) -> GameRead:
        """
        Insert a game for the current owner and return the stored row,
        including its store-assigned id.

        Raises:
            DuplicateGameError: the table's unique key rejected the row.
        """
        owner_id = require_owner_id(self.client)
        now = _now_iso()
        payload = {
            **record,
            "user_id": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        response = self._execute(
            self.client.table(self.TABLE).insert(payload),
            "add the game",
            on_conflict=_conflict(payload),
        )
        rows = response.data or []
        if not rows:
            raise StoreUnavailableError("The store did not confirm the new game.")
        return GameRead.model_validate(rows[0])

    def update_by_id(
        self,
        game_id: uuid.UUID,
        patch: dict[str, Any],
        current: GameRead | None = None,
    ) -> GameRead:
        """
        Apply `patch` to one of the owner's games.

        `current` is the row before the patch; it names the title, platform
        and partition in the duplicate error when the patch only changes
        some of them.

        Raises:
            NotFoundError: if no row with that id belongs to the owner.
            DuplicateGameError: the table's unique key rejected the change.
        """
        owner_id = require_owner_id(self.client)
        query = (
            self.client.table(self.TABLE)
            .update({**patch, "updated_at": _now_iso()})
            .eq("id", str(game_id))
            .eq("user_id", owner_id)
        )
        merged = {**(current.model_dump() if current is not None else {}), **patch}
        response = self._execute(query, "update the game", on_conflict=_conflict(merged))
        rows = response.data or []
        if not rows:
            raise NotFoundError("This game no longer exists in your collection.")
        return GameRead.model_validate(rows[0])

    def delete_by_id(self, game_id: uuid.UUID) -> None:
        """
        Delete one of the owner's games.

        Raises:
            NotFoundError: if no row was deleted.
        """
        owner_id = require_owner_id(self.client)
        query = (
            self.client.table(self.TABLE)
            .delete()
            .eq("id", str(game_id))
            .eq("user_id", owner_id)
        )
        response = self._execute(query, "delete the game")
        if not response.data:
            raise NotFoundError("This game no longer exists in your collection.")
