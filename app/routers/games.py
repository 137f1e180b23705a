# app/routers/games.py
import uuid

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_collection, require_user
from app.core.platforms import ALL_PLATFORMS
from app.schemas.game import (
    CollectionSummary,
    GameDraft,
    GamePatch,
    GameRead,
    Partition,
    SortKey,
    ViewFilter,
)
from app.schemas.user import SessionUser
from app.services.collection_manager import CollectionManager

router = APIRouter(prefix="/games", tags=["Games"])


def _loaded(collection: CollectionManager) -> CollectionManager:
    if not collection.is_loaded:
        collection.load()
    return collection


@router.get("", response_model=list[GameRead])
def list_games(
    partition: Partition = "collection",
    search: str = "",
    platform: str = ALL_PLATFORMS,
    sort: SortKey = "alphabetical",
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """
    Filtered and sorted view of the signed-in user's games.

    Query params:
      - partition: collection | favorites | wishlist
      - search: case-insensitive title substring
      - platform: canonical platform name, or "all"
      - sort: alphabetical | platform | price-high | price-low | newest | oldest

    The collection is loaded from the store on first access only.
    """
    view_filter = ViewFilter(partition=partition, search_text=search, platform=platform, sort_key=sort)
    return _loaded(collection).view(view_filter)


@router.post("/load", response_model=list[GameRead])
def reload_games(
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """Re-read the collection from the store (newest first)."""
    return collection.load()


@router.get("/summary", response_model=CollectionSummary)
def get_summary(
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """Tab counters and total value of the owned collection."""
    return _loaded(collection).summary()


@router.post("", response_model=GameRead, status_code=status.HTTP_201_CREATED)
def add_game(
    payload: GameDraft,
    wishlist: bool = False,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """
    Add a game to the collection, or to the wishlist with ?wishlist=true.

    409 if the same title/platform is already in that list.
    """
    return _loaded(collection).add(payload, is_wishlist=wishlist)


@router.get("/{game_id}", response_model=GameRead)
def get_game(
    game_id: uuid.UUID,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    return _loaded(collection).get(game_id)


@router.patch("/{game_id}", response_model=GameRead)
def update_game(
    game_id: uuid.UUID,
    payload: GamePatch,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """Partial edit of a game."""
    return _loaded(collection).update(game_id, payload)


@router.post("/{game_id}/favorite", response_model=GameRead)
def toggle_favorite(
    game_id: uuid.UUID,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    return _loaded(collection).toggle_favorite(game_id)


@router.post("/{game_id}/move-to-collection", response_model=GameRead)
def move_to_collection(
    game_id: uuid.UUID,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    """Move a wishlist game into the owned collection."""
    return _loaded(collection).move_to_collection(game_id)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_game(
    game_id: uuid.UUID,
    collection: CollectionManager = Depends(get_collection),
    current_user: SessionUser = Depends(require_user),
):
    _loaded(collection).remove(game_id)
