# app/routers/search.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_metadata
from app.core.platforms import CANONICAL_PLATFORMS, CONDITIONS
from app.schemas.metadata import GameDetails, SearchResponse
from app.services.metadata_service import MetadataService

router = APIRouter(tags=["Search"])


@router.get("/search", response_model=SearchResponse)
def search_games(
    q: str = "",
    metadata: MetadataService = Depends(get_metadata),
):
    """
    Search RAWG by title.

    Queries shorter than 3 characters return no results without calling
    RAWG. `stale` is true when a newer query was submitted meanwhile.
    """
    return metadata.search_latest(q)


@router.get("/search/{game_id}", response_model=GameDetails)
def get_search_details(
    game_id: int,
    metadata: MetadataService = Depends(get_metadata),
):
    """
    Prefill for the add-game form.

    404 means "enter the game manually".
    """
    details = metadata.get_details(game_id)
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game details unavailable",
        )
    return details


@router.get("/platforms")
def list_platforms():
    """Canonical platforms and conditions for the form dropdowns."""
    return {"platforms": list(CANONICAL_PLATFORMS), "conditions": list(CONDITIONS)}
