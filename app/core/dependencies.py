# app/core/dependencies.py
from fastapi import Depends, Request

from app.core.errors import NotAuthenticatedError
from app.schemas.user import SessionUser
from app.services.collection_manager import CollectionManager
from app.services.metadata_service import MetadataService
from app.services.session_manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    """FastAPI dependency: the SessionManager built in the app lifespan."""
    return request.app.state.session_manager


def get_collection(request: Request) -> CollectionManager:
    return request.app.state.collection


def get_metadata(request: Request) -> MetadataService:
    return request.app.state.metadata


def require_user(
    session_manager: SessionManager = Depends(get_session_manager),
) -> SessionUser:
    """
    Enforce authentication.

    Raises:
        NotAuthenticatedError: if no session is active.
    """
    if session_manager.user is None:
        raise NotAuthenticatedError()
    return session_manager.user
