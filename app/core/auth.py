# app/core/auth.py
import logging
from typing import Any

import httpx
from supabase import AuthError, Client

from app.core.errors import NotAuthenticatedError, StoreUnavailableError

logger = logging.getLogger(__name__)


def get_current_identity(client: Client) -> Any | None:
    """
    Resolve the identity behind the client's current session.

    Flow:
      1. Ask Supabase Auth for the user attached to the stored session.
      2. No session (or a rejected / expired one) => None.

    Returns:
        The Supabase auth user (id, email, user_metadata) or None.

    Raises:
        StoreUnavailableError: if the auth endpoint cannot be reached.
    """
    try:
        response = client.auth.get_user()
    except AuthError as e:
        logger.debug("get_user rejected: %s", e)
        return None
    except httpx.HTTPError as e:
        logger.error("get_user transport failure: %s", e)
        raise StoreUnavailableError("Could not reach the authentication service.") from e

    if response is None:
        return None
    return response.user


def require_owner_id(client: Client) -> str:
    """
    Enforce authentication for owner-scoped calls.

    Returns:
        The current identity id as a string (PostgREST filter value).

    Raises:
        NotAuthenticatedError: if there is no active session.
    """
    identity = get_current_identity(client)
    if identity is None:
        raise NotAuthenticatedError()
    return str(identity.id)


def metadata_display_name(identity: Any) -> str | None:
    """display_name stored on the identity at sign-up, if any."""
    metadata = getattr(identity, "user_metadata", None) or {}
    return metadata.get("display_name") or None
