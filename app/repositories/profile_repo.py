# app/repositories/profile_repo.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx
from supabase import Client, PostgrestAPIError

from app.core.errors import StoreUnavailableError
from app.schemas.user import ProfileRead

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class ProfileRepository:
    """
    Data access layer for the `profiles` table.

    Responsibilities:
      - Pure store operations (read, insert, upsert)
      - No auth flow, no business logic
    """

    TABLE = "profiles"

    def __init__(self, client: Client):
        self.client = client

    def get(self, user_id: uuid.UUID | str) -> ProfileRead | None:
        """Return the profile for an identity, or None if not created yet."""
        query = self.client.table(self.TABLE).select("*").eq("id", str(user_id)).limit(1)
        try:
            response = query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.error("profiles: lookup failed for %s: %s", user_id, e)
            raise StoreUnavailableError("Failed to load your profile.") from e
        rows = response.data or []
        return ProfileRead.model_validate(rows[0]) if rows else None

    def insert(self, profile: dict[str, Any]) -> bool:
        """
        Insert a profile row.

        Returns:
            True if this call created the row, False if a row with the same
            id already existed (unique violation). Losing that race is fine:
            the profile exists either way.
        """
        try:
            self.client.table(self.TABLE).insert(profile).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info("profiles: %s already exists", profile.get("id"))
                return False
            logger.error("profiles: insert failed for %s: %s", profile.get("id"), e)
            raise StoreUnavailableError("Failed to create your profile.") from e
        except httpx.HTTPError as e:
            logger.error("profiles: insert failed for %s: %s", profile.get("id"), e)
            raise StoreUnavailableError("Failed to create your profile.") from e
        return True

    def upsert(self, profile: dict[str, Any]) -> ProfileRead:
        """Insert or update a profile row keyed by id."""
        payload = {**profile, "updated_at": datetime.now(timezone.utc).isoformat()}
        try:
            response = self.client.table(self.TABLE).upsert(payload).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.error("profiles: upsert failed for %s: %s", profile.get("id"), e)
            raise StoreUnavailableError("Failed to update your profile.") from e
        rows = response.data or []
        if not rows:
            raise StoreUnavailableError("The store did not confirm the profile update.")
        return ProfileRead.model_validate(rows[0])
