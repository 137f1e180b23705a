# app/services/session_manager.py
import logging
from typing import Any, Callable

import httpx
from pydantic import ValidationError
from supabase import AuthError, Client

from app.core.auth import get_current_identity, metadata_display_name
from app.core.errors import (
    AuthProviderError,
    GameTrackerError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    StoreUnavailableError,
)
from app.repositories.profile_repo import ProfileRepository
from app.schemas.user import ProfileRead, SessionState, SessionUser

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionUser | None], None]


class SessionManager:
    """
    Owns the authentication lifecycle for the running app.

    Responsibilities:
      - sign in / sign up / sign out through Supabase Auth
      - restore an existing session on startup
      - keep exactly one auth-state subscription for its lifetime
      - make sure a profile row exists for every signed-in identity
      - publish the resolved SessionUser to local listeners

    The published user only changes from auth-state events, initialize(),
    refresh_session(), sign_out() and update_profile(). sign_in() relies on
    the SIGNED_IN event emitted by the provider.
    """

    def __init__(self, client: Client, profile_repo: ProfileRepository):
        self.client = client
        self.profile_repo = profile_repo
        self.user: SessionUser | None = None
        self.loading = True
        self._listeners: list[SessionListener] = []
        self._subscription = client.auth.on_auth_state_change(self._on_auth_state_change)

    # ----- Subscription -----

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener called with the new SessionUser (or None)
        on every published change. Returns the matching unsubscribe.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Release the auth subscription and drop local listeners."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._listeners.clear()

    @property
    def state(self) -> SessionState:
        return SessionState(loading=self.loading, user=self.user)

    def _publish(self, user: SessionUser | None) -> None:
        self.user = user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("session listener %r failed", listener)

    def _on_auth_state_change(self, event: Any, session: Any | None) -> None:
        logger.info("auth state change: %s (%s)", event, "session" if session else "no session")
        try:
            if session is not None and session.user is not None:
                self._publish(self._resolve_user(session.user))
            else:
                self._publish(None)
        except (GameTrackerError, ValidationError) as e:
            logger.error("auth state change handling failed: %s", e)
            self._publish(None)
        finally:
            self.loading = False

    # ----- Profile -----

    def ensure_profile(self, identity: Any) -> ProfileRead | None:
        """
        Create the profile row for `identity` if it does not exist yet.

        Never overwrites an existing profile. Two overlapping calls for the
        same identity are fine: the loser's insert hits the unique key and
        is reported as "already exists".
        """
        existing = self.profile_repo.get(identity.id)
        if existing is not None:
            return existing

        logger.info("creating profile for %s", identity.id)
        self.profile_repo.insert(
            {
                "id": str(identity.id),
                "email": identity.email,
                "display_name": metadata_display_name(identity),
            }
        )
        return self.profile_repo.get(identity.id)

    def _resolve_user(self, identity: Any) -> SessionUser:
        profile = self.ensure_profile(identity)
        display_name = (profile.display_name if profile else None) or metadata_display_name(identity)
        return SessionUser(id=identity.id, email=identity.email, display_name=display_name)

    # ----- Lifecycle -----

    def initialize(self) -> SessionUser | None:
        """
        Restore a stored session, if any.

        Any failure here degrades to "no user"; the app must still render.
        """
        try:
            session = self.client.auth.get_session()
            if session is None:
                logger.info("initialize: no stored session")
                self._publish(None)
            else:
                identity = get_current_identity(self.client)
                self._publish(self._resolve_user(identity) if identity is not None else None)
        except (AuthError, GameTrackerError, ValidationError, httpx.HTTPError) as e:
            logger.error("initialize: session restore failed: %s", e)
            self._publish(None)
        finally:
            self.loading = False
        return self.user

    def sign_in(self, email: str, password: str) -> SessionUser | None:
        """
        Sign in with email + password.

        The SIGNED_IN event published by the provider resolves and publishes
        the user; this method only reports failures.

        Raises:
            InvalidCredentialsError: provider rejected the credentials.
        """
        logger.info("signing in %s", email)
        try:
            self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise InvalidCredentialsError(e.message) from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError("Could not reach the authentication service.") from e
        return self.user

    def sign_up(self, email: str, password: str, display_name: str | None = None) -> bool:
        """
        Create an account. display_name is stored as identity metadata.

        Returns:
            True if the provider wants the email confirmed before a session
            exists, False if the user is already signed in.

        Raises:
            AuthProviderError: weak password, email already registered, ...
        """
        logger.info("signing up %s", email)
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"display_name": display_name}},
                }
            )
        except AuthError as e:
            raise AuthProviderError(e.message, title="Sign Up Failed") from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError("Could not reach the authentication service.") from e
        return response.session is None

    def sign_out(self) -> None:
        logger.info("signing out %s", self.user.id if self.user else None)
        try:
            self.client.auth.sign_out()
        except AuthError as e:
            raise AuthProviderError(e.message, title="Sign Out Failed") from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError("Could not reach the authentication service.") from e
        self._publish(None)

    def refresh_session(self) -> SessionUser | None:
        """Force a token refresh; any failure signs the user out locally."""
        try:
            response = self.client.auth.refresh_session()
            if response.user is not None:
                self._publish(self._resolve_user(response.user))
            else:
                self._publish(None)
        except (AuthError, GameTrackerError, ValidationError, httpx.HTTPError) as e:
            logger.error("session refresh failed: %s", e)
            self._publish(None)
        return self.user

    def update_profile(self, display_name: str) -> SessionUser:
        """
        Set the display name of the current identity's profile.

        Raises:
            NotAuthenticatedError: if no one is signed in.
        """
        identity = get_current_identity(self.client)
        if identity is None:
            raise NotAuthenticatedError()

        profile = self.profile_repo.upsert(
            {
                "id": str(identity.id),
                "email": identity.email,
                "display_name": display_name,
            }
        )
        user = SessionUser(id=identity.id, email=identity.email, display_name=profile.display_name)
        self._publish(user)
        return user
