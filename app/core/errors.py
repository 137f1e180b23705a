# app/core/errors.py
from fastapi import Request, status
from fastapi.responses import JSONResponse


class GameTrackerError(Exception):
    """
    Base class for errors surfaced to the user as a notification.

    Every subclass carries:
      - status_code: HTTP status used by the API layer
      - title: short notification heading
      - description: human-readable detail
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    title: str = "Error"

    def __init__(self, description: str, title: str | None = None):
        super().__init__(description)
        self.description = description
        if title is not None:
            self.title = title

    def to_notification(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "variant": "destructive",
        }


class NotAuthenticatedError(GameTrackerError):
    """No active session for an owner-scoped call."""

    status_code = status.HTTP_401_UNAUTHORIZED
    title = "Authentication Error"

    def __init__(self, description: str = "Your session has expired. Please sign in again."):
        super().__init__(description)


class InvalidCredentialsError(GameTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    title = "Sign In Failed"


class AuthProviderError(GameTrackerError):
    """Sign-up / sign-out / refresh rejected by the auth provider."""

    status_code = status.HTTP_400_BAD_REQUEST
    title = "Authentication Failed"


class DuplicateGameError(GameTrackerError):
    """
    (owner, title, platform) already exists in the target partition.

    `partition` is "wishlist" or "collection" so the caller can say
    where the collision happened.
    """

    status_code = status.HTTP_409_CONFLICT
    title = "Duplicate Game"

    def __init__(self, title: str, platform: str, is_wishlist: bool):
        self.game_title = title
        self.platform = platform
        self.is_wishlist = is_wishlist
        super().__init__(
            f"{title} for {platform} already exists in your {self.partition}."
        )

    @property
    def partition(self) -> str:
        return "wishlist" if self.is_wishlist else "collection"


class NotFoundError(GameTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    title = "Game Not Found"


class StoreUnavailableError(GameTrackerError):
    """Transport or query failure talking to the hosted store."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    title = "Store Unavailable"


class GameValidationError(GameTrackerError):
    status_code = 422
    title = "Invalid Game"


async def game_tracker_error_handler(request: Request, exc: GameTrackerError) -> JSONResponse:
    """
    Turn a domain error into a notification payload.

    Registered on the FastAPI app so routers never leak these as 500s.
    """
    return JSONResponse(status_code=exc.status_code, content=exc.to_notification())
