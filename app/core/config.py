# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key; every call still respects RLS)
      - RAWG_API_KEY (game metadata search)

    Optional:
      - DATABASE_URL (Supabase Postgres connection string). When set,
        the games/profiles tables are created on startup.
    """

    PROJECT_NAME: str = "Game Collection Tracker"
    API_V1_STR: str = "/api/v1"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str | None = None

    # RAWG metadata API
    RAWG_API_KEY: str = ""
    RAWG_BASE_URL: str = "https://api.rawg.io/api"
    RAWG_PAGE_SIZE: int = 6
    RAWG_TIMEOUT: float = 10.0

    # Search behaviour exposed to clients
    SEARCH_MIN_CHARS: int = 3
    SEARCH_DEBOUNCE_MS: int = 500

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
