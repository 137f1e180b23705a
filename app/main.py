# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from supabase import Client

from app.core.config import Settings, get_settings
from app.core.errors import GameTrackerError, game_tracker_error_handler
from app.core.supabase_client import create_supabase_client
from app.database import build_engine, create_db_and_tables
from app.repositories.game_repo import GameRepository
from app.repositories.profile_repo import ProfileRepository
from app.services.collection_manager import CollectionManager
from app.services.metadata_service import MetadataService
from app.services.session_manager import SessionManager

# Routers
from app.routers.users import router as users_router
from app.routers.games import router as games_router
from app.routers.search import router as search_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the games/profiles tables if DATABASE_URL is set.
      - Build the Supabase client and wire repositories and managers.
      - Restore a stored session before serving requests.

    Shutdown:
      - Release the auth subscription and the RAWG HTTP session.
    """
    settings: Settings = app.state.settings

    if settings.DATABASE_URL:
        logger.info("🔄 Startup: Connecting to Supabase Postgres...")
        try:
            create_db_and_tables(build_engine(settings.DATABASE_URL))
            logger.info("✅ Startup: DB connection OK, tables verified.")
        except Exception as e:
            logger.error(f"❌ Startup: DB connection FAILED: {e}")
            raise

    client = app.state.supabase or create_supabase_client(settings)
    session_manager = SessionManager(client, ProfileRepository(client))
    collection = CollectionManager(GameRepository(client))
    session_manager.subscribe(collection.on_session_change)
    metadata = app.state.metadata or MetadataService.from_settings(settings)

    app.state.session_manager = session_manager
    app.state.collection = collection
    app.state.metadata = metadata

    logger.info("🔄 Startup: Restoring session...")
    user = session_manager.initialize()
    logger.info(f"✅ Startup: session restored for {user.id}" if user else "✅ Startup: no session.")

    yield

    session_manager.close()
    metadata.close()


def create_app(
    settings: Settings | None = None,
    supabase: Client | None = None,
    metadata: MetadataService | None = None,
) -> FastAPI:
    """
    Build the API.

    `supabase` and `metadata` replace the real Supabase client and RAWG
    client (tests pass in-memory fakes).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.supabase = supabase
    app.state.metadata = metadata

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GameTrackerError, game_tracker_error_handler)

    # Versioned API prefix, e.g. /api/v1
    app.include_router(users_router, prefix=settings.API_V1_STR)
    app.include_router(games_router, prefix=settings.API_V1_STR)
    app.include_router(search_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "game-collection-tracker"}

    @app.get(f"{settings.API_V1_STR}/config")
    def client_config():
        """Search tuning the client applies before calling /search."""
        return {
            "search_min_chars": settings.SEARCH_MIN_CHARS,
            "search_debounce_ms": settings.SEARCH_DEBOUNCE_MS,
        }

    return app


app = create_app()
