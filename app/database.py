# app/database.py
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# Import models so SQLModel metadata is populated before create_all()
from app.models import game as _game_models  # noqa: F401
from app.models import profile as _profile_models  # noqa: F401

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# Only used to bootstrap the schema. All reads and writes at runtime go
# through the Supabase client so that RLS applies to the signed-in user.
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
# ---------------------------------------------------------


def with_sslmode(db_url: str) -> str:
    """Append sslmode=require if it is not already present."""
    if "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def build_engine(db_url: str) -> Engine:
    return create_engine(
        with_sslmode(db_url),
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create the games/profiles tables if they do not exist.

    This is called once on application startup when DATABASE_URL is set.
    """
    SQLModel.metadata.create_all(engine)
