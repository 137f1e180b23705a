import uuid

import pytest
from sqlalchemy import event, text
from sqlmodel import create_engine

from app.database import create_db_and_tables, with_sslmode


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'tracker.db'}")

    # Postgres built-in used by the games.id default
    @event.listens_for(engine, "connect")
    def _register_uuid(dbapi_connection, connection_record):
        dbapi_connection.create_function("gen_random_uuid", 0, lambda: uuid.uuid4().hex)

    create_db_and_tables(engine)
    yield engine
    engine.dispose()


def test_profile_insert_without_timestamps(engine):
    # Same columns ProfileRepository.insert sends
    owner_id = uuid.uuid4().hex
    with engine.begin() as conn:
        conn.execute(
            text("INSERT INTO profiles (id, email, display_name) VALUES (:id, :email, :name)"),
            {"id": owner_id, "email": "ada@example.com", "name": "Ada"},
        )
        row = conn.execute(text("SELECT created_at, updated_at FROM profiles")).one()

    assert row.created_at is not None
    assert row.updated_at is not None


def test_game_insert_without_id(engine):
    # Same columns GameRepository.insert sends: no id
    owner_id = uuid.uuid4().hex
    with engine.begin() as conn:
        conn.execute(
            text("INSERT INTO profiles (id, email) VALUES (:id, :email)"),
            {"id": owner_id, "email": "ada@example.com"},
        )
        conn.execute(
            text(
                "INSERT INTO games (user_id, title, platform, condition, purchase_price, "
                "current_value, release_year, is_favorite, is_wishlist, created_at, updated_at) "
                "VALUES (:user_id, 'Halo', 'Xbox', 'CIB', 0, 0, 2001, 0, 0, "
                "'2024-01-01T00:00:00+00:00', '2024-01-01T00:00:00+00:00')"
            ),
            {"user_id": owner_id},
        )
        row = conn.execute(text("SELECT id, created_at FROM games")).one()

    assert row.id
    assert row.created_at is not None


def test_with_sslmode():
    assert with_sslmode("postgresql://h/db") == "postgresql://h/db?sslmode=require"
    assert with_sslmode("postgresql://h/db?a=1") == "postgresql://h/db?a=1&sslmode=require"
    assert with_sslmode("postgresql://h/db?sslmode=disable") == "postgresql://h/db?sslmode=disable"
