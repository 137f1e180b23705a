"""Pytest fixtures shared across the test suite."""

import os

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("RAWG_API_KEY", "test-rawg-key")

import pytest

from app.repositories.game_repo import GameRepository
from app.repositories.profile_repo import ProfileRepository
from app.schemas.game import GameDraft
from app.services.collection_manager import CollectionManager
from app.services.session_manager import SessionManager
from tests.fakes import FakeSupabase


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def owner(supabase):
    """A signed-in identity."""
    return supabase.sign_in_as()


@pytest.fixture
def game_repo(supabase):
    return GameRepository(supabase)


@pytest.fixture
def profile_repo(supabase):
    return ProfileRepository(supabase)


@pytest.fixture
def collection(game_repo):
    return CollectionManager(game_repo)


@pytest.fixture
def session_manager(supabase, profile_repo):
    manager = SessionManager(supabase, profile_repo)
    yield manager
    manager.close()


@pytest.fixture
def make_draft():
    def _make(title="Halo", platform="Xbox", **fields):
        fields.setdefault("release_year", 2001)
        return GameDraft(title=title, platform=platform, **fields)

    return _make
