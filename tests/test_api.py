from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.metadata_service import MetadataService

API = "/api/v1"


@pytest.fixture
def rawg_session():
    return MagicMock()


@pytest.fixture
def client(supabase, rawg_session):
    settings = Settings(SUPABASE_URL="https://example.supabase.co", SUPABASE_KEY="anon")
    metadata = MetadataService(api_key="k", base_url="https://rawg.test/api", session=rawg_session)
    app = create_app(settings=settings, supabase=supabase, metadata=metadata)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signed_in(client, supabase):
    supabase.auth.register("player@example.com", "secret123", "Player")
    resp = client.post(f"{API}/auth/sign-in", json={"email": "player@example.com", "password": "secret123"})
    assert resp.status_code == 200
    return resp.json()["user"]


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_me_without_session(client):
    assert client.get(f"{API}/auth/me").json() == {"loading": False, "user": None}


def test_games_require_sign_in(client):
    resp = client.get(f"{API}/games")

    assert resp.status_code == 401
    assert resp.json()["title"] == "Authentication Error"
    assert resp.json()["variant"] == "destructive"


def test_sign_in_failure_is_a_notification(client, supabase):
    supabase.auth.register("player@example.com", "secret123")

    resp = client.post(f"{API}/auth/sign-in", json={"email": "player@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.json() == {
        "title": "Sign In Failed",
        "description": "Invalid login credentials",
        "variant": "destructive",
    }


def test_sign_up_and_profile_update(client, supabase):
    supabase.auth.confirm_email = True
    resp = client.post(
        f"{API}/auth/sign-up",
        json={"email": "new@example.com", "password": "secret123", "display_name": "  Newbie "},
    )
    assert resp.json() == {"confirmation_required": True}

    client.post(f"{API}/auth/sign-in", json={"email": "new@example.com", "password": "secret123"})
    assert client.get(f"{API}/auth/me").json()["user"]["display_name"] == "Newbie"

    resp = client.patch(f"{API}/auth/me", json={"display_name": "Renamed"})
    assert resp.json()["display_name"] == "Renamed"


def test_add_view_and_duplicate(client, signed_in):
    game = {"title": "Halo", "platform": "Xbox", "release_year": 2001, "current_value": 12}
    resp = client.post(f"{API}/games", json=game)
    assert resp.status_code == 201
    assert resp.json()["condition"] == "CIB"

    dup = client.post(f"{API}/games", json={**game, "title": "halo"})
    assert dup.status_code == 409
    assert dup.json()["description"] == "halo for Xbox already exists in your collection."

    wish = client.post(f"{API}/games", params={"wishlist": True}, json=game)
    assert wish.status_code == 201

    listed = client.get(f"{API}/games", params={"partition": "wishlist"}).json()
    assert [g["title"] for g in listed] == ["Halo"]
    assert listed[0]["is_wishlist"] is True

    summary = client.get(f"{API}/games/summary").json()
    assert summary["collection_count"] == 1
    assert summary["wishlist_count"] == 1


def test_invalid_game_is_422_notification(client, signed_in):
    resp = client.post(f"{API}/games", json={"title": "Halo", "platform": "Xbox 720"})

    assert resp.status_code == 422
    assert resp.json()["title"] == "Invalid Game"


def test_favorite_move_and_delete(client, signed_in):
    owned = client.post(f"{API}/games", json={"title": "Doom", "platform": "PC"}).json()
    wish = client.post(
        f"{API}/games", params={"wishlist": True}, json={"title": "Quake", "platform": "PC"}
    ).json()

    fav = client.post(f"{API}/games/{owned['id']}/favorite").json()
    assert fav["is_favorite"] is True
    assert [g["title"] for g in client.get(f"{API}/games", params={"partition": "favorites"}).json()] == ["Doom"]

    moved = client.post(f"{API}/games/{wish['id']}/move-to-collection").json()
    assert moved["is_wishlist"] is False

    assert client.delete(f"{API}/games/{owned['id']}").status_code == 204
    assert client.get(f"{API}/games/{owned['id']}").status_code == 404


def test_patch_game(client, signed_in):
    game = client.post(f"{API}/games", json={"title": "Doom", "platform": "PC", "purchase_price": 10}).json()

    resp = client.patch(f"{API}/games/{game['id']}", json={"current_value": 25})

    assert resp.json()["current_value"] == 25
    assert resp.json()["trend"] == "up"
    assert resp.json()["value_change_pct"] == 150.0


def test_sign_out_forgets_collection(client, signed_in, supabase):
    client.post(f"{API}/games", json={"title": "Doom", "platform": "PC"})

    client.post(f"{API}/auth/sign-out")

    assert client.get(f"{API}/games").status_code == 401
    assert client.app.state.collection.games == []


def test_search_routes(client, rawg_session):
    assert client.get(f"{API}/search", params={"q": "ab"}).json() == {
        "query": "ab",
        "stale": False,
        "results": [],
    }
    rawg_session.get.assert_not_called()

    rawg_session.get.return_value.json.return_value = {"id": 1, "name": "Obscure"}
    details = client.get(f"{API}/search/1").json()
    assert details["title"] == "Obscure"

    rawg_session.get.return_value.json.return_value = {}
    assert client.get(f"{API}/search/2").status_code == 404


def test_platforms(client):
    body = client.get(f"{API}/platforms").json()
    assert "Nintendo Switch" in body["platforms"]
    assert body["conditions"] == ["Sealed", "CIB", "Disc Only", "Digital", "Opened"]
