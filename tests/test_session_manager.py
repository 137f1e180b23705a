import pytest
from supabase import AuthApiError, PostgrestAPIError

from app.core.errors import AuthProviderError, InvalidCredentialsError, NotAuthenticatedError
from app.services.session_manager import SessionManager


def test_initialize_without_session(session_manager):
    assert session_manager.loading is True
    assert session_manager.initialize() is None
    assert session_manager.loading is False


def test_initialize_restores_session_and_creates_profile(supabase, profile_repo):
    identity = supabase.sign_in_as("ada@example.com", display_name="Ada")
    manager = SessionManager(supabase, profile_repo)

    user = manager.initialize()

    assert str(user.id) == identity.id
    assert user.display_name == "Ada"
    [profile] = supabase.rows("profiles")
    assert profile["email"] == "ada@example.com"
    assert profile["display_name"] == "Ada"
    manager.close()


def test_initialize_failure_degrades_to_no_user(supabase, profile_repo):
    supabase.sign_in_as()
    supabase.fail_next("profiles", PostgrestAPIError({"message": "down", "code": "XX000"}))
    manager = SessionManager(supabase, profile_repo)

    assert manager.initialize() is None
    assert manager.loading is False
    manager.close()


def test_sign_in_publishes_through_auth_event(supabase, session_manager):
    supabase.auth.register("sam@example.com", "hunter22", "Sam")
    seen = []
    session_manager.subscribe(seen.append)

    session_manager.sign_in("sam@example.com", "hunter22")

    assert session_manager.user.display_name == "Sam"
    assert seen == [session_manager.user]


def test_sign_in_with_malformed_profile_row_publishes_no_user(supabase, session_manager):
    supabase.auth.register("sam@example.com", "hunter22", "Sam")
    identity = supabase.auth.accounts["sam@example.com"][1]
    supabase.rows("profiles").append({"id": identity.id, "email": None, "display_name": "Sam"})
    seen = []
    session_manager.subscribe(seen.append)

    assert session_manager.sign_in("sam@example.com", "hunter22") is None

    assert seen == [None]
    assert session_manager.loading is False


def test_sign_in_bad_credentials(supabase, session_manager):
    supabase.auth.register("sam@example.com", "hunter22")

    with pytest.raises(InvalidCredentialsError) as exc:
        session_manager.sign_in("sam@example.com", "wrong")
    assert exc.value.description == "Invalid login credentials"
    assert session_manager.user is None


def test_sign_up_with_email_confirmation(supabase, session_manager):
    supabase.auth.confirm_email = True

    assert session_manager.sign_up("new@example.com", "longenough", "Newbie") is True
    assert session_manager.user is None
    assert supabase.auth.accounts["new@example.com"][1].user_metadata == {"display_name": "Newbie"}


def test_sign_up_errors_carry_provider_message(supabase, session_manager):
    with pytest.raises(AuthProviderError) as exc:
        session_manager.sign_up("new@example.com", "123")
    assert "at least 6" in exc.value.description


def test_sign_out_clears_user(supabase, session_manager):
    supabase.sign_in_as()
    assert session_manager.user is not None

    session_manager.sign_out()

    assert session_manager.user is None


def test_profile_is_never_overwritten(supabase, session_manager):
    identity = supabase.auth.register("kim@example.com", "secret123", "From metadata")
    supabase.rows("profiles").append(
        {"id": identity.id, "email": "kim@example.com", "display_name": "Chosen name"}
    )

    supabase.sign_in_as("kim@example.com")

    assert session_manager.user.display_name == "Chosen name"
    assert len(supabase.rows("profiles")) == 1


def test_display_name_falls_back_to_metadata(supabase, session_manager):
    identity = supabase.auth.register("kim@example.com", "secret123", "Meta Kim")
    supabase.rows("profiles").append({"id": identity.id, "email": "kim@example.com", "display_name": None})

    supabase.sign_in_as("kim@example.com")

    assert session_manager.user.display_name == "Meta Kim"


def test_ensure_profile_tolerates_concurrent_insert(supabase, session_manager, monkeypatch):
    identity = supabase.auth.register("race@example.com", "secret123")
    real_get = session_manager.profile_repo.get
    calls = []

    def racing_get(user_id):
        calls.append(user_id)
        if len(calls) == 1:
            # another session creates the row between our check and insert
            supabase.rows("profiles").append({"id": identity.id, "email": identity.email})
            return None
        return real_get(user_id)

    monkeypatch.setattr(session_manager.profile_repo, "get", racing_get)

    profile = session_manager.ensure_profile(identity)

    assert str(profile.id) == identity.id
    assert len(supabase.rows("profiles")) == 1


def test_update_profile(supabase, session_manager):
    supabase.sign_in_as()

    user = session_manager.update_profile("Player One")

    assert user.display_name == "Player One"
    assert session_manager.user.display_name == "Player One"
    assert supabase.rows("profiles")[0]["display_name"] == "Player One"


def test_update_profile_requires_session(session_manager):
    with pytest.raises(NotAuthenticatedError):
        session_manager.update_profile("Nobody")


def test_refresh_failure_signs_out_locally(supabase, session_manager):
    supabase.sign_in_as()
    supabase.auth.refresh_error = AuthApiError("Invalid Refresh Token", 400, "refresh_token_not_found")

    assert session_manager.refresh_session() is None
    assert session_manager.user is None


def test_unsubscribe_and_close(supabase, session_manager):
    seen = []
    unsubscribe = session_manager.subscribe(seen.append)
    unsubscribe()
    supabase.sign_in_as()
    assert seen == []

    session_manager.close()
    assert supabase.auth.subscribers == {}
    supabase.auth.sign_out()
    assert session_manager.user is not None


def test_failing_listener_does_not_break_others(supabase, session_manager):
    seen = []

    def broken(user):
        raise RuntimeError("listener bug")

    session_manager.subscribe(broken)
    session_manager.subscribe(seen.append)
    supabase.sign_in_as()

    assert len(seen) == 1
