# app/routers/users.py
from fastapi import APIRouter, Depends

from app.core.dependencies import get_session_manager, require_user
from app.schemas.user import (
    ProfileUpdate,
    SessionState,
    SessionUser,
    SignInRequest,
    SignUpRequest,
)
from app.services.session_manager import SessionManager

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=SessionState)
def read_me(session_manager: SessionManager = Depends(get_session_manager)):
    """
    Return the current session state.

    `loading` stays true until the stored session has been checked on
    startup; `user` is null when nobody is signed in.
    """
    return session_manager.state


@router.patch("/me", response_model=SessionUser)
def update_me(
    payload: ProfileUpdate,
    session_manager: SessionManager = Depends(get_session_manager),
    current_user: SessionUser = Depends(require_user),
):
    """
    Update the signed-in user's display name.
    """
    return session_manager.update_profile(payload.display_name)


@router.post("/sign-in", response_model=SessionState)
def sign_in(
    payload: SignInRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    """
    Sign in with email and password.

    The resolved user is published by the provider's SIGNED_IN event,
    so the returned state already reflects it.
    """
    session_manager.sign_in(payload.email, payload.password)
    return session_manager.state


@router.post("/sign-up")
def sign_up(
    payload: SignUpRequest,
    session_manager: SessionManager = Depends(get_session_manager),
):
    """
    Create an account.

    Most projects require email verification, in which case no session
    exists yet and the client should say "check your email".
    """
    confirmation_required = session_manager.sign_up(
        payload.email, payload.password, payload.display_name
    )
    return {"confirmation_required": confirmation_required}


@router.post("/sign-out", response_model=SessionState)
def sign_out(session_manager: SessionManager = Depends(get_session_manager)):
    session_manager.sign_out()
    return session_manager.state


@router.post("/refresh", response_model=SessionState)
def refresh(session_manager: SessionManager = Depends(get_session_manager)):
    """Force a session refresh; a failed refresh signs out locally."""
    session_manager.refresh_session()
    return session_manager.state
