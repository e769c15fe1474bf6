# storefront/routers/auth.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.core.config import Settings
from storefront.database import get_app_settings, get_session
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileEnvelope,
    RegisterRequest,
    UserEnvelope,
    UserRead,
)
from storefront.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = UserService(repo)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Register a new account and return it with a bearer token.

    Errors:
      - 400: missing fields / password too short
      - 409: username or email already taken
    """
    return service.register(session, settings, payload)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    """
    Log in with `email` or `username` plus `password`.

    Errors:
      - 400: missing fields
      - 404: unknown identity
      - 401: wrong password
    """
    return service.login(session, settings, payload)


@router.get("/profile", response_model=ProfileEnvelope)
def profile(
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Return the stored profile of the token's user.

    Auth:
      - Requires a valid bearer token.
    """
    return ProfileEnvelope(user=service.get_profile(session, current_user))


@router.post("/verify", response_model=UserEnvelope)
def verify(current_user: UserRead = Depends(require_auth)):
    """Check a bearer token and echo the user it carries."""
    return UserEnvelope(user=current_user)


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    current_user: UserRead = Depends(require_auth),
    settings: Settings = Depends(get_app_settings),
):
    """Issue a new token (fresh 24h expiry) for the same user."""
    return service.refresh(settings, current_user)


@router.get("/status")
def auth_status():
    """Heartbeat for the authentication service."""
    return {
        "service": "Authentication Service",
        "status": "active",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
