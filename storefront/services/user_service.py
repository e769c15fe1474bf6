# storefront/services/user_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.auth import (
    PASSWORD_MAX_BYTES,
    create_access_token,
    hash_password,
    verify_password,
)
from storefront.core.config import Settings
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserProfile,
    UserRead,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for registration and login.

    Responsibilities:
      - enforce app rules (password length, unique username/email)
      - hash and verify passwords
      - mint bearer tokens
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    @staticmethod
    def _issue(settings: Settings, user: UserRead) -> AuthResponse:
        return AuthResponse(user=user, token=create_access_token(settings, user))

    def register(
        self,
        session: Session,
        settings: Settings,
        payload: RegisterRequest,
    ) -> AuthResponse:
        """
        Create an account and log it in.

        Raises:
            HTTPException(400): password shorter than PASSWORD_MIN_LENGTH
                or longer than bcrypt accepts.
            HTTPException(409): username or email already registered.
        """
        if len(payload.password) < settings.PASSWORD_MIN_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
            )
        if len(payload.password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password cannot be longer than {PASSWORD_MAX_BYTES} bytes",
            )

        email = str(payload.email)
        if self.repo.exists_with(session, payload.username, email):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username or email already registered",
            )

        try:
            user = self.repo.create(
                session,
                User(
                    username=payload.username,
                    email=email,
                    password_hash=hash_password(payload.password),
                ),
            )
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username or email already registered",
            )

        logger.info("registered user id=%s username=%s", user.id, user.username)
        return self._issue(settings, UserRead.model_validate(user, from_attributes=True))

    def login(
        self,
        session: Session,
        settings: Settings,
        payload: LoginRequest,
    ) -> AuthResponse:
        """
        Authenticate by username or email.

        Raises:
            HTTPException(404): no account matches the identifier.
            HTTPException(401): wrong password.
        """
        user = self.repo.get_by_identifier(session, payload.identifier)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Invalid credentials",
            )

        if not verify_password(payload.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        return self._issue(settings, UserRead.model_validate(user, from_attributes=True))

    def refresh(self, settings: Settings, current_user: UserRead) -> AuthResponse:
        """New token with a fresh expiry for the same claims."""
        return self._issue(settings, current_user)

    def get_profile(self, session: Session, current_user: UserRead) -> UserProfile:
        """
        Load the stored profile for the token's user.

        Raises:
            HTTPException(404): the user row no longer exists.
        """
        user = self.repo.get_by_id(session, current_user.id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return UserProfile.model_validate(user, from_attributes=True)
