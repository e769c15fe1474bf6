# storefront/core/auth.py
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from storefront.core.config import Settings
from storefront.database import get_app_settings
from storefront.schemas.user import UserRead

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise the
#   framework's own 403, so we can answer 401 "Token required" ourselves.
bearer_scheme = HTTPBearer(auto_error=False)

# bcrypt only reads the first 72 bytes of a password and recent releases
# refuse longer input outright.
PASSWORD_MAX_BYTES = 72


# ----- Passwords -----


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash for `password`."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        # no stored hash can have been made from it
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


# ----- Tokens -----


def create_access_token(settings: Settings, user: UserRead) -> str:
    """
    Mint a signed bearer token for `user`.

    Claims:
      - sub: user id (string, per JWT convention)
      - username, email
      - iat / exp: issue time and expiry (ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(settings: Settings, token: str) -> dict[str, Any]:
    """
    Decode and verify a bearer token.

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp)

    Raises:
        HTTPException(403): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )


def user_from_claims(payload: dict[str, Any]) -> UserRead:
    """
    Build the token user from decoded claims.

    Raises:
        HTTPException(403): if required claims are missing or malformed.
    """
    try:
        return UserRead(
            id=int(payload["sub"]),
            username=payload["username"],
            email=payload["email"],
        )
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token missing required claims",
        )


# ----- Dependencies -----


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> UserRead:
    """
    Enforce authentication.

    Flow:
      1. No Authorization header => 401.
      2. Decode and verify JWT => 403 if invalid/expired.
      3. Return the user carried in the token claims.

    Cart and catalog code only consume "is the token valid, and which
    user id does it carry"; they never touch the users table for auth.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(settings, credentials.credentials)
    return user_from_claims(payload)
