# storefront/schemas/user.py
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field


class RegisterRequest(SQLModel):
    """
    Payload for account registration.

    Validation rules:
      - username cannot be empty or whitespace
      - email must be a valid EmailStr
      - password length is checked by the service (configurable minimum)
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(max_length=50)
    email: EmailStr
    password: str

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v


class LoginRequest(SQLModel):
    """
    Payload for login. Either `email` or `username` identifies the account.
    """

    model_config = ConfigDict(extra="forbid")

    email: str | None = None
    username: str | None = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self) -> "LoginRequest":
        if not (self.email or self.username):
            raise ValueError("email or username is required")
        if not self.password:
            raise ValueError("password is required")
        return self

    @property
    def identifier(self) -> str:
        return (self.email or self.username).strip()


class UserRead(SQLModel):
    """Public user fields returned to clients and carried in tokens."""

    id: int
    username: str
    email: str


class UserProfile(UserRead):
    created_at: datetime


class AuthResponse(SQLModel):
    """Returned by register, login and refresh."""

    user: UserRead
    token: str


class UserEnvelope(SQLModel):
    user: UserRead


class ProfileEnvelope(SQLModel):
    user: UserProfile
