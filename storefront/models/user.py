# storefront/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Registered storefront customer.

    Identity:
      - id: autoincrement integer, carried in the bearer token as "sub"
      - username / email: both unique, either one can be used to log in

    The password is never stored in clear text; `password_hash` holds a
    salted bcrypt hash.
    """

    __tablename__ = "users"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    username: str = Field(
        unique=True,
        index=True,
        max_length=50,
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=255,
    )

    password_hash: str

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
