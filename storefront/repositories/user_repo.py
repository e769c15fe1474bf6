# storefront/repositories/user_repo.py
from sqlmodel import Session, or_, select

from storefront.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_identifier(self, session: Session, identifier: str) -> User | None:
        """Return the User whose username OR email equals `identifier`."""
        stmt = select(User).where(
            or_(User.username == identifier, User.email == identifier)
        )
        return session.exec(stmt).first()

    def exists_with(self, session: Session, username: str, email: str) -> bool:
        """True if either the username or the email is already taken."""
        stmt = select(User.id).where(
            or_(User.username == username, User.email == email)
        )
        return session.exec(stmt).first() is not None

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
