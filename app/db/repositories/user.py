"""
User repository.

Handles database operations for User model. Every statement is built with
SQLAlchemy expressions, so values always travel as bound parameters.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, func, or_, update
from sqlmodel import Session, col, select

from app.db.errors import storage_errors
from app.models.user import User, utc_now
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def search_filter(search: Optional[str]):
    """
    Predicate shared by ``get_all`` and ``count``.

    Case-insensitive containment on name or email; LIKE wildcards in the term
    are escaped. Returns None when there is nothing to filter on.
    """
    if not search:
        return None
    return or_(
        col(User.name).icontains(search, autoescape=True),
        col(User.email).icontains(search, autoescape=True),
    )


def build_assignments(changes: UserUpdate, now: datetime) -> dict[str, Any]:
    """
    Column -> value pairs for a partial update.

    Only the fields supplied in ``changes`` are included; ``updated_at`` is
    always refreshed.
    """
    assignments: dict[str, Any] = {}
    for column, value in changes.changes().items():
        assignments[column] = value
    assignments["updated_at"] = now
    return assignments


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def create(self, data: UserCreate) -> User:
        """
        Create a new user in the database.

        Args:
            data: validated creation payload

        Returns:
            Created user with generated id and timestamps

        Raises:
            UserServiceError: DUPLICATE_EMAIL when the unique constraint rejects the email
        """
        now = utc_now()
        user = User(**data.model_dump(), created_at=now, updated_at=now)
        with storage_errors(self.session, "create"):
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        logger.info("Created user id=%s", user.id)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User instance if found, None otherwise
        """
        with storage_errors(self.session, "get_by_id"):
            return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: User email

        Returns:
            User instance if found, None otherwise
        """
        statement = select(User).where(User.email == email)
        with storage_errors(self.session, "get_by_email"):
            return self.session.exec(statement).first()

    def get_all(self, page: int = 1, limit: int = 10, search: Optional[str] = None) -> list[User]:
        """
        Get a page of users, newest first.

        Args:
            page: 1-based page number
            limit: Maximum number of records to return
            search: optional name/email substring

        Returns:
            List of users
        """
        statement = select(User)
        predicate = search_filter(search)
        if predicate is not None:
            statement = statement.where(predicate)
        statement = (
            statement
            .order_by(col(User.created_at).desc(), col(User.id).desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        with storage_errors(self.session, "get_all"):
            users = list(self.session.exec(statement).all())
        logger.debug("Fetched %d users (page=%d, limit=%d)", len(users), page, limit)
        return users

    def count(self, search: Optional[str] = None) -> int:
        """
        Count users matching the same filter as ``get_all``, ignoring pagination.
        """
        statement = select(func.count()).select_from(User)
        predicate = search_filter(search)
        if predicate is not None:
            statement = statement.where(predicate)
        with storage_errors(self.session, "count"):
            return int(self.session.exec(statement).one())

    def update(self, user_id: int, changes: UserUpdate) -> Optional[User]:
        """
        Apply a partial update.

        Args:
            user_id: User ID
            changes: validated partial payload

        Returns:
            Updated user, None if no row has this id

        Raises:
            UserServiceError: DUPLICATE_EMAIL when the new email belongs to another row
        """
        assignments = build_assignments(changes, utc_now())
        statement = (
            update(User)
            .where(col(User.id) == user_id)
            .values(**assignments)
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.session, "update"):
            result = self.session.exec(statement)
            if result.rowcount == 0:
                self.session.rollback()
                return None
            self.session.commit()
        logger.info("Updated user id=%s fields=%s", user_id, sorted(assignments))
        return self.get_by_id(user_id)

    def delete(self, user_id: int) -> bool:
        """
        Delete a user by ID.

        Args:
            user_id: User ID to delete

        Returns:
            True if deleted, False if not found
        """
        statement = delete(User).where(col(User.id) == user_id).execution_options(synchronize_session=False)
        with storage_errors(self.session, "delete"):
            result = self.session.exec(statement)
            self.session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted user id=%s", user_id)
        return deleted

    def exists_by_email(self, email: str) -> bool:
        """
        Check if a user with the given email exists.

        Args:
            email: Email to check

        Returns:
            True if user exists, False otherwise
        """
        return self.get_by_email(email) is not None
