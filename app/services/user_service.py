"""
User service.

Business rules for the user endpoints: uniqueness pre-checks, existence
checks, pagination metadata and the success envelopes. Input arrives
already validated by the schemas; storage failures arrive already
classified by the repository.
"""

import logging
import math
from typing import Optional

from sqlmodel import Session

from app.core.exceptions import DeleteFailed, DuplicateEmail, InvalidSearchTerm, UserNotFound
from app.db.repositories.user import UserRepository
from app.models.user import User, utc_now
from app.schemas.user import (
    DeletedUser,
    DeletedUserEnvelope,
    Pagination,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserQueryParams,
    UserSearchEnvelope,
    UserUpdate,
    to_response,
)

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def paginate(page: int, limit: int, total: int) -> Pagination:
    """Pagination metadata for ``total`` items split into pages of ``limit``."""
    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


class UserService:
    """Service for user-related business logic."""

    def __init__(self, session: Session):
        """
        Initialize service with database session.

        Args:
            session: SQLModel database session
        """
        self.repository = UserRepository(session)

    def create(self, data: UserCreate) -> UserEnvelope:
        """
        Create a user.

        Raises:
            DuplicateEmail: If the email is already registered (checked before
                the insert, and enforced again by the unique constraint)
        """
        if self.repository.exists_by_email(data.email):
            logger.info("Rejected create: email already registered")
            raise DuplicateEmail("Email is already registered")

        user = self.repository.create(data)
        return UserEnvelope(message="User created successfully", data=to_response(user))

    def get(self, user_id: int) -> UserEnvelope:
        user = self._get_existing(user_id)
        return UserEnvelope(message="User retrieved successfully", data=to_response(user))

    def list_users(self, params: UserQueryParams) -> UserListEnvelope:
        # get_all and count are independent; both use the same filter
        users = self.repository.get_all(params.page, params.limit, params.search)
        total = self.repository.count(params.search)

        return UserListEnvelope(
            message="Users retrieved successfully",
            data=[to_response(user) for user in users],
            pagination=paginate(params.page, params.limit, total),
        )

    def search(self, params: UserQueryParams) -> UserSearchEnvelope:
        """
        Search users by name or email.

        Raises:
            InvalidSearchTerm: If the term is missing or shorter than 2
                characters once surrounding whitespace is ignored
        """
        term = params.search
        if term is None or len(term.strip()) < MIN_SEARCH_LENGTH:
            logger.info("Rejected search: term too short")
            raise InvalidSearchTerm(f"Search term must be at least {MIN_SEARCH_LENGTH} characters long")

        users = self.repository.get_all(params.page, params.limit, term)
        total = self.repository.count(term)

        return UserSearchEnvelope(
            message=f"Search completed. Found {total} users",
            data=[to_response(user) for user in users],
            search_term=term,
            total_results=total,
        )

    def update(self, user_id: int, data: UserUpdate) -> UserEnvelope:
        """
        Apply a partial update.

        Raises:
            UserNotFound: If no user has this id
            DuplicateEmail: If the new email belongs to another user
        """
        existing = self._get_existing(user_id)

        if data.email is not None and data.email != existing.email:
            owner = self.repository.get_by_email(data.email)
            if owner is not None and owner.id != user_id:
                logger.info("Rejected update of user id=%s: email already registered", user_id)
                raise DuplicateEmail("Email is already registered by another user")

        user = self.repository.update(user_id, data)
        if user is None:
            # Removed between the existence check and the update
            raise UserNotFound(user_id)
        return UserEnvelope(message="User updated successfully", data=to_response(user))

    def delete(self, user_id: int) -> DeletedUserEnvelope:
        """
        Delete a user.

        Raises:
            UserNotFound: If no user has this id
            DeleteFailed: If the row vanished between the existence check and the delete
        """
        self._get_existing(user_id)

        if not self.repository.delete(user_id):
            logger.error("Delete of user id=%s removed no rows after existence check", user_id)
            raise DeleteFailed("The user could not be deleted")

        return DeletedUserEnvelope(
            message="User deleted successfully",
            data=DeletedUser(id=user_id, deleted_at=utc_now()),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_existing(self, user_id: int) -> User:
        user: Optional[User] = self.repository.get_by_id(user_id)
        if user is None:
            logger.info("User id=%s not found", user_id)
            raise UserNotFound(user_id)
        return user
