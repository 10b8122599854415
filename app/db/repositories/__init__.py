"""Database repositories."""

from app.db.repositories.user import UserRepository

__all__ = [
    "UserRepository",
]
