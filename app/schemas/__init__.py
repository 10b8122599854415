"""Pydantic schemas for request/response validation."""

from app.schemas.user import (
    DeletedUser,
    DeletedUserEnvelope,
    Pagination,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserQueryParams,
    UserResponse,
    UserSearchEnvelope,
    UserUpdate,
)
from app.schemas.messages import describe_errors

__all__ = [
    "DeletedUser",
    "DeletedUserEnvelope",
    "Pagination",
    "UserCreate",
    "UserEnvelope",
    "UserListEnvelope",
    "UserQueryParams",
    "UserResponse",
    "UserSearchEnvelope",
    "UserUpdate",
    "describe_errors",
]
