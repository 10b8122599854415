"""
User API schemas.

Pydantic models for user-related request/response validation.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import (AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, field_validator,
                      model_validator)
from pydantic.alias_generators import to_camel

PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"
EMPTY_UPDATE_MESSAGE = "must supply at least one field to update"
UPDATABLE_FIELDS = ("name", "email", "age", "phone", "address")


def _check_email(value: str) -> str:
    # Syntax only; the address is stored exactly as submitted
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError("must be a valid email address") from exc
    return value


def _reject_bool(value):
    # JSON true/false would otherwise pass lax int validation as 1/0
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    return value


EmailAddress = Annotated[str, StringConstraints(max_length=255), AfterValidator(_check_email)]


# Shared properties
class UserBase(BaseModel):
    """Base user schema with common fields."""
    name: str = Field(..., min_length=2, max_length=100, description="Full name")
    email: EmailAddress = Field(..., description="Unique email address")
    age: Optional[int] = Field(None, ge=1, le=149, description="Age in years")
    phone: Optional[str] = Field(None, min_length=7, max_length=20, pattern=PHONE_PATTERN,
                                 description="Phone number, digits with optional +, spaces, hyphens, parentheses")
    address: Optional[str] = Field(None, max_length=500, description="Postal address")

    @field_validator("age", mode="before")
    @classmethod
    def _age_not_bool(cls, value):
        return _reject_bool(value)


# Request schemas
class UserCreate(UserBase):
    """Schema for creating a user."""
    pass


class UserUpdate(BaseModel):
    """
    Schema for a partial update.

    Only fields present in the payload are changed. ``age``, ``phone`` and
    ``address`` may be sent as null to clear them; ``name`` and ``email``
    may not.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailAddress] = None
    age: Optional[int] = Field(None, ge=1, le=149)
    phone: Optional[str] = Field(None, min_length=7, max_length=20, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=500)

    @field_validator("age", mode="before")
    @classmethod
    def _age_not_bool(cls, value):
        return _reject_bool(value)

    @field_validator("name", "email")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("cannot be null")
        return value

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "UserUpdate":
        if not self.model_fields_set.intersection(UPDATABLE_FIELDS):
            raise ValueError(EMPTY_UPDATE_MESSAGE)
        return self

    def changes(self) -> dict:
        """Fields supplied by the caller, with their validated values."""
        return self.model_dump(include=set(UPDATABLE_FIELDS), exclude_unset=True)


class UserQueryParams(BaseModel):
    """Query string of the list and search endpoints."""
    page: int = Field(1, ge=1, description="Page number, starting at 1")
    limit: int = Field(10, ge=1, le=100, description="Items per page")
    search: Optional[str] = Field(None, max_length=100,
                                  description="Case-insensitive substring of name or email")


# Response schemas
class UserResponse(BaseModel):
    """Schema for user data in API responses."""
    id: int
    name: str
    email: str
    age: Optional[int] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without an offset; they are stored in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    class Config:
        from_attributes = True  # Allows creation from SQLModel objects


class CamelModel(BaseModel):
    """Serialises snake_case attributes as camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


class UserEnvelope(BaseModel):
    message: str
    data: UserResponse


class UserListEnvelope(BaseModel):
    message: str
    data: list[UserResponse]
    pagination: Pagination


class UserSearchEnvelope(CamelModel):
    message: str
    data: list[UserResponse]
    search_term: str
    total_results: int


class DeletedUser(CamelModel):
    id: int
    deleted_at: datetime


class DeletedUserEnvelope(BaseModel):
    message: str
    data: DeletedUser


def to_response(user) -> UserResponse:
    """Convert a persisted user row into its external representation."""
    return UserResponse.model_validate(user, from_attributes=True)
