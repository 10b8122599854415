"""
Shared API dependencies.

Reusable FastAPI dependencies for database access and request parameters.
"""

from typing import Annotated

from fastapi import Depends, Path, Query
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.user import UserQueryParams
from app.services.user_service import UserService


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """A UserService bound to the request's database session."""
    return UserService(db)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]

# Path parameter ``id``: integer >= 1
UserIdPath = Annotated[int, Path(alias="id", ge=1, description="User ID")]

# page / limit / search query string
UserQueryDep = Annotated[UserQueryParams, Query()]
