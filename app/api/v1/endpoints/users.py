"""
User endpoints.

CRUD, paginated listing and search for users.
"""

from fastapi import APIRouter, status

from app.api.dependencies import UserIdPath, UserQueryDep, UserServiceDep
from app.schemas.user import (
    DeletedUserEnvelope,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserSearchEnvelope,
    UserUpdate,
)

router = APIRouter()


@router.post("",
             summary="Create a user.",
             response_model=UserEnvelope,
             status_code=status.HTTP_201_CREATED)
def create_user(data: UserCreate, service: UserServiceDep):
    """
    Create a new user.

    Args:
        data: name, email and optional age, phone, address
        service: User service

    Returns:
        Created user

    Raises:
        409 DUPLICATE_EMAIL: If the email is already registered
    """
    return service.create(data)


@router.get("",
            summary="List users with pagination and optional search.",
            response_model=UserListEnvelope)
def list_users(params: UserQueryDep, service: UserServiceDep):
    return service.list_users(params)


# Declared before /{id} so "search" is not parsed as an id
@router.get("/search",
            summary="Search users by name or email.",
            response_model=UserSearchEnvelope)
def search_users(params: UserQueryDep, service: UserServiceDep):
    """
    Search users.

    The ``search`` query parameter is required and must contain at least
    2 non-blank characters.
    """
    return service.search(params)


@router.get("/{id}",
            summary="Get a user by ID.",
            response_model=UserEnvelope)
def get_user(user_id: UserIdPath, service: UserServiceDep):
    return service.get(user_id)


@router.put("/{id}",
            summary="Update a user (partial).",
            response_model=UserEnvelope)
def update_user(user_id: UserIdPath, data: UserUpdate, service: UserServiceDep):
    """
    Update the supplied fields of a user.

    Raises:
        404 USER_NOT_FOUND: If no user has this id
        409 DUPLICATE_EMAIL: If the new email belongs to another user
    """
    return service.update(user_id, data)


@router.delete("/{id}",
               summary="Delete a user.",
               response_model=DeletedUserEnvelope)
def delete_user(user_id: UserIdPath, service: UserServiceDep):
    return service.delete(user_id)
