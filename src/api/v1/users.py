# src/api/v1/users.py
"""User management API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import User
from src.schemas.user import UserCreate, UserResponse, UserUpdate
from src.services import user_service

router = APIRouter()


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="List all users",
)
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users.view")),
) -> list[UserResponse]:
    """Retrieve a list of all users in the system.

    Requires users.view permission.
    """
    return [user_service.to_response(db, user) for user in user_service.list_users(db)]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user",
)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users.create")),
) -> UserResponse:
    """Create a new user with profiles and companies.

    Requires users.create permission.
    """
    try:
        user = user_service.create_user(db, user_in)
    except (user_service.UserConflictError, user_service.UnknownReferenceError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return user_service.to_response(db, user)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get a user by ID",
)
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users.view")),
) -> UserResponse:
    """Retrieve a specific user by ID.

    Requires users.view permission.
    """
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user_service.to_response(db, user)


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
)
def update_user(
    user_id: uuid.UUID,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users.edit")),
) -> UserResponse:
    """Update a user's information. An empty password keeps the current one.

    Requires users.edit permission.
    """
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    # Prevent deactivating yourself
    if user_id == current_user.id and user_in.is_active is False:
        raise HTTPException(status_code=400, detail="Cannot deactivate yourself")

    try:
        user = user_service.update_user(db, user, user_in)
    except (user_service.UserConflictError, user_service.UnknownReferenceError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return user_service.to_response(db, user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users.delete")),
) -> None:
    """Delete a user.

    Requires users.delete permission.
    """
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot delete yourself")
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user_service.delete_user(db, user)
