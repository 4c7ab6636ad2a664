# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User directory service."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.events import AppEvent, event_bus
from src.models import User
from src.schemas.user import ProfileSummary, UserCreate, UserResponse, UserUpdate
from src.security import get_password_hash
from src.services import company_service, rbac_service

logger = logging.getLogger(__name__)


class UserConflictError(Exception):
    """Username or email already belongs to another user."""


class UnknownReferenceError(Exception):
    """A referenced role or company does not exist."""


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.username).all()


def get_user(db: Session, user_id: uuid.UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def _check_unique(
    db: Session, username: str, email: str, exclude_id: uuid.UUID | None = None
) -> None:
    query = db.query(User).filter(User.username == username)
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise UserConflictError("Username already taken")

    query = db.query(User).filter(User.email == email)
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise UserConflictError("Email already in use")


def _check_references(
    db: Session, profile_ids: list[uuid.UUID], company_ids: list[uuid.UUID]
) -> None:
    missing_roles = rbac_service.find_missing_roles(db, profile_ids)
    if missing_roles:
        raise UnknownReferenceError(f"Profile not found: {missing_roles[0]}")
    missing_companies = company_service.find_missing_companies(db, company_ids)
    if missing_companies:
        raise UnknownReferenceError(f"Company not found: {missing_companies[0]}")


def create_user(db: Session, data: UserCreate) -> User:
    """Create a user with their profiles and companies."""
    _check_unique(db, data.username, data.email)
    _check_references(db, data.profile_ids, data.company_ids)

    user = User(
        identification=data.identification,
        first_name=data.first_name,
        middle_name=data.middle_name or None,
        last_name=data.last_name,
        second_last_name=data.second_last_name or None,
        phone=data.phone or None,
        email=data.email,
        username=data.username,
        hashed_password=get_password_hash(data.password),
        is_active=True,
    )
    db.add(user)
    rbac_service.set_user_roles(db, user, data.profile_ids)
    company_service.set_user_companies(db, user, data.company_ids)
    db.commit()
    db.refresh(user)

    logger.info(f"Created user {user.username}")
    event_bus.publish(
        AppEvent.USER_CREATED, {"user_id": str(user.id), "username": user.username}
    )
    return user


def update_user(db: Session, user: User, data: UserUpdate) -> User:
    """Apply an edit form to a user. An empty password keeps the current one."""
    _check_unique(db, data.username, data.email, exclude_id=user.id)
    _check_references(db, data.profile_ids, data.company_ids)

    user.identification = data.identification
    user.first_name = data.first_name
    user.middle_name = data.middle_name or None
    user.last_name = data.last_name
    user.second_last_name = data.second_last_name or None
    user.phone = data.phone or None
    user.email = data.email
    user.username = data.username
    if data.password:
        user.hashed_password = get_password_hash(data.password)
    if data.is_active is not None:
        user.is_active = data.is_active

    rbac_service.set_user_roles(db, user, data.profile_ids)
    company_service.set_user_companies(db, user, data.company_ids)
    db.commit()
    db.refresh(user)

    event_bus.publish(AppEvent.USER_UPDATED, {"user_id": str(user.id)})
    return user


def delete_user(db: Session, user: User) -> None:
    user_id = str(user.id)
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id}")
    event_bus.publish(AppEvent.USER_DELETED, {"user_id": user_id})


def to_response(db: Session, user: User) -> UserResponse:
    """Build a UserResponse with the user's profiles and companies."""
    return UserResponse(
        id=user.id,
        identification=user.identification,
        first_name=user.first_name,
        middle_name=user.middle_name,
        last_name=user.last_name,
        second_last_name=user.second_last_name,
        phone=user.phone,
        email=user.email,
        username=user.username,
        is_active=user.is_active,
        profiles=[
            ProfileSummary.model_validate(r) for r in rbac_service.get_user_roles(db, user)
        ],
        company_ids=[link.company_id for link in user.user_companies],
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
