# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication and password recovery service."""

import logging
import secrets
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.events import AppEvent, event_bus
from src.models import Company, Role, User, VerificationCode, VerificationPurpose
from src.models.session import Session as SessionModel
from src.security import get_password_hash, verify_password as verify_local_hash
from src.services import company_service, rbac_service

logger = logging.getLogger(__name__)


class VerificationOutcome(str, Enum):
    """Verdict of a single password verifier."""

    VERIFIED = "verified"
    REJECTED = "rejected"
    # The verifier could not run; the next one in the chain is tried
    UNAVAILABLE = "unavailable"


PasswordVerifier = Callable[[Session, str, str], VerificationOutcome]


@dataclass
class UserValidation:
    """An active user found by identifier, with their companies and roles."""

    user: User
    companies: list[Company]
    roles: list[Role]


@dataclass
class UserProfile:
    """Profile returned after a successful password check."""

    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    role: str | None
    roles: list[dict] = field(default_factory=list)
    companies: list[dict] = field(default_factory=list)


@dataclass
class PasswordCheck:
    success: bool
    profile: UserProfile | None = None


@dataclass
class RecoveryResult:
    """Outcome of a password recovery step."""

    success: bool
    message: str


def verify_with_database_function(
    db: Session, password: str, stored_hash: str
) -> VerificationOutcome:
    """Ask the database to check the password (e.g. a pgcrypto ``crypt`` wrapper)."""
    function_name = settings.password_check_function
    if not function_name:
        return VerificationOutcome.UNAVAILABLE
    try:
        result = db.execute(
            select(getattr(func, function_name)(password, stored_hash))
        ).scalar()
    except SQLAlchemyError as e:
        db.rollback()
        logger.debug(f"Database password check {function_name} unavailable: {e}")
        return VerificationOutcome.UNAVAILABLE
    if result is None:
        return VerificationOutcome.UNAVAILABLE
    return VerificationOutcome.VERIFIED if result else VerificationOutcome.REJECTED


def verify_with_local_hash(
    db: Session, password: str, stored_hash: str
) -> VerificationOutcome:
    """Check a salted hash produced by :func:`src.security.get_password_hash`."""
    if verify_local_hash(password, stored_hash):
        return VerificationOutcome.VERIFIED
    return VerificationOutcome.REJECTED


PASSWORD_VERIFIERS: tuple[PasswordVerifier, ...] = (
    verify_with_database_function,
    verify_with_local_hash,
)


def check_password(
    db: Session,
    password: str,
    stored_hash: str | None,
    verifiers: Sequence[PasswordVerifier] = PASSWORD_VERIFIERS,
) -> bool:
    """Run the verifiers in order; the first one able to decide wins."""
    if not stored_hash:
        return False
    for verifier in verifiers:
        outcome = verifier(db, password, stored_hash)
        if outcome is not VerificationOutcome.UNAVAILABLE:
            logger.debug(f"Password check by {verifier.__name__}: {outcome.value}")
            return outcome is VerificationOutcome.VERIFIED
    logger.warning("No password verifier was able to check the stored hash")
    return False


def find_active_user(db: Session, identifier: str) -> User | None:
    """Find an active user by username or email."""
    return (
        db.query(User)
        .filter(or_(User.username == identifier, User.email == identifier))
        .filter(User.is_active.is_(True))
        .first()
    )


def validate_user(db: Session, identifier: str) -> UserValidation | None:
    """Look up an active user by username or email, with companies and roles."""
    user = find_active_user(db, identifier)
    if not user:
        logger.info(f"No active user found for identifier {identifier!r}")
        return None
    return UserValidation(
        user=user,
        companies=company_service.get_user_companies(db, user.id),
        roles=rbac_service.get_user_roles(db, user),
    )


def verify_password(db: Session, user_id: uuid.UUID, password: str) -> PasswordCheck:
    """Check a user's password and return their profile on success."""
    user = get_user_by_id(db, user_id)
    if not user:
        logger.info(f"Password check for unknown user {user_id}")
        return PasswordCheck(success=False)

    if not check_password(db, password, user.hashed_password):
        return PasswordCheck(success=False)

    roles = rbac_service.get_user_roles(db, user)
    companies = company_service.get_user_companies(db, user.id)
    profile = UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_active=user.is_active,
        role=roles[0].name if roles else None,
        roles=[{"id": r.id, "name": r.name} for r in roles],
        companies=[{"id": c.id, "business_name": c.business_name} for c in companies],
    )
    return PasswordCheck(success=True, profile=profile)


def get_user_companies(db: Session, user_id: uuid.UUID) -> list[Company]:
    """Companies a user belongs to."""
    return company_service.get_user_companies(db, user_id)


def authenticate(db: Session, identifier: str, password: str) -> User | None:
    """Authenticate an active user by username or email and password."""
    user = find_active_user(db, identifier)
    if not user:
        return None
    if not check_password(db, password, user.hashed_password):
        return None
    return user


def create_session(db: Session, user_id: uuid.UUID) -> str:
    """Create a new session for a user."""
    token = str(uuid.uuid4())
    expires_at = datetime.utcnow() + timedelta(days=settings.session_expiry_days)

    session = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
    )
    db.add(session)
    db.commit()

    event_bus.publish(AppEvent.USER_LOGIN, {"user_id": str(user_id)})

    return token


def get_session(db: Session, token: str) -> SessionModel | None:
    """Get a valid session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if not session:
        return None
    if session.expires_at < datetime.utcnow():
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    """Delete a session by token."""
    session = db.query(SessionModel).filter(SessionModel.token == token).first()
    if session:
        user_id = session.user_id
        db.delete(session)
        db.commit()
        event_bus.publish(AppEvent.USER_LOGOUT, {"user_id": str(user_id)})
        return True
    return False


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(SessionModel)
        .filter(SessionModel.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    """Get a user by username."""
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def generate_verification_code(db: Session, email: str) -> RecoveryResult:
    """Store a 6-digit recovery code for an email address.

    Delivery is left to subscribers of ``user.verification_code_created``.
    """
    code = str(100000 + secrets.randbelow(900000))
    expires_at = datetime.utcnow() + timedelta(
        minutes=settings.verification_code_ttl_minutes
    )
    try:
        db.add(
            VerificationCode(
                email=email,
                code=code,
                purpose=VerificationPurpose.RECOVERY,
                used=False,
                expires_at=expires_at,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error storing verification code for {email}: {e}")
        return RecoveryResult(
            success=False, message="Could not generate the verification code"
        )

    logger.info(f"Verification code generated for {email}")
    event_bus.publish(
        AppEvent.VERIFICATION_CODE_CREATED,
        {"email": email, "code": code, "expires_at": expires_at.isoformat()},
    )
    return RecoveryResult(
        success=True, message="A verification code was sent to your email address"
    )


def _find_valid_code(db: Session, email: str, code: str) -> VerificationCode | None:
    return (
        db.query(VerificationCode)
        .filter(
            VerificationCode.email == email,
            VerificationCode.code == code,
            VerificationCode.purpose == VerificationPurpose.RECOVERY,
            VerificationCode.used.is_(False),
            VerificationCode.expires_at >= datetime.utcnow(),
        )
        .order_by(VerificationCode.created_at.desc())
        .first()
    )


def verify_code(db: Session, email: str, code: str) -> RecoveryResult:
    """Check that a recovery code is unused and not expired."""
    try:
        valid = _find_valid_code(db, email, code)
    except SQLAlchemyError as e:
        logger.error(f"Error verifying code for {email}: {e}")
        return RecoveryResult(success=False, message="Could not verify the code")
    if not valid:
        return RecoveryResult(success=False, message="Invalid or expired code")
    return RecoveryResult(success=True, message="Code verified")


def change_password(
    db: Session, email: str, code: str, new_password: str
) -> RecoveryResult:
    """Set a new password after checking the recovery code, then burn the code."""
    verification = verify_code(db, email, code)
    if not verification.success:
        return verification

    user = get_user_by_email(db, email)
    if not user:
        logger.warning(f"Valid recovery code for {email} but no such user")
        return RecoveryResult(success=False, message="Could not change the password")

    try:
        user.hashed_password = get_password_hash(new_password)
        (
            db.query(VerificationCode)
            .filter(VerificationCode.email == email, VerificationCode.code == code)
            .update({VerificationCode.used: True}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error changing password for {email}: {e}")
        return RecoveryResult(success=False, message="Could not change the password")

    event_bus.publish(AppEvent.PASSWORD_RESET, {"user_id": str(user.id)})
    return RecoveryResult(success=True, message="Password changed")
