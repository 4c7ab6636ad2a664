# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication and password recovery API endpoints."""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import SESSION_COOKIE, get_current_user, get_db
from src.config import settings
from src.models import User
from src.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RecoveryCodeRequest,
    RecoveryResponse,
    ResetPasswordRequest,
    VerifyCodeRequest,
)
from src.services import auth_service, user_service

router = APIRouter()


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """Login with username or email and password."""
    user = auth_service.authenticate(db, data.username, data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    user_id = user.id
    token = auth_service.create_session(db, user_id)

    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=86400 * settings.session_expiry_days,
    )

    # Re-query user after session creation commit to avoid expired object error
    user = auth_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="User not found after session creation",
        )

    return AuthResponse(user=user_service.to_response(db, user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    response: Response,
    db: Session = Depends(get_db),
    session: str | None = Cookie(default=None),
) -> None:
    """Logout and drop the current session."""
    if session:
        auth_service.delete_session(db, session)
    response.delete_cookie(key=SESSION_COOKIE)


@router.get("/me", response_model=AuthResponse)
def get_current_user_info(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AuthResponse:
    """Get current authenticated user."""
    return AuthResponse(user=user_service.to_response(db, current_user))


@router.post("/recovery/code", response_model=RecoveryResponse)
def request_recovery_code(
    data: RecoveryCodeRequest,
    db: Session = Depends(get_db),
) -> RecoveryResponse:
    """Generate a recovery code for an email address.

    The response does not reveal whether the address belongs to a user.
    """
    result = auth_service.generate_verification_code(db, data.email)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.message,
        )
    return RecoveryResponse(success=result.success, message=result.message)


@router.post("/recovery/verify", response_model=RecoveryResponse)
def verify_recovery_code(
    data: VerifyCodeRequest,
    db: Session = Depends(get_db),
) -> RecoveryResponse:
    """Check a recovery code without consuming it."""
    result = auth_service.verify_code(db, data.email, data.code)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message,
        )
    return RecoveryResponse(success=result.success, message=result.message)


@router.post("/recovery/reset", response_model=RecoveryResponse)
def reset_password(
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
) -> RecoveryResponse:
    """Set a new password with a valid recovery code."""
    result = auth_service.change_password(
        db, data.email, data.code, data.new_password
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.message,
        )
    return RecoveryResponse(success=result.success, message=result.message)
