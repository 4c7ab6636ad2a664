# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication and password recovery schemas."""
from pydantic import BaseModel, EmailStr, Field

from src.schemas.user import MIN_PASSWORD_LENGTH, UserResponse


class LoginRequest(BaseModel):
    """Login with a username or an email address."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Response after a successful login."""

    user: UserResponse


class RecoveryCodeRequest(BaseModel):
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., pattern=r"^\d{6}$")


class ResetPasswordRequest(VerifyCodeRequest):
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class RecoveryResponse(BaseModel):
    """Outcome of a recovery step, with a message for the operator."""

    success: bool
    message: str
