# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""
import datetime
import re
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.]+$")
MIN_PASSWORD_LENGTH = 6


class UserBase(BaseModel):
    """Fields shared by the create and edit user forms."""

    identification: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    middle_name: str | None = Field(None, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    second_last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    profile_ids: list[uuid.UUID] = Field(..., min_length=1)
    company_ids: list[uuid.UUID] = Field(default_factory=list)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username must contain only letters, digits, dots and underscores"
            )
        return v


class UserCreate(UserBase):
    """Schema for creating a user."""

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UserUpdate(UserBase):
    """Schema for editing a user.

    An empty or missing password keeps the current one.
    """

    password: str | None = None
    is_active: bool | None = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        if v and len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        return v or None


class ProfileSummary(BaseModel):
    """Role (profile) as listed on a user."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None


class UserResponse(BaseModel):
    """Schema for user response."""

    id: uuid.UUID
    identification: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    second_last_name: str | None = None
    phone: str | None = None
    email: str
    username: str
    is_active: bool
    profiles: list[ProfileSummary] = []
    company_ids: list[uuid.UUID] = []
    created_at: datetime.datetime
    updated_at: datetime.datetime
