# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Request template schemas."""

import datetime
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RequestTemplateCreate(BaseModel):
    """Schema for creating a request template."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    form_structure: dict[str, Any] | None = None
    is_default: bool = False
    is_active: bool = True
    company_ids: list[uuid.UUID] = Field(
        default_factory=list,
        description="Companies the template is restricted to",
    )


class RequestTemplateUpdate(BaseModel):
    """Schema for updating a request template."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    form_structure: dict[str, Any] | None = None
    is_default: bool | None = None
    is_active: bool | None = None
    company_ids: list[uuid.UUID] | None = None


class RequestTemplateResponse(BaseModel):
    """Schema for request template response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    form_structure: dict[str, Any] | None
    is_default: bool
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TemplateStructureResponse(BaseModel):
    """Which template tables exist in the connected database."""

    request_templates_exists: bool
    company_templates_exists: bool
    tables: list[str]
