# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Company schemas."""
import datetime
import uuid

from pydantic import BaseModel, ConfigDict, Field


class CompanyCreate(BaseModel):
    """Schema for creating a company."""

    business_name: str = Field(..., min_length=1, max_length=200)
    tax_id: str | None = Field(None, max_length=50)
    is_active: bool = True


class CompanyUpdate(BaseModel):
    """Schema for updating a company."""

    business_name: str | None = Field(None, min_length=1, max_length=200)
    tax_id: str | None = Field(None, max_length=50)
    is_active: bool | None = None


class CompanyResponse(BaseModel):
    """Schema for company response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    business_name: str
    tax_id: str | None
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime
