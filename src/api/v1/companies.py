# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Company API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import Company, User
from src.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from src.services import company_service

router = APIRouter()


def _get_company_or_404(db: Session, company_id: uuid.UUID) -> Company:
    company = company_service.get_company(db, company_id)
    if not company:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found",
        )
    return company


@router.get("", response_model=list[CompanyResponse])
def list_companies(
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("companies.view")),
) -> list[Company]:
    """List companies ordered by name."""
    return company_service.get_companies(db, active_only=active_only)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    data: CompanyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("companies.create")),
) -> Company:
    """Create a new company."""
    return company_service.create_company(db, data)


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("companies.view")),
) -> Company:
    """Get a specific company."""
    return _get_company_or_404(db, company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: uuid.UUID,
    data: CompanyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("companies.edit")),
) -> Company:
    """Update a company."""
    company = _get_company_or_404(db, company_id)
    return company_service.update_company(db, company, data)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_company(
    company_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("companies.delete")),
) -> None:
    """Delete a company and its user and template links."""
    company = _get_company_or_404(db, company_id)
    company_service.delete_company(db, company)
