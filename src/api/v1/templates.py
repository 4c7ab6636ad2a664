# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Request template API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.events import event_bus
from src.models import RequestTemplate, User
from src.schemas.request_template import (
    RequestTemplateCreate,
    RequestTemplateResponse,
    RequestTemplateUpdate,
    TemplateStructureResponse,
)
from src.services.loading import LoadingTracker
from src.services.template_service import TemplateService

router = APIRouter()


def get_template_service(db: Session = Depends(get_db)) -> TemplateService:
    """Template service reporting its database calls on the application bus."""
    return TemplateService(db, loading=LoadingTracker(event_bus))


@router.get("", response_model=list[RequestTemplateResponse])
def list_templates(
    include_inactive: bool = False,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.view")),
) -> list[RequestTemplate]:
    """List templates ordered by name."""
    return service.get_all(include_inactive=include_inactive)


@router.post(
    "", response_model=RequestTemplateResponse, status_code=status.HTTP_201_CREATED
)
def create_template(
    data: RequestTemplateCreate,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.create")),
) -> RequestTemplate:
    """Create a new request template."""
    template = service.create(data)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Could not create the template",
        )
    return template


@router.get("/structure", response_model=TemplateStructureResponse)
def get_template_structure(
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.view")),
) -> TemplateStructureResponse:
    """Report which template tables exist in the database."""
    structure = service.verify_structure()
    return TemplateStructureResponse(
        request_templates_exists=structure.request_templates_exists,
        company_templates_exists=structure.company_templates_exists,
        tables=structure.tables,
    )


@router.get("/company/{company_id}", response_model=list[RequestTemplateResponse])
def list_company_templates(
    company_id: uuid.UUID,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.view")),
) -> list[RequestTemplate]:
    """Templates available to a company.

    Falls back to every active template when the company has none of its own.
    """
    return service.get_by_company(company_id)


@router.get("/{template_id}", response_model=RequestTemplateResponse)
def get_template(
    template_id: uuid.UUID,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.view")),
) -> RequestTemplate:
    """Get a specific template."""
    template = service.get_by_id(template_id)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


@router.put("/{template_id}", response_model=RequestTemplateResponse)
def update_template(
    template_id: uuid.UUID,
    data: RequestTemplateUpdate,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.edit")),
) -> RequestTemplate:
    """Update a template. ``company_ids`` replaces its company links."""
    template = service.update(template_id, data)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: uuid.UUID,
    service: TemplateService = Depends(get_template_service),
    current_user: User = Depends(require_permission("templates.delete")),
) -> None:
    """Delete a template."""
    if not service.delete(template_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
