# src/api/v1/rbac.py
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_user, get_db, require_permission
from src.models import Role, User
from src.rbac.catalog import CatalogView, get_catalog
from src.schemas.rbac import (
    GrantsUpdateSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithGrantsSchema,
    UserPermissionsSchema,
)
from src.services import rbac_service

router = APIRouter()


def _with_grants(db: Session, role: Role) -> RoleWithGrantsSchema:
    return RoleWithGrantsSchema(
        **RoleSchema.model_validate(role).model_dump(),
        grants=rbac_service.get_role_grants(db, role),
    )


def _get_role_or_404(db: Session, role_id: uuid.UUID) -> Role:
    role = rbac_service.get_role(db, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


@router.get("/rbac/catalog", response_model=list[CatalogView], summary="List grantable views and actions")
def get_view_catalog(
    current_user: User = Depends(require_permission("profiles.view")),
):
    """Retrieve the views and their actions, in display order.
    Requires profiles.view permission.
    """
    return list(get_catalog())

@router.get("/rbac/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.view")),
):
    """Retrieve a list of all roles in the system.
    Requires profiles.view permission.
    """
    return rbac_service.list_roles(db)

@router.get("/rbac/roles/active", response_model=list[RoleSchema], summary="List active roles")
def list_active_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retrieve the roles that can be assigned to users."""
    return rbac_service.list_roles(db, active_only=True)

@router.get("/rbac/roles/{role_id}", response_model=RoleWithGrantsSchema, summary="Get a role by ID with its grants")
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.view")),
):
    """Retrieve a specific role by its ID, including the view actions it grants.
    Requires profiles.view permission.
    """
    return _with_grants(db, _get_role_or_404(db, role_id))


@router.post("/rbac/roles", response_model=RoleWithGrantsSchema, status_code=status.HTTP_201_CREATED, summary="Create a new custom role")
def create_role(
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.create")),
):
    """Create a new custom role with the given grants.
    Requires profiles.create permission.
    """
    if rbac_service.get_role_by_name(db, role_in.name):
        raise HTTPException(status_code=400, detail="Role with this name already exists")

    role = rbac_service.create_role(
        db,
        name=role_in.name,
        description=role_in.description,
        is_active=role_in.is_active,
        grants=role_in.grants,
    )
    return _with_grants(db, role)

@router.put("/rbac/roles/{role_id}", response_model=RoleWithGrantsSchema, summary="Update an existing role")
def update_role(
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.edit")),
):
    """Update an existing custom role's name, description, status and grants.
    System roles cannot be modified.
    Requires profiles.edit permission.
    """
    role = _get_role_or_404(db, role_id)
    if role.is_system:
        raise HTTPException(status_code=403, detail="System roles cannot be modified")

    if role_in.name:
        existing_role = rbac_service.get_role_by_name(db, role_in.name)
        if existing_role and existing_role.id != role_id:
            raise HTTPException(status_code=400, detail="Role with this name already exists")

    role = rbac_service.update_role(
        db,
        role,
        name=role_in.name,
        description=role_in.description,
        is_active=role_in.is_active,
        grants=role_in.grants,
    )
    return _with_grants(db, role)

@router.put("/rbac/roles/{role_id}/grants", response_model=RoleWithGrantsSchema, summary="Replace a role's grants")
def update_role_grants(
    role_id: uuid.UUID,
    grants_in: GrantsUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.manage_permissions")),
):
    """Replace the complete grant list of a custom role.
    Actions the catalog does not know are dropped.
    Requires profiles.manage_permissions permission.
    """
    role = _get_role_or_404(db, role_id)
    if role.is_system:
        raise HTTPException(status_code=403, detail="System roles cannot be modified")

    role = rbac_service.update_role(db, role, grants=grants_in.grants)
    return _with_grants(db, role)

@router.delete("/rbac/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a custom role")
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("profiles.delete")),
):
    """Delete a custom role. System roles cannot be deleted.
    Requires profiles.delete permission.
    """
    role = _get_role_or_404(db, role_id)
    if role.is_system:
        raise HTTPException(status_code=403, detail="System roles cannot be deleted")

    rbac_service.delete_role(db, role)
    return

@router.get("/rbac/me/permissions", response_model=UserPermissionsSchema, summary="Get current user's effective permissions")
def get_my_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retrieve the current authenticated user's effective permission codes.
    Administrators hold every code in the catalog.
    """
    if rbac_service.is_admin(db, current_user):
        return UserPermissionsSchema(is_admin=True, permissions=get_catalog().permission_codes())

    return UserPermissionsSchema(
        is_admin=False,
        permissions=sorted(rbac_service.get_user_permissions(db, current_user)),
    )
