# src/schemas/rbac.py
import uuid

from pydantic import BaseModel, ConfigDict, Field

from src.rbac.grants import PermissionGrant


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    is_system: bool
    is_active: bool
    description: str | None


class RoleWithGrantsSchema(RoleSchema):
    """Schema representing a role along with the view actions it grants."""

    grants: list[PermissionGrant]


class RoleCreateSchema(BaseModel):
    """Schema for creating a new role."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    is_active: bool = True
    grants: list[PermissionGrant] = []


class RoleUpdateSchema(BaseModel):
    """Schema for updating a role."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    is_active: bool | None = None
    grants: list[PermissionGrant] | None = None


class GrantsUpdateSchema(BaseModel):
    """Complete replacement grant list for a role."""

    grants: list[PermissionGrant]


class UserPermissionsSchema(BaseModel):
    """Schema representing a user's effective permissions."""

    is_admin: bool
    permissions: list[str]
