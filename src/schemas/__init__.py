"""Pydantic schemas package."""
from src.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RecoveryCodeRequest,
    RecoveryResponse,
    ResetPasswordRequest,
    VerifyCodeRequest,
)
from src.schemas.common import HealthResponse
from src.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from src.schemas.rbac import (
    GrantsUpdateSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithGrantsSchema,
    UserPermissionsSchema,
)
from src.schemas.request_template import (
    RequestTemplateCreate,
    RequestTemplateResponse,
    RequestTemplateUpdate,
    TemplateStructureResponse,
)
from src.schemas.user import ProfileSummary, UserCreate, UserResponse, UserUpdate

__all__ = [
    "AuthResponse",
    "CompanyCreate",
    "CompanyResponse",
    "CompanyUpdate",
    "GrantsUpdateSchema",
    "HealthResponse",
    "LoginRequest",
    "ProfileSummary",
    "RecoveryCodeRequest",
    "RecoveryResponse",
    "RequestTemplateCreate",
    "RequestTemplateResponse",
    "RequestTemplateUpdate",
    "ResetPasswordRequest",
    "RoleCreateSchema",
    "RoleSchema",
    "RoleUpdateSchema",
    "RoleWithGrantsSchema",
    "TemplateStructureResponse",
    "UserCreate",
    "UserPermissionsSchema",
    "UserResponse",
    "UserUpdate",
    "VerifyCodeRequest",
]
