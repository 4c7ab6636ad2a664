# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.company import Company
from src.models.company_template import CompanyTemplate
from src.models.enums import VerificationPurpose
from src.models.permission import Permission
from src.models.request_template import RequestTemplate
from src.models.role import Role
from src.models.role_permission import RolePermission
from src.models.session import Session
from src.models.user import User
from src.models.user_company import UserCompany
from src.models.user_role import UserRole
from src.models.verification_code import VerificationCode

__all__ = [
    "Base",
    "Company",
    "CompanyTemplate",
    "Permission",
    "RequestTemplate",
    "Role",
    "RolePermission",
    "Session",
    "TimestampMixin",
    "User",
    "UserCompany",
    "UserRole",
    "VerificationCode",
    "VerificationPurpose",
]
