# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import auth, companies, rbac, templates, users

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Company routes
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])

# Request template routes
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])

# RBAC routes
api_router.include_router(rbac.router, tags=["rbac"])

# User management routes
api_router.include_router(users.router, tags=["users"])
