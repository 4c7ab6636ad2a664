"""Services package."""
from src.services import (
    auth_service,
    company_service,
    rbac_seed_service,
    rbac_service,
    user_service,
)

__all__ = [
    "auth_service",
    "company_service",
    "rbac_seed_service",
    "rbac_service",
    "user_service",
]
