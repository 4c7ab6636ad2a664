# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "rbac" / "system_views.json"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./admin_console.db",
        description="SQLAlchemy database URL",
    )

    # Security
    secret_key: str = Field(default="", description="Secret used for signing")
    session_expiry_days: int = Field(default=7, ge=1)
    session_cookie_secure: bool = Field(
        default=False, description="Only send the session cookie over HTTPS"
    )
    verification_code_ttl_minutes: int = Field(default=30, ge=1)
    password_check_function: str | None = Field(
        default="check_password",
        description="Database function verifying a password against a stored hash",
    )

    # View/action catalog
    catalog_path: Path = Field(
        default=DEFAULT_CATALOG_PATH,
        description="JSON file with the views and actions that roles can be granted",
    )

    # HTTP
    cors_origins: list[str] = Field(default=["http://localhost:5173"])
    api_base_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL used by the admin client",
    )

    # Application
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
