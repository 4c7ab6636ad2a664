# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import settings
from src.database import SessionLocal, engine
from src.models import Base
from src.schemas.common import HealthResponse
from src.services import auth_service
from src.services.rbac_seed_service import seed_rbac_data

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup: create tables and seed the catalog permissions and roles
    logger.info("Preparing database...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_rbac_data(db)
        removed = auth_service.cleanup_expired_sessions(db)
        if removed:
            logger.info(f"Removed {removed} expired sessions")
    finally:
        db.close()

    yield

    logger.info("Shutting down...")

app = FastAPI(
    title="Admin Console",
    description="Back office for users, roles, companies and request templates",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
