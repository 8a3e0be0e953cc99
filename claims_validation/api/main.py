"""
FastAPI Main Application
Entry point for the validation API server
Source: https://fastapi.tiangolo.com/
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from claims_validation import __version__
from claims_validation.api.routes import health, submissions
from claims_validation.core.config import get_validation_settings
from claims_validation.gateways import (
    get_claims_data_gateway,
    get_fee_scheme_gateway,
    get_provider_details_gateway,
)
from claims_validation.utils.logging import get_logger, setup_logging

settings = get_validation_settings()

# Setup logging
setup_logging(
    level=settings.LOG_LEVEL,
    log_file=settings.LOG_FILE,
    json_logs=settings.JSON_LOGS or settings.is_production,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[no-untyped-def]  # noqa: ARG001
    """
    Application lifespan manager.

    Source: https://fastapi.tiangolo.com/advanced/events/
    """
    # Startup
    logger.info(f"Starting claims validation API in {settings.ENVIRONMENT} mode")

    yield

    # Shutdown
    logger.info("Shutting down claims validation API")
    await get_claims_data_gateway().close()
    await get_fee_scheme_gateway().close()
    await get_provider_details_gateway().close()


app = FastAPI(
    title="Claims Validation API",
    description="Submission and claim validation engine for bulk legal aid claims",
    version=__version__,
    docs_url="/docs" if not settings.is_production else None,  # Disable docs in production
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(submissions.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Claims Validation API",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if not settings.is_production else "disabled",
    }
