"""
Health Check Routes
Service health monitoring endpoints
Source: https://microservices.io/patterns/observability/health-check-api.html
"""

from typing import Any

from fastapi import APIRouter

from claims_validation import __version__
from claims_validation.core.config import get_validation_settings
from claims_validation.services.provider_schedule_cache import get_provider_schedule_cache

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "claims-validation",
        "version": __version__,
        "environment": get_validation_settings().ENVIRONMENT,
    }


@router.get("/health/cache")
async def cache_stats() -> dict[str, Any]:
    """Provider schedule cache statistics."""
    return get_provider_schedule_cache().get_stats()
