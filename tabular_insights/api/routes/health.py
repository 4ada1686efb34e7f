"""
Health check and status API routes.
"""

import logging

from fastapi import APIRouter

from tabular_insights import __version__
from tabular_insights.core.config import get_settings
from tabular_insights.storage.postgres.connection import db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic health check.
    """
    return {"status": "OK", "message": "Server is running"}


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Health check with component status.
    """
    settings = get_settings()

    components = {"api": {"status": "healthy"}}

    try:
        await db.ping()
        components["postgres"] = {"status": "healthy"}
    except Exception as e:
        logger.warning(f"PostgreSQL health check failed: {e}")
        components["postgres"] = {"status": "unhealthy", "error": str(e)}

    configured = settings.ai_provider_config().configured_providers
    components["ai"] = (
        {"status": "configured", "providers": configured}
        if configured
        else {"status": "not_configured"}
    )

    all_healthy = all(
        c.get("status") in ["healthy", "configured"]
        for c in components.values()
    )

    return {
        "status": "healthy" if all_healthy else "degraded",
        "version": __version__,
        "components": components,
    }
