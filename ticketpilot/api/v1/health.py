"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Any

import asyncpg
from fastapi import APIRouter

from ticketpilot.api.deps import container
from ticketpilot.core.config import settings
from ticketpilot.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def check_database() -> bool:
    """Check that the credential store answers a trivial query."""
    if container.pool is None:
        return False
    try:
        async with container.pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return True
    except (asyncpg.PostgresError, OSError) as e:
        logger.warning("Database health check failed", error=str(e))
        return False


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Basic health check endpoint.
    Returns application status.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check endpoint.
    Verifies the credential store is available.
    """
    checks = {"app": True}
    if settings.uses_postgres:
        checks["database"] = await check_database()

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "not_ready",
        "storage_backend": settings.storage_backend,
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.
    Simple check that the application is running.
    """
    return {"status": "alive"}
