"""
Health check endpoints for the REST API.
"""

import asyncio

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from rest_api.services.payments.circuit_breaker import get_all_breaker_stats

DB_CHECK_TIMEOUT = 3.0

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


def _ping_database() -> None:
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Database connectivity plus payment provider circuit breaker state.
    Returns 503 when the database is unreachable.
    """
    try:
        await asyncio.wait_for(asyncio.to_thread(_ping_database), timeout=DB_CHECK_TIMEOUT)
        database = {"status": "healthy"}
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        database = {"status": "unhealthy", "error": type(e).__name__}

    healthy = database["status"] == "healthy"
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "status": "healthy" if healthy else "degraded",
        "dependencies": {"database": database},
        "circuit_breakers": get_all_breaker_stats(),
    }

    if not healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks
