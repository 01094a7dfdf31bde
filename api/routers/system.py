"""
System API router: health check and API root.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.config import settings
from api.database import get_db
from api.middleware import get_request_id
from api.rate_limit import redis_client

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)


@router.get("/")
async def root():
    """API root: name, version and main endpoint groups."""
    return {
        "name": "FuelPool API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "routes": "/api/routes",
            "compliance": "/api/compliance/...",
            "banking": "/api/banking/...",
            "pools": "/api/pools",
        },
    }


@router.get("/api/health")
async def health_check(db=Depends(get_db)):
    """
    Liveness check with database connectivity.

    Returns 503 when the database cannot be reached.
    """
    checks = {"database": "healthy"}
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        checks["database"] = "unhealthy"

    if settings.redis_enabled:
        checks["redis"] = "healthy" if redis_client is not None else "unavailable"

    healthy = checks["database"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "request_id": get_request_id(),
            "checks": checks,
        },
    )
