"""
GET /health

MongoDB is required: if it does not answer a ping the service is "unhealthy"
(503), since clicks cannot be recorded. Redis only backs the geolocation
cache, so a missing or failing Redis reports "degraded" with a 200.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_db, get_redis
from schemas.dto.responses.common import HealthResponse
from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


async def _check_mongodb(db) -> str:
    try:
        await db.client.admin.command("ping")
    except Exception as e:
        log.warning("health_mongodb_failed", error=str(e), error_type=type(e).__name__)
        return "error"
    return "ok"


async def _check_redis(redis) -> str:
    if redis is None:
        return "not_configured"
    try:
        await redis.ping()
    except Exception as e:
        log.warning("health_redis_failed", error=str(e), error_type=type(e).__name__)
        return "error"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health_check(db=Depends(get_db), redis=Depends(get_redis)) -> JSONResponse:
    checks = {
        "mongodb": await _check_mongodb(db),
        "redis": await _check_redis(redis),
    }
    if checks["mongodb"] != "ok":
        status = "unhealthy"
    elif checks["redis"] != "ok":
        status = "degraded"
    else:
        status = "healthy"

    body = HealthResponse(status=status, checks=checks)
    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content=body.model_dump(),
    )
