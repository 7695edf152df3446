"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dependencies import get_db, get_redis
from routes.health_routes import router as health_router

_MISSING = object()


def _health(mongo_error=None, redis=_MISSING) -> tuple[int, dict]:
    db = MagicMock()
    db.client.admin.command = AsyncMock(
        side_effect=mongo_error, return_value={"ok": 1}
    )
    if redis is _MISSING:
        redis = AsyncMock()
        redis.ping = AsyncMock(return_value=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = db
        app.state.redis = redis
        yield

    app = FastAPI(lifespan=lifespan)
    app.include_router(health_router)
    with TestClient(app) as client:
        resp = client.get("/health")
    return resp.status_code, resp.json()


def _failing_redis():
    redis = AsyncMock()
    redis.ping = AsyncMock(side_effect=ConnectionError("redis down"))
    return redis


def test_healthy_when_store_and_cache_respond():
    status, body = _health()
    assert status == 200
    assert body == {"status": "healthy", "checks": {"mongodb": "ok", "redis": "ok"}}


@pytest.mark.parametrize(
    "redis, redis_check",
    [(None, "not_configured"), (_failing_redis(), "error")],
    ids=["cache_not_configured", "cache_down"],
)
def test_cache_problems_only_degrade(redis, redis_check):
    status, body = _health(redis=redis)
    assert status == 200
    assert body["status"] == "degraded"
    assert body["checks"] == {"mongodb": "ok", "redis": redis_check}


def test_store_down_is_unhealthy_even_without_cache():
    status, body = _health(mongo_error=ConnectionError("refused"), redis=None)
    assert status == 503
    assert body["status"] == "unhealthy"
    assert body["checks"]["mongodb"] == "error"
    assert body["checks"]["redis"] == "not_configured"


def test_checks_use_injected_handles():
    db = MagicMock()
    db.client.admin.command = AsyncMock(return_value={"ok": 1})
    app = FastAPI()
    app.include_router(health_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_redis] = lambda: None
    with TestClient(app) as client:
        body = client.get("/health").json()
    assert body == {"status": "degraded", "checks": {"mongodb": "ok", "redis": "not_configured"}}
    db.client.admin.command.assert_awaited_once_with("ping")
