"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.cache.geo_cache import GeoCache
from infrastructure.geolocation import GeoLocationService
from infrastructure.http_client import HttpClient
from middleware.request_logging import setup_request_logging
from repositories.link_repository import COLLECTION_NAME, LinkRepository
from routes.health_routes import router as health_router
from routes.link_routes import router as link_router
from routes.page_routes import STATIC_DIR, router as page_router
from routes.tracking_routes import router as tracking_router
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        # Redis is optional; without it geolocation results are not cached
        redis_client = None
        if settings.redis.redis_uri:
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
        app.state.redis = redis_client

        geo_http = HttpClient(timeout=settings.geo.geo_timeout_seconds)
        app.state.geolocation = GeoLocationService(
            http_client=geo_http,
            cache=GeoCache(redis_client, ttl_seconds=settings.geo.geo_cache_ttl_seconds),
            api_url=settings.geo.geo_api_url,
            max_concurrent=settings.geo.geo_max_concurrent_lookups,
        )

        try:
            await LinkRepository(app.state.db[COLLECTION_NAME]).ensure_indexes()
        except Exception as e:
            # The service still starts; requests surface the store failure
            log.error("ensure_indexes_failed", error=str(e), error_type=type(e).__name__)

        log.info(
            "app_started",
            db_name=settings.db.db_name,
            redis_enabled=redis_client is not None,
            tracking_mode=settings.tracking_mode,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await geo_http.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_request_logging(app)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(link_router)
    app.include_router(tracking_router)
    app.include_router(page_router)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app
