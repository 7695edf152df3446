"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Process-wide handles (Mongo database, Redis,
geolocation service) are created in the app lifespan and read from
app.state; repositories and services are cheap per-request wrappers.
"""

from __future__ import annotations

from fastapi import Depends, Request

from config import AppSettings
from infrastructure.geolocation import GeoLocationService
from repositories.link_repository import COLLECTION_NAME, LinkRepository
from services.click_service import ClickService
from services.enrichment_service import EnrichmentService
from services.link_service import LinkService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_redis(request: Request):
    """Return the async Redis client from app.state (may be None if not configured)."""
    return request.app.state.redis


def get_geolocation(request: Request) -> GeoLocationService:
    return request.app.state.geolocation


def get_link_repository(db=Depends(get_db)) -> LinkRepository:
    return LinkRepository(db[COLLECTION_NAME])


def get_link_service(
    links: LinkRepository = Depends(get_link_repository),
) -> LinkService:
    return LinkService(links)


def get_click_service(
    links: LinkRepository = Depends(get_link_repository),
    geolocation: GeoLocationService = Depends(get_geolocation),
) -> ClickService:
    return ClickService(links, geolocation)


def get_enrichment_service(
    links: LinkRepository = Depends(get_link_repository),
) -> EnrichmentService:
    return EnrichmentService(links)
