"""
Integration test fixtures.

Routes run against a real FastAPI app with an in-memory LinkRepository test
double swapped in through dependency overrides, and a GeoLocationService whose
HTTP client talks to an httpx.MockTransport. No network or MongoDB needed.
"""

from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from config import AppSettings
from dependencies import get_link_repository
from errors import register_error_handlers
from infrastructure.geolocation import GeoLocationService
from infrastructure.http_client import HttpClient
from repositories.link_repository import EnrichmentResult
from routes.link_routes import router as link_router
from routes.tracking_routes import router as tracking_router
from schemas.models.link import ClickRecord, LinkDoc, utcnow

GEO_SUCCESS = {
    "status": "success",
    "country": "Canada",
    "regionName": "Ontario",
    "city": "Toronto",
    "lat": 43.65,
    "lon": -79.38,
}


class InMemoryLinkRepository:
    """Dict-backed stand-in with the same contract as LinkRepository."""

    def __init__(self) -> None:
        self.links: dict[str, LinkDoc] = {}
        self._order: dict[str, int] = {}
        self._seq = itertools.count()

    async def insert(self, link: LinkDoc) -> LinkDoc:
        self.links[link.link_id] = link
        self._order[link.link_id] = next(self._seq)
        return link

    async def find_by_link_id(self, link_id: str) -> Optional[LinkDoc]:
        link = self.links.get(link_id)
        return link.model_copy(deep=True) if link else None

    async def list_newest_first(self) -> list[LinkDoc]:
        return sorted(
            self.links.values(),
            key=lambda link: (link.created_at, self._order[link.link_id]),
            reverse=True,
        )

    async def delete_by_link_id(self, link_id: str) -> bool:
        self._order.pop(link_id, None)
        return self.links.pop(link_id, None) is not None

    async def totals(self) -> tuple[int, int]:
        return len(self.links), sum(link.clicks for link in self.links.values())

    async def record_click(self, link_id: str, record: ClickRecord) -> Optional[str]:
        link = self.links.get(link_id)
        if link is None:
            return None
        link.clicks += 1
        link.last_clicked = record.timestamp
        link.click_records.append(record)
        return link.destination_url

    async def count_click_records(self, link_id: str) -> Optional[int]:
        link = self.links.get(link_id)
        return None if link is None else len(link.click_records)

    async def has_click(self, link_id: str, click_id: str) -> bool:
        link = self.links.get(link_id)
        return link is not None and any(r.click_id == click_id for r in link.click_records)

    def _patch(self, link: LinkDoc, index: int, fields: dict) -> None:
        merged = link.click_records[index].model_dump(by_alias=True)
        merged.update(fields)
        merged["enrichedAt"] = utcnow()
        link.click_records[index] = ClickRecord.model_validate(merged)

    async def enrich_click_by_id(self, link_id: str, click_id: str, fields: dict) -> EnrichmentResult:
        link = self.links.get(link_id)
        if link is None:
            return EnrichmentResult.NOT_FOUND
        for i, rec in enumerate(link.click_records):
            if rec.click_id == click_id:
                if rec.enriched_at is not None:
                    return EnrichmentResult.ALREADY_ENRICHED
                self._patch(link, i, fields)
                return EnrichmentResult.APPLIED
        return EnrichmentResult.NOT_FOUND

    async def enrich_click_at_index(self, link_id: str, index: int, fields: dict) -> EnrichmentResult:
        link = self.links.get(link_id)
        if link is None or not link.click_records:
            return EnrichmentResult.NOT_FOUND
        if len(link.click_records) > index + 1:
            return EnrichmentResult.SUPERSEDED
        if link.click_records[index].enriched_at is not None:
            return EnrichmentResult.ALREADY_ENRICHED
        self._patch(link, index, fields)
        return EnrichmentResult.APPLIED


@pytest.fixture
def repo() -> InMemoryLinkRepository:
    return InMemoryLinkRepository()


@pytest.fixture
def geo_requests() -> list:
    return []


@pytest.fixture
def build_app(repo, geo_requests):
    """Factory: build_app(**settings_overrides) -> FastAPI."""

    def _handler(request: httpx.Request) -> httpx.Response:
        geo_requests.append(request)
        return httpx.Response(200, json=GEO_SUCCESS)

    def _build(**overrides) -> FastAPI:
        settings = AppSettings(**overrides)
        geolocation = GeoLocationService(
            HttpClient(timeout=1.0, transport=httpx.MockTransport(_handler))
        )

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            app.state.settings = settings
            app.state.db = None
            app.state.redis = None
            app.state.geolocation = geolocation
            yield

        app = FastAPI(lifespan=lifespan)
        register_error_handlers(app)
        app.include_router(link_router)
        app.include_router(tracking_router)
        app.dependency_overrides[get_link_repository] = lambda: repo
        return app

    return _build


@pytest.fixture
def client(build_app):
    with TestClient(build_app(), follow_redirects=False) as c:
        yield c


@pytest.fixture
def create_link(client):
    def _create(name="Newsletter", destination="https://example.com/article") -> dict:
        resp = client.post("/api/links", json={"name": name, "destinationUrl": destination})
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _create
