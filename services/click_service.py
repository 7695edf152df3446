"""
Click recording: the work done when a tracking link is resolved.

Pipeline per request (sequential, no cross-request coordination):

    classify user agent → resolve geolocation → build ClickRecord
    → atomic append + counter bump → destination URL

A click is recorded as soon as the link is resolved, whether or not the
browser goes on to visit the destination.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from errors import NotFoundError
from infrastructure.geolocation import GeoLocationService
from repositories.link_repository import LinkRepository
from schemas.models.enums import UNKNOWN
from schemas.models.link import ClickRecord, utcnow
from shared.generators import generate_click_id
from shared.ip_utils import DIRECT_REFERRER
from shared.logging import get_logger, hash_ip, should_sample
from shared.user_agent import classify_user_agent

log = get_logger(__name__)


@dataclass
class ClickContext:
    """Request metadata captured at redirect time."""

    ip_address: str = UNKNOWN
    user_agent: Optional[str] = None
    referrer: str = DIRECT_REFERRER
    source_port: Optional[int] = None


@dataclass
class RecordedClick:
    link_id: str
    click_id: str
    destination_url: str


class ClickService:
    def __init__(self, links: LinkRepository, geolocation: GeoLocationService) -> None:
        self._links = links
        self._geo = geolocation

    async def build_record(self, ctx: ClickContext) -> ClickRecord:
        ua = classify_user_agent(ctx.user_agent)
        geo = await self._geo.resolve(ctx.ip_address)
        return ClickRecord(
            click_id=generate_click_id(),
            timestamp=utcnow(),
            ip_address=ctx.ip_address or UNKNOWN,
            source_port=ctx.source_port,
            country=geo.country,
            city=geo.city,
            region=geo.region,
            latitude=geo.latitude,
            longitude=geo.longitude,
            user_agent=ctx.user_agent or UNKNOWN,
            browser=ua.browser,
            os=ua.os,
            device=ua.device,
            referrer=ctx.referrer or DIRECT_REFERRER,
        )

    async def record_click(self, link_id: str, ctx: ClickContext) -> RecordedClick:
        """Record one click on *link_id* and return where to send the visitor.

        Raises NotFoundError (with nothing written) for an unknown link.
        """
        record = await self.build_record(ctx)
        destination = await self._links.record_click(link_id, record)
        if destination is None:
            log.info("click_unknown_link", link_id=link_id, ip_hash=hash_ip(ctx.ip_address))
            raise NotFoundError("Tracking link not found")

        if should_sample("click_recorded"):
            log.info(
                "click_recorded",
                link_id=link_id,
                click_id=record.click_id,
                ip_hash=hash_ip(record.ip_address),
                country=record.country,
                browser=record.browser,
                os=record.os,
                device=record.device,
            )
        return RecordedClick(
            link_id=link_id,
            click_id=record.click_id,
            destination_url=destination,
        )
