"""Link management: creation, listing, deletion, history and totals."""

from __future__ import annotations

import math

from errors import NotFoundError
from repositories.link_repository import LinkRepository
from schemas.dto.requests.link import CreateLinkRequest
from schemas.dto.responses.link import AnalyticsSummary
from schemas.models.link import LinkDoc, utcnow
from shared.generators import generate_link_id
from shared.logging import get_logger

log = get_logger(__name__)


def build_tracking_url(base_url: str, link_id: str) -> str:
    return f"{base_url.rstrip('/')}/track/{link_id}"


class LinkService:
    def __init__(self, links: LinkRepository) -> None:
        self._links = links

    async def create(self, body: CreateLinkRequest) -> LinkDoc:
        link = LinkDoc(
            link_id=generate_link_id(),
            name=body.name,
            destination_url=body.destination_url,
            created_at=utcnow(),
        )
        link = await self._links.insert(link)
        log.info("link_created", link_id=link.link_id)
        return link

    async def list_links(self) -> list[LinkDoc]:
        return await self._links.list_newest_first()

    async def get(self, link_id: str) -> LinkDoc:
        link = await self._links.find_by_link_id(link_id)
        if link is None:
            raise NotFoundError("Link not found")
        return link

    async def delete(self, link_id: str) -> None:
        """Delete a link and its click history. Succeeds for unknown ids."""
        deleted = await self._links.delete_by_link_id(link_id)
        log.info("link_deleted", link_id=link_id, existed=deleted)

    async def analytics(self) -> AnalyticsSummary:
        total_links, total_clicks = await self._links.totals()
        # half-up, so 2.5 reports as 3
        avg = math.floor(total_clicks / total_links + 0.5) if total_links else 0
        return AnalyticsSummary(
            total_links=total_links,
            total_clicks=total_clicks,
            avg_clicks=avg,
        )
