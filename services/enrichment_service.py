"""
Deferred enrichment: merging client-collected data into a recorded click.

The interstitial page reports permissions, precise coordinates and
screen / locale details some time after the click was recorded. Two ways of
finding the record to patch:

- by ``clickId``: the token issued when the click was recorded; exact.
- by position: the link's most recent record. Kept for clients that only
  know the link id. Positional matching is racy (a second click between the
  redirect and the report would otherwise receive the data), so the patch is
  only applied while the chosen record is still the last one.

Only fields present in the payload are written. A record is enriched at most
once; later reports for it are acknowledged and ignored. A report with no
fields writes nothing and does not use up that one enrichment.
"""

from __future__ import annotations

from typing import Optional

from errors import NotFoundError
from repositories.link_repository import EnrichmentResult, LinkRepository
from shared.logging import get_logger

log = get_logger(__name__)


class EnrichmentService:
    def __init__(self, links: LinkRepository) -> None:
        self._links = links

    async def merge(
        self, link_id: str, fields: dict, click_id: Optional[str] = None
    ) -> EnrichmentResult:
        if click_id:
            if fields:
                result = await self._links.enrich_click_by_id(link_id, click_id, fields)
            elif await self._links.has_click(link_id, click_id):
                result = EnrichmentResult.NO_FIELDS
            else:
                result = EnrichmentResult.NOT_FOUND
        else:
            count = await self._links.count_click_records(link_id)
            if not count:
                raise NotFoundError("Link not found or no click records")
            if fields:
                result = await self._links.enrich_click_at_index(link_id, count - 1, fields)
            else:
                result = EnrichmentResult.NO_FIELDS

        if result in (EnrichmentResult.NOT_FOUND, EnrichmentResult.SUPERSEDED):
            log.info(
                "click_enrichment_rejected",
                link_id=link_id,
                click_id=click_id,
                reason=result.value,
            )
            raise NotFoundError("Link not found or no click records")

        if result is EnrichmentResult.APPLIED:
            log.info("click_enriched", link_id=link_id, click_id=click_id, fields=sorted(fields))
        else:
            log.info(
                "click_enrichment_ignored",
                link_id=link_id,
                click_id=click_id,
                reason=result.value,
            )
        return result
