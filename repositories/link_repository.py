"""
Repository for the ``links`` collection.

All writes that touch a link's click history are single-document operations,
so each is atomic on its own:

- record_click()          $inc clicks + $set lastClicked + $push clickRecords
                          in one find_one_and_update
- enrich_click_by_id()    positional $set on the record whose clickId matches
- enrich_click_at_index() $set on clickRecords.<i>, guarded so it only applies
                          while <i> is still the last record

Driver errors are re-raised as PersistenceError.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from errors import PersistenceError
from schemas.models.link import ClickRecord, LinkDoc, utcnow
from shared.logging import get_logger

log = get_logger(__name__)

COLLECTION_NAME = "links"


class EnrichmentResult(str, Enum):
    APPLIED = "applied"
    ALREADY_ENRICHED = "already_enriched"
    # The update carried no fields; the record is left open for a later one
    NO_FIELDS = "no_fields"
    NOT_FOUND = "not_found"
    # A newer click was appended between reading and patching the last record
    SUPERSEDED = "superseded"


@contextmanager
def _persistence(operation: str, **context) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        log.error(
            "persistence_failure",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise PersistenceError(str(e), details={"operation": operation}) from e


def _set_fields(prefix: str, fields: dict, enriched_at: datetime) -> dict:
    update = {f"{prefix}.{key}": value for key, value in fields.items()}
    update[f"{prefix}.enrichedAt"] = enriched_at
    return update


class LinkRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def ensure_indexes(self) -> None:
        with _persistence("ensure_indexes"):
            await self._col.create_index([("linkId", ASCENDING)], unique=True)
            await self._col.create_index([("createdAt", DESCENDING)])

    # ── Link CRUD ────────────────────────────────────────────────────────────

    async def insert(self, link: LinkDoc) -> LinkDoc:
        with _persistence("insert", link_id=link.link_id):
            result = await self._col.insert_one(link.to_mongo())
        return link.model_copy(update={"id": result.inserted_id})

    async def find_by_link_id(self, link_id: str) -> Optional[LinkDoc]:
        with _persistence("find_by_link_id", link_id=link_id):
            doc = await self._col.find_one({"linkId": link_id})
        return LinkDoc.from_mongo(doc)

    async def list_newest_first(self) -> list[LinkDoc]:
        with _persistence("list_newest_first"):
            cursor = self._col.find({}).sort("createdAt", DESCENDING)
            docs = await cursor.to_list()
        return [LinkDoc.from_mongo(doc) for doc in docs]

    async def delete_by_link_id(self, link_id: str) -> bool:
        """Delete a link and its embedded history. Returns whether one existed."""
        with _persistence("delete_by_link_id", link_id=link_id):
            result = await self._col.delete_one({"linkId": link_id})
        return result.deleted_count > 0

    async def totals(self) -> tuple[int, int]:
        """Return (total links, total clicks) across the collection."""
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "totalLinks": {"$sum": 1},
                    "totalClicks": {"$sum": "$clicks"},
                }
            }
        ]
        with _persistence("totals"):
            cursor = await self._col.aggregate(pipeline)
            rows = await cursor.to_list()
        if not rows:
            return 0, 0
        return int(rows[0]["totalLinks"]), int(rows[0]["totalClicks"])

    # ── Click history ────────────────────────────────────────────────────────

    async def record_click(self, link_id: str, record: ClickRecord) -> Optional[str]:
        """Append *record* and bump the counters in one atomic update.

        Returns the link's destination URL, or None when no such link exists
        (in which case nothing is written).
        """
        with _persistence("record_click", link_id=link_id):
            doc = await self._col.find_one_and_update(
                {"linkId": link_id},
                {
                    "$inc": {"clicks": 1},
                    "$set": {"lastClicked": record.timestamp},
                    "$push": {"clickRecords": record.to_mongo()},
                },
                projection={"destinationUrl": 1},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            return None
        return doc["destinationUrl"]

    async def count_click_records(self, link_id: str) -> Optional[int]:
        """Length of the link's click history, or None if the link is absent."""
        with _persistence("count_click_records", link_id=link_id):
            doc = await self._col.find_one(
                {"linkId": link_id},
                {"_id": 0, "recordCount": {"$size": {"$ifNull": ["$clickRecords", []]}}},
            )
        if doc is None:
            return None
        return int(doc["recordCount"])

    async def has_click(self, link_id: str, click_id: str) -> bool:
        with _persistence("has_click", link_id=link_id, click_id=click_id):
            doc = await self._col.find_one(
                {"linkId": link_id, "clickRecords.clickId": click_id},
                {"_id": 1},
            )
        return doc is not None

    async def enrich_click_by_id(
        self, link_id: str, click_id: str, fields: dict
    ) -> EnrichmentResult:
        """Merge *fields* into the record identified by *click_id*."""
        with _persistence("enrich_click_by_id", link_id=link_id, click_id=click_id):
            result = await self._col.update_one(
                {
                    "linkId": link_id,
                    "clickRecords": {
                        "$elemMatch": {"clickId": click_id, "enrichedAt": None}
                    },
                },
                {"$set": _set_fields("clickRecords.$", fields, utcnow())},
            )
        if result.matched_count:
            return EnrichmentResult.APPLIED
        if not await self.has_click(link_id, click_id):
            return EnrichmentResult.NOT_FOUND
        return EnrichmentResult.ALREADY_ENRICHED

    async def enrich_click_at_index(
        self, link_id: str, index: int, fields: dict
    ) -> EnrichmentResult:
        """Merge *fields* into clickRecords[index] while it is still the last record."""
        with _persistence("enrich_click_at_index", link_id=link_id, index=index):
            result = await self._col.update_one(
                {
                    "linkId": link_id,
                    f"clickRecords.{index}": {"$exists": True},
                    f"clickRecords.{index + 1}": {"$exists": False},
                    f"clickRecords.{index}.enrichedAt": None,
                },
                {"$set": _set_fields(f"clickRecords.{index}", fields, utcnow())},
            )
        if result.matched_count:
            return EnrichmentResult.APPLIED

        count = await self.count_click_records(link_id)
        if count is None or count == 0:
            return EnrichmentResult.NOT_FOUND
        if count > index + 1:
            return EnrichmentResult.SUPERSEDED
        return EnrichmentResult.ALREADY_ENRICHED
