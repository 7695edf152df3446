"""
Response DTOs for link management endpoints.

LinkResponse        : one link, as returned by POST/GET /api/links
CreateLinkResponse  : POST /api/links
LinkListResponse    : GET /api/links
AnalyticsResponse   : GET /api/analytics
LinkRecordsResponse : GET /api/links/{link_id}/records

Keys are camelCase to match the stored documents and existing clients.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.link import ClickRecord, LinkDoc


class LinkSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    destination_url: str = Field(alias="destinationUrl")
    clicks: int
    created_at: datetime = Field(alias="createdAt")


class LinkResponse(LinkSummary):
    link_id: str = Field(alias="linkId")
    last_clicked: Optional[datetime] = Field(
        default=None, alias="lastClicked"
    )
    click_records: list[ClickRecord] = Field(
        default_factory=list, alias="clickRecords"
    )

    @classmethod
    def from_doc(cls, doc: LinkDoc) -> "LinkResponse":
        return cls(
            link_id=doc.link_id,
            name=doc.name,
            destination_url=doc.destination_url,
            clicks=doc.clicks,
            created_at=doc.created_at,
            last_clicked=doc.last_clicked,
            click_records=doc.click_records,
        )


class CreateLinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    link: LinkResponse
    tracking_url: str = Field(alias="trackingUrl")


class LinkListResponse(BaseModel):
    success: bool = True
    links: list[LinkResponse]


class AnalyticsSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_links: int = Field(alias="totalLinks")
    total_clicks: int = Field(alias="totalClicks")
    avg_clicks: int = Field(alias="avgClicks")


class AnalyticsResponse(BaseModel):
    success: bool = True
    analytics: AnalyticsSummary


class LinkRecordsResponse(BaseModel):
    success: bool = True
    link: LinkSummary
    records: list[ClickRecord]
