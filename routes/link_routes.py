"""
Link management API.

POST   /api/links                   create a tracking link
GET    /api/links                   all links, newest first
GET    /api/analytics               totals across all links
DELETE /api/links/{link_id}         delete a link and its history (idempotent)
GET    /api/links/{link_id}/records link summary + full click history
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from config import AppSettings
from dependencies import get_link_service, get_settings
from schemas.dto.requests.link import CreateLinkRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.dto.responses.link import (
    AnalyticsResponse,
    CreateLinkResponse,
    LinkListResponse,
    LinkRecordsResponse,
    LinkResponse,
    LinkSummary,
)
from services.link_service import LinkService, build_tracking_url

router = APIRouter(prefix="/api", tags=["links"])


@router.post(
    "/links",
    response_model=CreateLinkResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_link(
    body: CreateLinkRequest,
    request: Request,
    service: LinkService = Depends(get_link_service),
    settings: AppSettings = Depends(get_settings),
) -> CreateLinkResponse:
    link = await service.create(body)
    base_url = settings.public_base_url or str(request.base_url)
    return CreateLinkResponse(
        link=LinkResponse.from_doc(link),
        tracking_url=build_tracking_url(base_url, link.link_id),
    )


@router.get("/links", response_model=LinkListResponse)
async def list_links(
    service: LinkService = Depends(get_link_service),
) -> LinkListResponse:
    links = await service.list_links()
    return LinkListResponse(links=[LinkResponse.from_doc(link) for link in links])


@router.get("/analytics", response_model=AnalyticsResponse)
async def analytics(
    service: LinkService = Depends(get_link_service),
) -> AnalyticsResponse:
    return AnalyticsResponse(analytics=await service.analytics())


@router.delete("/links/{link_id}", response_model=MessageResponse)
async def delete_link(
    link_id: str,
    service: LinkService = Depends(get_link_service),
) -> MessageResponse:
    await service.delete(link_id)
    return MessageResponse(success=True)


@router.get(
    "/links/{link_id}/records",
    response_model=LinkRecordsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def link_records(
    link_id: str,
    service: LinkService = Depends(get_link_service),
) -> LinkRecordsResponse:
    link = await service.get(link_id)
    return LinkRecordsResponse(
        link=LinkSummary(
            name=link.name,
            destination_url=link.destination_url,
            clicks=link.clicks,
            created_at=link.created_at,
        ),
        records=link.click_records,
    )
