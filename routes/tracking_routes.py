"""
Click tracking endpoints.

GET  /track/{link_id}             record a click, then send the browser on
POST /api/track-update/{link_id}  merge client-collected data into a click

/track is browser-facing, so failures there are plain text rather than the
JSON error shape used by the API.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from config import AppSettings
from dependencies import get_click_service, get_enrichment_service, get_settings
from errors import NotFoundError, PersistenceError
from schemas.dto.requests.link import TrackUpdateRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from services.click_service import ClickContext, ClickService
from services.enrichment_service import EnrichmentService
from shared.ip_utils import get_client_ip, get_client_port, get_referrer
from shared.logging import get_logger

log = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["tracking"])


def click_context_from_request(request: Request) -> ClickContext:
    return ClickContext(
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referrer=get_referrer(request),
        source_port=get_client_port(request),
    )


@router.get("/track/{link_id}", response_class=Response)
async def track_click(
    link_id: str,
    request: Request,
    service: ClickService = Depends(get_click_service),
    settings: AppSettings = Depends(get_settings),
) -> Response:
    try:
        click = await service.record_click(link_id, click_context_from_request(request))
    except NotFoundError:
        return PlainTextResponse("Tracking link not found", status_code=404)
    except PersistenceError:
        return PlainTextResponse("Error processing tracking link", status_code=500)
    except Exception as e:
        log.error(
            "track_click_failed",
            link_id=link_id,
            error=str(e),
            error_type=type(e).__name__,
            exc_info=e,
        )
        return PlainTextResponse("Error processing tracking link", status_code=500)

    if settings.tracking_mode == "interstitial":
        return templates.TemplateResponse(
            request,
            "track.html",
            {
                "link_id": click.link_id,
                "click_id": click.click_id,
                "destination_url": click.destination_url,
                "update_url": f"/api/track-update/{click.link_id}",
            },
            headers={"Cache-Control": "no-store"},
        )
    return RedirectResponse(
        click.destination_url,
        status_code=settings.redirect_status_code,
        headers={"Cache-Control": "no-store"},
    )


@router.post(
    "/api/track-update/{link_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}},
)
async def track_update(
    link_id: str,
    body: TrackUpdateRequest,
    service: EnrichmentService = Depends(get_enrichment_service),
) -> MessageResponse:
    await service.merge(link_id, body.enrichment_fields(), click_id=body.click_id)
    return MessageResponse(success=True)
