"""
Request DTOs for link management and click enrichment endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.models.link import DeferredEnrichment
from shared.validators import validate_url


class CreateLinkRequest(BaseModel):
    """Request body for POST /api/links."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    destination_url: str = Field(alias="destinationUrl", min_length=1)

    @field_validator("name", mode="after")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("destination_url", mode="after")
    @classmethod
    def _valid_destination(cls, v: str) -> str:
        v = v.strip()
        if not validate_url(v):
            raise ValueError("destinationUrl must be an absolute http(s) URL")
        return v


class TrackUpdateRequest(DeferredEnrichment):
    """Request body for POST /api/track-update/{link_id}.

    Every field is optional. ``clickId`` targets one specific click; without
    it the update lands on the link's most recent click.
    """

    click_id: Optional[str] = Field(default=None, alias="clickId", max_length=64)

    def enrichment_fields(self) -> dict:
        """Non-null fields the client actually sent, keyed by storage name."""
        return self.model_dump(
            by_alias=True,
            exclude_unset=True,
            exclude_none=True,
            exclude={"click_id"},
        )
