"""
Link document model.

Maps to the ``links`` MongoDB collection. One document per tracking link,
with its click history embedded as an append-only array:

  linkId          unique opaque identifier (immutable)
  clicks          always equal to len(clickRecords) once a write completes
  clickRecords    insertion order == chronological order

Keys are stored camelCase (``destinationUrl``, ``clickRecords``, ...) for
compatibility with existing data and API clients; pydantic aliases map them
to Python identifiers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.base import MongoBaseModel
from schemas.models.enums import (
    UNKNOWN,
    Browser,
    DeviceType,
    OperatingSystem,
    PermissionState,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GeoLocation(BaseModel):
    """Approximate location derived from the client IP."""

    country: str = UNKNOWN
    city: str = UNKNOWN
    region: str = UNKNOWN
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def unknown(cls) -> "GeoLocation":
        return cls()


class UserAgentInfo(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    browser: Browser = Browser.UNKNOWN
    os: OperatingSystem = OperatingSystem.UNKNOWN
    device: DeviceType = DeviceType.DESKTOP


class DeferredEnrichment(BaseModel):
    """Client-collected data reported after the redirect.

    Every field is optional: a report carries whatever the browser managed
    to collect, and only the fields it carries are merged.
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    camera_permission: Optional[PermissionState] = Field(
        default=None, alias="cameraPermission"
    )
    location_permission: Optional[PermissionState] = Field(
        default=None, alias="locationPermission"
    )
    user_latitude: Optional[float] = Field(
        default=None, alias="userLatitude", ge=-90, le=90
    )
    user_longitude: Optional[float] = Field(
        default=None, alias="userLongitude", ge=-180, le=180
    )
    screen_resolution: Optional[str] = Field(default=None, alias="screenResolution")
    language: Optional[str] = None
    time_zone: Optional[str] = Field(default=None, alias="timezone")
    connection_type: Optional[str] = Field(default=None, alias="connectionType")


class ClickRecord(BaseModel):
    """One observation of a visit to a tracking link.

    Created once at redirect time. The deferred-enrichment fields start at
    their sentinel values and are patched at most once afterwards
    (``enrichedAt`` records when).
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )

    click_id: Optional[str] = Field(default=None, alias="clickId")
    timestamp: datetime = Field(default_factory=utcnow)

    ip_address: str = Field(default=UNKNOWN, alias="ipAddress")
    source_port: Optional[int] = Field(default=None, alias="sourcePort")

    # IP geolocation
    country: str = UNKNOWN
    city: str = UNKNOWN
    region: str = UNKNOWN
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Request metadata
    user_agent: str = Field(default=UNKNOWN, alias="userAgent")
    browser: Browser = Browser.UNKNOWN
    os: OperatingSystem = OperatingSystem.UNKNOWN
    device: DeviceType = DeviceType.DESKTOP
    referrer: str = "Direct"

    # Deferred enrichment
    camera_permission: PermissionState = Field(
        default=PermissionState.NOT_REQUESTED, alias="cameraPermission"
    )
    location_permission: PermissionState = Field(
        default=PermissionState.NOT_REQUESTED, alias="locationPermission"
    )
    user_latitude: Optional[float] = Field(default=None, alias="userLatitude")
    user_longitude: Optional[float] = Field(default=None, alias="userLongitude")
    screen_resolution: str = Field(default=UNKNOWN, alias="screenResolution")
    language: str = UNKNOWN
    time_zone: str = Field(default=UNKNOWN, alias="timezone")
    connection_type: str = Field(default=UNKNOWN, alias="connectionType")
    enriched_at: Optional[datetime] = Field(default=None, alias="enrichedAt")

    def to_mongo(self) -> dict:
        return self.model_dump(by_alias=True)


class LinkDoc(MongoBaseModel):
    """Document model for the ``links`` collection."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    link_id: str = Field(alias="linkId")
    name: str
    destination_url: str = Field(alias="destinationUrl")
    clicks: int = 0
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    last_clicked: Optional[datetime] = Field(default=None, alias="lastClicked")
    click_records: list[ClickRecord] = Field(
        default_factory=list, alias="clickRecords"
    )
