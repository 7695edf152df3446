"""IP geolocation via an external HTTP lookup service (ip-api.com by default).

GeoLocationService.resolve() never raises. Every failure path (transport
error, timeout, non-2xx, malformed body, ``status != "success"``) is logged
and degrades to the all-Unknown result, so a slow or dead provider costs the
redirect at most one timeout.

Addresses that cannot be geolocated (loopback, private ranges, "Unknown",
unparsable strings) are answered locally without a network call.

Outbound lookups are bounded by an asyncio.Semaphore so a burst of clicks
cannot fan out into an unbounded burst of provider requests, and successful
results are cached per IP when Redis is configured.
"""

from __future__ import annotations

import asyncio
import ipaddress
from typing import Any, Optional

import httpx

from errors import UpstreamUnavailableError
from infrastructure.cache.geo_cache import GeoCache
from infrastructure.http_client import HttpClient
from schemas.models.enums import UNKNOWN
from schemas.models.link import GeoLocation
from shared.ip_utils import normalize_ip
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)

DEFAULT_API_URL = "http://ip-api.com/json/{ip}"


def is_locally_unresolvable(ip_address: str) -> bool:
    """True when *ip_address* has no meaningful public geolocation."""
    if not ip_address or ip_address == UNKNOWN:
        return True
    try:
        addr = ipaddress.ip_address(ip_address)
    except ValueError:
        return True
    return (
        addr.is_loopback
        or addr.is_private
        or addr.is_link_local
        or addr.is_unspecified
        or addr.is_multicast
        or addr.is_reserved
    )


def parse_provider_payload(data: Any) -> GeoLocation:
    """Map an ip-api style JSON body to GeoLocation.

    Raises UpstreamUnavailableError if the body is not a success payload.
    """
    if not isinstance(data, dict):
        raise UpstreamUnavailableError("malformed geolocation response")
    if data.get("status") != "success":
        raise UpstreamUnavailableError(
            data.get("message") or "geolocation lookup failed",
            details={"status": data.get("status")},
        )

    def _coord(value: Any) -> Optional[float]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    return GeoLocation(
        country=data.get("country") or UNKNOWN,
        city=data.get("city") or UNKNOWN,
        region=data.get("regionName") or UNKNOWN,
        latitude=_coord(data.get("lat")),
        longitude=_coord(data.get("lon")),
    )


class GeoLocationService:
    def __init__(
        self,
        http_client: HttpClient,
        cache: Optional[GeoCache] = None,
        api_url: str = DEFAULT_API_URL,
        max_concurrent: int = 10,
    ) -> None:
        self._http = http_client
        self._cache = cache or GeoCache(redis_client=None)
        self._api_url = api_url
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def resolve(self, ip_address: Optional[str]) -> GeoLocation:
        ip = normalize_ip(ip_address)
        if is_locally_unresolvable(ip):
            return GeoLocation.unknown()

        cached = await self._cache.get(ip)
        if cached is not None:
            return cached

        try:
            geo = await self._lookup(ip)
        except UpstreamUnavailableError as e:
            log.warning(
                "geolocation_lookup_failed",
                ip_hash=hash_ip(ip),
                error=e.message,
                details=e.details,
            )
            return GeoLocation.unknown()

        await self._cache.set(ip, geo)
        return geo

    async def _lookup(self, ip: str) -> GeoLocation:
        url = self._api_url.format(ip=ip)
        async with self._semaphore:
            try:
                response = await self._http.get(url)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                raise UpstreamUnavailableError(
                    str(e) or type(e).__name__,
                    details={"error_type": type(e).__name__},
                ) from e
            except ValueError as e:
                raise UpstreamUnavailableError(
                    "malformed geolocation response"
                ) from e
        return parse_provider_payload(data)
