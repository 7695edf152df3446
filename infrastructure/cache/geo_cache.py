"""Geolocation-specific Redis cache.

Stores GeoLocation results as JSON keyed by IP so repeated clicks from the
same address skip the external lookup. A missing Redis client turns every
operation into a no-op; Redis errors are logged and never raised.
"""

from typing import Optional

import redis.asyncio as aioredis

from schemas.models.link import GeoLocation
from shared.logging import get_logger, hash_ip

log = get_logger(__name__)


class GeoCache:
    def __init__(
        self, redis_client: Optional[aioredis.Redis], ttl_seconds: int = 3600
    ) -> None:
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._redis is not None and self.ttl_seconds > 0

    def _key(self, ip_address: str) -> str:
        return f"geo_cache:{ip_address}"

    async def get(self, ip_address: str) -> Optional[GeoLocation]:
        if not self.enabled:
            return None
        try:
            raw = await self._redis.get(self._key(ip_address))
            if raw is None:
                return None
            return GeoLocation.model_validate_json(raw)
        except Exception as e:
            log.warning("geo_cache_get_error", ip_hash=hash_ip(ip_address), error=str(e))
            return None

    async def set(self, ip_address: str, geo: GeoLocation) -> None:
        if not self.enabled:
            return
        try:
            await self._redis.setex(
                self._key(ip_address),
                self.ttl_seconds,
                geo.model_dump_json(),
            )
        except Exception as e:
            log.error("geo_cache_set_error", ip_hash=hash_ip(ip_address), error=str(e))
