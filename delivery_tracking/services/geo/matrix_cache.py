"""
Caching layer for distance-matrix batches.

Uses content-addressed keys built from the rounded origin and batch
destinations, so a repeated lookup within the TTL skips the provider.
"""
import logging
from typing import Any, Optional

from delivery_tracking.core.metrics import track_cache
from delivery_tracking.core.redis import RedisClient
from delivery_tracking.schemas.tracking import Coordinate

logger = logging.getLogger(__name__)


class MatrixCache:
    """Redis-backed cache of per-batch distance-matrix entries."""

    def __init__(self, redis_client: RedisClient, ttl_seconds: int = 900):
        """
        Initialize matrix cache.

        Args:
            redis_client: Redis client instance
            ttl_seconds: Cache TTL (default 15 minutes)
        """
        self.redis = redis_client
        self.ttl = ttl_seconds

    def _compute_key(self, origin: Coordinate, destinations: list[Coordinate]) -> str:
        """Generate cache key from coordinates rounded to ~1m precision."""
        rounded = [
            (round(c.latitude, 5), round(c.longitude, 5))
            for c in [origin, *destinations]
        ]
        return f"matrix:{RedisClient.hash_key(rounded)}"

    async def get(
        self, origin: Coordinate, destinations: list[Coordinate]
    ) -> Optional[list[Optional[dict[str, Any]]]]:
        """Get cached batch entries; None on miss or cache failure."""
        key = self._compute_key(origin, destinations)
        try:
            cached = await self.redis.get_json(key)
        except Exception as e:
            logger.warning(f"Matrix cache read failed for {key}: {e}")
            return None

        track_cache("distance_matrix", hit=cached is not None)
        if cached is not None:
            logger.debug(f"Matrix cache hit: {key}")
        return cached

    async def set(
        self,
        origin: Coordinate,
        destinations: list[Coordinate],
        entries: list[Optional[dict[str, Any]]],
    ) -> None:
        """Cache batch entries; failures are logged and ignored."""
        key = self._compute_key(origin, destinations)
        try:
            await self.redis.set_json(key, entries, self.ttl)
        except Exception as e:
            logger.warning(f"Matrix cache write failed for {key}: {e}")


def create_matrix_cache(settings) -> Optional[MatrixCache]:
    """Build the cache from settings; None when DISTANCE_MATRIX_CACHE_URL is unset."""
    if not settings.DISTANCE_MATRIX_CACHE_URL:
        return None
    return MatrixCache(
        RedisClient(settings.DISTANCE_MATRIX_CACHE_URL),
        ttl_seconds=settings.DISTANCE_MATRIX_CACHE_TTL,
    )
