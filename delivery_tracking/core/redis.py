"""
Redis client for the distance-matrix cache.
"""
import hashlib
import json
from typing import Any, Optional

import redis.asyncio as redis


class RedisClient:
    """Async Redis client with caching utilities."""

    def __init__(self, url: str):
        self.url = url
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_json(self, key: str) -> Optional[Any]:
        """Get JSON value from cache."""
        client = await self.get_client()
        value = await client.get(key)
        if value:
            return json.loads(value)
        return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Set JSON value in cache with TTL."""
        client = await self.get_client()
        await client.setex(key, ttl_seconds, json.dumps(value))

    @staticmethod
    def hash_key(*args: Any) -> str:
        """Generate a hash key from arguments."""
        key_data = json.dumps(args, sort_keys=True, default=str)
        return hashlib.sha256(key_data.encode()).hexdigest()[:16]
