"""
Caching utilities backed by Redis. Every Redis failure degrades to a cache
miss, so callers never need Redis to be up.
"""
import json
import logging
from typing import Any, Optional
import redis
from config.settings import settings

logger = logging.getLogger(__name__)

# Redis client (lazy initialization)
_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get Redis client with lazy initialization"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
    return _redis_client


class CacheManager:
    """Cache management utilities"""

    def __init__(self, client: Optional[redis.Redis] = None):
        self._client = client

    @property
    def redis_client(self) -> redis.Redis:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        try:
            cached_value = self.redis_client.get(key)
            if cached_value:
                return json.loads(cached_value)
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.debug(f"Cache get failed for {key}: {e}")
        return None

    def set(self, key: str, value: Any, expiry_seconds: int = 300) -> bool:
        """Set value in cache"""
        try:
            serialized_value = json.dumps(value, default=str)
            return bool(self.redis_client.setex(key, expiry_seconds, serialized_value))
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache set failed for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache"""
        try:
            return bool(self.redis_client.delete(key))
        except redis.RedisError:
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern"""
        try:
            keys = list(self.redis_client.scan_iter(match=pattern))
            if keys:
                return self.redis_client.delete(*keys)
            return 0
        except redis.RedisError:
            return 0


# Global cache manager instance
cache_manager = CacheManager()


def roster_cache_key(event_id: int) -> str:
    return f"cache:offline_roster:{event_id}"


def invalidate_roster_cache() -> int:
    """Member changes make every cached roster stale."""
    return cache_manager.delete_pattern("cache:offline_roster:*")
