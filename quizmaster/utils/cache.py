"""
Redis cache utility for upstream lookups
"""
import redis
import json
import logging
from typing import Optional, Any
from quizmaster.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-backed JSON cache; every call is a no-op when Redis is down"""

    def __init__(self, url: Optional[str] = None):
        try:
            self.redis_client = redis.from_url(
                url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value or None"""
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except redis.RedisError as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(self, key: str, value: Any, ttl: int = None) -> bool:
        """
        Store a JSON-serializable value

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: category TTL)

        Returns:
            Success status
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or settings.CATEGORY_CACHE_TTL
            self.redis_client.setex(key, ttl, json.dumps(value))
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except redis.RedisError as e:
            logger.error(f"Cache set error: {str(e)}")
            return False


# Global instance
cache_service = CacheService()
