"""Generic Redis cache operations"""
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Generic service for Redis cache operations.

    Cache failures never fail a request: reads fall back to a miss and
    writes report False.
    """

    _redis_client: Optional[redis.Redis] = None

    @classmethod
    def is_enabled(cls) -> bool:
        """Whether caching is turned on in settings"""
        return get_settings().cache_enabled

    @classmethod
    async def get_redis_client(cls) -> redis.Redis:
        """
        Get or create Redis client singleton.

        Returns:
            Redis client instance
        """
        if cls._redis_client is None:
            cls._redis_client = redis.from_url(
                get_settings().redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        return cls._redis_client

    @classmethod
    async def close_redis_client(cls):
        """Close Redis connection"""
        if cls._redis_client:
            await cls._redis_client.aclose()
            cls._redis_client = None

    @classmethod
    async def get(cls, key: str) -> Optional[str]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value if exists, None otherwise
        """
        if not cls.is_enabled():
            return None

        try:
            client = await cls.get_redis_client()
            return await client.get(key)
        except RedisError as e:
            logger.warning("Cache get error for key '%s': %s", key, e)
            return None

    @classmethod
    async def set(cls, key: str, value: str, ttl: int = 3600) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: 3600 = 1 hour)

        Returns:
            True if successful, False otherwise
        """
        if not cls.is_enabled():
            return False

        try:
            client = await cls.get_redis_client()
            await client.setex(key, ttl, value)
            return True
        except RedisError as e:
            logger.warning("Cache set error for key '%s': %s", key, e)
            return False

    @classmethod
    async def delete(cls, key: str) -> bool:
        """
        Delete value from cache.

        Args:
            key: Cache key

        Returns:
            True if successful, False otherwise
        """
        if not cls.is_enabled():
            return False

        try:
            client = await cls.get_redis_client()
            await client.delete(key)
            return True
        except RedisError as e:
            logger.warning("Cache delete error for key '%s': %s", key, e)
            return False

    @classmethod
    async def health_check(cls) -> bool:
        """
        Check if Redis connection is healthy.

        Returns:
            True if Redis is accessible, False otherwise
        """
        if not cls.is_enabled():
            return False

        try:
            client = await cls.get_redis_client()
            await client.ping()
            return True
        except RedisError:
            return False
