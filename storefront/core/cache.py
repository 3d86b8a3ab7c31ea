"""
Redis cache configuration and utilities
Falls back to an in-process store when Redis is unreachable
"""

import redis.asyncio as redis
from typing import Optional, Any, Union
from datetime import timedelta, datetime
import json
import logging

from .config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """Redis cache manager with in-memory fallback"""

    def __init__(self):
        self.redis_client: Optional[redis.Redis] = None
        self._fallback_cache: dict = {}  # In-memory fallback for development and tests
        self._use_redis = False

    async def connect(self):
        """Initialize Redis connection"""
        try:
            self.redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=settings.REDIS_DECODE_RESPONSES,
                max_connections=settings.REDIS_MAX_CONNECTIONS
            )
            await self.redis_client.ping()
            logger.info("Redis connection established")
            self._use_redis = True
        except Exception as e:
            logger.warning(f"Failed to connect to Redis, using in-memory fallback: {e}")
            self.redis_client = None
            self._use_redis = False

    async def disconnect(self):
        """Close Redis connection"""
        if self.redis_client:
            await self.redis_client.close()
            logger.info("Redis connection closed")
        self.redis_client = None
        self._use_redis = False

    async def get(self, key: str) -> Optional[Any]:
        """Get JSON value from cache"""
        try:
            if self._use_redis and self.redis_client:
                value = await self.redis_client.get(key)
                return json.loads(value) if value else None

            cache_item = self._fallback_cache.get(key)
            if cache_item:
                if cache_item.get('expires_at') and datetime.now() > cache_item['expires_at']:
                    del self._fallback_cache[key]
                    return None
                return cache_item['value']
            return None
        except Exception as e:
            logger.error(f"Cache get error: {e}")
            return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """Set JSON-serialisable value in cache with optional expiration"""
        if isinstance(expire, timedelta):
            expire = int(expire.total_seconds())

        try:
            if self._use_redis and self.redis_client:
                payload = json.dumps(value)
                if expire:
                    return await self.redis_client.setex(key, expire, payload)
                return await self.redis_client.set(key, payload)

            cache_item = {'value': value}
            if expire:
                cache_item['expires_at'] = datetime.now() + timedelta(seconds=expire)
            self._fallback_cache[key] = cache_item
            return True
        except Exception as e:
            logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache"""
        try:
            if self._use_redis and self.redis_client:
                return bool(await self.redis_client.delete(key))
            return self._fallback_cache.pop(key, None) is not None
        except Exception as e:
            logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """Check the cache backend; the in-memory fallback is always up"""
        try:
            if self._use_redis and self.redis_client:
                return bool(await self.redis_client.ping())
            return True
        except Exception as e:
            logger.error(f"Cache ping error: {e}")
            return False


# Global cache instance
cache = RedisCache()
