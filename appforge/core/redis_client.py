import redis.asyncio as aioredis
from redis.asyncio import Redis
from typing import Optional

from appforge.core.config import settings
from appforge.core.logging_config import logger


class RedisClient:
    """Redis client used by the flat file store to persist its state key"""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self.redis: Optional[Redis] = None

    async def connect(self):
        """Connect to Redis"""
        if self.redis is not None:
            return
        try:
            self.redis = aioredis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True
            )
            await self.redis.ping()
            logger.info("[Redis] Connected successfully")
        except Exception as e:
            logger.error(f"[Redis] Connection error: {e}")
            self.redis = None
            raise

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
        logger.info("[Redis] Disconnected")

    async def get(self, key: str) -> Optional[str]:
        """Get value from Redis. Errors propagate to the caller."""
        await self.connect()
        return await self.redis.get(key)

    async def set(self, key: str, value: str) -> bool:
        """Set value in Redis. Errors propagate to the caller."""
        await self.connect()
        return bool(await self.redis.set(key, value))

    async def delete(self, key: str) -> bool:
        """Delete key from Redis"""
        await self.connect()
        return await self.redis.delete(key) > 0
