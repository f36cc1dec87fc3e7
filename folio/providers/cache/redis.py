import logging
import os
from typing import Optional

from redis.asyncio import Redis

from folio.base.providers import CacheConfig, CacheProvider

logger = logging.getLogger()


class RedisCacheProvider(CacheProvider):
    """Shared cache backed by Redis. Values are stored as JSON strings with
    a per-key TTL."""

    def __init__(self, config: CacheConfig, client: Optional[Redis] = None):
        super().__init__(config)
        url = config.url or os.getenv("FOLIO_REDIS_URL")
        if client is None and not url:
            raise ValueError(
                "Error, please set a valid FOLIO_REDIS_URL environment variable or set a 'url' in the 'cache' settings of your `folio.toml`."
            )
        self.url = url
        self.redis: Redis = client or Redis.from_url(
            url,  # type: ignore
            decode_responses=True,
            socket_timeout=config.socket_timeout_seconds,
            socket_connect_timeout=config.socket_timeout_seconds,
        )

    async def initialize(self) -> None:
        logger.info("Initializing `RedisCacheProvider`.")
        await self.redis.ping()

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.redis.setex(key, ttl_seconds, value)

    async def close(self) -> None:
        await self.redis.aclose()
