from typing import Optional

from folio.base.providers import CacheProvider


class NullCacheProvider(CacheProvider):
    """Cache that never stores anything; every read is a miss."""

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        pass
