import asyncio
import logging
from collections import OrderedDict
from typing import Optional

from folio.base.providers import CacheConfig, CacheEntry, CacheProvider

logger = logging.getLogger()


class LocalCacheProvider(CacheProvider):
    """Per-process cache with TTL expiry, evicting the oldest entry once
    ``max_local_entries`` is reached."""

    def __init__(self, config: CacheConfig):
        super().__init__(config)
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(
                key=key, value=value, ttl_seconds=ttl_seconds
            )
            while len(self._entries) > self.config.max_local_entries:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)

    async def close(self) -> None:
        self._entries.clear()
