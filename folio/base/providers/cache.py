"""Cache-aside capability interfaces.

Readers and writers are separate capabilities so callers depend only on what
they use. Implementations may raise; the search service treats every cache
error as a miss.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .base import Provider, ProviderConfig


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    key: str
    value: str
    ttl_seconds: int
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or _utcnow()) >= self.expires_at


class CacheConfig(ProviderConfig):
    provider: Optional[str] = "none"
    url: Optional[str] = None
    key_prefix: str = "folio:search"
    socket_timeout_seconds: float = 2.0
    search_ttl: int = 300
    facets_ttl: int = 300
    autocomplete_ttl: int = 60
    popular_ttl: int = 3600
    max_local_entries: int = 10_000

    def validate_config(self) -> None:
        if self.provider not in self.supported_providers:
            raise ValueError(f"Provider '{self.provider}' is not supported.")
        for ttl in (
            self.search_ttl,
            self.facets_ttl,
            self.autocomplete_ttl,
            self.popular_ttl,
        ):
            if ttl <= 0:
                raise ValueError("Cache TTLs must be positive.")

    @property
    def supported_providers(self) -> list[str]:
        return ["redis", "local", "none"]


class CacheReader(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass


class CacheWriter(ABC):
    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        pass


class CacheProvider(Provider, CacheReader, CacheWriter):
    def __init__(self, config: CacheConfig):
        super().__init__(config)
        self.config: CacheConfig = config

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass
