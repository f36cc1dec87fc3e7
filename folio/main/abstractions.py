from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel

from folio.providers import (
    InMemoryDatabaseProvider,
    LocalCacheProvider,
    NullCacheProvider,
    PostgresDatabaseProvider,
    RedisCacheProvider,
    SimpleOrchestrationProvider,
)

if TYPE_CHECKING:
    from folio.main.services.search_service import SearchService


class FolioProviders(BaseModel):
    database: PostgresDatabaseProvider | InMemoryDatabaseProvider
    cache: RedisCacheProvider | LocalCacheProvider | NullCacheProvider
    orchestration: SimpleOrchestrationProvider

    class Config:
        arbitrary_types_allowed = True


@dataclass
class FolioServices:
    search: "SearchService"
