from .cache import LocalCacheProvider, NullCacheProvider, RedisCacheProvider
from .database import (
    InMemoryCatalog,
    InMemoryDatabaseProvider,
    PostgresDatabaseProvider,
)
from .orchestration import SimpleOrchestrationProvider

__all__ = [
    # Cache
    "LocalCacheProvider",
    "NullCacheProvider",
    "RedisCacheProvider",
    # Database
    "InMemoryCatalog",
    "InMemoryDatabaseProvider",
    "PostgresDatabaseProvider",
    # Orchestration
    "SimpleOrchestrationProvider",
]
