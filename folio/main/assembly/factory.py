import logging
from typing import Optional

from folio.base import CacheConfig, DatabaseConfig, OrchestrationConfig
from folio.providers import (
    InMemoryCatalog,
    InMemoryDatabaseProvider,
    LocalCacheProvider,
    NullCacheProvider,
    PostgresDatabaseProvider,
    RedisCacheProvider,
    SimpleOrchestrationProvider,
)

from ..abstractions import FolioProviders
from ..config import FolioConfig

logger = logging.getLogger()


class FolioProviderFactory:
    def __init__(self, config: FolioConfig):
        self.config = config

    @staticmethod
    async def create_database_provider(
        db_config: DatabaseConfig,
        catalog: Optional[InMemoryCatalog] = None,
        *args,
        **kwargs,
    ) -> PostgresDatabaseProvider | InMemoryDatabaseProvider:
        database_provider: PostgresDatabaseProvider | InMemoryDatabaseProvider
        if db_config.provider == "postgres":
            database_provider = PostgresDatabaseProvider(db_config)
        elif db_config.provider == "memory":
            database_provider = InMemoryDatabaseProvider(
                db_config, catalog=catalog
            )
        else:
            raise ValueError(
                f"Database provider {db_config.provider} not supported"
            )
        await database_provider.initialize()
        return database_provider

    @staticmethod
    async def create_cache_provider(
        cache_config: CacheConfig, *args, **kwargs
    ) -> RedisCacheProvider | LocalCacheProvider | NullCacheProvider:
        cache_provider: (
            RedisCacheProvider | LocalCacheProvider | NullCacheProvider
        )
        if cache_config.provider == "redis":
            cache_provider = RedisCacheProvider(cache_config)
        elif cache_config.provider == "local":
            cache_provider = LocalCacheProvider(cache_config)
        elif cache_config.provider in ("none", None):
            cache_provider = NullCacheProvider(cache_config)
        else:
            raise ValueError(
                f"Cache provider {cache_config.provider} not supported"
            )

        try:
            await cache_provider.initialize()
        except Exception as e:
            # The cache is optional; reads and writes soft-fail per call.
            logger.warning(
                f"Cache provider '{cache_config.provider}' is unreachable at startup: {e}"
            )
        return cache_provider

    @staticmethod
    def create_orchestration_provider(
        config: OrchestrationConfig, *args, **kwargs
    ) -> SimpleOrchestrationProvider:
        if config.provider == "simple":
            return SimpleOrchestrationProvider(config)
        else:
            raise ValueError(
                f"Orchestration provider {config.provider} not supported"
            )

    async def create_providers(
        self,
        database_provider_override: Optional[
            PostgresDatabaseProvider | InMemoryDatabaseProvider
        ] = None,
        cache_provider_override: Optional[
            RedisCacheProvider | LocalCacheProvider | NullCacheProvider
        ] = None,
        orchestration_provider_override: Optional[
            SimpleOrchestrationProvider
        ] = None,
        catalog: Optional[InMemoryCatalog] = None,
        *args,
        **kwargs,
    ) -> FolioProviders:
        # Overrides are compared to None: an empty local cache is falsy.
        database_provider = (
            database_provider_override
            if database_provider_override is not None
            else await self.create_database_provider(
                self.config.database, catalog, *args, **kwargs
            )
        )

        cache_provider = (
            cache_provider_override
            if cache_provider_override is not None
            else await self.create_cache_provider(
                self.config.cache, *args, **kwargs
            )
        )

        orchestration_provider = (
            orchestration_provider_override
            if orchestration_provider_override is not None
            else self.create_orchestration_provider(self.config.orchestration)
        )

        return FolioProviders(
            database=database_provider,
            cache=cache_provider,
            orchestration=orchestration_provider,
        )
