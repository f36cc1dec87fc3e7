from unittest.mock import AsyncMock

import pytest

from folio.main import FolioApp, FolioBuilder, FolioConfig, FolioProviderFactory
from folio.providers import (
    InMemoryDatabaseProvider,
    LocalCacheProvider,
    NullCacheProvider,
    RedisCacheProvider,
)


@pytest.fixture
def memory_config():
    return FolioConfig(
        {"database": {"provider": "memory"}, "cache": {"provider": "none"}}
    )


@pytest.mark.asyncio
async def test_builder_wires_memory_providers(memory_config, catalog):
    folio_app = await FolioBuilder(memory_config).build(catalog=catalog)

    assert isinstance(folio_app, FolioApp)
    assert isinstance(folio_app.providers.database, InMemoryDatabaseProvider)
    assert isinstance(folio_app.providers.cache, NullCacheProvider)
    assert folio_app.services.search.providers is folio_app.providers

    paths = set(folio_app.app.openapi()["paths"])
    assert {"/v1/search", "/v1/search/facets", "/v1/health"} <= paths

    await folio_app.shutdown()


@pytest.mark.asyncio
async def test_empty_cache_override_is_kept(memory_config, cache_provider):
    assert len(cache_provider) == 0

    providers = await FolioProviderFactory(memory_config).create_providers(
        cache_provider_override=cache_provider
    )

    assert providers.cache is cache_provider
    assert isinstance(providers.cache, LocalCacheProvider)


@pytest.mark.asyncio
async def test_unreachable_cache_does_not_block_startup(monkeypatch):
    monkeypatch.setattr(
        RedisCacheProvider,
        "initialize",
        AsyncMock(side_effect=ConnectionError("refused")),
    )
    config = FolioConfig(
        {"cache": {"provider": "redis", "url": "redis://localhost:1/0"}}
    )

    cache = await FolioProviderFactory.create_cache_provider(config.cache)

    assert isinstance(cache, RedisCacheProvider)


@pytest.mark.asyncio
async def test_unknown_provider_is_rejected(memory_config):
    memory_config.database.provider = "mongo"

    with pytest.raises(ValueError):
        await FolioProviderFactory.create_database_provider(
            memory_config.database
        )
