import json
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from folio.base import (
    AnalyticsEvent,
    DatabaseConfig,
    SearchFilters,
    SearchRequest,
    SuggestionType,
)
from folio.providers.database.analytics import PostgresSearchAnalyticsHandler
from folio.providers.database.base import ParamHelper
from folio.providers.database.catalog import PostgresCatalogSearchHandler
from folio.providers.database.postgres import PostgresDatabaseProvider


@pytest.fixture
def connection_manager():
    manager = MagicMock()
    manager.fetch_query = AsyncMock(return_value=[])
    manager.fetchrow_query = AsyncMock(return_value=None)
    manager.execute_query = AsyncMock(return_value=None)
    return manager


@pytest.fixture
def catalog_handler(connection_manager):
    return PostgresCatalogSearchHandler(
        project_name="shop",
        connection_manager=connection_manager,
        similarity_threshold=0.3,
        author_facet_limit=20,
    )


@pytest.fixture
def analytics_handler(connection_manager):
    return PostgresSearchAnalyticsHandler("shop", connection_manager)


def _book_row(**overrides):
    row = {
        "id": "b1",
        "title": "The Resonance Engine",
        "subtitle": None,
        "description": "A machine that hums.",
        "price": 18.5,
        "rating": 4.9,
        "format": "hardcover",
        "language": "en",
        "cover_url": None,
        "publication_date": None,
        "created_at": None,
        "publisher_name": "Northwind",
        "categories": ["Fiction"],
        "category_slugs": ["fiction"],
        "authors": ["Mira Okafor"],
        "author_ids": ["a1"],
        "review_count": 3,
        "avg_rating": 4.83,
        "relevance_score": 312.5,
    }
    row.update(overrides)
    return row


def test_param_helper_numbers_placeholders():
    params = ParamHelper()
    assert params.add("a") == "$1"
    assert params.add("b") == "$2"
    assert params.params == ["a", "b"]


@pytest.mark.asyncio
async def test_search_binds_query_text_as_parameters(
    catalog_handler, connection_manager
):
    connection_manager.fetch_query.return_value = [_book_row()]
    hostile = "x'; DROP TABLE books; --"

    records = await catalog_handler.search(
        SearchRequest(query=hostile, limit=5, offset=10)
    )

    sql, params = connection_manager.fetch_query.call_args[0]
    assert hostile not in sql
    assert hostile in params
    assert params[-2:] == [5, 10]
    assert "shop.books" in sql
    assert "ORDER BY relevance_score DESC" in sql
    assert records[0].id == "b1"
    assert records[0].relevance_score == 312.5


@pytest.mark.asyncio
async def test_search_without_text_scores_zero(catalog_handler, connection_manager):
    await catalog_handler.search(SearchRequest(categories=["fiction"]))

    sql, params = connection_manager.fetch_query.call_args[0]
    assert "0::float8 AS relevance_score" in sql
    assert "similarity(" not in sql
    assert params == [["fiction"], 20, 0]


@pytest.mark.asyncio
async def test_count_uses_same_predicate(catalog_handler, connection_manager):
    connection_manager.fetchrow_query.return_value = {"count": 7}

    total = await catalog_handler.count(
        SearchFilters(query="shadow", formats=["ebook"], min_price=5)
    )

    sql, params = connection_manager.fetchrow_query.call_args[0]
    assert total == 7
    assert "COUNT(*)" in sql
    assert params == ["%shadow%", "shadow", 0.3, ["ebook"], 5.0]


@pytest.mark.asyncio
async def test_count_handles_missing_row(catalog_handler):
    assert await catalog_handler.count(SearchFilters(formats=["ebook"])) == 0


@pytest.mark.asyncio
async def test_facets_parse_json_columns(catalog_handler, connection_manager):
    connection_manager.fetchrow_query.return_value = {
        "categories": json.dumps(
            [{"key": "mystery", "label": "Mystery", "count": 2}]
        ),
        "authors": [{"key": "a2", "label": "Jonas Whitfield", "count": 2}],
        "formats": [{"key": "paperback", "count": 2}],
        "languages": json.dumps([{"key": "en", "count": 2}]),
        "price_stats": json.dumps({"min": 9.0, "max": 12.0, "avg": 10.5}),
        "price_bands": json.dumps({"0-10": 1, "10-20": 1}),
    }

    facets = await catalog_handler.facets(SearchFilters(query="shadow"))

    assert facets.categories[0].key == "mystery"
    assert facets.formats[0].label == "paperback"
    assert facets.price_ranges.avg == 10.5
    assert [b.key for b in facets.price_ranges.ranges] == ["0-10", "10-20"]

    sql, params = connection_manager.fetchrow_query.call_args[0]
    assert "c.is_active = true" in sql
    assert params[-1] == 20


@pytest.mark.asyncio
async def test_autocomplete_escapes_like_wildcards(
    catalog_handler, connection_manager
):
    connection_manager.fetch_query.return_value = [
        {
            "label": "Mira Okafor",
            "type": "author",
            "id": "a1",
            "image_ref": None,
            "rating": None,
            "relevance": 0.5,
        }
    ]

    suggestions = await catalog_handler.autocomplete("50%_off", 5)

    _, params = connection_manager.fetch_query.call_args[0]
    assert params == ["50%_off", "%50\\%\\_off%", 5]
    assert suggestions[0].type == SuggestionType.AUTHOR


@pytest.mark.asyncio
async def test_analytics_record_inserts_event(
    analytics_handler, connection_manager
):
    event = AnalyticsEvent(query="shadow", user_id="u1", result_count=4)
    await analytics_handler.record(event)

    sql, params = connection_manager.execute_query.call_args[0]
    assert "INSERT INTO shop.search_analytics" in sql
    assert params == ["shadow", "u1", 4, event.timestamp]


@pytest.mark.asyncio
async def test_analytics_popular_applies_threshold(
    analytics_handler, connection_manager
):
    connection_manager.fetch_query.return_value = [
        {"query": "shadow", "search_count": 3, "avg_results": 2.0}
    ]

    popular = await analytics_handler.popular(
        limit=10, window=timedelta(days=7), min_occurrences=2
    )

    sql, params = connection_manager.fetch_query.call_args[0]
    assert "HAVING COUNT(*) >= $2" in sql
    assert params[1:] == [2, 10]
    assert popular[0].query == "shadow"
    assert popular[0].count == 3


def test_provider_reads_credentials_from_env(monkeypatch, app_config):
    monkeypatch.setenv("FOLIO_POSTGRES_USER", "folio")
    monkeypatch.setenv("FOLIO_POSTGRES_PASSWORD", "secret")
    monkeypatch.setenv("FOLIO_POSTGRES_HOST", "db")
    monkeypatch.setenv("FOLIO_POSTGRES_PORT", "5433")
    monkeypatch.setenv("FOLIO_POSTGRES_DBNAME", "catalog")

    provider = PostgresDatabaseProvider(
        DatabaseConfig(app=app_config, provider="postgres", statement_timeout_seconds=2.5)
    )

    assert provider.connection_string == "postgresql://folio:secret@db:5433/catalog"
    assert provider.project_name == "test_project"
    assert provider.connection_manager.statement_timeout == 2.5
    assert provider.catalog_handler.project_name == "test_project"


def test_provider_requires_credentials(monkeypatch, app_config):
    for var in [
        "FOLIO_POSTGRES_USER",
        "FOLIO_POSTGRES_PASSWORD",
        "FOLIO_POSTGRES_HOST",
        "FOLIO_POSTGRES_PORT",
        "FOLIO_POSTGRES_DBNAME",
    ]:
        monkeypatch.delenv(var, raising=False)

    with pytest.raises(ValueError, match="FOLIO_POSTGRES_USER"):
        PostgresDatabaseProvider(DatabaseConfig(app=app_config, provider="postgres"))
