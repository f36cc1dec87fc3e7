# tests/conftest.py
from datetime import date, datetime, timezone

import pytest

from folio.base import AppConfig, CacheConfig, DatabaseConfig, OrchestrationConfig
from folio.main import FolioConfig, FolioProviders, SearchService
from folio.providers import (
    InMemoryDatabaseProvider,
    LocalCacheProvider,
    SimpleOrchestrationProvider,
)
from folio.providers.database import (
    CatalogAuthor,
    CatalogBook,
    CatalogCategory,
    CatalogReview,
    InMemoryCatalog,
)


def _reviews(*ratings: float) -> list[CatalogReview]:
    return [CatalogReview(rating=r) for r in ratings]


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Six categories; only "mystery" and "fantasy" hold a book matching
    "shadow"."""
    catalog = InMemoryCatalog()

    for slug, name in [
        ("fiction", "Fiction"),
        ("history", "History"),
        ("science", "Science"),
        ("mystery", "Mystery"),
        ("poetry", "Poetry"),
        ("fantasy", "Fantasy"),
    ]:
        catalog.add_category(CatalogCategory(id=f"cat-{slug}", slug=slug, name=name))

    for author_id, name in [
        ("a1", "Mira Okafor"),
        ("a2", "Jonas Whitfield"),
        ("a3", "Elena Sokolova"),
        ("a4", "Theo Brandt"),
    ]:
        catalog.add_author(CatalogAuthor(id=author_id, name=name))

    books = [
        CatalogBook(
            id="b1",
            title="The Resonance Engine",
            subtitle="A Novel",
            description="An inventor builds a machine that hums with memory.",
            price=18.5,
            rating=4.9,
            format="hardcover",
            language="en",
            publication_date=date(2023, 5, 1),
            author_ids=["a1"],
            category_ids=["cat-fiction", "cat-science"],
            reviews=_reviews(5, 5, 4.5),
        ),
        CatalogBook(
            id="b2",
            title="Shadow of the Lighthouse",
            description="A keeper guards a secret on a rocky coast.",
            price=12.0,
            rating=4.2,
            format="paperback",
            language="en",
            publication_date=date(2021, 9, 14),
            author_ids=["a2"],
            category_ids=["cat-mystery"],
            reviews=_reviews(4),
        ),
        CatalogBook(
            id="b3",
            title="Shadows Over Avalon",
            description="Knights, sorcery and a vanished queen.",
            price=55.0,
            rating=3.8,
            format="ebook",
            language="fr",
            publication_date=date(2019, 2, 3),
            author_ids=["a3"],
            category_ids=["cat-fantasy"],
        ),
        CatalogBook(
            id="b4",
            title="Letters from the Front",
            description="Correspondence gathered across four winters.",
            price=30.0,
            rating=4.5,
            format="hardcover",
            language="en",
            author_ids=["a4"],
            category_ids=["cat-history"],
            reviews=_reviews(4, 5),
        ),
        CatalogBook(
            id="b5",
            title="Atoms and Stars",
            description="A tour of physics for curious readers.",
            price=8.0,
            rating=4.1,
            format="paperback",
            language="en",
            author_ids=["a1", "a4"],
            category_ids=["cat-science"],
            reviews=_reviews(4),
        ),
        CatalogBook(
            id="b6",
            title="Verses at Dusk",
            description="Poems about evening light.",
            price=None,
            rating=None,
            format="paperback",
            language="en",
            author_ids=["a3"],
            category_ids=["cat-poetry"],
        ),
        CatalogBook(
            id="b7",
            title="Winter Orchard",
            description="Three sisters return to the family farm.",
            price=15.0,
            rating=4.0,
            format="paperback",
            language="en",
            created_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
            author_ids=["a2"],
            category_ids=["cat-fiction"],
            reviews=_reviews(4, 4),
        ),
        CatalogBook(
            id="b8",
            title="Paper Boats",
            description="A small town summer.",
            price=9.5,
            rating=3.5,
            format="ebook",
            language="en",
            author_ids=["a4"],
            category_ids=["cat-fiction"],
            reviews=_reviews(3.5),
        ),
        CatalogBook(
            id="b9",
            title="The Lost Draft",
            description="Unpublished and withdrawn.",
            price=20.0,
            rating=5.0,
            format="hardcover",
            language="en",
            is_active=False,
            author_ids=["a1"],
            category_ids=["cat-fiction"],
            reviews=_reviews(5),
        ),
    ]
    for book in books:
        catalog.add_book(book)

    return catalog


@pytest.fixture
def app_config():
    return AppConfig(project_name="test_project")


@pytest.fixture
def folio_config():
    return FolioConfig(
        {
            "app": {"project_name": "test_project"},
            "database": {"provider": "memory"},
            "cache": {"provider": "local"},
        }
    )


@pytest.fixture
def database_provider(folio_config, catalog):
    return InMemoryDatabaseProvider(folio_config.database, catalog=catalog)


@pytest.fixture
def cache_provider(folio_config):
    return LocalCacheProvider(folio_config.cache)


@pytest.fixture
def orchestration_provider(folio_config):
    return SimpleOrchestrationProvider(folio_config.orchestration)


@pytest.fixture
def providers(database_provider, cache_provider, orchestration_provider):
    return FolioProviders(
        database=database_provider,
        cache=cache_provider,
        orchestration=orchestration_provider,
    )


@pytest.fixture
def search_service(folio_config, providers):
    return SearchService(config=folio_config, providers=providers)


@pytest.fixture
def database_config(app_config):
    return DatabaseConfig(
        app=app_config,
        provider="memory",
        project_name="test_project",
    )


@pytest.fixture
def cache_config(app_config):
    return CacheConfig(app=app_config, provider="local", max_local_entries=3)


@pytest.fixture
def orchestration_config(app_config):
    return OrchestrationConfig(app=app_config, max_pending_tasks=2)
