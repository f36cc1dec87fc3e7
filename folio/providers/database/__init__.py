from .memory import (
    CatalogAuthor,
    CatalogBook,
    CatalogCategory,
    CatalogReview,
    InMemoryCatalog,
    InMemoryCatalogSearchHandler,
    InMemoryDatabaseProvider,
    InMemorySearchAnalyticsHandler,
)
from .postgres import PostgresDatabaseProvider

__all__ = [
    "CatalogAuthor",
    "CatalogBook",
    "CatalogCategory",
    "CatalogReview",
    "InMemoryCatalog",
    "InMemoryCatalogSearchHandler",
    "InMemoryDatabaseProvider",
    "InMemorySearchAnalyticsHandler",
    "PostgresDatabaseProvider",
]
