"""Base classes for catalog and analytics stores."""

import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Optional, Sequence

from pydantic import BaseModel

from ..abstractions import (
    AnalyticsEvent,
    PopularSearch,
    ScoredRecord,
    SearchFacets,
    SearchFilters,
    SearchRequest,
    Suggestion,
)
from .base import Provider, ProviderConfig

logger = logging.getLogger()


class DatabaseConnectionManager(ABC):
    @abstractmethod
    def execute_query(
        self,
        query: str,
        params: Optional[dict[str, Any] | Sequence[Any]] = None,
        isolation_level: Optional[str] = None,
    ):
        pass

    @abstractmethod
    def fetch_query(
        self,
        query: str,
        params: Optional[dict[str, Any] | Sequence[Any]] = None,
    ):
        pass

    @abstractmethod
    def fetchrow_query(
        self,
        query: str,
        params: Optional[dict[str, Any] | Sequence[Any]] = None,
    ):
        pass

    @abstractmethod
    async def initialize(self, pool: Any):
        pass


class Handler(ABC):
    def __init__(
        self,
        project_name: str,
        connection_manager: Optional[DatabaseConnectionManager],
    ):
        self.project_name = project_name
        self.connection_manager = connection_manager

    def _get_table_name(self, base_name: str) -> str:
        return f"{self.project_name}.{base_name}"

    @abstractmethod
    async def create_tables(self):
        pass


class CatalogSearchHandler(Handler):
    """Read-only access to the catalog for ranked search, facets and
    autocomplete."""

    async def create_tables(self):
        # The catalog schema is owned by the storefront.
        pass

    @abstractmethod
    async def search(self, request: SearchRequest) -> list[ScoredRecord]:
        pass

    @abstractmethod
    async def count(self, filters: SearchFilters) -> int:
        pass

    @abstractmethod
    async def facets(self, filters: SearchFilters) -> SearchFacets:
        pass

    @abstractmethod
    async def autocomplete(self, query: str, limit: int) -> list[Suggestion]:
        pass


class SearchAnalyticsHandler(Handler):
    """Append-only sink for issued queries and the aggregate read over it."""

    @abstractmethod
    async def record(self, event: AnalyticsEvent) -> None:
        pass

    @abstractmethod
    async def popular(
        self, limit: int, window: timedelta, min_occurrences: int
    ) -> list[PopularSearch]:
        pass


class PostgresConfigurationSettings(BaseModel):
    """Connection pool settings for the catalog database."""

    max_connections: Optional[int] = 32
    statement_cache_size: Optional[int] = 100


class DatabaseConfig(ProviderConfig):
    """A base database configuration class."""

    provider: str = "postgres"
    user: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    db_name: Optional[str] = None
    project_name: Optional[str] = None
    postgres_configuration_settings: Optional[
        PostgresConfigurationSettings
    ] = None
    statement_timeout_seconds: float = 5.0
    similarity_threshold: float = 0.3
    author_facet_limit: int = 20
    seed_path: Optional[str] = None

    def validate_config(self) -> None:
        if self.provider not in self.supported_providers:
            raise ValueError(f"Provider '{self.provider}' is not supported.")
        if not 0 <= self.similarity_threshold <= 1:
            raise ValueError("similarity_threshold must be between 0 and 1.")
        if self.statement_timeout_seconds <= 0:
            raise ValueError("statement_timeout_seconds must be positive.")

    @property
    def supported_providers(self) -> list[str]:
        return ["postgres", "memory"]


class AnalyticsConfig(BaseModel):
    """Trailing-window settings for the popular searches read."""

    window_days: int = 7
    min_occurrences: int = 2

    class Config:
        populate_by_name = True
        ignore_extra = True

    @classmethod
    def create(cls, **kwargs: Any) -> "AnalyticsConfig":
        base_args = cls.model_fields.keys()
        return cls(**{k: v for k, v in kwargs.items() if k in base_args})

    @property
    def window(self) -> timedelta:
        return timedelta(days=self.window_days)


class DatabaseProvider(Provider):
    config: DatabaseConfig
    project_name: str
    catalog_handler: CatalogSearchHandler
    analytics_handler: SearchAnalyticsHandler

    def __init__(self, config: DatabaseConfig):
        logger.info(
            f"Initializing DatabaseProvider with provider '{config.provider}'."
        )
        super().__init__(config)

    @abstractmethod
    async def initialize(self):
        pass

    @abstractmethod
    async def close(self):
        pass

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
