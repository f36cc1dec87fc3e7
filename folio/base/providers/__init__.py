from .base import AppConfig, Provider, ProviderConfig
from .cache import (
    CacheConfig,
    CacheEntry,
    CacheProvider,
    CacheReader,
    CacheWriter,
)
from .database import (
    AnalyticsConfig,
    CatalogSearchHandler,
    DatabaseConfig,
    DatabaseConnectionManager,
    DatabaseProvider,
    Handler,
    PostgresConfigurationSettings,
    SearchAnalyticsHandler,
)
from .orchestration import OrchestrationConfig, OrchestrationProvider

__all__ = [
    # Base provider classes
    "AppConfig",
    "Provider",
    "ProviderConfig",
    # Cache provider
    "CacheConfig",
    "CacheEntry",
    "CacheProvider",
    "CacheReader",
    "CacheWriter",
    # Database providers
    "AnalyticsConfig",
    "CatalogSearchHandler",
    "DatabaseConfig",
    "DatabaseConnectionManager",
    "DatabaseProvider",
    "Handler",
    "PostgresConfigurationSettings",
    "SearchAnalyticsHandler",
    # Orchestration provider
    "OrchestrationConfig",
    "OrchestrationProvider",
]
