from .abstractions import *
from .providers import *
from .utils import *

__all__ = [
    ## ABSTRACTIONS
    # Base abstractions
    "FolioSerializable",
    # Exception abstractions
    "FolioException",
    "FolioValidationError",
    "SearchFailedError",
    # Search abstractions
    "DEFAULT_SEARCH_LIMIT",
    "MAX_SEARCH_LIMIT",
    "MIN_AUTOCOMPLETE_LENGTH",
    "AnalyticsEvent",
    "AutocompleteResult",
    "FacetBucket",
    "PopularSearch",
    "PriceSummary",
    "ScoredRecord",
    "SearchFacets",
    "SearchFilters",
    "SearchRequest",
    "SearchResult",
    "SortBy",
    "SortOrder",
    "Suggestion",
    "SuggestionType",
    ## PROVIDERS
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
    ## UTILS
    "deep_update",
    "escape_like",
    "make_cache_key",
    "trigram_similarity",
]
