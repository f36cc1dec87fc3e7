from .base import FolioSerializable
from .exception import FolioException, FolioValidationError, SearchFailedError
from .search import (
    DEFAULT_SEARCH_LIMIT,
    MAX_SEARCH_LIMIT,
    MIN_AUTOCOMPLETE_LENGTH,
    AnalyticsEvent,
    AutocompleteResult,
    FacetBucket,
    PopularSearch,
    PriceSummary,
    ScoredRecord,
    SearchFacets,
    SearchFilters,
    SearchRequest,
    SearchResult,
    SortBy,
    SortOrder,
    Suggestion,
    SuggestionType,
)

__all__ = [
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
]
