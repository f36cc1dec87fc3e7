"""Abstractions for catalog search, facets, autocomplete and analytics."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from .base import FolioSerializable

MAX_SEARCH_LIMIT = 100
DEFAULT_SEARCH_LIMIT = 20
MIN_AUTOCOMPLETE_LENGTH = 2


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    RATING = "rating"
    PRICE = "price"
    NEWEST = "newest"
    TITLE = "title"
    POPULARITY = "popularity"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SuggestionType(str, Enum):
    BOOK = "book"
    AUTHOR = "author"
    CATEGORY = "category"


def _clean_identifiers(values: Any) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    cleaned: list[str] = []
    for value in values:
        text = str(value).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


class SearchFilters(FolioSerializable):
    """Free text plus structured filters.

    Every field is optional. Multi-valued filters match any of their values,
    populated fields are combined with AND, numeric bounds are inclusive.
    """

    query: Optional[str] = Field(default=None, alias="q")
    categories: list[str] = Field(
        default_factory=list,
        description="Category slugs; a book matches when tagged with any of them.",
    )
    authors: list[str] = Field(
        default_factory=list,
        description="Author identifiers; a book matches when written by any of them.",
    )
    formats: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    min_price: Optional[float] = Field(default=None, alias="minPrice")
    max_price: Optional[float] = Field(default=None, alias="maxPrice")
    min_rating: Optional[float] = Field(default=None, alias="minRating")

    @field_validator("query", mode="before")
    @classmethod
    def _normalize_query(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator(
        "categories", "authors", "formats", "languages", mode="before"
    )
    @classmethod
    def _normalize_identifiers(cls, value: Any) -> list[str]:
        return _clean_identifiers(value)

    @model_validator(mode="after")
    def _check_price_bounds(self) -> "SearchFilters":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price must not exceed max_price")
        return self

    @property
    def has_text(self) -> bool:
        return self.query is not None

    @property
    def is_constrained(self) -> bool:
        return self.has_text or any(
            (
                self.categories,
                self.authors,
                self.formats,
                self.languages,
                self.min_price is not None,
                self.max_price is not None,
                self.min_rating is not None,
            )
        )

    def filters_only(self) -> "SearchFilters":
        return SearchFilters(
            **self.model_dump(include=set(SearchFilters.model_fields))
        )

    def cache_params(self) -> dict[str, Any]:
        """Order-independent view of the request used for cache keys."""
        params = self.model_dump(mode="json", exclude_none=True)
        for key, value in params.items():
            if isinstance(value, list):
                params[key] = sorted(value)
        return params


class SearchRequest(SearchFilters):
    sort_by: SortBy = Field(default=SortBy.RELEVANCE, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")
    limit: int = DEFAULT_SEARCH_LIMIT
    offset: int = 0
    include_facets: bool = Field(default=False, alias="includeFacets")

    @field_validator("sort_by", mode="before")
    @classmethod
    def _fallback_sort_by(cls, value: Any) -> SortBy:
        if isinstance(value, SortBy):
            return value
        try:
            return SortBy(str(value).strip().lower())
        except ValueError:
            return SortBy.RELEVANCE

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_sort_order(cls, value: Any) -> SortOrder:
        if isinstance(value, SortOrder):
            return value
        if str(value).strip().lower() == "asc":
            return SortOrder.ASC
        return SortOrder.DESC

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("limit must be at least 1")
        return min(value, MAX_SEARCH_LIMIT)

    @field_validator("offset")
    @classmethod
    def _check_offset(cls, value: int) -> int:
        if value < 0:
            raise ValueError("offset must not be negative")
        return value


class ScoredRecord(FolioSerializable):
    """A catalog book with denormalized names, review aggregates and score."""

    id: str
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    format: Optional[str] = None
    language: Optional[str] = None
    cover_url: Optional[str] = None
    publication_date: Optional[date] = None
    created_at: Optional[datetime] = None
    publisher_name: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    category_slugs: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    author_ids: list[str] = Field(default_factory=list)
    review_count: int = 0
    avg_rating: Optional[float] = None
    relevance_score: float = 0.0

    def __str__(self) -> str:
        return f"ScoredRecord(id={self.id}, title={self.title}, score={self.relevance_score:.3f})"


class FacetBucket(FolioSerializable):
    key: str
    label: str
    count: int


class PriceSummary(FolioSerializable):
    min: Optional[float] = None
    max: Optional[float] = None
    avg: Optional[float] = None
    ranges: list[FacetBucket] = Field(default_factory=list)


class SearchFacets(FolioSerializable):
    categories: list[FacetBucket] = Field(default_factory=list)
    authors: list[FacetBucket] = Field(default_factory=list)
    formats: list[FacetBucket] = Field(default_factory=list)
    languages: list[FacetBucket] = Field(default_factory=list)
    price_ranges: PriceSummary = Field(default_factory=PriceSummary)

    def dimensions(self) -> dict[str, list[FacetBucket]]:
        return {
            "categories": self.categories,
            "authors": self.authors,
            "formats": self.formats,
            "languages": self.languages,
            "priceRanges": self.price_ranges.ranges,
        }


class SearchResult(FolioSerializable):
    results: list[ScoredRecord] = Field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_SEARCH_LIMIT
    offset: int = 0
    has_more: bool = False
    facets: Optional[SearchFacets] = None

    @classmethod
    def paginate(
        cls,
        results: list[ScoredRecord],
        total: int,
        limit: int,
        offset: int,
        facets: Optional[SearchFacets] = None,
    ) -> "SearchResult":
        results = results[:limit]
        return cls(
            results=results,
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(results) < total,
            facets=facets,
        )


class Suggestion(FolioSerializable):
    label: str
    type: SuggestionType
    id: str
    image_ref: Optional[str] = None
    rating: Optional[float] = None
    relevance: float = 0.0


class AutocompleteResult(FolioSerializable):
    suggestions: list[Suggestion] = Field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsEvent(FolioSerializable):
    query: str
    user_id: Optional[str] = None
    result_count: int = 0
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PopularSearch(FolioSerializable):
    query: str
    count: int
    avg_result_count: float
