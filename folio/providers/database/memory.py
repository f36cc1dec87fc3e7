"""In-process catalog and analytics stores.

These mirror the Postgres handlers row for row (same candidate predicate,
scoring weights, orderings and facet rules) so the engine can run without a
database in local development and tests. Similarity is computed with the
same trigram measure pg_trgm uses.
"""

import json
import logging
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from folio.base.abstractions import (
    AnalyticsEvent,
    FacetBucket,
    PopularSearch,
    ScoredRecord,
    SearchFacets,
    SearchFilters,
    SearchRequest,
    Suggestion,
    SuggestionType,
)
from folio.base.providers import (
    CatalogSearchHandler,
    DatabaseConfig,
    DatabaseProvider,
    SearchAnalyticsHandler,
)
from folio.base.utils import trigram_similarity

from .catalog import build_price_summary, price_band_key
from .ranking import relevance_score, sort_records

logger = logging.getLogger()


class CatalogAuthor(BaseModel):
    id: str
    name: str
    photo_url: Optional[str] = None


class CatalogCategory(BaseModel):
    id: str
    slug: str
    name: str
    is_active: bool = True


class CatalogReview(BaseModel):
    rating: float
    is_approved: bool = True


class CatalogBook(BaseModel):
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
    is_active: bool = True
    author_ids: list[str] = Field(default_factory=list)
    category_ids: list[str] = Field(default_factory=list)
    reviews: list[CatalogReview] = Field(default_factory=list)


class InMemoryCatalog:
    def __init__(self) -> None:
        self.books: dict[str, CatalogBook] = {}
        self.authors: dict[str, CatalogAuthor] = {}
        self.categories: dict[str, CatalogCategory] = {}

    def add_author(self, author: CatalogAuthor) -> CatalogAuthor:
        self.authors[author.id] = author
        return author

    def add_category(self, category: CatalogCategory) -> CatalogCategory:
        self.categories[category.id] = category
        return category

    def add_book(self, book: CatalogBook) -> CatalogBook:
        self.books[book.id] = book
        return book

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryCatalog":
        catalog = cls()
        for author in data.get("authors", []):
            catalog.add_author(CatalogAuthor(**author))
        for category in data.get("categories", []):
            catalog.add_category(CatalogCategory(**category))
        for book in data.get("books", []):
            catalog.add_book(CatalogBook(**book))
        return catalog

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryCatalog":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()  # type: ignore


class InMemoryCatalogSearchHandler(CatalogSearchHandler):
    def __init__(
        self,
        project_name: str,
        catalog: InMemoryCatalog,
        similarity_threshold: float = 0.3,
        author_facet_limit: int = 20,
    ):
        super().__init__(project_name, None)
        self.catalog = catalog
        self.similarity_threshold = similarity_threshold
        self.author_facet_limit = author_facet_limit

    def _matches(self, book: CatalogBook, filters: SearchFilters) -> bool:
        if not book.is_active:
            return False

        if filters.query and not (
            _contains(book.title, filters.query)
            or _contains(book.subtitle, filters.query)
            or _contains(book.description, filters.query)
            or trigram_similarity(book.title, filters.query)
            >= self.similarity_threshold
        ):
            return False

        if filters.categories:
            slugs = {
                self.catalog.categories[cid].slug
                for cid in book.category_ids
                if cid in self.catalog.categories
            }
            if not slugs.intersection(filters.categories):
                return False

        if filters.authors and not set(book.author_ids).intersection(
            filters.authors
        ):
            return False

        if filters.formats and book.format not in filters.formats:
            return False

        if filters.languages and book.language not in filters.languages:
            return False

        if filters.min_price is not None and (
            book.price is None or book.price < filters.min_price
        ):
            return False

        if filters.max_price is not None and (
            book.price is None or book.price > filters.max_price
        ):
            return False

        if filters.min_rating is not None and (
            book.rating is None or book.rating < filters.min_rating
        ):
            return False

        return True

    def _pool(self, filters: SearchFilters) -> list[CatalogBook]:
        return [b for b in self.catalog.books.values() if self._matches(b, filters)]

    def _to_record(self, book: CatalogBook, query: Optional[str]) -> ScoredRecord:
        categories = sorted(
            (
                self.catalog.categories[cid]
                for cid in book.category_ids
                if cid in self.catalog.categories
            ),
            key=lambda c: c.name,
        )
        authors = sorted(
            (
                self.catalog.authors[aid]
                for aid in book.author_ids
                if aid in self.catalog.authors
            ),
            key=lambda a: a.name,
        )
        approved = [r.rating for r in book.reviews if r.is_approved]
        return ScoredRecord(
            id=book.id,
            title=book.title,
            subtitle=book.subtitle,
            description=book.description,
            price=book.price,
            rating=book.rating,
            format=book.format,
            language=book.language,
            cover_url=book.cover_url,
            publication_date=book.publication_date,
            created_at=book.created_at,
            publisher_name=book.publisher_name,
            categories=[c.name for c in categories],
            category_slugs=[c.slug for c in categories],
            authors=[a.name for a in authors],
            author_ids=[a.id for a in authors],
            review_count=len(approved),
            avg_rating=sum(approved) / len(approved) if approved else None,
            relevance_score=relevance_score(
                query, book.title, book.subtitle, book.description
            ),
        )

    async def search(self, request: SearchRequest) -> list[ScoredRecord]:
        records = [self._to_record(b, request.query) for b in self._pool(request)]
        ordered = sort_records(records, request.sort_by, request.sort_order)
        return ordered[request.offset : request.offset + request.limit]

    async def count(self, filters: SearchFilters) -> int:
        return len(self._pool(filters))

    async def facets(self, filters: SearchFilters) -> SearchFacets:
        pool = self._pool(filters)

        category_counts: Counter[str] = Counter()
        author_counts: Counter[str] = Counter()
        for book in pool:
            for cid in set(book.category_ids):
                category = self.catalog.categories.get(cid)
                if category and category.is_active:
                    category_counts[cid] += 1
            for aid in set(book.author_ids):
                if aid in self.catalog.authors:
                    author_counts[aid] += 1

        categories = sorted(
            (
                FacetBucket(
                    key=self.catalog.categories[cid].slug,
                    label=self.catalog.categories[cid].name,
                    count=count,
                )
                for cid, count in category_counts.items()
            ),
            key=lambda bucket: (-bucket.count, bucket.label),
        )
        authors = sorted(
            (
                FacetBucket(
                    key=aid, label=self.catalog.authors[aid].name, count=count
                )
                for aid, count in author_counts.items()
            ),
            key=lambda bucket: (-bucket.count, bucket.label),
        )[: self.author_facet_limit]

        prices = [b.price for b in pool if b.price is not None]
        stats = (
            {"min": min(prices), "max": max(prices), "avg": sum(prices) / len(prices)}
            if prices
            else None
        )

        return SearchFacets(
            categories=categories,
            authors=authors,
            formats=self._value_buckets(b.format for b in pool),
            languages=self._value_buckets(b.language for b in pool),
            price_ranges=build_price_summary(
                stats, Counter(price_band_key(p) for p in prices)
            ),
        )

    @staticmethod
    def _value_buckets(values) -> list[FacetBucket]:
        counts = Counter(v for v in values if v is not None)
        return [
            FacetBucket(key=value, label=value, count=count)
            for value, count in sorted(
                counts.items(), key=lambda item: (-item[1], item[0])
            )
        ]

    async def autocomplete(self, query: str, limit: int) -> list[Suggestion]:
        suggestions: list[Suggestion] = []

        for book in self.catalog.books.values():
            if book.is_active and (
                _contains(book.title, query) or _contains(book.subtitle, query)
            ):
                suggestions.append(
                    Suggestion(
                        label=book.title,
                        type=SuggestionType.BOOK,
                        id=book.id,
                        image_ref=book.cover_url,
                        rating=book.rating,
                        relevance=trigram_similarity(book.title, query) * 2
                        + trigram_similarity(book.subtitle or "", query),
                    )
                )

        for author in self.catalog.authors.values():
            if _contains(author.name, query):
                suggestions.append(
                    Suggestion(
                        label=author.name,
                        type=SuggestionType.AUTHOR,
                        id=author.id,
                        image_ref=author.photo_url,
                        relevance=trigram_similarity(author.name, query),
                    )
                )

        for category in self.catalog.categories.values():
            if category.is_active and _contains(category.name, query):
                suggestions.append(
                    Suggestion(
                        label=category.name,
                        type=SuggestionType.CATEGORY,
                        id=category.id,
                        relevance=trigram_similarity(category.name, query),
                    )
                )

        suggestions.sort(
            key=lambda s: (
                -s.relevance,
                s.rating is None,
                -(s.rating or 0.0),
                s.label,
            )
        )
        return suggestions[:limit]


class InMemorySearchAnalyticsHandler(SearchAnalyticsHandler):
    def __init__(self, project_name: str):
        super().__init__(project_name, None)
        self.events: list[AnalyticsEvent] = []

    async def create_tables(self) -> None:
        pass

    async def record(self, event: AnalyticsEvent) -> None:
        self.events.append(event)

    async def popular(
        self, limit: int, window: timedelta, min_occurrences: int
    ) -> list[PopularSearch]:
        since = datetime.now(timezone.utc) - window
        grouped: dict[str, list[int]] = defaultdict(list)
        for event in self.events:
            if event.timestamp >= since:
                grouped[event.query].append(event.result_count)

        popular = [
            PopularSearch(
                query=query,
                count=len(counts),
                avg_result_count=sum(counts) / len(counts),
            )
            for query, counts in grouped.items()
            if len(counts) >= min_occurrences
        ]
        popular.sort(key=lambda p: (-p.count, p.query))
        return popular[:limit]


class InMemoryDatabaseProvider(DatabaseProvider):
    def __init__(
        self,
        config: DatabaseConfig,
        catalog: Optional[InMemoryCatalog] = None,
    ):
        super().__init__(config)
        self.project_name = (
            config.project_name or config.app.project_name or "folio"
        )
        if catalog is None:
            catalog = (
                InMemoryCatalog.from_json(config.seed_path)
                if config.seed_path
                else InMemoryCatalog()
            )
        self.catalog = catalog
        self.catalog_handler = InMemoryCatalogSearchHandler(
            project_name=self.project_name,
            catalog=catalog,
            similarity_threshold=config.similarity_threshold,
            author_facet_limit=config.author_facet_limit,
        )
        self.analytics_handler = InMemorySearchAnalyticsHandler(
            project_name=self.project_name
        )

    async def initialize(self):
        logger.info(
            f"Using in-memory catalog with {len(self.catalog.books)} books."
        )
        await self.analytics_handler.create_tables()

    async def close(self):
        pass
