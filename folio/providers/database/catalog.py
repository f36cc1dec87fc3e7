import json
import logging
from typing import Any, Optional

from folio.base.abstractions import (
    FacetBucket,
    PriceSummary,
    ScoredRecord,
    SearchFacets,
    SearchFilters,
    SearchRequest,
    Suggestion,
    SuggestionType,
)
from folio.base.providers import CatalogSearchHandler
from folio.base.utils import escape_like

from .base import ParamHelper, PostgresConnectionManager
from .filters import compile_filters
from .ranking import relevance_expression, sort_clause

logger = logging.getLogger()

# (key, label, exclusive upper bound)
PRICE_BANDS: list[tuple[str, str, Optional[float]]] = [
    ("0-10", "Under 10", 10.0),
    ("10-20", "10 to 20", 20.0),
    ("20-50", "20 to 50", 50.0),
    ("50+", "50 and over", None),
]


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _load_json(value: Any) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def price_band_key(price: float) -> str:
    for key, _, upper in PRICE_BANDS:
        if upper is None or price < upper:
            return key
    return PRICE_BANDS[-1][0]


def build_price_summary(
    stats: Optional[dict[str, Any]], band_counts: dict[str, int]
) -> PriceSummary:
    stats = stats or {}
    return PriceSummary(
        min=_to_float(stats.get("min")),
        max=_to_float(stats.get("max")),
        avg=_to_float(stats.get("avg")),
        ranges=[
            FacetBucket(key=key, label=label, count=band_counts[key])
            for key, label, _ in PRICE_BANDS
            if band_counts.get(key, 0) > 0
        ],
    )


def _buckets(rows: Optional[list[dict[str, Any]]]) -> list[FacetBucket]:
    return [
        FacetBucket(
            key=str(row["key"]),
            label=str(row.get("label") or row["key"]),
            count=int(row["count"]),
        )
        for row in rows or []
        if int(row["count"]) > 0
    ]


class PostgresCatalogSearchHandler(CatalogSearchHandler):
    """Ranked catalog search over the storefront's Postgres schema.

    Requires the ``pg_trgm`` extension for ``similarity()``.
    """

    def __init__(
        self,
        project_name: str,
        connection_manager: PostgresConnectionManager,
        similarity_threshold: float = 0.3,
        author_facet_limit: int = 20,
    ):
        super().__init__(project_name, connection_manager)
        self.similarity_threshold = similarity_threshold
        self.author_facet_limit = author_facet_limit

    def _predicate(self, filters: SearchFilters, params: ParamHelper) -> str:
        return compile_filters(
            filters, self._get_table_name, self.similarity_threshold
        ).render(params)

    async def search(self, request: SearchRequest) -> list[ScoredRecord]:
        params = ParamHelper()
        relevance = relevance_expression(request.query, params)
        where_clause = self._predicate(request, params)
        limit = params.add(request.limit)
        offset = params.add(request.offset)

        query = f"""
            WITH search_results AS (
                SELECT
                    b.id::text AS id,
                    b.title,
                    b.subtitle,
                    b.description,
                    b.price,
                    b.rating,
                    b.format,
                    b.language,
                    b.cover_url,
                    b.publication_date,
                    b.created_at,
                    p.name AS publisher_name,
                    cat.names AS categories,
                    cat.slugs AS category_slugs,
                    au.names AS authors,
                    au.ids AS author_ids,
                    rs.review_count,
                    rs.avg_rating,
                    {relevance} AS relevance_score
                FROM {self._get_table_name("books")} b
                LEFT JOIN {self._get_table_name("publishers")} p ON p.id = b.publisher_id
                LEFT JOIN LATERAL (
                    SELECT
                        COALESCE(array_agg(c.name ORDER BY c.name), ARRAY[]::text[]) AS names,
                        COALESCE(array_agg(c.slug ORDER BY c.name), ARRAY[]::text[]) AS slugs
                    FROM {self._get_table_name("book_categories")} bc
                    JOIN {self._get_table_name("categories")} c ON c.id = bc.category_id
                    WHERE bc.book_id = b.id
                ) cat ON TRUE
                LEFT JOIN LATERAL (
                    SELECT
                        COALESCE(array_agg(a.name ORDER BY a.name), ARRAY[]::text[]) AS names,
                        COALESCE(array_agg(a.id::text ORDER BY a.name), ARRAY[]::text[]) AS ids
                    FROM {self._get_table_name("book_authors")} ba
                    JOIN {self._get_table_name("authors")} a ON a.id = ba.author_id
                    WHERE ba.book_id = b.id
                ) au ON TRUE
                LEFT JOIN LATERAL (
                    SELECT COUNT(*) AS review_count, AVG(r.rating) AS avg_rating
                    FROM {self._get_table_name("reviews")} r
                    WHERE r.book_id = b.id AND r.is_approved = true
                ) rs ON TRUE
                WHERE {where_clause}
            )
            SELECT * FROM search_results
            {sort_clause(request.sort_by, request.sort_order)}
            LIMIT {limit} OFFSET {offset}
        """

        rows = await self.connection_manager.fetch_query(query, params.params)
        return [self._record_from_row(row) for row in rows]

    async def count(self, filters: SearchFilters) -> int:
        params = ParamHelper()
        where_clause = self._predicate(filters, params)
        query = f"""
            SELECT COUNT(*) AS count
            FROM {self._get_table_name("books")} b
            WHERE {where_clause}
        """
        row = await self.connection_manager.fetchrow_query(
            query, params.params
        )
        return int(row["count"]) if row else 0

    async def facets(self, filters: SearchFilters) -> SearchFacets:
        params = ParamHelper()
        where_clause = self._predicate(filters, params)
        author_limit = params.add(self.author_facet_limit)

        query = f"""
            WITH book_pool AS (
                SELECT b.id, b.format, b.language, b.price
                FROM {self._get_table_name("books")} b
                WHERE {where_clause}
            )
            SELECT
                (
                    SELECT COALESCE(json_agg(json_build_object(
                        'key', t.slug, 'label', t.name, 'count', t.cnt
                    ) ORDER BY t.cnt DESC, t.name), '[]'::json)
                    FROM (
                        SELECT c.slug, c.name, COUNT(DISTINCT bc.book_id) AS cnt
                        FROM {self._get_table_name("categories")} c
                        JOIN {self._get_table_name("book_categories")} bc ON bc.category_id = c.id
                        JOIN book_pool bp ON bp.id = bc.book_id
                        WHERE c.is_active = true
                        GROUP BY c.id, c.slug, c.name
                    ) t
                ) AS categories,
                (
                    SELECT COALESCE(json_agg(json_build_object(
                        'key', t.id, 'label', t.name, 'count', t.cnt
                    ) ORDER BY t.cnt DESC, t.name), '[]'::json)
                    FROM (
                        SELECT a.id::text AS id, a.name, COUNT(DISTINCT ba.book_id) AS cnt
                        FROM {self._get_table_name("authors")} a
                        JOIN {self._get_table_name("book_authors")} ba ON ba.author_id = a.id
                        JOIN book_pool bp ON bp.id = ba.book_id
                        GROUP BY a.id, a.name
                        ORDER BY cnt DESC, a.name
                        LIMIT {author_limit}
                    ) t
                ) AS authors,
                (
                    SELECT COALESCE(json_agg(json_build_object(
                        'key', t.format, 'count', t.cnt
                    ) ORDER BY t.cnt DESC, t.format), '[]'::json)
                    FROM (
                        SELECT format, COUNT(*) AS cnt
                        FROM book_pool
                        WHERE format IS NOT NULL
                        GROUP BY format
                    ) t
                ) AS formats,
                (
                    SELECT COALESCE(json_agg(json_build_object(
                        'key', t.language, 'count', t.cnt
                    ) ORDER BY t.cnt DESC, t.language), '[]'::json)
                    FROM (
                        SELECT language, COUNT(*) AS cnt
                        FROM book_pool
                        WHERE language IS NOT NULL
                        GROUP BY language
                    ) t
                ) AS languages,
                (
                    SELECT json_build_object(
                        'min', MIN(price), 'max', MAX(price), 'avg', AVG(price)
                    )
                    FROM book_pool
                    WHERE price IS NOT NULL
                ) AS price_stats,
                (
                    SELECT COALESCE(json_object_agg(t.band, t.cnt), '{{}}'::json)
                    FROM (
                        SELECT
                            CASE
                                WHEN price < 10 THEN '0-10'
                                WHEN price < 20 THEN '10-20'
                                WHEN price < 50 THEN '20-50'
                                ELSE '50+'
                            END AS band,
                            COUNT(*) AS cnt
                        FROM book_pool
                        WHERE price IS NOT NULL
                        GROUP BY band
                    ) t
                ) AS price_bands
        """

        row = await self.connection_manager.fetchrow_query(
            query, params.params
        )
        if not row:
            return SearchFacets()

        band_counts = {
            key: int(count)
            for key, count in (_load_json(row["price_bands"]) or {}).items()
        }
        return SearchFacets(
            categories=_buckets(_load_json(row["categories"])),
            authors=_buckets(_load_json(row["authors"])),
            formats=_buckets(_load_json(row["formats"])),
            languages=_buckets(_load_json(row["languages"])),
            price_ranges=build_price_summary(
                _load_json(row["price_stats"]), band_counts
            ),
        )

    async def autocomplete(self, query: str, limit: int) -> list[Suggestion]:
        sql = f"""
            SELECT * FROM (
                SELECT
                    b.title AS label,
                    'book' AS type,
                    b.id::text AS id,
                    b.cover_url AS image_ref,
                    b.rating::float8 AS rating,
                    (
                        similarity(b.title, $1) * 2 +
                        similarity(COALESCE(b.subtitle, ''), $1)
                    )::float8 AS relevance
                FROM {self._get_table_name("books")} b
                WHERE b.is_active = true
                    AND (b.title ILIKE $2 OR b.subtitle ILIKE $2)

                UNION ALL

                SELECT
                    a.name AS label,
                    'author' AS type,
                    a.id::text AS id,
                    a.photo_url AS image_ref,
                    NULL::float8 AS rating,
                    similarity(a.name, $1)::float8 AS relevance
                FROM {self._get_table_name("authors")} a
                WHERE a.name ILIKE $2

                UNION ALL

                SELECT
                    c.name AS label,
                    'category' AS type,
                    c.id::text AS id,
                    NULL AS image_ref,
                    NULL::float8 AS rating,
                    similarity(c.name, $1)::float8 AS relevance
                FROM {self._get_table_name("categories")} c
                WHERE c.is_active = true AND c.name ILIKE $2
            ) suggestions
            ORDER BY relevance DESC, rating DESC NULLS LAST, label ASC
            LIMIT $3
        """

        rows = await self.connection_manager.fetch_query(
            sql, [query, f"%{escape_like(query)}%", limit]
        )
        return [
            Suggestion(
                label=row["label"],
                type=SuggestionType(row["type"]),
                id=row["id"],
                image_ref=row["image_ref"],
                rating=_to_float(row["rating"]),
                relevance=float(row["relevance"] or 0.0),
            )
            for row in rows
        ]

    @staticmethod
    def _record_from_row(row: Any) -> ScoredRecord:
        return ScoredRecord(
            id=row["id"],
            title=row["title"],
            subtitle=row["subtitle"],
            description=row["description"],
            price=_to_float(row["price"]),
            rating=_to_float(row["rating"]),
            format=row["format"],
            language=row["language"],
            cover_url=row["cover_url"],
            publication_date=row["publication_date"],
            created_at=row["created_at"],
            publisher_name=row["publisher_name"],
            categories=list(row["categories"] or []),
            category_slugs=list(row["category_slugs"] or []),
            authors=list(row["authors"] or []),
            author_ids=list(row["author_ids"] or []),
            review_count=int(row["review_count"] or 0),
            avg_rating=_to_float(row["avg_rating"]),
            relevance_score=float(row["relevance_score"] or 0.0),
        )
