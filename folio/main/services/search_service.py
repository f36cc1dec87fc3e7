import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

from folio.base.abstractions import (
    MIN_AUTOCOMPLETE_LENGTH,
    AnalyticsEvent,
    AutocompleteResult,
    FolioValidationError,
    PopularSearch,
    SearchFacets,
    SearchFailedError,
    SearchFilters,
    SearchRequest,
    SearchResult,
)

from ..abstractions import FolioProviders
from ..config import FolioConfig
from .base import Service
from .caching import CachedOperation

logger = logging.getLogger()

T = TypeVar("T")


def clamp_limit(limit: Optional[int], default: int, maximum: int) -> int:
    if limit is None:
        return default
    return max(1, min(limit, maximum))


class SearchService(Service):
    """Catalog search, facets, autocomplete and popular searches.

    Every read goes through the configured cache. Store failures surface as
    ``SearchFailedError``; cache and analytics failures never reach the
    caller.
    """

    def __init__(
        self,
        config: FolioConfig,
        providers: FolioProviders,
    ):
        super().__init__(config, providers)
        cache = providers.cache
        prefix = config.cache.key_prefix

        self._search_cache = CachedOperation[SearchResult](
            "search", SearchResult, config.cache.search_ttl, cache, cache, prefix
        )
        self._facets_cache = CachedOperation[SearchFacets](
            "facets", SearchFacets, config.cache.facets_ttl, cache, cache, prefix
        )
        self._autocomplete_cache = CachedOperation[AutocompleteResult](
            "autocomplete",
            AutocompleteResult,
            config.cache.autocomplete_ttl,
            cache,
            cache,
            prefix,
        )
        self._popular_cache = CachedOperation[list[PopularSearch]](
            "popular_searches",
            list[PopularSearch],
            config.cache.popular_ttl,
            cache,
            cache,
            prefix,
        )

    @property
    def catalog(self):
        return self.providers.database.catalog_handler

    @property
    def analytics(self):
        return self.providers.database.analytics_handler

    async def _guard(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except Exception as e:
            logger.error(f"Store call failed during '{operation}': {e}")
            raise SearchFailedError(operation) from e

    async def search(
        self, request: SearchRequest, user_id: Optional[str] = None
    ) -> SearchResult:
        if not request.is_constrained:
            raise FolioValidationError(
                "Provide a search query or at least one filter.",
                detail={"fields": list(SearchFilters.model_fields)},
            )

        result = await self._search_cache(
            request.cache_params(), lambda: self._run_search(request)
        )

        if request.query:
            self._record(request.query, user_id, result.total)
        return result

    async def _run_search(self, request: SearchRequest) -> SearchResult:
        filters = request.filters_only()
        calls: list[Awaitable[Any]] = [
            self.catalog.search(request),
            self.catalog.count(filters),
        ]
        if request.include_facets:
            calls.append(self.catalog.facets(filters))

        tasks = [asyncio.ensure_future(call) for call in calls]
        try:
            outcome = await self._guard("search", asyncio.gather(*tasks))
        finally:
            # cancel siblings still running after a failure
            for task in tasks:
                if not task.done():
                    task.cancel()

        records, total = outcome[0], outcome[1]
        facets = outcome[2] if request.include_facets else None

        return SearchResult.paginate(
            records,
            total=total,
            limit=request.limit,
            offset=request.offset,
            facets=facets,
        )

    async def facets(
        self,
        query: Optional[str] = None,
        filters: Optional[SearchFilters] = None,
    ) -> SearchFacets:
        data = filters.model_dump() if filters else {}
        if query is not None:
            data["query"] = query
        scoped = SearchFilters(**data)

        return await self._facets_cache(
            scoped.cache_params(),
            lambda: self._guard("facets", self.catalog.facets(scoped)),
        )

    async def autocomplete(
        self, query: Optional[str], limit: Optional[int] = None
    ) -> AutocompleteResult:
        text = (query or "").strip()
        if len(text) < MIN_AUTOCOMPLETE_LENGTH:
            return AutocompleteResult()

        limit = clamp_limit(
            limit,
            self.config.app.autocomplete_default_limit,
            self.config.app.autocomplete_max_limit,
        )

        async def compute() -> AutocompleteResult:
            suggestions = await self._guard(
                "autocomplete", self.catalog.autocomplete(text, limit)
            )
            return AutocompleteResult(suggestions=suggestions)

        return await self._autocomplete_cache(
            {"query": text, "limit": limit}, compute
        )

    async def popular_searches(
        self, limit: Optional[int] = None
    ) -> list[PopularSearch]:
        limit = clamp_limit(
            limit,
            self.config.app.popular_default_limit,
            self.config.app.popular_max_limit,
        )
        settings = self.config.analytics

        return await self._popular_cache(
            {
                "limit": limit,
                "window_days": settings.window_days,
                "min_occurrences": settings.min_occurrences,
            },
            lambda: self._guard(
                "popular_searches",
                self.analytics.popular(
                    limit, settings.window, settings.min_occurrences
                ),
            ),
        )

    def _record(
        self, query: str, user_id: Optional[str], result_count: int
    ) -> None:
        event = AnalyticsEvent(
            query=query, user_id=user_id, result_count=result_count
        )
        self.providers.orchestration.submit(
            "record_search", self._record_event, event
        )

    async def _record_event(self, event: AnalyticsEvent) -> None:
        try:
            await self.analytics.record(event)
        except Exception as e:
            logger.warning(f"Failed to record search analytics: {e}")
