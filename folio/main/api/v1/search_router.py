import logging
from typing import Optional

from fastapi import Header, Query

from folio.base.abstractions import SearchFilters, SearchRequest

from ...abstractions import FolioProviders, FolioServices
from ...config import FolioConfig
from .base_router import BaseRouterV1

logger = logging.getLogger()


class SearchRouter(BaseRouterV1):
    def __init__(
        self,
        providers: FolioProviders,
        services: FolioServices,
        config: FolioConfig,
    ):
        logging.info("Initializing SearchRouter")
        super().__init__(providers, services, config)

    def _setup_routes(self):
        @self.router.get(
            "/search",
            summary="Search the catalog",
        )
        @self.base_endpoint
        async def search(
            q: Optional[str] = Query(None, description="Free-text query."),
            categories: list[str] = Query([], description="Category slugs."),
            authors: list[str] = Query([], description="Author identifiers."),
            formats: list[str] = Query([]),
            languages: list[str] = Query([]),
            min_price: Optional[float] = Query(None, alias="minPrice"),
            max_price: Optional[float] = Query(None, alias="maxPrice"),
            min_rating: Optional[float] = Query(None, alias="minRating"),
            sort_by: str = Query("relevance", alias="sortBy"),
            sort_order: str = Query("desc", alias="sortOrder"),
            limit: int = Query(20),
            offset: int = Query(0),
            include_facets: bool = Query(False, alias="includeFacets"),
            x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
        ):
            """Ranked, paginated catalog search.

            Requires free text or at least one filter. Multi-valued filters
            are passed as repeated parameters, e.g.
            ``?categories=fiction&categories=history``. ``limit`` is capped
            at 100.
            """
            request = SearchRequest(
                query=q,
                categories=categories,
                authors=authors,
                formats=formats,
                languages=languages,
                min_price=min_price,
                max_price=max_price,
                min_rating=min_rating,
                sort_by=sort_by,
                sort_order=sort_order,
                limit=limit,
                offset=offset,
                include_facets=include_facets,
            )
            return await self.services.search.search(
                request, user_id=x_user_id
            )

        @self.router.get(
            "/search/autocomplete",
            summary="Autocomplete suggestions",
        )
        @self.base_endpoint
        async def autocomplete(
            q: Optional[str] = Query(None),
            limit: Optional[int] = Query(None),
        ):
            """Books, authors and categories matching a partial query.

            Queries shorter than two characters return no suggestions.
            """
            return await self.services.search.autocomplete(q, limit)

        @self.router.get(
            "/search/facets",
            summary="Facet counts for a query",
        )
        @self.base_endpoint
        async def facets(
            q: Optional[str] = Query(None),
            categories: list[str] = Query([]),
            authors: list[str] = Query([]),
            formats: list[str] = Query([]),
            languages: list[str] = Query([]),
            min_price: Optional[float] = Query(None, alias="minPrice"),
            max_price: Optional[float] = Query(None, alias="maxPrice"),
            min_rating: Optional[float] = Query(None, alias="minRating"),
        ):
            filters = SearchFilters(
                query=q,
                categories=categories,
                authors=authors,
                formats=formats,
                languages=languages,
                min_price=min_price,
                max_price=max_price,
                min_rating=min_rating,
            )
            return await self.services.search.facets(filters=filters)

        @self.router.get(
            "/search/popular",
            summary="Popular searches",
        )
        @self.base_endpoint
        async def popular(limit: Optional[int] = Query(None)):
            """Queries issued more than once in the trailing window."""
            return await self.services.search.popular_searches(limit)
