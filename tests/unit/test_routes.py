import pytest
from fastapi.testclient import TestClient

from folio.main import FolioApp, FolioServices, SearchRouter, SystemRouter


@pytest.fixture
def client(folio_config, providers, search_service):
    services = FolioServices(search=search_service)
    app = FolioApp(
        config=folio_config,
        providers=providers,
        services=services,
        search_router=SearchRouter(
            providers, services, folio_config
        ).get_router(),
        system_router=SystemRouter(
            providers, services, folio_config
        ).get_router(),
    )
    with TestClient(app.app) as client:
        yield client


def test_search_wraps_results(client):
    response = client.get(
        "/v1/search",
        params={"categories": ["fiction"], "sortBy": "rating", "limit": 2},
    )

    assert response.status_code == 200
    body = response.json()["results"]
    assert [r["id"] for r in body["results"]] == ["b1", "b7"]
    assert body["total"] == 3
    assert body["has_more"] is True
    assert body["facets"] is None


def test_search_with_repeated_filters_and_facets(client):
    response = client.get(
        "/v1/search",
        params=[
            ("q", "shadow"),
            ("formats", "ebook"),
            ("formats", "paperback"),
            ("includeFacets", "true"),
        ],
    )

    body = response.json()["results"]
    assert body["total"] == 2
    assert {b["key"] for b in body["facets"]["categories"]} == {
        "mystery",
        "fantasy",
    }


def test_unconstrained_search_is_rejected(client):
    response = client.get("/v1/search", params={"q": "  "})

    assert response.status_code == 422
    assert response.json()["error_type"] == "FolioValidationError"
    assert "query" in response.json()["detail"]["fields"]


@pytest.mark.parametrize(
    "params",
    [
        {"q": "shadow", "offset": -1},
        {"q": "shadow", "limit": 0},
        {"q": "shadow", "minPrice": 30, "maxPrice": 10},
    ],
)
def test_invalid_parameters_are_rejected(client, params):
    response = client.get("/v1/search", params=params)

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert isinstance(detail, list) and detail
    assert all("msg" in error for error in detail)


def test_unknown_sort_falls_back(client):
    response = client.get(
        "/v1/search", params={"q": "shadow", "sortBy": "bestselling"}
    )

    assert response.status_code == 200


def test_autocomplete(client):
    short = client.get("/v1/search/autocomplete", params={"q": "s"})
    assert short.json() == {"results": {"suggestions": []}}

    response = client.get(
        "/v1/search/autocomplete", params={"q": "okafor", "limit": 3}
    )
    suggestions = response.json()["results"]["suggestions"]
    assert suggestions[0]["type"] == "author"
    assert suggestions[0]["id"] == "a1"


def test_facets(client):
    response = client.get("/v1/search/facets", params={"q": "shadow"})

    facets = response.json()["results"]
    assert {b["key"] for b in facets["categories"]} == {"mystery", "fantasy"}
    assert facets["price_ranges"]["min"] == 12.0


def test_popular_reflects_recorded_searches(client, providers):
    for _ in range(2):
        client.get(
            "/v1/search",
            params={"q": "orchard"},
            headers={"X-User-Id": "reader-1"},
        )

    response = client.get("/v1/search/popular")
    assert response.json()["results"] == [
        {"query": "orchard", "count": 2, "avg_result_count": 1.0}
    ]

    events = providers.database.analytics_handler.events
    assert [e.user_id for e in events] == ["reader-1", "reader-1"]


def test_store_failure_is_opaque(client, providers):
    async def broken(*args, **kwargs):
        raise ConnectionError("password=hunter2")

    providers.database.catalog_handler.count = broken

    response = client.get("/v1/search", params={"q": "shadow"})

    assert response.status_code == 500
    body = response.json()
    assert body["error_type"] == "SearchFailedError"
    assert body["detail"] == {"operation": "search"}
    assert "hunter2" not in response.text


def test_health(client):
    response = client.get("/v1/health")

    body = response.json()["results"]
    assert body["response"] == "ok"
    assert body["database"] == "memory"
    assert body["cache"] == "local"
