import pytest

from folio.base import SearchFilters
from folio.providers.database.base import ParamHelper
from folio.providers.database.filters import (
    PredicateBuilder,
    compile_filters,
    text_match_pattern,
)


def table(name: str) -> str:
    return f"shop.{name}"


def render(filters: SearchFilters, threshold: float = 0.3):
    params = ParamHelper()
    sql = compile_filters(filters, table, threshold).render(params)
    return sql, params.params


def test_empty_builder_renders_true():
    assert PredicateBuilder().render(ParamHelper()) == "TRUE"


def test_builder_allocates_placeholders_at_render_time():
    builder = PredicateBuilder()
    builder.add("a = {0}", 1).add("b BETWEEN {0} AND {1}", 2, 3)

    params = ParamHelper(["already-bound"])
    sql = builder.render(params)

    assert sql == "a = $2 AND b BETWEEN $3 AND $4"
    assert params.params == ["already-bound", 1, 2, 3]
    assert len(builder) == 2


def test_unconstrained_filters_only_require_active_books():
    sql, params = render(SearchFilters())
    assert sql == "b.is_active = true"
    assert params == []


def test_each_populated_field_adds_one_clause():
    filters = SearchFilters(
        categories=["fiction", "history"],
        authors=["a1"],
        formats=["ebook"],
        languages=["en", "fr"],
        min_price=5,
        max_price=20,
        min_rating=4,
    )
    assert len(compile_filters(filters, table, 0.3)) == 8

    sql, params = render(filters)
    assert "fc.slug = ANY($1::text[])" in sql
    assert "shop.book_categories" in sql
    assert "fba.author_id::text = ANY($2::text[])" in sql
    assert "b.format = ANY($3::text[])" in sql
    assert "b.language = ANY($4::text[])" in sql
    assert "b.price >= $5" in sql
    assert "b.price <= $6" in sql
    assert "b.rating >= $7" in sql
    assert params == [["fiction", "history"], ["a1"], ["ebook"], ["en", "fr"], 5.0, 20.0, 4.0]


@pytest.mark.parametrize(
    "query",
    ["'; DROP TABLE books; --", "100% cotton", "Robert'); --"],
)
def test_query_text_is_never_interpolated(query):
    sql, params = render(SearchFilters(query=query))

    assert query not in sql
    assert params[1] == query
    assert params[0] == text_match_pattern(query)
    assert "similarity(b.title, $2) >= $3" in sql
    assert params[2] == 0.3


def test_text_match_pattern_escapes_wildcards():
    assert text_match_pattern("50%_off") == "%50\\%\\_off%"


def test_zero_bounds_still_constrain():
    sql, params = render(SearchFilters(min_price=0, min_rating=0))
    assert "b.price >= $1" in sql
    assert "b.rating >= $2" in sql
    assert params == [0.0, 0.0]
