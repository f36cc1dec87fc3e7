"""Compiles search filters into a parameterized WHERE predicate.

Clauses are collected as ``(template, values)`` pairs and only turned into
SQL by ``PredicateBuilder.render``, which is the single place positional
placeholders are allocated. Templates reference their values as ``{0}``,
``{1}``... and never contain user text.
"""

from typing import Any, Callable

from folio.base.abstractions import SearchFilters
from folio.base.utils import escape_like

from .base import ParamHelper

BOOK_ALIAS = "b"


class PredicateBuilder:
    def __init__(self) -> None:
        self._clauses: list[tuple[str, tuple[Any, ...]]] = []

    def add(self, clause: str, *values: Any) -> "PredicateBuilder":
        self._clauses.append((clause, values))
        return self

    def __len__(self) -> int:
        return len(self._clauses)

    def render(self, params: ParamHelper) -> str:
        rendered = []
        for clause, values in self._clauses:
            placeholders = [params.add(value) for value in values]
            rendered.append(clause.format(*placeholders))
        return " AND ".join(rendered) or "TRUE"


def text_match_pattern(query: str) -> str:
    return f"%{escape_like(query)}%"


def compile_filters(
    filters: SearchFilters,
    table: Callable[[str], str],
    similarity_threshold: float,
) -> PredicateBuilder:
    """Builds the candidate-pool predicate shared by the page, count and
    facet queries.

    ``table`` maps a base table name to its qualified name.
    """
    b = BOOK_ALIAS
    predicate = PredicateBuilder()
    predicate.add(f"{b}.is_active = true")

    if filters.query:
        predicate.add(
            f"({b}.title ILIKE {{0}} OR {b}.subtitle ILIKE {{0}} "
            f"OR {b}.description ILIKE {{0}} "
            f"OR similarity({b}.title, {{1}}) >= {{2}})",
            text_match_pattern(filters.query),
            filters.query,
            similarity_threshold,
        )

    if filters.categories:
        predicate.add(
            f"EXISTS (SELECT 1 FROM {table('book_categories')} fbc "
            f"JOIN {table('categories')} fc ON fc.id = fbc.category_id "
            f"WHERE fbc.book_id = {b}.id AND fc.slug = ANY({{0}}::text[]))",
            filters.categories,
        )

    if filters.authors:
        predicate.add(
            f"EXISTS (SELECT 1 FROM {table('book_authors')} fba "
            f"WHERE fba.book_id = {b}.id "
            f"AND fba.author_id::text = ANY({{0}}::text[]))",
            filters.authors,
        )

    if filters.formats:
        predicate.add(f"{b}.format = ANY({{0}}::text[])", filters.formats)

    if filters.languages:
        predicate.add(f"{b}.language = ANY({{0}}::text[])", filters.languages)

    if filters.min_price is not None:
        predicate.add(f"{b}.price >= {{0}}", filters.min_price)

    if filters.max_price is not None:
        predicate.add(f"{b}.price <= {{0}}", filters.max_price)

    if filters.min_rating is not None:
        predicate.add(f"{b}.rating >= {{0}}", filters.min_rating)

    return predicate
