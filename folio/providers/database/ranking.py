"""Relevance scoring and sort resolution.

The SQL expressions and their in-process counterparts share the weights
below so both catalog backends rank identically.
"""

from datetime import date, datetime
from typing import Any, Optional

from folio.base.abstractions import ScoredRecord, SortBy, SortOrder
from folio.base.utils import trigram_similarity

from .base import ParamHelper
from .filters import BOOK_ALIAS, text_match_pattern

TITLE_MATCH_BONUS = 100
SUBTITLE_MATCH_BONUS = 50
DESCRIPTION_MATCH_BONUS = 25
TITLE_SIMILARITY_WEIGHT = 200
DESCRIPTION_SIMILARITY_WEIGHT = 50


def relevance_expression(query: Optional[str], params: ParamHelper) -> str:
    if not query:
        return "0::float8"

    b = BOOK_ALIAS
    pattern = params.add(text_match_pattern(query))
    raw = params.add(query)
    return f"""(
        CASE WHEN {b}.title ILIKE {pattern} THEN {TITLE_MATCH_BONUS} ELSE 0 END +
        CASE WHEN {b}.subtitle ILIKE {pattern} THEN {SUBTITLE_MATCH_BONUS} ELSE 0 END +
        CASE WHEN {b}.description ILIKE {pattern} THEN {DESCRIPTION_MATCH_BONUS} ELSE 0 END +
        similarity({b}.title, {raw}) * {TITLE_SIMILARITY_WEIGHT} +
        similarity(COALESCE({b}.description, ''), {raw}) * {DESCRIPTION_SIMILARITY_WEIGHT}
    )::float8"""


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()  # type: ignore


def relevance_score(
    query: Optional[str],
    title: Optional[str],
    subtitle: Optional[str] = None,
    description: Optional[str] = None,
) -> float:
    if not query:
        return 0.0

    score = 0.0
    if _contains(title, query):
        score += TITLE_MATCH_BONUS
    if _contains(subtitle, query):
        score += SUBTITLE_MATCH_BONUS
    if _contains(description, query):
        score += DESCRIPTION_MATCH_BONUS
    score += trigram_similarity(title, query) * TITLE_SIMILARITY_WEIGHT
    score += (
        trigram_similarity(description or "", query)
        * DESCRIPTION_SIMILARITY_WEIGHT
    )
    return score


def _is_ascending(sort_order: SortOrder | str) -> bool:
    return str(getattr(sort_order, "value", sort_order)).lower() == "asc"


def sort_clause(sort_by: SortBy | str, sort_order: SortOrder | str) -> str:
    order = "ASC" if _is_ascending(sort_order) else "DESC"

    sort_mappings = {
        SortBy.RELEVANCE: f"relevance_score {order}, avg_rating DESC NULLS LAST",
        SortBy.RATING: f"avg_rating {order} NULLS LAST, review_count DESC",
        SortBy.PRICE: f"price {order} NULLS LAST",
        SortBy.NEWEST: "publication_date DESC NULLS LAST, created_at DESC NULLS LAST",
        SortBy.TITLE: f"title {order}",
        SortBy.POPULARITY: f"review_count {order}, avg_rating DESC NULLS LAST",
    }

    try:
        key = SortBy(getattr(sort_by, "value", sort_by))
    except ValueError:
        key = SortBy.RELEVANCE
    return f"ORDER BY {sort_mappings[key]}, id ASC"


# (attribute, descending?) pairs; None direction means "use sort_order".
_SORT_KEYS: dict[SortBy, list[tuple[str, Optional[bool]]]] = {
    SortBy.RELEVANCE: [("relevance_score", None), ("avg_rating", True)],
    SortBy.RATING: [("avg_rating", None), ("review_count", True)],
    SortBy.PRICE: [("price", None)],
    SortBy.NEWEST: [("publication_date", True), ("created_at", True)],
    SortBy.TITLE: [("title", None)],
    SortBy.POPULARITY: [("review_count", None), ("avg_rating", True)],
}


def _sortable(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return value.toordinal()
    return value


def sort_records(
    records: list[ScoredRecord],
    sort_by: SortBy | str,
    sort_order: SortOrder | str,
) -> list[ScoredRecord]:
    """In-process equivalent of ``sort_clause``: nulls always sort last."""
    try:
        key = SortBy(getattr(sort_by, "value", sort_by))
    except ValueError:
        key = SortBy.RELEVANCE
    descending = not _is_ascending(sort_order)

    ordered = sorted(records, key=lambda r: r.id)
    for attribute, fixed in reversed(_SORT_KEYS[key]):
        reverse = descending if fixed is None else fixed
        present = [r for r in ordered if getattr(r, attribute) is not None]
        missing = [r for r in ordered if getattr(r, attribute) is None]
        present.sort(
            key=lambda r: _sortable(getattr(r, attribute)), reverse=reverse
        )
        ordered = present + missing
    return ordered
