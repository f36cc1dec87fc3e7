import hashlib
import json
import re
from typing import Any, TypeVar

KeyType = TypeVar("KeyType")

_WORD_PATTERN = re.compile(r"[^\W_]+", re.UNICODE)


def deep_update(
    mapping: dict[KeyType, Any], *updating_mappings: dict[KeyType, Any]
) -> dict[KeyType, Any]:
    updated_mapping = mapping.copy()
    for updating_mapping in updating_mappings:
        for k, v in updating_mapping.items():
            if (
                k in updated_mapping
                and isinstance(updated_mapping[k], dict)
                and isinstance(v, dict)
            ):
                updated_mapping[k] = deep_update(updated_mapping[k], v)
            else:
                updated_mapping[k] = v
    return updated_mapping


def escape_like(text: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so user text only ever matches literally."""
    return (
        text.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


def make_cache_key(prefix: str, operation: str, params: dict[str, Any]) -> str:
    """Deterministic cache key for an operation and its parameters.

    Dictionary key order never affects the key.
    """
    canonical = json.dumps(
        params, sort_keys=True, separators=(",", ":"), default=str
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{prefix}:{operation}:{digest}"


def _trigrams(text: str) -> set[str]:
    grams: set[str] = set()
    for word in _WORD_PATTERN.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return grams


def trigram_similarity(left: str | None, right: str | None) -> float:
    """Trigram overlap between two strings, as computed by pg_trgm's
    ``similarity()``: shared trigrams over the union of both sets."""
    left_grams = _trigrams(left or "")
    right_grams = _trigrams(right or "")
    if not left_grams or not right_grams:
        return 0.0
    shared = len(left_grams & right_grams)
    return shared / float(len(left_grams) + len(right_grams) - shared)
