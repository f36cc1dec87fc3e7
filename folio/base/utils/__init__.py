from .base_utils import (
    deep_update,
    escape_like,
    make_cache_key,
    trigram_similarity,
)

__all__ = [
    "deep_update",
    "escape_like",
    "make_cache_key",
    "trigram_similarity",
]
