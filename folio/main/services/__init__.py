from .base import Service
from .caching import CachedOperation
from .search_service import SearchService

__all__ = ["CachedOperation", "SearchService", "Service"]
