from .local import LocalCacheProvider
from .noop import NullCacheProvider
from .redis import RedisCacheProvider

__all__ = [
    "LocalCacheProvider",
    "NullCacheProvider",
    "RedisCacheProvider",
]
