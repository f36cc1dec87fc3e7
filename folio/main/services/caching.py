import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from folio.base.providers import CacheReader, CacheWriter
from folio.base.utils import make_cache_key

logger = logging.getLogger()

T = TypeVar("T")


class CachedOperation(Generic[T]):
    """Cache-aside wrapper for a single read operation.

    Values are stored as JSON. Failed or undecodable reads count as misses
    and failed writes are dropped; both are logged at WARNING.
    """

    def __init__(
        self,
        operation: str,
        result_type: Any,
        ttl_seconds: int,
        reader: CacheReader,
        writer: CacheWriter,
        key_prefix: str,
    ):
        self.operation = operation
        self.ttl_seconds = ttl_seconds
        self.reader = reader
        self.writer = writer
        self.key_prefix = key_prefix
        self.adapter: TypeAdapter[T] = TypeAdapter(result_type)

    def key_for(self, params: dict[str, Any]) -> str:
        return make_cache_key(self.key_prefix, self.operation, params)

    async def __call__(
        self, params: dict[str, Any], compute: Callable[[], Awaitable[T]]
    ) -> T:
        key = self.key_for(params)

        cached = await self._read(key)
        if cached is not None:
            try:
                return self.adapter.validate_json(cached)
            except ValidationError as e:
                logger.warning(
                    f"Discarding undecodable cache entry for '{self.operation}': {e}"
                )

        value = await compute()
        await self._write(key, self.adapter.dump_json(value).decode("utf-8"))
        return value

    async def _read(self, key: str):
        try:
            return await self.reader.get(key)
        except Exception as e:
            logger.warning(
                f"Cache read failed for '{self.operation}', treating as miss: {e}"
            )
            return None

    async def _write(self, key: str, value: str) -> None:
        try:
            await self.writer.set(key, value, self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Cache write failed for '{self.operation}': {e}")
