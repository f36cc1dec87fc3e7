import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import asyncpg

from folio.base.providers import (
    DatabaseConnectionManager,
    PostgresConfigurationSettings,
)

logger = logging.getLogger()


class SemaphoreConnectionPool:
    def __init__(
        self,
        connection_string: str,
        postgres_configuration_settings: PostgresConfigurationSettings,
    ):
        self.connection_string = connection_string
        self.postgres_configuration_settings = postgres_configuration_settings

    async def initialize(self):
        try:
            max_connections = (
                self.postgres_configuration_settings.max_connections or 32
            )
            logger.info(
                f"Connecting with {int(max_connections * 0.9)} connections to `asyncpg.create_pool`."
            )

            self.semaphore = asyncio.Semaphore(int(max_connections * 0.9))

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                max_size=max_connections,
                statement_cache_size=self.postgres_configuration_settings.statement_cache_size,
            )

            logger.info(
                "Successfully connected to Postgres database and created connection pool."
            )
        except Exception as e:
            raise ValueError(
                f"Error {e} occurred while attempting to connect to the catalog database."
            ) from e

    @asynccontextmanager
    async def get_connection(self):
        async with self.semaphore:
            async with self.pool.acquire() as conn:
                yield conn

    async def close(self):
        await self.pool.close()


class PostgresConnectionManager(DatabaseConnectionManager):
    """Runs statements on the shared pool.

    Every call is bounded by ``statement_timeout`` seconds; asyncpg raises
    ``asyncio.TimeoutError`` when it elapses.
    """

    def __init__(self, statement_timeout: Optional[float] = None):
        self.pool: Optional[SemaphoreConnectionPool] = None
        self.statement_timeout = statement_timeout

    async def initialize(self, pool: SemaphoreConnectionPool):
        self.pool = pool

    async def execute_query(self, query, params=None, isolation_level=None):
        if not self.pool:
            raise ValueError("PostgresConnectionManager is not initialized.")
        async with self.pool.get_connection() as conn:
            if isolation_level:
                async with conn.transaction(isolation=isolation_level):
                    return await conn.execute(
                        query, *(params or []), timeout=self.statement_timeout
                    )
            return await conn.execute(
                query, *(params or []), timeout=self.statement_timeout
            )

    async def fetch_query(self, query, params=None):
        if not self.pool:
            raise ValueError("PostgresConnectionManager is not initialized.")
        async with self.pool.get_connection() as conn:
            return await conn.fetch(
                query, *(params or []), timeout=self.statement_timeout
            )

    async def fetchrow_query(self, query, params=None):
        if not self.pool:
            raise ValueError("PostgresConnectionManager is not initialized.")
        async with self.pool.get_connection() as conn:
            return await conn.fetchrow(
                query, *(params or []), timeout=self.statement_timeout
            )


class ParamHelper:
    """Manages SQL parameters and positional placeholder generation."""

    def __init__(self, initial_params: Optional[list[Any]] = None):
        self.params: list[Any] = initial_params or []
        self.index: int = len(self.params) + 1

    def add(self, value: Any) -> str:
        """Adds a parameter and returns its placeholder (e.g., '$1')."""
        self.params.append(value)
        placeholder = f"${self.index}"
        self.index += 1
        return placeholder
