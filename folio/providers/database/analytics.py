import logging
from datetime import datetime, timedelta, timezone

from folio.base.abstractions import AnalyticsEvent, PopularSearch
from folio.base.providers import SearchAnalyticsHandler

from .base import PostgresConnectionManager

logger = logging.getLogger()


class PostgresSearchAnalyticsHandler(SearchAnalyticsHandler):
    """Append-only record of issued search queries."""

    TABLE_NAME = "search_analytics"

    def __init__(
        self, project_name: str, connection_manager: PostgresConnectionManager
    ):
        super().__init__(project_name, connection_manager)

    async def create_tables(self) -> None:
        query = f"""
        CREATE SCHEMA IF NOT EXISTS {self.project_name};

        CREATE TABLE IF NOT EXISTS {self._get_table_name(self.TABLE_NAME)} (
            id BIGSERIAL PRIMARY KEY,
            query TEXT NOT NULL,
            user_id TEXT,
            result_count INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_{self.project_name}_{self.TABLE_NAME}_created_at
        ON {self._get_table_name(self.TABLE_NAME)}(created_at);
        """
        await self.connection_manager.execute_query(query)

    async def record(self, event: AnalyticsEvent) -> None:
        query = f"""
        INSERT INTO {self._get_table_name(self.TABLE_NAME)}
        (query, user_id, result_count, created_at)
        VALUES ($1, $2, $3, $4)
        """
        await self.connection_manager.execute_query(
            query,
            [event.query, event.user_id, event.result_count, event.timestamp],
        )

    async def popular(
        self, limit: int, window: timedelta, min_occurrences: int
    ) -> list[PopularSearch]:
        """Queries issued at least ``min_occurrences`` times within the
        trailing ``window``, most frequent first."""
        since = datetime.now(timezone.utc) - window
        query = f"""
        SELECT
            query,
            COUNT(*) AS search_count,
            AVG(result_count)::float8 AS avg_results
        FROM {self._get_table_name(self.TABLE_NAME)}
        WHERE created_at >= $1
        GROUP BY query
        HAVING COUNT(*) >= $2
        ORDER BY search_count DESC, query ASC
        LIMIT $3
        """
        rows = await self.connection_manager.fetch_query(
            query, [since, min_occurrences, limit]
        )
        return [
            PopularSearch(
                query=row["query"],
                count=int(row["search_count"]),
                avg_result_count=float(row["avg_results"] or 0.0),
            )
            for row in rows
        ]
