import logging
import os
from typing import Optional

from folio.base.providers import (
    DatabaseConfig,
    DatabaseProvider,
    PostgresConfigurationSettings,
)

from .analytics import PostgresSearchAnalyticsHandler
from .base import PostgresConnectionManager, SemaphoreConnectionPool
from .catalog import PostgresCatalogSearchHandler

logger = logging.getLogger()


class PostgresDatabaseProvider(DatabaseProvider):
    # Folio configuration settings
    config: DatabaseConfig
    project_name: str

    # Postgres connection settings
    user: str
    password: str
    host: str
    port: int
    db_name: str
    connection_string: str

    postgres_configuration_settings: PostgresConfigurationSettings
    pool: Optional[SemaphoreConnectionPool]

    connection_manager: PostgresConnectionManager
    catalog_handler: PostgresCatalogSearchHandler
    analytics_handler: PostgresSearchAnalyticsHandler

    def __init__(self, config: DatabaseConfig, *args, **kwargs):
        super().__init__(config)

        env_vars = [
            ("user", "FOLIO_POSTGRES_USER"),
            ("password", "FOLIO_POSTGRES_PASSWORD"),
            ("host", "FOLIO_POSTGRES_HOST"),
            ("port", "FOLIO_POSTGRES_PORT"),
            ("db_name", "FOLIO_POSTGRES_DBNAME"),
        ]

        for attr, env_var in env_vars:
            if value := (getattr(config, attr) or os.getenv(env_var)):
                setattr(self, attr, value)
            else:
                raise ValueError(
                    f"Error, please set a valid {env_var} environment variable or set a '{attr}' in the 'database' settings of your `folio.toml`."
                )

        self.port = int(self.port)

        self.project_name = (
            config.project_name
            or config.app.project_name
            or os.getenv("FOLIO_PROJECT_NAME")
            or "public"
        )

        if self.host.startswith("/"):
            self.connection_string = f"postgresql://{self.user}:{self.password}@/{self.db_name}?host={self.host}"
            logger.info("Connecting to Postgres via Unix socket")
        else:
            self.connection_string = f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"
            logger.info("Connecting to Postgres via TCP/IP")

        self.config: DatabaseConfig = config
        self.pool = None
        self.postgres_configuration_settings = (
            self._get_postgres_configuration_settings(config)
        )

        self.connection_manager = PostgresConnectionManager(
            statement_timeout=config.statement_timeout_seconds
        )
        self.catalog_handler = PostgresCatalogSearchHandler(
            project_name=self.project_name,
            connection_manager=self.connection_manager,
            similarity_threshold=config.similarity_threshold,
            author_facet_limit=config.author_facet_limit,
        )
        self.analytics_handler = PostgresSearchAnalyticsHandler(
            self.project_name, self.connection_manager
        )

    async def initialize(self):
        logger.info("Initializing `PostgresDatabaseProvider`.")
        self.pool = SemaphoreConnectionPool(
            self.connection_string, self.postgres_configuration_settings
        )
        await self.pool.initialize()
        await self.connection_manager.initialize(self.pool)

        async with self.pool.get_connection() as conn:
            await conn.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm;")

        await self.catalog_handler.create_tables()
        await self.analytics_handler.create_tables()

    def _get_postgres_configuration_settings(
        self, config: DatabaseConfig
    ) -> PostgresConfigurationSettings:
        settings = PostgresConfigurationSettings()

        env_mapping = {
            "max_connections": "FOLIO_POSTGRES_MAX_CONNECTIONS",
            "statement_cache_size": "FOLIO_POSTGRES_STATEMENT_CACHE_SIZE",
        }

        for setting, env_var in env_mapping.items():
            value = getattr(
                config.postgres_configuration_settings, setting, None
            )
            if value is None:
                value = os.getenv(env_var)

            if value is not None:
                setattr(settings, setting, int(value))

        return settings

    async def close(self):
        if self.pool:
            await self.pool.close()
