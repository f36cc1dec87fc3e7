import logging
from datetime import datetime, timezone

from ...abstractions import FolioProviders, FolioServices
from ...config import FolioConfig
from .base_router import BaseRouterV1


class SystemRouter(BaseRouterV1):
    def __init__(
        self,
        providers: FolioProviders,
        services: FolioServices,
        config: FolioConfig,
    ):
        logging.info("Initializing SystemRouter")
        super().__init__(providers, services, config)
        self.start_time = datetime.now(timezone.utc)

    def _setup_routes(self):
        @self.router.get("/health")
        @self.base_endpoint
        async def health_check():
            uptime = datetime.now(timezone.utc) - self.start_time
            return {
                "response": "ok",
                "uptime_seconds": uptime.total_seconds(),
                "database": self.config.database.provider,
                "cache": self.config.cache.provider,
            }
