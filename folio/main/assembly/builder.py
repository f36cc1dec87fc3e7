import logging
from typing import Any, Type

from ..abstractions import FolioProviders, FolioServices
from ..api.v1.search_router import SearchRouter
from ..api.v1.system_router import SystemRouter
from ..app import FolioApp
from ..config import FolioConfig
from ..services.search_service import SearchService
from .factory import FolioProviderFactory

logger = logging.getLogger()


class FolioBuilder:
    def __init__(self, config: FolioConfig):
        self.config = config

    async def build(self, *args, **kwargs) -> FolioApp:
        provider_factory = FolioProviderFactory

        try:
            providers = await self._create_providers(
                provider_factory, *args, **kwargs
            )
        except Exception as e:
            logger.error(f"Error {e} while creating FolioProviders.")
            raise

        service_params = {
            "config": self.config,
            "providers": providers,
        }

        services = self._create_services(service_params)

        routers = {
            "search_router": SearchRouter(
                providers=providers,
                services=services,
                config=self.config,
            ).get_router(),
            "system_router": SystemRouter(
                providers=providers,
                services=services,
                config=self.config,
            ).get_router(),
        }

        return FolioApp(
            config=self.config,
            providers=providers,
            services=services,
            **routers,
        )

    async def _create_providers(
        self, provider_factory: Type[FolioProviderFactory], *args, **kwargs
    ) -> FolioProviders:
        factory = provider_factory(self.config)
        return await factory.create_providers(*args, **kwargs)

    def _create_services(self, service_params: dict[str, Any]) -> FolioServices:
        return FolioServices(search=SearchService(**service_params))
