from .abstractions import FolioProviders, FolioServices
from .api.v1.base_router import BaseRouterV1
from .api.v1.search_router import SearchRouter
from .api.v1.system_router import SystemRouter
from .app import FolioApp
from .assembly import FolioBuilder, FolioConfig, FolioProviderFactory
from .services import CachedOperation, SearchService, Service

__all__ = [
    "FolioProviders",
    "FolioServices",
    # Routers
    "BaseRouterV1",
    "SearchRouter",
    "SystemRouter",
    # App
    "FolioApp",
    # Assembly
    "FolioBuilder",
    "FolioConfig",
    "FolioProviderFactory",
    # Services
    "CachedOperation",
    "SearchService",
    "Service",
]
