from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from folio.base import FolioException

from .abstractions import FolioProviders, FolioServices
from .config import FolioConfig


def folio_exception_response(exc: FolioException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            {
                "message": exc.message,
                "error_type": type(exc).__name__,
                "detail": exc.detail,
            }
        ),
    )


class FolioApp:
    def __init__(
        self,
        config: FolioConfig,
        providers: FolioProviders,
        services: FolioServices,
        search_router: APIRouter,
        system_router: APIRouter,
    ):
        self.config = config
        self.providers = providers
        self.services = services
        self.search_router = search_router
        self.system_router = system_router

        self.app = FastAPI()

        @self.app.exception_handler(FolioException)
        async def folio_exception_handler(
            request: Request, exc: FolioException
        ):
            return folio_exception_response(exc)

        self._setup_routes()
        self._apply_cors()

    def _setup_routes(self):
        self.app.include_router(self.search_router, prefix="/v1")
        self.app.include_router(self.system_router, prefix="/v1")

        @self.app.get("/openapi_spec", include_in_schema=False)
        async def openapi_spec():
            return get_openapi(
                title="Folio Search API",
                version="1.0.0",
                routes=self.app.routes,
            )

    def _apply_cors(self):
        origins = ["*", "http://localhost:3000", "http://localhost:7280"]
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    async def shutdown(self):
        """Waits for background analytics writes, then releases stores."""
        await self.providers.orchestration.drain()
        await self.providers.cache.close()
        await self.providers.database.close()

    async def serve(self, host: str = "0.0.0.0", port: int = 7280):
        import uvicorn

        from folio.utils.logging_config import configure_logging

        configure_logging()

        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_config=None,
        )
        server = uvicorn.Server(config)
        try:
            await server.serve()
        finally:
            await self.shutdown()
