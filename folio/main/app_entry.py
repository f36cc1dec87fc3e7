import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from folio.base import FolioException
from folio.utils.logging_config import configure_logging

from .app import folio_exception_response
from .assembly import FolioBuilder, FolioConfig

log_file = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    folio_app = await create_folio_app(config_path=config_path)

    # Copy all routes from folio_app to app
    app.router.routes = folio_app.app.routes

    yield

    # Shutdown
    await folio_app.shutdown()


async def create_folio_app(config_path: Optional[str] = None):
    config = FolioConfig.load(config_path=config_path)
    builder = FolioBuilder(config=config)
    return await builder.build()


config_path = os.getenv("FOLIO_CONFIG_PATH", None)
host = os.getenv("FOLIO_HOST", os.getenv("HOST", "0.0.0.0"))
port = int(os.getenv("FOLIO_PORT", "7280"))

logging.info(
    f"Environment FOLIO_CONFIG_PATH: {'None' if config_path is None else config_path}"
)
logging.info(
    f"Environment FOLIO_POSTGRES_HOST: {os.getenv('FOLIO_POSTGRES_HOST')}"
)
logging.info(
    f"Environment FOLIO_POSTGRES_DBNAME: {os.getenv('FOLIO_POSTGRES_DBNAME')}"
)
logging.info(f"Environment FOLIO_REDIS_URL set: {bool(os.getenv('FOLIO_REDIS_URL'))}")

# Create the FastAPI app
app = FastAPI(
    lifespan=lifespan,
    log_config=None,
)


@app.exception_handler(FolioException)
async def folio_exception_handler(request: Request, exc: FolioException):
    return folio_exception_response(exc)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def main():
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
