import functools
import logging
from abc import abstractmethod
from typing import Callable

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from folio.base.abstractions import FolioException, FolioValidationError

from ...abstractions import FolioProviders, FolioServices
from ...config import FolioConfig

logger = logging.getLogger()


class BaseRouterV1:
    def __init__(
        self,
        providers: FolioProviders,
        services: FolioServices,
        config: FolioConfig,
    ):
        """
        :param providers: Database, cache and orchestration providers.
        :param services: Service references (search).
        """
        self.providers = providers
        self.services = services
        self.config = config
        self.router = APIRouter()

        self._setup_routes()

    def get_router(self):
        return self.router

    def base_endpoint(self, func: Callable):
        """
        A decorator to wrap endpoints in a standard pattern:
         - error handling
         - response shaping
        """

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                func_result = await func(*args, **kwargs)
                if isinstance(func_result, tuple) and len(func_result) == 2:
                    results, outer_kwargs = func_result
                else:
                    results, outer_kwargs = func_result, {}

                return {"results": results, **outer_kwargs}

            except FolioException:
                raise
            except ValidationError as e:
                raise FolioValidationError(
                    "Invalid request parameters.",
                    detail=e.errors(include_url=False, include_context=False),
                ) from e
            except Exception as e:
                logger.error(
                    f"Error in base endpoint {func.__name__}() - {str(e)}",
                    exc_info=True,
                )
                raise HTTPException(
                    status_code=500,
                    detail={
                        "message": f"An error occurred during {func.__name__}",
                        "error_type": type(e).__name__,
                    },
                ) from e

        wrapper._is_base_endpoint = True  # type: ignore
        return wrapper

    @abstractmethod
    def _setup_routes(self):
        """Subclasses override this to define actual endpoints."""
        pass
