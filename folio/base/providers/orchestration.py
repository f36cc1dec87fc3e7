from abc import abstractmethod
from typing import Any, Awaitable, Callable

from .base import Provider, ProviderConfig


class OrchestrationConfig(ProviderConfig):
    provider: str = "simple"
    max_pending_tasks: int = 1_024

    def validate_config(self) -> None:
        if self.provider not in self.supported_providers:
            raise ValueError(f"Provider {self.provider} is not supported.")
        if self.max_pending_tasks < 1:
            raise ValueError("max_pending_tasks must be at least 1.")

    @property
    def supported_providers(self) -> list[str]:
        return ["simple"]


class OrchestrationProvider(Provider):
    """Dispatches work off the caller's critical path."""

    def __init__(self, config: OrchestrationConfig):
        super().__init__(config)
        self.config: OrchestrationConfig = config

    @abstractmethod
    def submit(
        self, name: str, func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> bool:
        """Schedule ``func(*args, **kwargs)`` and return immediately.

        Returns False when the task was not accepted.
        """
        pass

    @abstractmethod
    async def drain(self) -> None:
        pass
