import asyncio
import logging
from typing import Any, Awaitable, Callable

from folio.base.providers import OrchestrationConfig, OrchestrationProvider

logger = logging.getLogger()


class SimpleOrchestrationProvider(OrchestrationProvider):
    """Runs submitted coroutines as tasks on the current event loop.

    At most ``max_pending_tasks`` run at once; further submissions are
    dropped. Task failures are logged and never reach the submitter.
    """

    def __init__(self, config: OrchestrationConfig):
        super().__init__(config)
        self.config = config
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(
        self, name: str, func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> bool:
        if len(self._tasks) >= self.config.max_pending_tasks:
            logger.warning(
                f"Dropping background task '{name}': {len(self._tasks)} tasks already pending."
            )
            return False

        task = asyncio.create_task(func(*args, **kwargs), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return True

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if exc := task.exception():
            logger.warning(
                f"Background task '{task.get_name()}' failed: {exc}"
            )

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
