"""Periodic background tasks on the running event loop."""

import asyncio
import contextlib
from typing import Any, Awaitable, Callable

from garage_parts.utils.logging import get_logger

logger = get_logger(__name__)


class PeriodicTask:
    """
    Runs an async callable immediately and then on a fixed interval.

    ``start`` while running and ``stop`` while stopped are no-ops.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval_seconds: float,
    ):
        self.name = name
        self.func = func
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None
        self.tick_count = 0

    @property
    def is_running(self) -> bool:
        """Whether the background loop is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Requires a running event loop."""
        if self.is_running:
            return

        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info("periodic_task_started", task=self.name, interval=self.interval_seconds)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to unwind."""
        if self._task is None:
            return

        task, self._task = self._task, None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

        logger.info("periodic_task_stopped", task=self.name, ticks=self.tick_count)

    async def _run(self) -> None:
        while True:
            try:
                await self.func()
            except Exception as e:
                # One failing tick must not end the schedule
                logger.error("periodic_task_failed", task=self.name, error=str(e))
            self.tick_count += 1
            await asyncio.sleep(self.interval_seconds)
