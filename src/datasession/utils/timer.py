"""Cancellable one-shot timers on the running event loop."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable

from loguru import logger

__all__ = ["Timer"]


class Timer:
    """Runs a callback once after a delay unless cancelled first.

    Starting a timer that is already pending replaces the pending callback.
    """

    def __init__(self, name: str) -> None:
        """Initialize the timer.

        Args:
            name: Label used in logs and as task name.
        """
        self.name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        """Whether a callback is scheduled and has not finished yet."""
        return self._task is not None and not self._task.done()

    def start(
        self, delay: float, callback: Callable[[], Awaitable[None] | None]
    ) -> None:
        """Schedule ``callback`` after ``delay`` seconds, replacing a pending one."""
        self.cancel()
        self._task = asyncio.create_task(
            self._run(delay, callback), name=f"timer:{self.name}"
        )

    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            # Called from synchronous code outside the event loop
            current = None
        if task is current:
            return
        task.cancel()
        self._task = None
        logger.debug("Timer cancelled", timer=self.name)

    async def wait(self) -> None:
        """Wait until the pending callback ran or was cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _run(
        self, delay: float, callback: Callable[[], Awaitable[None] | None]
    ) -> None:
        await asyncio.sleep(delay)
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Timer callback failed", timer=self.name)
