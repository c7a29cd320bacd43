"""
Latest-request-wins task scheduling.

Background requests are keyed by the context they belong to (usually a
participant id). Submitting a new request for a key cancels the pending one
for that key, and a result is only delivered if its task is still the latest
for its key, so a slow stale reply can never overwrite a fresh one.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..logging_config import get_logger

T = TypeVar("T")

# Module-level logger
logger = get_logger("latest_wins")


class LatestWinsScheduler:
    """Per-key registry of cancelable background tasks."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def submit(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None] | None = None,
    ) -> "asyncio.Task[T | None]":
        """
        Start ``factory()`` in the background for ``key``.

        Must be called from a running event loop. Returns immediately.

        Args:
            key: Context the request belongs to
            factory: Zero-argument callable producing the awaitable to run
            on_result: Called with the result if this is still the latest task for the key
        """
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            logger.debug(f"Superseding pending request for {key}")
            previous.cancel()

        task = asyncio.get_running_loop().create_task(self._run(key, factory, on_result))
        self._tasks[key] = task
        task.add_done_callback(lambda finished: self._forget(key, finished))
        return task

    async def _run(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        on_result: Callable[[T], None] | None,
    ) -> T | None:
        try:
            result = await factory()
        except Exception as e:
            logger.warning(f"Background request for {key} failed: {type(e).__name__}: {e}")
            return None

        if self._tasks.get(key) is not asyncio.current_task():
            logger.debug(f"Discarding stale result for {key}")
            return result

        if on_result is not None:
            try:
                on_result(result)
            except Exception as e:
                logger.warning(f"Result handler for {key} failed: {type(e).__name__}: {e}")
        return result

    def _forget(self, key: str, finished: "asyncio.Task[Any]") -> None:
        if self._tasks.get(key) is finished:
            del self._tasks[key]

    def pending(self, key: str) -> bool:
        """Whether a request for ``key`` is still running."""
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def cancel(self, key: str) -> bool:
        """Cancel the pending request for ``key``; returns whether one was running."""
        task = self._tasks.get(key)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        for task in list(self._tasks.values()):
            task.cancel()

    async def wait_idle(self) -> None:
        """Wait until no request for any key is pending."""
        while True:
            running = [task for task in self._tasks.values() if not task.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)
