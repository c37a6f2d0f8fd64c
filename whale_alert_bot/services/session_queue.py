"""Per-user sequential execution of bot work.

Work for one key runs strictly in submission order and never overlaps; work
for different keys runs concurrently. The map only holds keys with work in
flight: an entry is dropped as soon as its last task settles, unless a newer
task has replaced it in the meantime.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionQueue:
    """Async FIFO keyed by user id.

    Example:
        >>> results = await queue.enqueue("42", lambda: dispatcher.run(...))
    """

    def __init__(self) -> None:
        self._tails: dict[str, asyncio.Future] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tails)

    async def enqueue(self, key: str, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` after everything already queued for ``key``.

        The failure of an earlier task does not stop later ones; the caller of
        each task still receives that task's own result or exception.

        Args:
            key: Queue key, the user's Telegram id.
            task: Zero-argument coroutine function to run.

        Returns:
            Whatever ``task`` returns.
        """
        with self._lock:
            previous = self._tails.get(key)
            current = asyncio.ensure_future(self._run_after(previous, key, task))
            self._tails[key] = current
        current.add_done_callback(functools.partial(self._release, key))

        # Cancelling the caller must not cancel queued work
        return await asyncio.shield(current)

    async def _run_after(
        self, previous: asyncio.Future | None, key: str, task: Callable[[], Awaitable[T]]
    ) -> T:
        if previous is not None:
            await asyncio.wait({previous})

        logger.debug("Session queue start key=%s", key)
        return await task()

    def _release(self, key: str, future: asyncio.Future) -> None:
        with self._lock:
            if self._tails.get(key) is future:
                del self._tails[key]

        if not future.cancelled() and future.exception() is not None:
            logger.debug("Session queue task failed key=%s: %s", key, future.exception())
        logger.debug("Session queue finish key=%s", key)
