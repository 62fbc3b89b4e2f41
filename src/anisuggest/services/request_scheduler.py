"""Debounced, cancellable request scheduling.

At most one request is live at a time. Starting a new request aborts the
previous one, and every request first waits a cool-down delay so that a
burst of keystrokes results in a single fetch for the settled text.

A request that is aborted, or whose fetch raises, resolves to ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from anisuggest.shared.constants import SuggestDefaults
from anisuggest.shared.errors import AniSuggestError
from anisuggest.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestState(Enum):
    """Lifecycle of the current request."""

    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


class RequestScheduler:
    """Runs one debounced fetch at a time.

    Args:
        delay: Cool-down in seconds before a scheduled fetch is dispatched

    Example:
        >>> scheduler = RequestScheduler(delay=0.2)
        >>> data = await scheduler.run(lambda: client.search("anime", "bebop"))
        >>> data is None  # aborted by a newer run() or failed
    """

    def __init__(self, delay: float = SuggestDefaults.REQUEST_DELAY) -> None:
        self.delay = delay
        self._task: asyncio.Task | None = None
        self._state = RequestState.IDLE

    @property
    def state(self) -> RequestState:
        """State of the most recent request."""
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (RequestState.SCHEDULED, RequestState.IN_FLIGHT)

    async def run(self, fetch: Callable[[], Awaitable[T]]) -> T | None:
        """Abort the live request, wait the cool-down, then await ``fetch()``.

        Returns:
            The fetch result, or None when the request was aborted or failed
        """
        self.abort()

        task = asyncio.create_task(self._delayed(fetch))
        self._task = task
        self._state = RequestState.SCHEDULED

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        current = self._task is task
        if current:
            self._task = None

        if task.cancelled():
            logger.debug("Request aborted before completion")
            if current:
                self._state = RequestState.ABORTED
            return None

        error = task.exception()
        if error is not None:
            if isinstance(error, AniSuggestError):
                log_operation_error(logger, error, "scheduled_request", level=logging.WARNING)
            else:
                logger.warning("Scheduled request failed: %s", error, exc_info=error)
            if current:
                self._state = RequestState.FAILED
            return None

        if current:
            self._state = RequestState.COMPLETED
        return task.result()

    async def _delayed(self, fetch: Callable[[], Awaitable[T]]) -> T:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        if self._task is asyncio.current_task():
            self._state = RequestState.IN_FLIGHT
        return await fetch()

    def abort(self) -> bool:
        """Cancel the scheduled or in-flight request.

        Returns:
            True if a live request was cancelled
        """
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        self._state = RequestState.ABORTED
        logger.debug("Aborted pending request")
        return True


__all__ = [
    "RequestScheduler",
    "RequestState",
]
