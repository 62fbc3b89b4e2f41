"""Named one-shot alarms on the running asyncio loop.

Each alarm is identified by the cache key it expires. Creating an alarm
with an existing name replaces it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Union

logger = logging.getLogger(__name__)

AlarmCallback = Callable[[str], Union[Awaitable[None], None]]


class AlarmScheduler:
    """Fires ``callback(name)`` once at an absolute time.

    The callback may be a plain function or a coroutine function; coroutine
    callbacks are run as tasks on the loop.

    Args:
        callback: Called with the alarm name when it fires
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        callback: AlarmCallback,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.callback = callback
        self.clock = clock
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def create(self, name: str, when: float) -> None:
        """Schedule ``name`` to fire at ``when`` (epoch seconds).

        Must be called from a coroutine or callback on the running loop.
        """
        self.clear(name)
        loop = asyncio.get_running_loop()
        delay = max(0.0, when - self.clock())
        self._handles[name] = loop.call_later(delay, self._fire, name)
        logger.debug("Alarm %r armed in %.1fs", name, delay)

    def clear(self, name: str) -> bool:
        """Cancel an alarm. Returns False when no such alarm was pending."""
        handle = self._handles.pop(name, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def clear_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def pending(self) -> list[str]:
        return list(self._handles)

    def _fire(self, name: str) -> None:
        self._handles.pop(name, None)
        logger.debug("Alarm %r fired", name)
        try:
            result = self.callback(name)
        except Exception:
            logger.exception("Alarm callback failed for %r", name)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Alarm callback failed", exc_info=task.exception())


__all__ = [
    "AlarmCallback",
    "AlarmScheduler",
]
