"""Debounced scheduling on the running asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Run a coroutine once a burst of triggers has been quiet for ``delay_ms``.

    Each ``trigger()`` restarts the wait. Runs never overlap: a run fired
    while the previous one is still executing starts after it finishes.
    """

    def __init__(self, action: Callable[[], Awaitable[None]], delay_ms: float):
        self.action = action
        self.delay_ms = delay_ms
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        """True while a trigger is waiting out its quiet period."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        """Restart the quiet period. Must be called with a running event loop."""
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay_ms / 1000.0, self._fire)

    def cancel(self) -> None:
        """Drop a pending trigger. A run already executing is left alone."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Fire a pending trigger now and wait for the resulting run."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()
        if self._task is not None and not self._task.done():
            await self._task

    def _fire(self) -> None:
        self._handle = None
        previous = self._task
        self._task = asyncio.ensure_future(self._run_after(previous))

    async def _run_after(self, previous: Optional[asyncio.Task]) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        logger.debug("Debounced action firing")
        await self.action()


__all__ = ['Debouncer']
