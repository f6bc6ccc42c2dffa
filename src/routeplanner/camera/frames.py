"""
Frame clocks drive the animator loop.

``next_frame()`` suspends until the next frame and returns the frame
timestamp in milliseconds. The real clock paces frames with ``asyncio.sleep``;
the fixed-step clock advances a virtual time so transitions are reproducible.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol


class FrameClock(Protocol):
    def now(self) -> float:
        ...

    async def next_frame(self) -> float:
        ...


class AsyncioFrameClock:
    """Wall-clock frames at roughly ``fps`` per second."""

    def __init__(self, fps: float = 60.0):
        self.fps = fps

    def now(self) -> float:
        return time.monotonic() * 1000.0

    async def next_frame(self) -> float:
        await asyncio.sleep(1.0 / self.fps)
        return self.now()


class FixedStepFrameClock:
    """Virtual clock that moves exactly ``1000 / fps`` ms per frame."""

    def __init__(self, fps: float = 60.0, start_ms: float = 0.0):
        self.fps = fps
        self.step_ms = 1000.0 / fps
        self._now = start_ms
        self.frames = 0

    def now(self) -> float:
        return self._now

    async def next_frame(self) -> float:
        # Yield so other tasks (e.g. a competing transition) can interleave
        await asyncio.sleep(0)
        self._now += self.step_ms
        self.frames += 1
        return self._now


__all__ = ['FrameClock', 'AsyncioFrameClock', 'FixedStepFrameClock']
