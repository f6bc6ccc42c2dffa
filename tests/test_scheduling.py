from __future__ import annotations

import asyncio

import pytest

from routeplanner.scheduling import Debouncer


class _CountingAction:
    def __init__(self, delay: float = 0.0):
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.delay = delay

    async def __call__(self):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(self.delay)
        self.active -= 1


def test_burst_of_triggers_runs_once():
    action = _CountingAction()

    async def scenario():
        debouncer = Debouncer(action, delay_ms=10)
        for _ in range(5):
            debouncer.trigger()
        assert debouncer.pending
        await asyncio.sleep(0.05)
        await debouncer.flush()
        return debouncer

    debouncer = asyncio.run(scenario())

    assert action.calls == 1
    assert not debouncer.pending
    assert not debouncer.running


def test_flush_runs_pending_trigger_immediately():
    action = _CountingAction()

    async def scenario():
        debouncer = Debouncer(action, delay_ms=60000)
        debouncer.trigger()
        await debouncer.flush()

    asyncio.run(scenario())

    assert action.calls == 1


def test_flush_without_trigger_does_nothing():
    action = _CountingAction()

    async def scenario():
        await Debouncer(action, delay_ms=10).flush()

    asyncio.run(scenario())

    assert action.calls == 0


def test_cancel_drops_pending_trigger():
    action = _CountingAction()

    async def scenario():
        debouncer = Debouncer(action, delay_ms=10)
        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.05)
        return debouncer

    debouncer = asyncio.run(scenario())

    assert action.calls == 0
    assert not debouncer.pending


def test_runs_never_overlap():
    action = _CountingAction(delay=0.02)

    async def scenario():
        debouncer = Debouncer(action, delay_ms=0)
        debouncer.trigger()
        await asyncio.sleep(0.005)
        assert debouncer.running
        debouncer.trigger()
        await debouncer.flush()
        await asyncio.sleep(0.05)
        await debouncer.flush()

    asyncio.run(scenario())

    assert action.calls == 2
    assert action.max_active == 1


def test_trigger_needs_running_loop():
    debouncer = Debouncer(_CountingAction(), delay_ms=10)
    with pytest.raises(RuntimeError):
        debouncer.trigger()
