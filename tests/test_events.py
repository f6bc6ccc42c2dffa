from __future__ import annotations

from conftest import EventRecorder
from routeplanner import events
from routeplanner.events import EventBus


def test_emit_reaches_subscribers_in_order():
    bus = EventBus()
    first = EventRecorder()
    second = EventRecorder()
    bus.subscribe(events.CAMERA_CHANGED, first)
    bus.subscribe(events.CAMERA_CHANGED, second)

    bus.emit(events.CAMERA_CHANGED, {'zoom': 3})
    bus.emit(events.POINTS_CHANGED, {'source': 'append'})

    assert first.events == [(events.CAMERA_CHANGED, {'zoom': 3})]
    assert second.events == first.events


def test_unsubscribe():
    bus = EventBus()
    recorder = EventRecorder()
    unsubscribe = bus.subscribe(events.ROUTE_FAILED, recorder)

    unsubscribe()
    unsubscribe()
    bus.emit(events.ROUTE_FAILED, {})

    assert recorder.events == []


def test_failing_handler_does_not_stop_dispatch(caplog):
    bus = EventBus()
    recorder = EventRecorder()

    def broken(name, data):
        raise ValueError("bad subscriber")

    bus.subscribe(events.INSTRUCTION_INDEX_CHANGED, broken)
    bus.subscribe(events.INSTRUCTION_INDEX_CHANGED, recorder)

    bus.emit(events.INSTRUCTION_INDEX_CHANGED, {'index': 1})

    assert recorder.named(events.INSTRUCTION_INDEX_CHANGED) == [{'index': 1}]
    assert "bad subscriber" in caplog.text
