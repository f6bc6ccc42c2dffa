"""Change notifications from the planner to UI layers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


ROUTE_RECALCULATED = 'route_recalculated'
ROUTE_FAILED = 'route_failed'
INSTRUCTION_INDEX_CHANGED = 'instruction_index_changed'
HIGHLIGHT_IN_PROGRESS_CHANGED = 'highlight_in_progress_changed'
CAMERA_CHANGED = 'camera_changed'
POINTS_CHANGED = 'points_changed'

EventHandler = Callable[[str, Any], None]


class EventBus:
    """Synchronous name -> handlers dispatch. Handlers receive ``(event_name, data)``."""

    def __init__(self):
        self.event_handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unregisters it."""
        self.event_handlers.setdefault(event_name, []).append(handler)

        def unsubscribe() -> None:
            handlers = self.event_handlers.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event_name: str, data: Any = None) -> None:
        for handler in list(self.event_handlers.get(event_name, ())):
            try:
                handler(event_name, data)
            except Exception as e:
                # A broken UI subscriber must not abort a navigation transition
                logger.exception(f"Error in event handler for {event_name}: {e}")


__all__ = [
    'EventBus',
    'EventHandler',
    'ROUTE_RECALCULATED',
    'ROUTE_FAILED',
    'INSTRUCTION_INDEX_CHANGED',
    'HIGHLIGHT_IN_PROGRESS_CHANGED',
    'CAMERA_CHANGED',
    'POINTS_CHANGED',
]
