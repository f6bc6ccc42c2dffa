"""Pytest configuration: import the package from src/ and share routing fakes."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

_SRC_ROOT = Path(__file__).resolve().parent.parent / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

from routeplanner.config import PlannerConfig  # noqa: E402
from routeplanner.models import Segment  # noqa: E402


def line_route(
    start: Tuple[float, float],
    end: Tuple[float, float],
    steps: int = 3,
    elevations: Optional[Sequence[float]] = None,
    arrive: bool = True,
    **path_fields: Any,
) -> Dict[str, Any]:
    """
    GraphHopper-shaped response for a straight line split into ``steps`` instructions.

    ``start``/``end`` are (lat, lng). Each instruction covers one coordinate
    interval; a final zero-length "Arrive" instruction mimics the real service.
    """
    (lat0, lng0), (lat1, lng1) = start, end
    coordinates = []
    for i in range(steps + 1):
        t = i / steps
        ele = elevations[i] if elevations is not None else 0.0
        coordinates.append([lng0 + (lng1 - lng0) * t, lat0 + (lat1 - lat0) * t, ele])

    instructions = [
        {'text': f'Continue {i + 1}', 'distance': 100.0 * (i + 1), 'interval': [i, i + 1]}
        for i in range(steps)
    ]
    if arrive:
        instructions.append({'text': 'Arrive at destination', 'distance': 0.0, 'interval': [steps, steps]})

    path: Dict[str, Any] = {
        'points': {'type': 'LineString', 'coordinates': coordinates},
        'instructions': instructions,
        'distance': sum(step['distance'] for step in instructions),
    }
    path.update(path_fields)
    return {'paths': [path]}


class FakeRoutingClient:
    """Routing collaborator double that records requests."""

    def __init__(self, responses: Optional[List[Any]] = None, error: Optional[Exception] = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    async def route(self, points):
        self.calls.append(tuple(points))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        if self.responses:
            return self.responses[0]
        first, last = points[0], points[-1]
        return line_route((first.lat, first.lng), (last.lat, last.lng))


class RecordingSurface:
    def __init__(self, fail_on_highlight: bool = False):
        self.calls: List[tuple] = []
        self.fail_on_highlight = fail_on_highlight

    def clear_highlights(self) -> None:
        self.calls.append(('clear',))

    def highlight_segment(self, segment: Segment) -> None:
        if self.fail_on_highlight:
            raise RuntimeError("renderer unavailable")
        self.calls.append(('segment', segment.instruction_index))

    def highlight_elevation(self, coordinate_range) -> None:
        self.calls.append(('elevation', tuple(coordinate_range)))


class EventRecorder:
    def __init__(self):
        self.events: List[tuple] = []

    def __call__(self, name: str, data: Any) -> None:
        self.events.append((name, data))

    def named(self, name: str) -> List[Any]:
        return [data for event_name, data in self.events if event_name == name]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No ROUTEPLANNER_* variables and no config file in the working directory."""
    for key in list(os.environ):
        if key.startswith('ROUTEPLANNER_'):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config(clean_env):
    return PlannerConfig(recalculate_debounce_ms=5)
