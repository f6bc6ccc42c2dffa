"""
Core value types shared by the planner components.

Everything here is an immutable snapshot. State that changes over time
(the ordered point list, the navigation index, the live camera) is owned by
the component that mutates it and is only ever replaced, never edited in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class LatLng:
    """A geographic position in degrees."""

    lat: float
    lng: float

    def is_finite(self) -> bool:
        return math.isfinite(self.lat) and math.isfinite(self.lng)

    def to_list(self) -> List[float]:
        return [self.lat, self.lng]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lng box."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[LatLng]) -> Optional["BoundingBox"]:
        """Smallest box containing every point, or None for an empty input."""
        south = west = math.inf
        north = east = -math.inf
        seen = False
        for point in points:
            seen = True
            south = min(south, point.lat)
            north = max(north, point.lat)
            west = min(west, point.lng)
            east = max(east, point.lng)
        if not seen:
            return None
        return cls(south, west, north, east)

    @property
    def south_west(self) -> LatLng:
        return LatLng(self.south, self.west)

    @property
    def north_east(self) -> LatLng:
        return LatLng(self.north, self.east)

    @property
    def north_west(self) -> LatLng:
        return LatLng(self.north, self.west)

    @property
    def south_east(self) -> LatLng:
        return LatLng(self.south, self.east)

    @property
    def center(self) -> LatLng:
        return LatLng((self.south + self.north) / 2.0, (self.west + self.east) / 2.0)

    def is_ordered(self) -> bool:
        values = (self.south, self.west, self.north, self.east)
        if not all(math.isfinite(v) for v in values):
            return False
        return self.south <= self.north and self.west <= self.east

    def is_valid(self) -> bool:
        """Finite, ordered, and not collapsed to a single point."""
        if not self.is_ordered():
            return False
        return self.north > self.south or self.east > self.west


class PointRole(str, Enum):
    START = 'start'
    WAYPOINT = 'waypoint'
    END = 'end'


@dataclass(frozen=True)
class Point:
    """A user-placed route point."""

    lat: float
    lng: float
    role: PointRole = PointRole.WAYPOINT
    name: Optional[str] = None

    @property
    def latlng(self) -> LatLng:
        return LatLng(self.lat, self.lng)

    def with_role(self, role: PointRole) -> "Point":
        return replace(self, role=role)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'lat': self.lat, 'lng': self.lng, 'role': self.role.value}
        if self.name:
            data['name'] = self.name
        return data


@dataclass(frozen=True)
class Camera:
    """Visible map state: centre, zoom and bearing (degrees, clockwise from north)."""

    center: LatLng
    zoom: float
    bearing: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'center': self.center.to_list(),
            'zoom': self.zoom,
            'bearing': self.bearing,
        }


@dataclass(frozen=True)
class Instruction:
    text: str
    distance_m: float
    coordinate_range: Tuple[int, int]
    is_overview: bool = False


@dataclass(frozen=True)
class Segment:
    """Sub-polyline covered by one real instruction."""

    coordinates: Tuple[LatLng, ...]
    bounding_box: BoundingBox
    instruction_index: int
    coordinate_range: Tuple[int, int]

    @property
    def first(self) -> LatLng:
        return self.coordinates[0]

    @property
    def last(self) -> LatLng:
        return self.coordinates[-1]


@dataclass(frozen=True)
class RouteGeometry:
    """Routed polyline as (lng, lat, elevation) triples plus its totals."""

    coordinates: Tuple[Tuple[float, float, float], ...]
    distance_m: float
    ascent_m: float = 0.0
    descent_m: float = 0.0

    @property
    def latlngs(self) -> List[LatLng]:
        return [LatLng(lat, lng) for lng, lat, _ in self.coordinates]

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        return BoundingBox.from_points(self.latlngs)


@dataclass(frozen=True)
class RouteModel:
    """Everything derived from one routing response."""

    segments: Tuple[Segment, ...] = ()
    instructions: Tuple[Instruction, ...] = ()
    optimal_zoom: float = 15.0
    geometry: Optional[RouteGeometry] = None

    @property
    def is_empty(self) -> bool:
        return not self.instructions

    @property
    def step_count(self) -> int:
        """Number of real (non-overview) instructions."""
        return max(0, len(self.instructions) - 1)

    def segment_for_step(self, index: int) -> Optional[Segment]:
        """Segment drawn for ``instructions[index]``; None for the overview or a skipped slice."""
        for segment in self.segments:
            if segment.instruction_index == index:
                return segment
        return None


@dataclass
class NavigationState:
    current_instruction_index: int = 0
    highlight_in_progress: bool = False
    user_navigated_away: bool = False


@dataclass(frozen=True)
class Connector:
    """Dashed line from a placed point to the nearest spot on the route."""

    point: Point
    route_point: LatLng
    distance_m: float


@dataclass(frozen=True)
class Highlight:
    """What the route overlay and the elevation chart currently emphasise."""

    segment: Optional[Segment] = None
    elevation_range: Optional[Tuple[int, int]] = None
