"""
Geometry kernel for route planning.

Pure, stateless helpers: great-circle distance, clamped point-to-segment
projection, forward azimuth, bounding boxes and the padding tiers used when
framing them. Coordinates are WGS84 degrees throughout.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from . import projection
from .models import BoundingBox, LatLng


EARTH_RADIUS_M = 6371000.0

# (upper bound of bounding-box diagonal in metres, padding share of the viewport)
PADDING_TIERS: Tuple[Tuple[float, float], ...] = (
    (50.0, 0.015),
    (200.0, 0.02),
    (500.0, 0.03),
    (1000.0, 0.04),
)
LONG_SEGMENT_PADDING = 0.05


def distance(a: LatLng, b: LatLng) -> float:
    """Haversine great-circle distance in metres."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))


def project_onto_segment(p: LatLng, v: LatLng, w: LatLng) -> LatLng:
    """
    Closest point to ``p`` on segment ``[v, w]``.

    The projection is done in Web Mercator plane coordinates, the same plane
    the map draws in. Returns ``v`` or ``w`` exactly when the projection falls
    outside the segment, and ``v`` when the segment has zero length.
    """
    px, py = projection.project(p, 0)
    vx, vy = projection.project(v, 0)
    wx, wy = projection.project(w, 0)

    l2 = (vx - wx) ** 2 + (vy - wy) ** 2
    if l2 == 0:
        return v

    t = ((px - vx) * (wx - vx) + (py - vy) * (wy - vy)) / l2
    if t <= 0:
        return v
    if t >= 1:
        return w

    return projection.unproject((vx + t * (wx - vx), vy + t * (wy - vy)), 0)


def bearing(a: LatLng, b: LatLng) -> float:
    """Forward azimuth from ``a`` to ``b`` in degrees, 0 = north, clockwise."""
    start_lat = math.radians(a.lat)
    end_lat = math.radians(b.lat)
    d_lng = math.radians(b.lng - a.lng)

    y = math.sin(d_lng) * math.cos(end_lat)
    x = math.cos(start_lat) * math.sin(end_lat) - math.sin(start_lat) * math.cos(end_lat) * math.cos(d_lng)

    return normalize_bearing(math.degrees(math.atan2(y, x)))


def vertical_alignment_angle(a: LatLng, b: LatLng) -> float:
    """Map rotation that makes the segment ``a -> b`` point up the screen."""
    return (360.0 - bearing(a, b)) % 360.0


def normalize_bearing(angle: float) -> float:
    """Wrap any angle into [0, 360)."""
    wrapped = angle % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def shortest_arc(start: float, target: float) -> float:
    """Signed rotation in (-180, 180] taking ``start`` to ``target``."""
    delta = ((target - start + 540.0) % 360.0) - 180.0
    return 180.0 if delta == -180.0 else delta


def bounding_box_diagonal(box: Optional[BoundingBox]) -> float:
    """South-west to north-east distance in metres; 0 for a missing or broken box."""
    if box is None or not box.is_ordered():
        return 0.0
    return distance(box.south_west, box.north_east)


def padding_ratio(segment_length_m: float) -> float:
    """Share of the viewport kept free around a box of the given diagonal."""
    for upper_bound, ratio in PADDING_TIERS:
        if segment_length_m < upper_bound:
            return ratio
    return LONG_SEGMENT_PADDING


def dynamic_padding(segment_length_m: float, viewport_size: Sequence[float]) -> Tuple[int, int]:
    """[vertical, horizontal] padding in pixels for the segment length tier."""
    width, height = viewport_size
    ratio = padding_ratio(segment_length_m)
    return round(height * ratio), round(width * ratio)


def closest_point_on_line(p: LatLng, line: Sequence[LatLng]) -> Tuple[Optional[LatLng], float]:
    """Closest point of a polyline to ``p`` and its distance in metres."""
    if not line:
        return None, math.inf
    if len(line) == 1:
        return line[0], distance(p, line[0])

    best_point: Optional[LatLng] = None
    best_distance = math.inf
    for start, end in zip(line, line[1:]):
        candidate = project_onto_segment(p, start, end)
        d = distance(p, candidate)
        if d < best_distance:
            best_distance = d
            best_point = candidate
    return best_point, best_distance


__all__ = [
    'EARTH_RADIUS_M',
    'distance',
    'project_onto_segment',
    'bearing',
    'vertical_alignment_angle',
    'normalize_bearing',
    'shortest_arc',
    'bounding_box_diagonal',
    'padding_ratio',
    'dynamic_padding',
    'closest_point_on_line',
]
