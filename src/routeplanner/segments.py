"""
Route segment model.

Turns one routing response into the immutable ``RouteModel`` the navigation
layer steps through: a synthetic overview instruction followed by the real
instructions, one segment per usable instruction slice, and a single zoom
level that frames the longest segment so every step uses the same zoom.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

from . import projection
from .geometry import bounding_box_diagonal, closest_point_on_line, distance
from .models import (
    BoundingBox,
    Connector,
    Instruction,
    LatLng,
    Point,
    RouteGeometry,
    RouteModel,
    Segment,
)
from .schemas import RoutePath, parse_route_response

logger = logging.getLogger(__name__)


OVERVIEW_TEXT = 'Go'
DEFAULT_ZOOM = 15.0
SEGMENT_PADDING_PX = 20
SEGMENT_MAX_ZOOM = 19.0
CONNECTOR_THRESHOLD_M = 5.0


def elevation_gain(elevations: Sequence[float]) -> Tuple[float, float]:
    """Total ascent and descent in metres along a sequence of elevations."""
    ascent = 0.0
    descent = 0.0
    for previous, current in zip(elevations, elevations[1:]):
        delta = current - previous
        if delta > 0:
            ascent += delta
        else:
            descent -= delta
    return ascent, descent


def elevation_profile(geometry: RouteGeometry) -> List[Tuple[float, float]]:
    """(cumulative distance in km, elevation in m) for every route coordinate."""
    profile: List[Tuple[float, float]] = []
    travelled = 0.0
    previous: Optional[LatLng] = None
    for lng, lat, ele in geometry.coordinates:
        here = LatLng(lat, lng)
        if previous is not None:
            travelled += distance(previous, here)
        profile.append((travelled / 1000.0, ele))
        previous = here
    return profile


def _route_geometry(path: RoutePath) -> RouteGeometry:
    coordinates = tuple(
        (c[0], c[1], c[2] if len(c) > 2 else 0.0) for c in path.points.coordinates
    )
    ascent, descent = path.ascend, path.descend
    if ascent is None or descent is None:
        computed_ascent, computed_descent = elevation_gain([c[2] for c in coordinates])
        ascent = computed_ascent if ascent is None else ascent
        descent = computed_descent if descent is None else descent
    return RouteGeometry(coordinates, path.distance, ascent, descent)


def clamp_interval(interval: Sequence[int], coordinate_count: int) -> Tuple[int, int]:
    """Clamp an instruction interval into the coordinate array, keeping start <= end."""
    last = coordinate_count - 1
    start = max(0, min(last, interval[0]))
    end = max(start, min(last, interval[1]))
    return start, end


def fit_segment_zoom(
    box: Optional[BoundingBox],
    viewport_size: Sequence[float],
    padding_px: float = SEGMENT_PADDING_PX,
    max_zoom: float = SEGMENT_MAX_ZOOM,
    default_zoom: float = DEFAULT_ZOOM,
) -> float:
    """Zoom that fits ``box`` with a fixed pixel padding, or ``default_zoom``."""
    if box is None:
        return default_zoom
    fitted = projection.fit_bounds(box, viewport_size, (padding_px, padding_px), max_zoom=max_zoom)
    if fitted is None:
        return default_zoom
    return fitted[1]


def build_segments(
    route_response: Any,
    viewport_size: Sequence[float] = (500, 500),
    padding_px: float = SEGMENT_PADDING_PX,
    max_zoom: float = SEGMENT_MAX_ZOOM,
    default_zoom: float = DEFAULT_ZOOM,
) -> RouteModel:
    """
    Build the segment/instruction model from a routing response.

    Args:
        route_response: Raw response dict or a validated ``RouteResponse``.
        viewport_size: (width, height) in pixels, used for the optimal zoom.
        padding_px: Fixed padding around the longest segment.
        max_zoom: Upper bound for the optimal zoom.
        default_zoom: Zoom used when no segment can be framed.

    Returns:
        RouteModel; empty (no instructions, no segments) when the response has
        no usable path.
    """
    response = parse_route_response(route_response)
    if response is None or not response.paths:
        logger.warning("Routing response has no paths")
        return RouteModel(optimal_zoom=default_zoom)

    path = response.paths[0]
    geometry = _route_geometry(path)
    count = len(geometry.coordinates)
    if count == 0:
        logger.warning("Routing response path has no coordinates")
        return RouteModel(optimal_zoom=default_zoom)

    latlngs = geometry.latlngs
    total = sum(step.distance for step in path.instructions) if path.instructions else path.distance

    instructions: List[Instruction] = [
        Instruction(OVERVIEW_TEXT, total, (0, count - 1), is_overview=True),
    ]
    segments: List[Segment] = []
    longest: Optional[Segment] = None
    longest_diagonal = -1.0

    for index, step in enumerate(path.instructions, start=1):
        interval = clamp_interval(step.interval, count)
        instructions.append(Instruction(step.text, step.distance, interval))

        start, end = interval
        line = tuple(latlngs[start:end + 1])
        if len(line) < 2:
            logger.debug(f"Skipping instruction {index} ({step.text!r}): {len(line)} coordinate(s)")
            continue

        box = BoundingBox.from_points(line)
        segment = Segment(line, box, index, interval)
        segments.append(segment)

        diagonal = bounding_box_diagonal(box)
        if diagonal > longest_diagonal:
            longest_diagonal = diagonal
            longest = segment

    optimal_zoom = fit_segment_zoom(
        longest.bounding_box if longest is not None else None,
        viewport_size,
        padding_px=padding_px,
        max_zoom=max_zoom,
        default_zoom=default_zoom,
    )

    logger.info(
        f"Built route model: {len(instructions) - 1} instructions, "
        f"{len(segments)} segments, optimal zoom {optimal_zoom:.2f}"
    )
    return RouteModel(tuple(segments), tuple(instructions), optimal_zoom, geometry)


def route_connectors(
    points: Sequence[Point],
    route_line: Sequence[LatLng],
    threshold_m: float = CONNECTOR_THRESHOLD_M,
) -> List[Connector]:
    """Connectors from placed points to the routed line, for points farther than ``threshold_m``."""
    connectors = []
    for point in points:
        closest, gap = closest_point_on_line(point.latlng, route_line)
        if closest is not None and gap > threshold_m:
            connectors.append(Connector(point, closest, gap))
    return connectors


__all__ = [
    'build_segments',
    'clamp_interval',
    'elevation_gain',
    'elevation_profile',
    'fit_segment_zoom',
    'route_connectors',
    'DEFAULT_ZOOM',
]
