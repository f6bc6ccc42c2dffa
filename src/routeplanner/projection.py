"""
Spherical Web Mercator helpers.

Pixel coordinates follow the slippy-map convention: 256 px tiles, origin at
the north-west corner of the world, y growing southwards.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from .models import BoundingBox, LatLng


TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798


def scale(zoom: float) -> float:
    return TILE_SIZE * math.pow(2.0, zoom)


def project(latlng: LatLng, zoom: float) -> Tuple[float, float]:
    """LatLng -> world pixel coordinates at ``zoom``."""
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, latlng.lat))
    sin_lat = math.sin(math.radians(lat))

    x = (latlng.lng + 180.0) / 360.0
    y = 0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)

    s = scale(zoom)
    return x * s, y * s


def unproject(point: Sequence[float], zoom: float) -> LatLng:
    """World pixel coordinates at ``zoom`` -> LatLng."""
    s = scale(zoom)
    x = point[0] / s
    y = point[1] / s

    lng = x * 360.0 - 180.0
    lat = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * y))))
    return LatLng(lat, lng)


def fit_bounds(
    box: BoundingBox,
    viewport_size: Sequence[float],
    padding: Sequence[float] = (0, 0),
    min_zoom: float = 0.0,
    max_zoom: float = 18.0,
    zoom_snap: float = 0.0,
) -> Optional[Tuple[LatLng, float]]:
    """
    Centre and zoom that fit ``box`` inside the viewport.

    Args:
        box: Area to frame.
        viewport_size: (width, height) in pixels.
        padding: (vertical, horizontal) pixels kept free on each side.
        min_zoom: Lower zoom clamp.
        max_zoom: Upper zoom clamp.
        zoom_snap: Round the zoom down to a multiple of this step (0 disables).

    Returns:
        (center, zoom) or None when the box is invalid or the padded viewport
        has no room left.
    """
    if not box.is_valid():
        return None

    width, height = viewport_size
    pad_v, pad_h = padding
    available_w = width - 2 * pad_h
    available_h = height - 2 * pad_v
    if available_w <= 0 or available_h <= 0:
        return None

    west_x, north_y = project(box.north_west, 0)
    east_x, south_y = project(box.south_east, 0)
    dx = abs(east_x - west_x)
    dy = abs(south_y - north_y)

    ratios = []
    if dx > 0:
        ratios.append(available_w / dx)
    if dy > 0:
        ratios.append(available_h / dy)
    if not ratios:
        # Both corners clamp to the same pixel beyond the mercator latitude limit
        return None
    zoom = math.log2(min(ratios))

    if zoom_snap > 0:
        zoom = math.floor(zoom / zoom_snap) * zoom_snap
    zoom = max(min_zoom, min(max_zoom, zoom))

    center = unproject(((west_x + east_x) / 2.0, (north_y + south_y) / 2.0), 0)
    return center, zoom


__all__ = ['TILE_SIZE', 'scale', 'project', 'unproject', 'fit_bounds']
