from __future__ import annotations

import pytest

from routeplanner import projection
from routeplanner.models import BoundingBox, LatLng


def _pixel_extent(box: BoundingBox, zoom: float):
    west_x, north_y = projection.project(box.north_west, zoom)
    east_x, south_y = projection.project(box.south_east, zoom)
    return east_x - west_x, south_y - north_y


def test_project_origin_is_world_centre():
    assert projection.project(LatLng(0, 0), 0) == pytest.approx((128, 128))
    assert projection.project(LatLng(0, 0), 1) == pytest.approx((256, 256))


def test_unproject_inverts_project():
    latlng = LatLng(52.52, 13.40)
    back = projection.unproject(projection.project(latlng, 12), 12)
    assert back.lat == pytest.approx(latlng.lat)
    assert back.lng == pytest.approx(latlng.lng)


def test_fit_bounds_fills_the_limiting_axis():
    box = BoundingBox(-10, -10, 10, 10)
    center, zoom = projection.fit_bounds(box, (512, 512))

    width, height = _pixel_extent(box, zoom)
    # Mercator stretches latitude, so height is the limiting axis
    assert height == pytest.approx(512)
    assert width < 512
    assert center.lat == pytest.approx(0, abs=1e-9)
    assert center.lng == pytest.approx(0, abs=1e-9)


def test_fit_bounds_respects_padding():
    box = BoundingBox(0, 0, 0, 10)
    _, zoom = projection.fit_bounds(box, (500, 500), padding=(20, 50))
    width, _ = _pixel_extent(box, zoom)
    assert width == pytest.approx(400)


def test_fit_bounds_clamps_and_snaps_zoom():
    tiny = BoundingBox(0, 0, 0.0001, 0.0001)
    _, zoom = projection.fit_bounds(tiny, (500, 500), max_zoom=18)
    assert zoom == 18

    box = BoundingBox(-10, -10, 10, 10)
    _, zoom = projection.fit_bounds(box, (512, 512), zoom_snap=1)
    assert zoom == 5

    world = BoundingBox(-80, -180, 80, 180)
    _, zoom = projection.fit_bounds(world, (100, 100), min_zoom=2)
    assert zoom == 2


@pytest.mark.parametrize(
    "box, viewport, padding",
    [
        (BoundingBox(1, 1, 1, 1), (500, 500), (0, 0)),
        (BoundingBox(1, 0, 0, 1), (500, 500), (0, 0)),
        (BoundingBox(0, 0, 1, 1), (500, 500), (250, 0)),
        (BoundingBox(0, 0, 1, 1), (40, 500), (0, 20)),
        (BoundingBox(86, 0, 89, 0), (500, 500), (0, 0)),
    ],
)
def test_fit_bounds_returns_none_when_nothing_fits(box, viewport, padding):
    assert projection.fit_bounds(box, viewport, padding) is None
