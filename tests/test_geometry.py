from __future__ import annotations

import math

import pytest

from routeplanner import geometry
from routeplanner.models import BoundingBox, LatLng


ONE_DEGREE_M = 2 * math.pi * geometry.EARTH_RADIUS_M / 360


def test_distance_along_equator_and_meridian():
    assert geometry.distance(LatLng(0, 0), LatLng(0, 1)) == pytest.approx(ONE_DEGREE_M, rel=1e-9)
    assert geometry.distance(LatLng(0, 0), LatLng(1, 0)) == pytest.approx(ONE_DEGREE_M, rel=1e-9)


def test_distance_is_symmetric_and_zero_for_same_point():
    a = LatLng(52.52, 13.40)
    b = LatLng(48.85, 2.35)
    assert geometry.distance(a, b) == pytest.approx(geometry.distance(b, a))
    assert geometry.distance(a, a) == 0


def test_project_onto_segment_interior():
    closest = geometry.project_onto_segment(LatLng(1, 5), LatLng(0, 0), LatLng(0, 10))
    assert closest.lat == pytest.approx(0, abs=1e-9)
    assert closest.lng == pytest.approx(5)


def test_project_onto_segment_clamps_to_endpoints():
    v = LatLng(0, 0)
    w = LatLng(0, 10)
    assert geometry.project_onto_segment(LatLng(0, -3), v, w) == v
    assert geometry.project_onto_segment(LatLng(2, 12), v, w) == w


def test_project_onto_zero_length_segment_returns_start():
    v = LatLng(3, 3)
    assert geometry.project_onto_segment(LatLng(5, 5), v, LatLng(3, 3)) == v


@pytest.mark.parametrize(
    "target, expected",
    [
        (LatLng(1, 0), 0.0),
        (LatLng(0, 1), 90.0),
        (LatLng(-1, 0), 180.0),
        (LatLng(0, -1), 270.0),
    ],
)
def test_bearing_cardinal_directions(target, expected):
    assert geometry.bearing(LatLng(0, 0), target) == pytest.approx(expected)


def test_vertical_alignment_turns_segment_up_the_screen():
    assert geometry.vertical_alignment_angle(LatLng(0, 0), LatLng(1, 0)) == pytest.approx(0.0)
    # Heading east: rotate the map by -90, i.e. 270
    assert geometry.vertical_alignment_angle(LatLng(0, 0), LatLng(0, 1)) == pytest.approx(270.0)


@pytest.mark.parametrize(
    "start, target, expected",
    [
        (350, 10, 20),
        (10, 350, -20),
        (0, 90, 90),
        (90, 0, -90),
        (0, 180, 180),
        (180, 0, 180),
        (45, 45, 0),
    ],
)
def test_shortest_arc(start, target, expected):
    assert geometry.shortest_arc(start, target) == pytest.approx(expected)


@pytest.mark.parametrize("angle, expected", [(-10, 350), (370, 10), (360, 0), (-1e-15, 0)])
def test_normalize_bearing(angle, expected):
    result = geometry.normalize_bearing(angle)
    assert 0 <= result < 360
    assert result == pytest.approx(expected)


@pytest.mark.parametrize(
    "length_m, ratio",
    [
        (10, 0.015),
        (50, 0.02),
        (199, 0.02),
        (200, 0.03),
        (750, 0.04),
        (1000, 0.05),
        (25000, 0.05),
    ],
)
def test_padding_ratio_tiers(length_m, ratio):
    assert geometry.padding_ratio(length_m) == ratio


def test_dynamic_padding_is_vertical_then_horizontal():
    assert geometry.dynamic_padding(100, (400, 600)) == (12, 8)


def test_bounding_box_diagonal():
    box = BoundingBox(0, 0, 1, 0)
    assert geometry.bounding_box_diagonal(box) == pytest.approx(ONE_DEGREE_M)
    assert geometry.bounding_box_diagonal(None) == 0
    assert geometry.bounding_box_diagonal(BoundingBox(1, 0, 0, 0)) == 0
    assert geometry.bounding_box_diagonal(BoundingBox(0, 0, math.nan, 1)) == 0


@pytest.mark.parametrize(
    "box, valid",
    [
        (BoundingBox(0, 0, 1, 1), True),
        (BoundingBox(0, 0, 0, 10), True),
        (BoundingBox(0, 5, 10, 5), True),
        (BoundingBox(3, 3, 3, 3), False),
        (BoundingBox(1, 0, 0, 1), False),
        (BoundingBox(0, 1, 1, 0), False),
        (BoundingBox(0, 0, math.inf, 1), False),
        (BoundingBox(math.nan, 0, 1, 1), False),
    ],
)
def test_bounding_box_validity(box, valid):
    assert box.is_valid() is valid


def test_bounding_box_from_points():
    box = BoundingBox.from_points([LatLng(1, 5), LatLng(-2, 3), LatLng(0, 7)])
    assert box == BoundingBox(-2, 3, 1, 7)
    assert box.center == LatLng(-0.5, 5)
    assert BoundingBox.from_points([]) is None


def test_closest_point_on_line():
    line = [LatLng(0, 0), LatLng(0, 10), LatLng(5, 10)]
    point, gap = geometry.closest_point_on_line(LatLng(1, 5), line)
    assert point.lat == pytest.approx(0, abs=1e-9)
    assert point.lng == pytest.approx(5)
    assert gap == pytest.approx(ONE_DEGREE_M, rel=1e-3)


def test_closest_point_on_degenerate_lines():
    assert geometry.closest_point_on_line(LatLng(0, 0), []) == (None, math.inf)
    point, gap = geometry.closest_point_on_line(LatLng(0, 0), [LatLng(0, 1)])
    assert point == LatLng(0, 1)
    assert gap == pytest.approx(ONE_DEGREE_M)
