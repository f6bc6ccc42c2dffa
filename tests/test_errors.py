from __future__ import annotations

import pytest

from routeplanner.errors import (
    MarkersLocked,
    RouteCalculationError,
    RoutePlannerError,
    RoutingServiceError,
    ValidationFailure,
    WaypointLimitReached,
    error_response,
)


@pytest.mark.parametrize(
    "error_cls, code",
    [
        (ValidationFailure, 'VALIDATION_ERROR'),
        (RoutingServiceError, 'ROUTING_SERVICE_ERROR'),
        (RouteCalculationError, 'ROUTE_CALCULATION_FAILED'),
        (WaypointLimitReached, 'WAYPOINT_LIMIT_REACHED'),
        (MarkersLocked, 'MARKERS_LOCKED'),
    ],
)
def test_error_codes(error_cls, code):
    error = error_cls("something went wrong")
    assert isinstance(error, RoutePlannerError)
    assert error.to_payload() == {
        'success': False,
        'error_code': code,
        'error': 'something went wrong',
    }


def test_payload_includes_details():
    error = RoutingServiceError("HTTP 502", details={'status': 502})
    assert error.to_payload()['details'] == {'status': 502}
    assert str(error) == "HTTP 502"


def test_error_response_helper():
    assert error_response('X', 'bad', details={'a': 1}) == {
        'success': False,
        'error_code': 'X',
        'error': 'bad',
        'details': {'a': 1},
    }
