"""Domain-specific errors and helpers for the route planning engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ErrorPayload:
    """Structured error payload handed to UI layers."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'success': False,
            'error_code': self.code,
            'error': self.message,
        }
        if self.details:
            payload['details'] = self.details
        return payload


class RoutePlannerError(Exception):
    """Base exception for route planning failures."""

    code: str = 'ROUTEPLANNER_ERROR'

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return ErrorPayload(self.code, self.message, self.details or None).to_dict()


class ValidationFailure(RoutePlannerError):
    code = 'VALIDATION_ERROR'


class RoutingServiceError(RoutePlannerError):
    """Transport or HTTP failure talking to the routing collaborator."""

    code = 'ROUTING_SERVICE_ERROR'


class RouteCalculationError(RoutePlannerError):
    """The single reportable error raised when a route cannot be recalculated."""

    code = 'ROUTE_CALCULATION_FAILED'


class WaypointLimitReached(RoutePlannerError):
    code = 'WAYPOINT_LIMIT_REACHED'


class MarkersLocked(RoutePlannerError):
    code = 'MARKERS_LOCKED'


def error_response(code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a standardised error payload."""
    return ErrorPayload(code, message, details).to_dict()


__all__ = [
    'ErrorPayload',
    'RoutePlannerError',
    'ValidationFailure',
    'RoutingServiceError',
    'RouteCalculationError',
    'WaypointLimitReached',
    'MarkersLocked',
    'error_response',
]
