"""
routeplanner - route editing and navigation engine.

Waypoint ordering, a segment/instruction model built from routing output,
a navigation state machine and an animated multi-axis camera.
"""

__version__ = "0.1.0"

from .config import PlannerConfig
from .errors import (
    MarkersLocked,
    RouteCalculationError,
    RoutePlannerError,
    RoutingServiceError,
    WaypointLimitReached,
)
from .models import (
    BoundingBox,
    Camera,
    Instruction,
    LatLng,
    NavigationState,
    Point,
    PointRole,
    RouteGeometry,
    RouteModel,
    Segment,
)
from .planner import RoutePlanner

__all__ = [
    '__version__',
    'PlannerConfig',
    'RoutePlanner',
    'RoutePlannerError',
    'RouteCalculationError',
    'RoutingServiceError',
    'WaypointLimitReached',
    'MarkersLocked',
    'BoundingBox',
    'Camera',
    'Instruction',
    'LatLng',
    'NavigationState',
    'Point',
    'PointRole',
    'RouteGeometry',
    'RouteModel',
    'Segment',
]
