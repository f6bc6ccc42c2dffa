"""Response schema definitions for the routing collaborator."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, conlist

logger = logging.getLogger(__name__)


class RoutingModel(BaseModel):
    """Base model configuration with permissive extra handling."""

    model_config = ConfigDict(extra='allow')


class RoutePoints(RoutingModel):
    # [lng, lat] or [lng, lat, elevation]
    coordinates: List[conlist(float, min_length=2, max_length=3)] = Field(default_factory=list)


class RouteInstruction(RoutingModel):
    text: str = ''
    distance: float = 0.0
    interval: conlist(int, min_length=2, max_length=2)


class RoutePath(RoutingModel):
    points: RoutePoints = Field(default_factory=RoutePoints)
    instructions: List[RouteInstruction] = Field(default_factory=list)
    distance: float = 0.0
    ascend: Optional[float] = None
    descend: Optional[float] = None


class RouteResponse(RoutingModel):
    paths: List[RoutePath] = Field(default_factory=list)


def parse_route_response(data: Any) -> Optional[RouteResponse]:
    """
    Validate a raw routing response.

    Returns None (and logs why) when the payload is not a mapping or does not
    match the expected shape; callers treat that like an empty route.
    """
    if isinstance(data, RouteResponse):
        return data
    if not isinstance(data, dict):
        logger.warning(f"Routing response is {type(data).__name__}, expected an object")
        return None
    try:
        return RouteResponse.model_validate(data)
    except ValidationError as exc:
        logger.warning(f"Malformed routing response: {exc.error_count()} validation errors")
        logger.debug(str(exc))
        return None


__all__ = [
    'RoutingModel',
    'RoutePoints',
    'RouteInstruction',
    'RoutePath',
    'RouteResponse',
    'parse_route_response',
]
