"""
HTTP client for a GraphHopper-compatible routing service.

The planner only depends on the ``RoutingClient`` protocol: anything with an
async ``route(points)`` returning the raw response mapping will do. This
module provides the aiohttp implementation used in production.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import aiohttp

from .errors import RoutingServiceError
from .models import Point

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = 'https://graphhopper.com/api/1'


class RoutingClient(Protocol):
    async def route(self, points: Sequence[Point]) -> Dict[str, Any]:
        ...


def build_route_params(
    points: Sequence[Point],
    vehicle: str = 'hike',
    api_key: str = '',
    elevation: bool = True,
) -> List[Tuple[str, str]]:
    """Query parameters for ``GET /route``; ``point`` repeats once per route point, in order."""
    params = [('point', f"{p.lat},{p.lng}") for p in points]
    params.extend([
        ('vehicle', vehicle),
        ('details', 'surface'),
        ('points_encoded', 'false'),
        ('elevation', 'true' if elevation else 'false'),
        ('instructions', 'true'),
        ('type', 'json'),
    ])
    if api_key:
        params.append(('key', api_key))
    return params


class GraphHopperClient:
    """
    aiohttp client for the routing collaborator.

    Handles:
    - Lazy session creation (``initialize``/``close`` or ``async with``)
    - Request timeouts
    - Mapping transport and HTTP failures to ``RoutingServiceError``
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = '',
        vehicle: str = 'hike',
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.vehicle = vehicle
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config) -> "GraphHopperClient":
        return cls(
            base_url=config.routing_base_url,
            api_key=config.routing_api_key,
            vehicle=config.routing_vehicle,
            timeout=config.routing_timeout,
        )

    async def initialize(self):
        """Create the HTTP session if there is none yet."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True

    async def close(self):
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def route(self, points: Sequence[Point]) -> Dict[str, Any]:
        """
        Request a routed path through ``points``.

        Returns:
            Raw JSON response (validated later by the segment model).

        Raises:
            RoutingServiceError: On timeout, connection failure, non-2xx status
                or a body that is not JSON.
        """
        await self.initialize()
        url = f"{self.base_url}/route"
        params = build_route_params(points, self.vehicle, self.api_key)
        logger.debug(f"Requesting route through {len(points)} points")

        try:
            async with self._session.get(url, params=params) as response:
                if response.status >= 400:
                    message = await self._error_message(response)
                    raise RoutingServiceError(
                        f"Routing service returned HTTP {response.status}: {message}",
                        details={'status': response.status},
                    )
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error(f"Routing request timed out after {self.timeout}s")
            raise RoutingServiceError(
                f"Routing request timed out after {self.timeout}s",
                details={'timeout': self.timeout},
            ) from e
        except aiohttp.ClientError as e:
            logger.error(f"Routing request failed: {e}")
            raise RoutingServiceError(f"Routing request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Routing service returned invalid JSON: {e}")
            raise RoutingServiceError(f"Routing service returned invalid JSON: {e}") from e

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            return response.reason or 'unknown error'
        if isinstance(body, dict) and body.get('message'):
            return str(body['message'])
        return response.reason or 'unknown error'


__all__ = ['RoutingClient', 'GraphHopperClient', 'build_route_params', 'DEFAULT_BASE_URL']
