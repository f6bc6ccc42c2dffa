"""
Route planner coordination layer.

``RoutePlanner`` is the engine instance a UI talks to. It wires the waypoint
sequencer, the routing collaborator, the segment model, the navigation state
machine and the camera animator together at construction time, and owns the
only ``Camera`` and ``NavigationState`` of the session.

Point edits are synchronous; the route request that follows them is debounced
so a burst of edits costs one request. Results of a request that was overtaken
by further edits are discarded.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from . import events
from .camera.animator import Animation, CameraAnimator
from .camera.frames import FrameClock
from .config import PlannerConfig
from .directions import directions_list, instruction_label
from .errors import RouteCalculationError
from .events import EventBus
from .models import Camera, Connector, Highlight, Instruction, LatLng, Point, RouteModel
from .navigation import HighlightSurface, NavigationController
from .routing_client import RoutingClient
from .scheduling import Debouncer
from .segments import build_segments, route_connectors
from .waypoints import WaypointSequencer

logger = logging.getLogger(__name__)


class RoutePlanner:
    """
    One interactive route-planning session.

    Args:
        routing_client: Collaborator with an async ``route(points)``.
        config: Planner configuration (defaults, file and environment).
        frame_clock: Clock driving camera animation frames.
        surface: Optional renderer notified of highlight changes.
        event_bus: Bus for UI notifications; one is created when omitted.
        camera: Initial camera; defaults to the world view at ``min_zoom``.
    """

    def __init__(
        self,
        routing_client: RoutingClient,
        config: Optional[PlannerConfig] = None,
        frame_clock: Optional[FrameClock] = None,
        surface: Optional[HighlightSurface] = None,
        event_bus: Optional[EventBus] = None,
        camera: Optional[Camera] = None,
    ):
        self.config = config or PlannerConfig()
        self.events = event_bus or EventBus()
        self.routing_client = routing_client

        self.sequencer = WaypointSequencer(
            max_waypoints=self.config.max_waypoints,
            on_change=self._on_points_changed,
        )
        self.animator = CameraAnimator.from_config(
            self.config,
            camera or Camera(LatLng(0.0, 0.0), float(self.config.get('min_zoom')), 0.0),
            frame_clock=frame_clock,
            on_frame=self._on_camera_frame,
        )
        self.navigation = NavigationController(
            self.animator,
            self.events,
            surface=surface,
            viewport_size=self.config.viewport_size,
            overview_max_zoom=float(self.config.get('max_zoom')),
        )
        self._debouncer = Debouncer(self._debounced_recalculate, self.config.recalculate_debounce_ms)

        self.connectors: List[Connector] = []
        self.last_error: Optional[RouteCalculationError] = None
        self._points_version = 0
        self._request_id = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def points(self) -> Tuple[Point, ...]:
        return self.sequencer.points

    @property
    def route(self) -> RouteModel:
        return self.navigation.route

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self.navigation.instructions

    @property
    def camera(self) -> Camera:
        return self.animator.camera

    @property
    def highlight(self) -> Highlight:
        return self.navigation.highlight

    @property
    def state(self):
        return self.navigation.state

    @property
    def rotation_enabled(self) -> bool:
        return self.animator.rotation_enabled

    @property
    def recalculation_pending(self) -> bool:
        return self._debouncer.pending or self._debouncer.running

    def directions(self) -> List[str]:
        total = self.route.geometry.distance_m if self.route.geometry is not None else None
        return directions_list(self.instructions, total)

    def current_direction(self) -> str:
        instruction = self.navigation.current_instruction
        if instruction is None:
            return directions_list(())[0]
        total = self.route.geometry.distance_m if self.route.geometry is not None else None
        return instruction_label(self.navigation.current_index, instruction, total)

    # ------------------------------------------------------------------
    # Point editing
    # ------------------------------------------------------------------

    def add_point(self, lat: float, lng: float, name: Optional[str] = None) -> Point:
        """Map click: first point is the start, later points extend the route to a new end."""
        return self.sequencer.append(LatLng(lat, lng), name)

    def add_waypoint(
        self,
        lat: float,
        lng: float,
        name: Optional[str] = None,
        index: Optional[int] = None,
        sort: bool = True,
    ) -> Point:
        """
        Add a waypoint and, unless ``sort`` is False, re-run the waypoint sort.

        Without ``index`` the waypoint lands on the closest leg of the route.
        Insert and sort are one undo step.
        """
        return self.sequencer.insert(Point(lat, lng, name=name), index, sort=sort)

    def set_start(self, lat: float, lng: float, name: Optional[str] = None) -> Point:
        return self.sequencer.set_start(LatLng(lat, lng), name)

    def set_end(self, lat: float, lng: float, name: Optional[str] = None) -> Point:
        return self.sequencer.set_end(LatLng(lat, lng), name)

    def remove_point(self, index: int) -> Optional[Point]:
        return self.sequencer.remove(index)

    def move_point(self, index: int, new_index: int) -> bool:
        return self.sequencer.move(index, new_index)

    def relocate_point(self, index: int, lat: float, lng: float) -> bool:
        return self.sequencer.relocate(index, LatLng(lat, lng))

    def sort_waypoints(self) -> bool:
        return self.sequencer.sort_waypoints()

    def reverse_route(self) -> bool:
        return self.sequencer.reverse()

    def load_points(self, points: Sequence[Point]) -> None:
        self.sequencer.replace_all(points)

    def undo(self) -> bool:
        return self.sequencer.undo()

    def redo(self) -> bool:
        return self.sequencer.redo()

    def lock_markers(self) -> None:
        self.sequencer.lock()

    def unlock_markers(self) -> None:
        self.sequencer.unlock()

    def clear_route(self) -> None:
        """Drop every point and the route; the camera stays put but turns north."""
        self.sequencer.clear()
        camera = self.animator.camera
        self.animator.jump_to(Camera(camera.center, camera.zoom, 0.0))

    def _on_points_changed(self, source: str) -> None:
        self._points_version += 1
        self.navigation.reset()
        self.events.emit(events.POINTS_CHANGED, {
            'source': source,
            'points': [p.to_dict() for p in self.points],
        })

        if not self.sequencer.is_routable():
            self._debouncer.cancel()
            if not self.route.is_empty:
                logger.info("Fewer than 2 points, clearing route")
                self.navigation.clear()
                self.connectors = []
                self.events.emit(events.ROUTE_RECALCULATED, self.route)
            return

        try:
            self._debouncer.trigger()
        except RuntimeError:
            logger.debug(f"No running event loop after {source}; call recalculate() to fetch the route")

    # ------------------------------------------------------------------
    # Route calculation
    # ------------------------------------------------------------------

    async def recalculate(self) -> Optional[RouteModel]:
        """
        Fetch and load the route for the current points.

        Returns:
            The new RouteModel, or None when there are fewer than 2 points or
            the points changed while the request was in flight.

        Raises:
            RouteCalculationError: The routing collaborator failed or returned
                no usable path. Points, the previous route and the camera are
                left as they were.
        """
        points = self.points
        if len(points) < 2:
            logger.info(f"Need at least 2 points to calculate a route, have {len(points)}")
            return None

        self._request_id += 1
        request_id = self._request_id
        version = self._points_version

        try:
            response = await self.routing_client.route(points)
        except Exception as e:
            if self._is_stale(request_id, version):
                logger.debug(f"Discarding stale route failure {request_id}: {e}")
                return None
            logger.error(f"Route calculation failed: {e}")
            raise RouteCalculationError(
                f"Route calculation failed: {e}",
                details={'points': len(points)},
            ) from e

        if self._is_stale(request_id, version):
            logger.debug(f"Discarding stale route response {request_id}")
            return None

        model = build_segments(
            response,
            viewport_size=self.config.viewport_size,
            padding_px=float(self.config.get('segment_padding_px')),
            max_zoom=float(self.config.get('segment_max_zoom')),
            default_zoom=float(self.config.get('default_zoom')),
        )
        if model.is_empty:
            logger.error("Routing service returned no usable path")
            raise RouteCalculationError(
                "No route found between the given points",
                details={'points': len(points)},
            )

        self._load_route(model)
        return model

    async def flush(self) -> None:
        """Run a pending debounced recalculation now and wait for it."""
        await self._debouncer.flush()

    def _load_route(self, model: RouteModel) -> None:
        self.last_error = None
        self.navigation.load_route(model)
        self.connectors = route_connectors(
            self.points,
            model.geometry.latlngs if model.geometry is not None else [],
            self.config.connector_threshold_m,
        )
        logger.info(
            f"Route loaded: {model.step_count} steps, "
            f"{model.geometry.distance_m if model.geometry else 0:.0f}m"
        )
        self.events.emit(events.ROUTE_RECALCULATED, model)
        self.navigation.fit_overview().add_done_callback(self._on_overview_done)

    def _is_stale(self, request_id: int, version: int) -> bool:
        return request_id != self._request_id or version != self._points_version

    @staticmethod
    def _on_overview_done(animation: Animation) -> None:
        error = animation.exception()
        if error is not None:
            logger.error(f"Overview animation failed: {error}")

    async def _debounced_recalculate(self) -> None:
        try:
            await self.recalculate()
        except RouteCalculationError as e:
            self.last_error = e
            self.events.emit(events.ROUTE_FAILED, e.to_payload())

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def next(self) -> bool:
        return await self.navigation.next()

    async def prev(self) -> bool:
        return await self.navigation.prev()

    async def jump(self, index: int) -> bool:
        return await self.navigation.jump(index)

    async def return_to_overview(self) -> bool:
        return await self.navigation.return_to_overview()

    def set_rotation_enabled(self, enabled: bool) -> Optional[Animation]:
        """Toggle map rotation; turning it off rotates the camera back to north."""
        self.animator.rotation_enabled = enabled
        logger.info(f"Rotation {'enabled' if enabled else 'disabled'}")
        if enabled:
            return None
        return self.animator.reset_bearing(float(self.config.get('rotation_reset_duration_ms')))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _on_camera_frame(self, camera: Camera) -> None:
        self.events.emit(events.CAMERA_CHANGED, camera)

    async def close(self) -> None:
        self._debouncer.cancel()
        self.animator.cancel()
        close = getattr(self.routing_client, 'close', None)
        if close is not None:
            await close()


__all__ = ['RoutePlanner']
