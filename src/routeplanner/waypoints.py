"""
Waypoint sequencing.

``WaypointSequencer`` owns the ordered list of route points and is the only
thing that mutates it. Every successful mutation replaces the list and calls
the ``on_change`` hook, which the planner wires to a debounced route
recalculation. Sorting with the insertion heuristic only happens on request.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .errors import MarkersLocked, WaypointLimitReached
from .geometry import distance, project_onto_segment
from .models import LatLng, Point, PointRole

logger = logging.getLogger(__name__)


DEFAULT_MAX_WAYPOINTS = 28
MAX_HISTORY = 50


def reorder_waypoints(waypoints: Sequence[Point], start: Union[Point, LatLng]) -> List[Point]:
    """
    Order waypoints with a cheapest-insertion heuristic.

    Waypoints are visited nearest-to-start first (stable sort). The nearest one
    seeds the tour; each following waypoint goes between the adjacent pair where
    it adds the least distance, or at the end when appending is cheaper. Ties
    resolve to the lowest position.

    Args:
        waypoints: Waypoints to order. Start and end are not part of the tour.
        start: Anchor the first waypoint is chosen against.

    Returns:
        New list with the same points in visiting order.
    """
    if len(waypoints) < 2:
        return list(waypoints)

    anchor = start.latlng if isinstance(start, Point) else start
    positions = [wp.latlng for wp in waypoints]

    by_distance = sorted(range(len(waypoints)), key=lambda i: distance(anchor, positions[i]))

    matrix = [[distance(a, b) for b in positions] for a in positions]

    tour = [by_distance[0]]
    for candidate in by_distance[1:]:
        best_index: Optional[int] = None
        best_cost = float('inf')
        for j in range(len(tour) - 1):
            a, b = tour[j], tour[j + 1]
            cost = matrix[a][candidate] + matrix[candidate][b] - matrix[a][b]
            if cost < best_cost:
                best_cost = cost
                best_index = j + 1

        append_cost = matrix[tour[-1]][candidate]
        if best_index is not None and best_cost < append_cost:
            tour.insert(best_index, candidate)
        else:
            tour.append(candidate)

    return [waypoints[i] for i in tour]


def best_insertion_index(points: Sequence[Point], position: LatLng) -> int:
    """Index that places ``position`` on the closest leg of the current route."""
    best_index = 1
    best_distance = float('inf')
    for i in range(len(points) - 1):
        closest = project_onto_segment(position, points[i].latlng, points[i + 1].latlng)
        d = distance(position, closest)
        if d < best_distance:
            best_distance = d
            best_index = i + 1
    return best_index


class WaypointSequencer:
    """Ordered start/waypoint/end list with role bookkeeping and undo history."""

    def __init__(
        self,
        max_waypoints: int = DEFAULT_MAX_WAYPOINTS,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.max_waypoints = max_waypoints
        self.on_change = on_change
        self._points: Tuple[Point, ...] = ()
        self._locked = False
        self._undo: List[Tuple[Point, ...]] = []
        self._redo: List[Tuple[Point, ...]] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def start(self) -> Optional[Point]:
        return next((p for p in self._points if p.role == PointRole.START), None)

    @property
    def end(self) -> Optional[Point]:
        return next((p for p in reversed(self._points) if p.role == PointRole.END), None)

    @property
    def waypoints(self) -> List[Point]:
        return [p for p in self._points if p.role == PointRole.WAYPOINT]

    @property
    def locked(self) -> bool:
        return self._locked

    def __len__(self) -> int:
        return len(self._points)

    def is_routable(self) -> bool:
        return len(self._points) >= 2

    # ------------------------------------------------------------------
    # Lock
    # ------------------------------------------------------------------

    def lock(self) -> None:
        self._locked = True
        logger.info("Markers locked")

    def unlock(self) -> None:
        self._locked = False
        logger.info("Markers unlocked")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, position: LatLng, name: Optional[str] = None) -> Point:
        """
        Place a point at the end of the route.

        The first point becomes the start, every later one the new end; a
        previous end is demoted to a waypoint.
        """
        self._ensure_unlocked()
        if not self._points:
            point = Point(position.lat, position.lng, PointRole.START, name)
            self._commit((point,), 'append')
            return point

        if len(self._points) >= 2:
            self._ensure_capacity()
        demoted = tuple(p.with_role(PointRole.WAYPOINT) if p.role == PointRole.END else p for p in self._points)
        points = self._assign_roles(demoted + (Point(position.lat, position.lng, PointRole.END, name),))
        self._commit(points, 'append')
        return points[-1]

    def insert(self, point: Point, index: Optional[int] = None, sort: bool = False) -> Point:
        """
        Insert a waypoint at ``index`` (clamped to the interior of the route).

        Without an index the waypoint goes on the closest leg of the route. On
        a route with fewer than two points the new point fills the missing
        start or end instead. With ``sort`` the waypoints are reordered with
        the insertion heuristic in the same history step.

        Returns:
            The inserted point with the role it was given.
        """
        self._ensure_unlocked()
        points = list(self._points)

        if len(points) < 2:
            index = 0 if points and points[0].role == PointRole.END else len(points)
        else:
            self._ensure_capacity()
            if index is None:
                index = best_insertion_index(points, point.latlng)
            else:
                clamped = max(1, min(len(points) - 1, index))
                if clamped != index:
                    logger.debug(f"Insert index {index} clamped to {clamped}")
                index = clamped

        points.insert(index, point.with_role(PointRole.WAYPOINT))
        assigned = self._assign_roles(points)
        inserted = assigned[index]
        if sort:
            assigned = self._sort_interior(assigned)
        self._commit(assigned, 'insert')
        return inserted

    def set_start(self, position: LatLng, name: Optional[str] = None) -> Point:
        """Replace the start point, or prepend one when there is none."""
        self._ensure_unlocked()
        point = Point(position.lat, position.lng, PointRole.START, name)
        points = list(self._points)
        if points and points[0].role == PointRole.START:
            points[0] = point
        else:
            points.insert(0, point)
        self._commit(tuple(points), 'set_start')
        return point

    def set_end(self, position: LatLng, name: Optional[str] = None) -> Point:
        """Replace the end point, or append one when there is none."""
        self._ensure_unlocked()
        point = Point(position.lat, position.lng, PointRole.END, name)
        points = list(self._points)
        if len(points) >= 2 and points[-1].role == PointRole.END:
            points[-1] = point
        else:
            points.append(point)
        self._commit(tuple(points), 'set_end')
        return point

    def remove(self, index: int) -> Optional[Point]:
        """
        Remove the point at ``index``.

        When the removed point was the start (or end), the new first (or last)
        point takes over that role with its coordinates untouched. Returns the
        removed point, or None for an out-of-range index.
        """
        self._ensure_unlocked()
        if not 0 <= index < len(self._points):
            logger.warning(f"Ignoring remove of point {index}: route has {len(self._points)} points")
            return None

        points = list(self._points)
        removed = points.pop(index)

        if points:
            if removed.role == PointRole.START:
                points[0] = points[0].with_role(PointRole.START)
            elif removed.role == PointRole.END and len(points) > 1:
                points[-1] = points[-1].with_role(PointRole.END)

        self._commit(tuple(points), 'remove')
        return removed

    def move(self, index: int, new_index: int) -> bool:
        """Move a point to another position; roles follow the new first/last slots."""
        self._ensure_unlocked()
        count = len(self._points)
        if not 0 <= index < count:
            logger.warning(f"Ignoring move of point {index}: route has {count} points")
            return False

        new_index = max(0, min(count - 1, new_index))
        if new_index == index:
            return False

        points = list(self._points)
        points.insert(new_index, points.pop(index))
        self._commit(self._assign_roles(points), 'move')
        return True

    def relocate(self, index: int, position: LatLng) -> bool:
        """Drag a point to new coordinates, keeping its role and name."""
        self._ensure_unlocked()
        if not 0 <= index < len(self._points):
            logger.warning(f"Ignoring relocate of point {index}: route has {len(self._points)} points")
            return False

        points = list(self._points)
        old = points[index]
        points[index] = Point(position.lat, position.lng, old.role, old.name)
        self._commit(tuple(points), 'relocate')
        return True

    def sort_waypoints(self) -> bool:
        """Reorder the waypoints between start and end with the insertion heuristic."""
        self._ensure_unlocked()
        if self.start is None:
            logger.info("No start point, nothing to sort against")
            return False

        ordered = self._sort_interior(self._points)
        if ordered == self._points:
            logger.debug("Waypoints already in heuristic order")
            return False

        self._commit(ordered, 'sort')
        return True

    def reverse(self) -> bool:
        """Swap start and end and reverse the waypoint order."""
        self._ensure_unlocked()
        if len(self._points) < 2:
            return False
        self._commit(self._assign_roles(list(reversed(self._points))), 'reverse')
        return True

    def clear(self) -> None:
        self._ensure_unlocked()
        self._commit((), 'clear')

    def replace_all(self, points: Sequence[Point]) -> None:
        """Load a whole point list (e.g. from a saved route), normalising roles."""
        self._ensure_unlocked()
        assigned = self._assign_roles(points)
        if sum(1 for p in assigned if p.role == PointRole.WAYPOINT) > self.max_waypoints:
            raise WaypointLimitReached(
                f"Waypoint limit reached ({self.max_waypoints})",
                details={'max_waypoints': self.max_waypoints},
            )
        self._commit(assigned, 'load')

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        self._ensure_unlocked()
        if not self._undo:
            return False
        self._redo.append(self._points)
        self._points = self._undo.pop()
        self._notify('undo')
        return True

    def redo(self) -> bool:
        self._ensure_unlocked()
        if not self._redo:
            return False
        self._undo.append(self._points)
        self._points = self._redo.pop()
        self._notify('redo')
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise MarkersLocked("Markers are locked")

    def _ensure_capacity(self) -> None:
        if len(self.waypoints) >= self.max_waypoints:
            raise WaypointLimitReached(
                f"Waypoint limit reached ({self.max_waypoints}). Remove a waypoint before adding another.",
                details={'max_waypoints': self.max_waypoints},
            )

    @staticmethod
    def _assign_roles(points: Sequence[Point]) -> Tuple[Point, ...]:
        """First point is the start, last is the end, everything between is a waypoint."""
        count = len(points)
        assigned = []
        for i, point in enumerate(points):
            if i == 0:
                role = PointRole.START
            elif i == count - 1:
                role = PointRole.END
            else:
                role = PointRole.WAYPOINT
            assigned.append(point if point.role == role else point.with_role(role))
        return tuple(assigned)

    @staticmethod
    def _sort_interior(points: Tuple[Point, ...]) -> Tuple[Point, ...]:
        if len(points) < 4:
            return points
        start, end = points[0], points[-1]
        return (start,) + tuple(reorder_waypoints(points[1:-1], start)) + (end,)

    def _commit(self, points: Tuple[Point, ...], source: str) -> None:
        self._undo.append(self._points)
        if len(self._undo) > MAX_HISTORY:
            self._undo.pop(0)
        self._redo.clear()
        self._points = points
        self._notify(source)

    def _notify(self, source: str) -> None:
        logger.debug(f"Points changed ({source}): {len(self._points)} points")
        if self.on_change is not None:
            self.on_change(source)


__all__ = ['WaypointSequencer', 'reorder_waypoints', 'best_insertion_index', 'DEFAULT_MAX_WAYPOINTS']
