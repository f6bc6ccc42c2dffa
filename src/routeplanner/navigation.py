"""
Navigation state machine.

Keeps one current instruction consistent across the highlighted route line,
the elevation highlight and the camera. A transition (clear highlights,
retarget the camera, highlight the new step) runs as one unit behind the
``highlight_in_progress`` flag; requests arriving while it is set are dropped.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Tuple

from . import events
from .camera.animator import Animation, CameraAnimator
from .events import EventBus
from .geometry import bounding_box_diagonal, dynamic_padding, vertical_alignment_angle
from .models import Highlight, Instruction, NavigationState, RouteModel, Segment

logger = logging.getLogger(__name__)


OVERVIEW_INDEX = 0


class HighlightSurface(Protocol):
    """Whatever draws the route overlay and the elevation chart."""

    def clear_highlights(self) -> None:
        ...

    def highlight_segment(self, segment: Segment) -> None:
        ...

    def highlight_elevation(self, coordinate_range: Tuple[int, int]) -> None:
        ...


class NavigationController:
    """Owns ``NavigationState`` for one planner."""

    def __init__(
        self,
        animator: CameraAnimator,
        event_bus: Optional[EventBus] = None,
        surface: Optional[HighlightSurface] = None,
        viewport_size: Sequence[float] = (500, 500),
        overview_max_zoom: float = 18.0,
    ):
        self.animator = animator
        self.events = event_bus or EventBus()
        self.surface = surface
        self.viewport_size = tuple(viewport_size)
        self.overview_max_zoom = overview_max_zoom

        self.state = NavigationState()
        self.route = RouteModel()
        self.highlight = Highlight()
        self._generation = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def instructions(self) -> Tuple[Instruction, ...]:
        return self.route.instructions

    @property
    def current_index(self) -> int:
        return self.state.current_instruction_index

    @property
    def current_instruction(self) -> Optional[Instruction]:
        if not self.route.instructions:
            return None
        return self.route.instructions[self.state.current_instruction_index]

    @property
    def busy(self) -> bool:
        return self.state.highlight_in_progress

    @property
    def last_index(self) -> int:
        return self.route.step_count

    # ------------------------------------------------------------------
    # Route lifecycle
    # ------------------------------------------------------------------

    def load_route(self, route: RouteModel) -> None:
        """
        Swap in a new route model at the overview step.

        Stops the camera where it is; a transition still awaiting its
        animation sees the new generation and skips its highlight.
        """
        self.route = route
        self.reset()

    def reset(self) -> None:
        """Back to the overview step without moving the camera."""
        self.animator.cancel()
        self._generation += 1
        self.state.user_navigated_away = False
        self._clear_highlights()
        if self.state.current_instruction_index != OVERVIEW_INDEX:
            self.state.current_instruction_index = OVERVIEW_INDEX
            self._emit_index()

    def clear(self) -> None:
        self.load_route(RouteModel())

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def next(self) -> bool:
        return await self.jump(self.state.current_instruction_index + 1)

    async def prev(self) -> bool:
        return await self.jump(self.state.current_instruction_index - 1)

    async def jump(self, index: int, force: bool = False) -> bool:
        """
        Move to instruction ``index`` (clamped into range).

        Returns True when a transition ran, False when it was dropped because
        another one is in progress, there is no route, or the index did not
        change.
        """
        return await self._transition(index, force=force)

    async def return_to_overview(self) -> bool:
        """Go back to the overview step with the bearing reset to north."""
        ran = await self._transition(OVERVIEW_INDEX, force=True)
        if ran:
            self.state.user_navigated_away = False
        return ran

    async def _transition(self, index: int, force: bool = False) -> bool:
        if self.state.highlight_in_progress:
            logger.debug(f"Dropping transition to {index}: highlight in progress")
            return False

        if not self.route.instructions:
            logger.info("No instructions to navigate")
            return False

        clamped = max(0, min(self.last_index, index))
        if clamped != index:
            logger.debug(f"Instruction index {index} clamped to {clamped}")
        if clamped == self.state.current_instruction_index and not force:
            return False

        generation = self._generation
        self._set_busy(True)
        try:
            self.state.current_instruction_index = clamped
            if clamped > OVERVIEW_INDEX:
                self.state.user_navigated_away = True
            self._emit_index()

            self._clear_highlights()
            await self._retarget(clamped)

            if generation != self._generation:
                logger.debug(f"Route replaced during transition to {clamped}, skipping highlight")
                return True

            self._highlight_step(clamped)
        finally:
            self._set_busy(False)
        return True

    def _retarget(self, index: int) -> Animation:
        if index == OVERVIEW_INDEX:
            return self.fit_overview()

        segment = self.route.segment_for_step(index)
        if segment is None:
            logger.info(f"Instruction {index} has no drawable segment, camera stays put")
            return Animation.skipped(self.animator.camera)

        bearing = 0.0
        if self.animator.rotation_enabled:
            bearing = vertical_alignment_angle(segment.first, segment.last)

        return self.animator.animate_to_bounds(
            segment.bounding_box,
            bearing=bearing,
            zoom=self.route.optimal_zoom,
        )

    def fit_overview(self, duration_hint_ms: Optional[float] = None) -> Animation:
        """Frame the whole route, north up."""
        geometry = self.route.geometry
        box = geometry.bounding_box if geometry is not None else None
        padding = dynamic_padding(bounding_box_diagonal(box), self.viewport_size)
        return self.animator.animate_to_bounds(
            box,
            padding=padding,
            bearing=0.0,
            max_zoom=self.overview_max_zoom,
            duration_hint_ms=duration_hint_ms,
        )

    # ------------------------------------------------------------------
    # Highlights and notifications
    # ------------------------------------------------------------------

    def _highlight_step(self, index: int) -> None:
        if index == OVERVIEW_INDEX:
            return
        segment = self.route.segment_for_step(index)
        if segment is None:
            return
        self.highlight = Highlight(segment, segment.coordinate_range)
        if self.surface is not None:
            self.surface.highlight_segment(segment)
            self.surface.highlight_elevation(segment.coordinate_range)

    def _clear_highlights(self) -> None:
        self.highlight = Highlight()
        if self.surface is not None:
            self.surface.clear_highlights()

    def _set_busy(self, busy: bool) -> None:
        self.state.highlight_in_progress = busy
        self.events.emit(events.HIGHLIGHT_IN_PROGRESS_CHANGED, busy)

    def _emit_index(self) -> None:
        self.events.emit(events.INSTRUCTION_INDEX_CHANGED, {
            'index': self.state.current_instruction_index,
            'instruction': self.current_instruction,
        })


__all__ = ['NavigationController', 'HighlightSurface', 'OVERVIEW_INDEX']
