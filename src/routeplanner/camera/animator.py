"""
Synchronized pan/zoom/bearing camera animation.

One ``CameraAnimator`` owns the live ``Camera``. ``animate()`` runs a single
frame loop that moves all three axes from the same progress value with their
own easing: cubic ease-in-out for pan and bearing (shortest arc), and an
exponential zoom interpolation with a slow-steady-slow ease. Starting a new
animation cancels the one in flight. Completion snaps every axis to the
target and is the only place the last applied bearing is updated.
"""

from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .. import projection
from ..geometry import normalize_bearing, shortest_arc
from ..models import BoundingBox, Camera, LatLng
from .easing import EasingType, get_easing_function
from .frames import AsyncioFrameClock, FrameClock

logger = logging.getLogger(__name__)


BASE_DURATION_MS = 800.0
MIN_DURATION_MS = 600.0
MAX_DURATION_MS = 1500.0
MS_PER_ZOOM_LEVEL = 200.0
LINEAR_ZOOM_THRESHOLD = 0.01


class AnimationStatus(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"


def calculate_duration(
    zoom_delta: float,
    base_ms: float = BASE_DURATION_MS,
    min_ms: float = MIN_DURATION_MS,
    max_ms: float = MAX_DURATION_MS,
    ms_per_zoom_level: float = MS_PER_ZOOM_LEVEL,
) -> float:
    """
    Transition length in milliseconds.

    Larger zoom changes get proportionally more time, bounded both ways.
    """
    return max(min_ms, min(max_ms, base_ms + abs(zoom_delta) * ms_per_zoom_level))


def interpolate_zoom(start: float, target: float, eased: float) -> float:
    """
    Interpolate on the log2 zoom scale.

    Zooming in grows from the start level; zooming out uses the mirrored
    expression anchored at the target, so both directions are monotonic.
    """
    delta = target - start
    if abs(delta) <= LINEAR_ZOOM_THRESHOLD:
        return start + delta * eased

    scale_factor = math.pow(2.0, abs(delta))
    if delta > 0:
        return start + math.log2(1 + (scale_factor - 1) * eased)
    return target + math.log2(1 + (scale_factor - 1) * (1 - eased))


def interpolate_camera(
    start: Camera,
    target: Camera,
    progress: float,
    rotate: bool = True,
    pan_easing: Callable[[float], float] = get_easing_function(EasingType.EASE_IN_OUT_CUBIC),
    zoom_easing: Callable[[float], float] = get_easing_function(EasingType.ZOOM),
) -> Camera:
    """Camera at ``progress`` (0..1) of the transition from ``start`` to ``target``."""
    progress = max(0.0, min(1.0, progress))
    eased = pan_easing(progress)

    center = LatLng(
        start.center.lat + (target.center.lat - start.center.lat) * eased,
        start.center.lng + (target.center.lng - start.center.lng) * eased,
    )
    zoom = interpolate_zoom(start.zoom, target.zoom, zoom_easing(progress))

    if rotate:
        bearing = normalize_bearing(start.bearing + shortest_arc(start.bearing, target.bearing) * eased)
    else:
        bearing = 0.0

    return Camera(center, zoom, bearing)


def _is_finite_camera(camera: Camera) -> bool:
    return camera.center.is_finite() and math.isfinite(camera.zoom) and math.isfinite(camera.bearing)


class Animation:
    """
    Handle for one camera transition.

    Awaiting it yields the final ``AnimationStatus``. The status is set exactly
    once, by whichever of completion or cancellation happens first.
    """

    def __init__(self, start: Camera, target: Camera, duration_ms: float, rotate: bool = True):
        self.start = start
        self.target = target
        self.duration_ms = duration_ms
        self.rotate = rotate
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def skipped(cls, start: Camera) -> "Animation":
        animation = cls(start, start, 0.0)
        animation._finish(AnimationStatus.SKIPPED)
        return animation

    @property
    def status(self) -> AnimationStatus:
        if not self._future.done():
            return AnimationStatus.RUNNING
        return self._future.result()

    def done(self) -> bool:
        return self._future.done()

    def exception(self) -> Optional[BaseException]:
        """Error that ended the frame loop, once done; marks it as retrieved."""
        return self._future.exception()

    def add_done_callback(self, callback: Callable[["Animation"], None]) -> None:
        self._future.add_done_callback(lambda _: callback(self))

    def cancel(self) -> bool:
        """Stop the frame loop where it is. Returns False if already finished."""
        if self._future.done():
            return False
        self._finish(AnimationStatus.CANCELLED)
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True

    def _finish(self, status: AnimationStatus) -> None:
        if not self._future.done():
            self._future.set_result(status)

    def __await__(self):
        return self._future.__await__()

    def __repr__(self) -> str:
        return f"<Animation {self.status.value} {self.duration_ms:.0f}ms>"


class CameraAnimator:
    """Owner of the live camera and its single in-flight animation."""

    def __init__(
        self,
        camera: Camera,
        frame_clock: Optional[FrameClock] = None,
        rotation_enabled: bool = True,
        viewport_size: Sequence[float] = (500, 500),
        min_zoom: float = 0.0,
        max_zoom: float = 18.0,
        base_duration_ms: float = BASE_DURATION_MS,
        min_duration_ms: float = MIN_DURATION_MS,
        max_duration_ms: float = MAX_DURATION_MS,
        ms_per_zoom_level: float = MS_PER_ZOOM_LEVEL,
        on_frame: Optional[Callable[[Camera], None]] = None,
    ):
        self._camera = Camera(camera.center, camera.zoom, normalize_bearing(camera.bearing))
        self.last_applied_bearing = self._camera.bearing
        self.frame_clock: FrameClock = frame_clock or AsyncioFrameClock()
        self.rotation_enabled = rotation_enabled
        self.viewport_size = tuple(viewport_size)
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.base_duration_ms = base_duration_ms
        self.min_duration_ms = min_duration_ms
        self.max_duration_ms = max_duration_ms
        self.ms_per_zoom_level = ms_per_zoom_level
        self.on_frame = on_frame
        self.current: Optional[Animation] = None

    @classmethod
    def from_config(cls, config, camera: Camera, frame_clock: Optional[FrameClock] = None, **kwargs) -> "CameraAnimator":
        return cls(
            camera,
            frame_clock=frame_clock or AsyncioFrameClock(config.frame_rate),
            rotation_enabled=config.rotation_enabled,
            viewport_size=config.viewport_size,
            min_zoom=float(config.get('min_zoom')),
            max_zoom=float(config.get('max_zoom')),
            base_duration_ms=float(config.get('animation_base_duration_ms')),
            min_duration_ms=float(config.get('animation_min_duration_ms')),
            max_duration_ms=float(config.get('animation_max_duration_ms')),
            ms_per_zoom_level=float(config.get('animation_ms_per_zoom_level')),
            **kwargs,
        )

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def is_animating(self) -> bool:
        return self.current is not None and not self.current.done()

    def duration_for(self, start: Camera, target: Camera, duration_hint_ms: Optional[float] = None) -> float:
        base = self.base_duration_ms if duration_hint_ms is None else duration_hint_ms
        return calculate_duration(
            target.zoom - start.zoom,
            base_ms=base,
            min_ms=self.min_duration_ms,
            max_ms=self.max_duration_ms,
            ms_per_zoom_level=self.ms_per_zoom_level,
        )

    def start_camera(self) -> Camera:
        """Where the next transition begins: the live view with the last applied bearing."""
        return Camera(self._camera.center, self._camera.zoom, self.last_applied_bearing)

    def cancel(self) -> bool:
        if self.current is None:
            return False
        cancelled = self.current.cancel()
        if cancelled:
            logger.debug("Cancelled in-flight camera animation")
        return cancelled

    def jump_to(self, camera: Camera) -> None:
        """Set the camera without animating."""
        self.cancel()
        self._apply(self._final_camera(camera))
        self.last_applied_bearing = self._camera.bearing

    def animate(
        self,
        target: Camera,
        duration_hint_ms: Optional[float] = None,
        start: Optional[Camera] = None,
        rotate: Optional[bool] = None,
    ) -> Animation:
        """
        Start a transition to ``target``, cancelling any in flight.

        Args:
            target: Camera to end on. Its bearing is ignored while rotation is disabled.
            duration_hint_ms: Base duration before the zoom-dependent term and clamping.
            start: Camera to start from (defaults to ``start_camera()``).
            rotate: Interpolate the bearing; defaults to ``rotation_enabled``.

        Returns:
            Awaitable ``Animation`` handle.
        """
        self.cancel()

        start = start or self.start_camera()
        if not _is_finite_camera(target) or not _is_finite_camera(start):
            logger.warning(f"Skipping animation to non-finite camera {target}")
            return Animation.skipped(self._camera)

        if rotate is None:
            rotate = self.rotation_enabled
        duration = self.duration_for(start, target, duration_hint_ms)
        animation = Animation(start, target, duration, rotate)
        animation._task = asyncio.get_running_loop().create_task(self._run(animation))
        self.current = animation
        logger.debug(
            f"Animating camera zoom {start.zoom:.2f}->{target.zoom:.2f} "
            f"bearing {start.bearing:.1f}->{target.bearing:.1f} over {duration:.0f}ms"
        )
        return animation

    def animate_to_bounds(
        self,
        box: Optional[BoundingBox],
        padding: Sequence[float] = (0, 0),
        bearing: float = 0.0,
        zoom: Optional[float] = None,
        max_zoom: Optional[float] = None,
        duration_hint_ms: Optional[float] = None,
    ) -> Animation:
        """
        Frame ``box``: centre on it and fit it, or use ``zoom`` when given.

        An invalid box (empty, inverted, non-finite or a single point) leaves
        the camera where it is and returns an already finished animation.
        """
        if box is None or not box.is_valid():
            logger.info(f"Not moving camera: invalid bounding box {box}")
            self.cancel()
            return Animation.skipped(self._camera)

        fitted = projection.fit_bounds(
            box,
            self.viewport_size,
            padding,
            min_zoom=self.min_zoom,
            max_zoom=self.max_zoom if max_zoom is None else max_zoom,
        )
        if fitted is None:
            logger.info(f"Not moving camera: bounding box {box} does not fit the viewport")
            self.cancel()
            return Animation.skipped(self._camera)

        center, fitted_zoom = fitted
        target = Camera(center, fitted_zoom if zoom is None else zoom, bearing)
        return self.animate(target, duration_hint_ms)

    def reset_bearing(self, duration_hint_ms: float = 400.0) -> Animation:
        """Rotate back to north without moving centre or zoom."""
        target = Camera(self._camera.center, self._camera.zoom, 0.0)
        return self.animate(target, duration_hint_ms, rotate=True)

    def preview(
        self,
        target: Camera,
        start: Optional[Camera] = None,
        duration_hint_ms: Optional[float] = None,
        fps: float = 30.0,
    ) -> List[Camera]:
        """
        Intermediate cameras of a transition, sampled at ``fps``, ending on the snapped target.

        Does not touch the live camera.
        """
        start = start or self.start_camera()
        duration = self.duration_for(start, target, duration_hint_ms)
        frame_count = max(1, math.ceil(duration * fps / 1000.0))
        frames = [
            interpolate_camera(start, target, i / frame_count, rotate=self.rotation_enabled)
            for i in range(1, frame_count)
        ]
        frames.append(self._final_camera(target))
        return frames

    def _final_camera(self, target: Camera, rotate: Optional[bool] = None) -> Camera:
        if rotate is None:
            rotate = self.rotation_enabled
        bearing = normalize_bearing(target.bearing) if rotate else 0.0
        return Camera(target.center, target.zoom, bearing)

    def _apply(self, camera: Camera) -> None:
        self._camera = camera
        if self.on_frame is not None:
            self.on_frame(camera)

    async def _run(self, animation: Animation) -> None:
        clock = self.frame_clock
        started = clock.now()
        try:
            while True:
                now = await clock.next_frame()
                progress = (now - started) / animation.duration_ms if animation.duration_ms > 0 else 1.0
                if progress >= 1.0:
                    break
                self._apply(interpolate_camera(
                    animation.start, animation.target, progress, rotate=animation.rotate,
                ))
        except asyncio.CancelledError:
            animation._finish(AnimationStatus.CANCELLED)
            raise
        except Exception as e:
            # Delivered to whoever awaits the animation
            logger.error(f"Camera animation failed: {e}")
            if not animation.done():
                animation._future.set_exception(e)
            return

        self._apply(self._final_camera(animation.target, animation.rotate))
        self.last_applied_bearing = self._camera.bearing
        animation._finish(AnimationStatus.COMPLETED)


__all__ = [
    'Animation',
    'AnimationStatus',
    'CameraAnimator',
    'calculate_duration',
    'interpolate_camera',
    'interpolate_zoom',
]
