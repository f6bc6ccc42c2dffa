from __future__ import annotations

import asyncio
import math

import pytest

from routeplanner.camera import (
    AnimationStatus,
    CameraAnimator,
    EasingFunctions,
    FixedStepFrameClock,
    calculate_duration,
    interpolate_zoom,
)
from routeplanner.models import BoundingBox, Camera, LatLng


def _camera(lat=0.0, lng=0.0, zoom=10.0, bearing=0.0):
    return Camera(LatLng(lat, lng), zoom, bearing)


def _run_animation(start, target, **animator_kwargs):
    """Animate start -> target on a fixed-step clock; returns (animator, status, frames)."""
    frames = []

    async def scenario():
        animator = CameraAnimator(start, FixedStepFrameClock(), on_frame=frames.append, **animator_kwargs)
        status = await animator.animate(target)
        return animator, status

    animator, status = asyncio.run(scenario())
    return animator, status, frames


# ----------------------------------------------------------------------
# Pure interpolation
# ----------------------------------------------------------------------

@pytest.mark.parametrize(
    "zoom_delta, hint, expected",
    [
        (0, None, 800),
        (2, None, 1200),
        (-2, None, 1200),
        (10, None, 1500),
        (0, 100, 600),
        (1, 1000, 1200),
    ],
)
def test_calculate_duration_is_clamped(zoom_delta, hint, expected):
    if hint is None:
        assert calculate_duration(zoom_delta) == expected
    else:
        assert calculate_duration(zoom_delta, base_ms=hint) == expected


def test_interpolate_zoom_endpoints():
    assert interpolate_zoom(5, 12, 0) == 5
    assert interpolate_zoom(5, 12, 1) == pytest.approx(12)
    assert interpolate_zoom(12, 5, 0) == pytest.approx(12)
    assert interpolate_zoom(12, 5, 1) == 5


def test_interpolate_zoom_is_linear_for_tiny_changes():
    assert interpolate_zoom(10, 10.005, 0.5) == pytest.approx(10.0025)


def test_zoom_interpolates_on_log_scale():
    assert interpolate_zoom(5, 12, 0.5) == pytest.approx(5 + math.log2(1 + 127 * 0.5))
    assert interpolate_zoom(12, 5, 0.5) == pytest.approx(5 + math.log2(1 + 127 * 0.5))


@pytest.mark.parametrize("easing", [EasingFunctions.linear, EasingFunctions.ease_in_out_cubic, EasingFunctions.zoom])
def test_easing_functions_are_monotonic_from_zero_to_one(easing):
    samples = [easing(i / 100) for i in range(101)]
    assert samples[0] == pytest.approx(0)
    assert samples[-1] == pytest.approx(1)
    assert samples == sorted(samples)


# ----------------------------------------------------------------------
# Frame loop
# ----------------------------------------------------------------------

def test_bearing_rotates_through_north_on_shortest_arc():
    animator, status, frames = _run_animation(_camera(bearing=350), _camera(bearing=10))

    assert status is AnimationStatus.COMPLETED
    assert animator.camera.bearing == 10
    swept = [(frame.bearing - 350) % 360 for frame in frames]
    assert all(0 <= value <= 20 + 1e-9 for value in swept)
    assert swept == sorted(swept)
    assert swept[-1] == pytest.approx(20)


@pytest.mark.parametrize("start_zoom, target_zoom", [(5, 12), (12, 5)])
def test_zoom_is_monotonic(start_zoom, target_zoom):
    animator, status, frames = _run_animation(_camera(zoom=start_zoom), _camera(zoom=target_zoom))

    zooms = [frame.zoom for frame in frames]
    if target_zoom > start_zoom:
        assert zooms == sorted(zooms)
    else:
        assert zooms == sorted(zooms, reverse=True)
    assert animator.camera.zoom == target_zoom


def test_completion_snaps_every_axis_to_target():
    target = _camera(lat=1.234, lng=5.678, zoom=14.5, bearing=123.0)
    animator, status, frames = _run_animation(_camera(), target)

    assert status is AnimationStatus.COMPLETED
    assert animator.camera == target
    assert frames[-1] == target
    assert len(frames) > 10


def test_last_applied_bearing_updates_only_on_completion():
    seen = []

    async def scenario():
        animator = CameraAnimator(_camera(bearing=30), FixedStepFrameClock())
        animator.on_frame = lambda camera: seen.append(animator.last_applied_bearing)
        await animator.animate(_camera(bearing=90))
        return animator

    animator = asyncio.run(scenario())

    assert seen and all(bearing == 30 for bearing in seen)
    assert animator.last_applied_bearing == 90


def test_new_animation_cancels_the_one_in_flight():
    async def scenario():
        animator = CameraAnimator(_camera(), FixedStepFrameClock())
        first = animator.animate(_camera(lat=1, lng=1, zoom=12, bearing=90))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        second = animator.animate(_camera(lat=2, lng=2, zoom=8))
        return animator, await first, await second, second

    animator, first_status, second_status, second = asyncio.run(scenario())

    assert first_status is AnimationStatus.CANCELLED
    assert second_status is AnimationStatus.COMPLETED
    assert animator.camera == _camera(lat=2, lng=2, zoom=8)
    # The interrupted transition never completed, so its bearing was never applied
    assert second.start.bearing == 0
    assert second.start.center != LatLng(0, 0)


def test_cancel_leaves_camera_mid_transition():
    async def scenario():
        animator = CameraAnimator(_camera(bearing=45), FixedStepFrameClock())
        animation = animator.animate(_camera(lat=5, zoom=14, bearing=180))
        for _ in range(5):
            await asyncio.sleep(0)
        assert animator.is_animating
        assert animator.cancel()
        return animator, await animation

    animator, status = asyncio.run(scenario())

    assert status is AnimationStatus.CANCELLED
    assert not animator.is_animating
    assert 0 < animator.camera.center.lat < 5
    assert animator.last_applied_bearing == 45
    assert not animator.cancel()


@pytest.mark.parametrize(
    "box",
    [
        None,
        BoundingBox(1, 1, 1, 1),
        BoundingBox(2, 0, 1, 1),
        BoundingBox(0, 0, math.nan, 1),
    ],
)
def test_invalid_bounds_leave_camera_untouched(box):
    frames = []
    start = _camera(zoom=7, bearing=30)

    async def scenario():
        animator = CameraAnimator(start, FixedStepFrameClock(), on_frame=frames.append)
        status = await animator.animate_to_bounds(box)
        return animator, status

    animator, status = asyncio.run(scenario())

    assert status is AnimationStatus.SKIPPED
    assert animator.camera == start
    assert frames == []


def test_animate_to_bounds_centres_the_box():
    async def scenario():
        animator = CameraAnimator(_camera(zoom=3), FixedStepFrameClock(), max_zoom=18)
        status = await animator.animate_to_bounds(BoundingBox(0, 0, 0, 10), padding=(20, 20), bearing=270)
        return animator, status

    animator, status = asyncio.run(scenario())

    assert status is AnimationStatus.COMPLETED
    assert animator.camera.center.lng == pytest.approx(5)
    assert animator.camera.center.lat == pytest.approx(0, abs=1e-9)
    assert animator.camera.zoom == pytest.approx(math.log2(460 / (256 * 10 / 360)))
    assert animator.camera.bearing == 270


def test_animate_to_bounds_uses_explicit_zoom():
    async def scenario():
        animator = CameraAnimator(_camera(zoom=3), FixedStepFrameClock())
        await animator.animate_to_bounds(BoundingBox(0, 0, 1, 1), zoom=11.5)
        return animator

    assert asyncio.run(scenario()).camera.zoom == 11.5


def test_non_finite_target_is_skipped():
    animator, status, frames = _run_animation(_camera(), _camera(zoom=math.inf))

    assert status is AnimationStatus.SKIPPED
    assert animator.camera == _camera()
    assert frames == []


def test_rotation_disabled_keeps_north_up():
    animator, status, frames = _run_animation(
        _camera(), _camera(lat=1, zoom=12, bearing=135), rotation_enabled=False,
    )

    assert status is AnimationStatus.COMPLETED
    assert all(frame.bearing == 0 for frame in frames)
    assert animator.camera.bearing == 0
    assert animator.last_applied_bearing == 0


def test_reset_bearing_rotates_even_when_rotation_is_disabled():
    frames = []

    async def scenario():
        animator = CameraAnimator(_camera(bearing=90), FixedStepFrameClock(), on_frame=frames.append)
        animator.rotation_enabled = False
        status = await animator.reset_bearing()
        return animator, status

    animator, status = asyncio.run(scenario())

    assert status is AnimationStatus.COMPLETED
    assert any(0 < frame.bearing < 90 for frame in frames)
    assert animator.camera == _camera(bearing=0)


def test_jump_to_sets_camera_without_frames_loop():
    animator = CameraAnimator(_camera(), FixedStepFrameClock())
    animator.jump_to(_camera(lat=3, bearing=200))

    assert animator.camera == _camera(lat=3, bearing=200)
    assert animator.last_applied_bearing == 200


def test_preview_samples_frames_and_ends_on_target():
    animator = CameraAnimator(_camera(bearing=350), FixedStepFrameClock())
    target = _camera(lat=1, bearing=10)

    frames = animator.preview(target, fps=10)

    # 800ms at 10fps
    assert len(frames) == 8
    assert frames[-1] == target
    assert animator.camera == _camera(bearing=350)
