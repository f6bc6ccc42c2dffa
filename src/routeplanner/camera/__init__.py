"""Camera animation: easing curves, frame clocks and the animator."""

from .animator import (
    Animation,
    AnimationStatus,
    CameraAnimator,
    calculate_duration,
    interpolate_camera,
    interpolate_zoom,
)
from .easing import EasingFunctions, EasingType, get_easing_function
from .frames import AsyncioFrameClock, FixedStepFrameClock, FrameClock

__all__ = [
    'Animation',
    'AnimationStatus',
    'CameraAnimator',
    'calculate_duration',
    'interpolate_camera',
    'interpolate_zoom',
    'EasingFunctions',
    'EasingType',
    'get_easing_function',
    'AsyncioFrameClock',
    'FixedStepFrameClock',
    'FrameClock',
]
