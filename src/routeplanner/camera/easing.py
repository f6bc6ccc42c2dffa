"""
Easing functions for camera transitions.

Each function takes a progress value t (0.0 to 1.0) and returns an eased
value in the same range. Pan and bearing share the cubic ease-in-out; zoom
uses its own slow-steady-slow curve so tiles have time to load at both ends.
"""

from enum import Enum
from typing import Callable, Dict


class EasingType(Enum):
    """Easing function types for camera axes"""
    LINEAR = "linear"
    EASE_IN_OUT_CUBIC = "ease_in_out_cubic"
    ZOOM = "zoom"


class EasingFunctions:
    """Collection of easing functions for smooth animations"""

    @staticmethod
    def linear(t: float) -> float:
        """Linear interpolation - constant speed"""
        return t

    @staticmethod
    def ease_in_out_cubic(t: float) -> float:
        """Cubic ease in/out - used for pan and bearing"""
        if t < 0.5:
            return 4 * t * t * t
        return 1 - pow(-2 * t + 2, 3) / 2

    @staticmethod
    def zoom(t: float) -> float:
        """Quadratic ramps over the first and last 20%, linear in between"""
        if t < 0.2:
            return 2.5 * t * t
        if t > 0.8:
            return 1 - 2.5 * (1 - t) * (1 - t)
        return t


def get_easing_function(easing_type: EasingType) -> Callable[[float], float]:
    """Get the easing function for a given easing type"""
    return EASING_FUNCTION_MAP.get(easing_type, EasingFunctions.ease_in_out_cubic)


EASING_FUNCTION_MAP: Dict[EasingType, Callable[[float], float]] = {
    EasingType.LINEAR: EasingFunctions.linear,
    EasingType.EASE_IN_OUT_CUBIC: EasingFunctions.ease_in_out_cubic,
    EasingType.ZOOM: EasingFunctions.zoom,
}
