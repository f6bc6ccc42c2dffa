"""Human-readable labels for the directions panel and elevation summary."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .models import Instruction, RouteGeometry

NO_INSTRUCTIONS = 'No navigation instructions available.'


def format_distance(distance_m: float) -> str:
    """``512m`` below a kilometre, ``1.2km`` above."""
    if distance_m < 1000:
        return f"{round(distance_m)}m"
    return f"{distance_m / 1000:.1f}km"


def format_elevation(elevation_m: float) -> str:
    return f"{round(elevation_m)}m"


def instruction_label(index: int, instruction: Instruction, total_distance_m: Optional[float] = None) -> str:
    """
    Panel text for one instruction.

    The overview reads ``Go - Total distance: 12.34 km``; a step reads
    ``3. Turn left onto Main St - 120m``.
    """
    if instruction.is_overview:
        total = instruction.distance_m if total_distance_m is None else total_distance_m
        distance_km = f"{total / 1000:.2f} km" if total else ''
        return f"Go - Total distance: {distance_km}"
    return f"{index}. {instruction.text} - {round(instruction.distance_m)}m"


def directions_list(instructions: Sequence[Instruction], total_distance_m: Optional[float] = None) -> List[str]:
    if not instructions:
        return [NO_INSTRUCTIONS]
    return [instruction_label(i, step, total_distance_m) for i, step in enumerate(instructions)]


def elevation_summary(geometry: Optional[RouteGeometry]) -> str:
    if geometry is None:
        return ''
    return (
        f"Distance {format_distance(geometry.distance_m)}, "
        f"ascent {format_elevation(geometry.ascent_m)}, "
        f"descent {format_elevation(geometry.descent_m)}"
    )


__all__ = [
    'format_distance',
    'format_elevation',
    'instruction_label',
    'directions_list',
    'elevation_summary',
    'NO_INSTRUCTIONS',
]
