#!/usr/bin/env python3
"""
Command line tools for the route planning engine.

Usage:
  routeplanner sort --start 52.52,13.40 --waypoint 52.50,13.45 --waypoint 52.53,13.38
  routeplanner directions --point 52.52,13.40 --point 52.50,13.45 --vehicle bike
  routeplanner preview --from 52.52,13.40,12,350 --to 52.50,13.45,15,10 --fps 10
  routeplanner config --config routeplanner_config.json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional, Sequence

from .camera.animator import CameraAnimator
from .config import PlannerConfig
from .directions import directions_list, elevation_summary
from .errors import RoutePlannerError, RouteCalculationError, ValidationFailure
from .logging import setup_logging
from .models import Camera, LatLng, Point, PointRole
from .routing_client import GraphHopperClient
from .segments import build_segments
from .waypoints import reorder_waypoints

logger = logging.getLogger(__name__)


def parse_floats(value: str, count: Sequence[int]) -> List[float]:
    """Parse ``"a,b[,c...]"`` into floats, accepting any length in ``count``."""
    try:
        numbers = [float(part) for part in value.split(',')]
    except ValueError:
        raise ValidationFailure(f"Not a list of numbers: {value!r}") from None
    if len(numbers) not in count:
        raise ValidationFailure(f"Expected {' or '.join(str(c) for c in count)} numbers, got {value!r}")
    return numbers


def parse_latlng(value: str) -> LatLng:
    lat, lng = parse_floats(value, (2,))
    return LatLng(lat, lng)


def parse_camera(value: str) -> Camera:
    numbers = parse_floats(value, (3, 4))
    bearing = numbers[3] if len(numbers) == 4 else 0.0
    return Camera(LatLng(numbers[0], numbers[1]), numbers[2], bearing)


def route_points(values: Sequence[str]) -> List[Point]:
    latlngs = [parse_latlng(v) for v in values]
    points = []
    for i, latlng in enumerate(latlngs):
        if i == 0:
            role = PointRole.START
        elif i == len(latlngs) - 1:
            role = PointRole.END
        else:
            role = PointRole.WAYPOINT
        points.append(Point(latlng.lat, latlng.lng, role))
    return points


def cmd_sort(args: argparse.Namespace, config: PlannerConfig) -> int:
    start = parse_latlng(args.start)
    waypoints = [Point(ll.lat, ll.lng) for ll in (parse_latlng(v) for v in args.waypoint or [])]
    if len(waypoints) > config.max_waypoints:
        raise ValidationFailure(f"At most {config.max_waypoints} waypoints are supported")

    ordered = reorder_waypoints(waypoints, start)
    if args.json:
        print(json.dumps([p.latlng.to_list() for p in ordered]))
    else:
        for i, p in enumerate(ordered, start=1):
            print(f"{i}. {p.lat},{p.lng}")
    return 0


async def fetch_directions(args: argparse.Namespace, config: PlannerConfig) -> int:
    points = route_points(args.point or [])
    if len(points) < 2:
        raise ValidationFailure("At least 2 points are required")

    client = GraphHopperClient.from_config(config)
    if args.vehicle:
        client.vehicle = args.vehicle
    async with client:
        try:
            response = await client.route(points)
        except RoutePlannerError as e:
            raise RouteCalculationError(f"Route calculation failed: {e}") from e

    model = build_segments(
        response,
        viewport_size=config.viewport_size,
        padding_px=float(config.get('segment_padding_px')),
        max_zoom=float(config.get('segment_max_zoom')),
        default_zoom=float(config.get('default_zoom')),
    )
    if model.is_empty:
        raise RouteCalculationError("No route found between the given points")

    total = model.geometry.distance_m if model.geometry is not None else None
    lines = directions_list(model.instructions, total)
    if args.json:
        print(json.dumps({
            'directions': lines,
            'optimal_zoom': model.optimal_zoom,
            'distance_m': total,
            'ascent_m': model.geometry.ascent_m if model.geometry else None,
            'descent_m': model.geometry.descent_m if model.geometry else None,
        }, indent=2))
    else:
        for line in lines:
            print(line)
        print(elevation_summary(model.geometry))
    return 0


def cmd_preview(args: argparse.Namespace, config: PlannerConfig) -> int:
    start = parse_camera(args.start)
    target = parse_camera(args.target)
    animator = CameraAnimator.from_config(config, start)
    if args.no_rotation:
        animator.rotation_enabled = False

    frames = animator.preview(target, duration_hint_ms=args.duration, fps=args.fps)
    print(json.dumps([frame.to_dict() for frame in frames], indent=2 if args.pretty else None))
    return 0


def cmd_config(args: argparse.Namespace, config: PlannerConfig) -> int:
    values = config.get_all()
    if values.get('routing_api_key'):
        values['routing_api_key'] = '***'
    print(json.dumps(values, indent=2, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='routeplanner', description='Route planning engine tools')
    p.add_argument('--config', help='Path to a JSON config file')
    p.add_argument('--log-level', help='DEBUG, INFO, WARNING or ERROR')
    sub = p.add_subparsers(dest='cmd', required=True)

    sort = sub.add_parser('sort', help='Order waypoints with the insertion heuristic')
    sort.add_argument('--start', required=True, help='lat,lng')
    sort.add_argument('--waypoint', action='append', help='lat,lng (repeatable)')
    sort.add_argument('--json', action='store_true')

    directions = sub.add_parser('directions', help='Fetch a route and print its directions')
    directions.add_argument('--point', action='append', help='lat,lng (repeatable, in route order)')
    directions.add_argument('--vehicle', help='Routing profile, e.g. hike or bike')
    directions.add_argument('--json', action='store_true')

    preview = sub.add_parser('preview', help='Print the camera keyframes of a transition')
    preview.add_argument('--from', dest='start', required=True, help='lat,lng,zoom[,bearing]')
    preview.add_argument('--to', dest='target', required=True, help='lat,lng,zoom[,bearing]')
    preview.add_argument('--duration', type=float, help='Base duration in ms')
    preview.add_argument('--fps', type=float, default=30.0)
    preview.add_argument('--no-rotation', action='store_true')
    preview.add_argument('--pretty', action='store_true')

    sub.add_parser('config', help='Show the effective configuration')
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging('routeplanner-cli', level=args.log_level)
    config = PlannerConfig(args.config)

    try:
        if args.cmd == 'sort':
            return cmd_sort(args, config)
        if args.cmd == 'directions':
            return asyncio.run(fetch_directions(args, config))
        if args.cmd == 'preview':
            return cmd_preview(args, config)
        if args.cmd == 'config':
            return cmd_config(args, config)
    except RoutePlannerError as e:
        logger.error(e.message)
        print(json.dumps(e.to_payload()), file=sys.stderr)
        return 1

    parser.error(f'Unknown command: {args.cmd}')
    return 2


if __name__ == '__main__':
    sys.exit(main())
