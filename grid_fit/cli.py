#!/usr/bin/env python3
"""Command-line interface for grid fitting.

This module counts the grid cells that fit inside a region and searches for
the grid alignment that fits the most. Regions are read from JSON files
holding either nested coordinates (polygons of rings of [x, y] pairs) or a
GeoJSON Polygon / MultiPolygon geometry, optionally wrapped in a Feature.

Usage:
    grid-fit count floor.json --spacing 1.5 --angle 12 --overlay cells.png
    grid-fit align floor.json --spacing 1.5 --timeout 10
    grid-fit -v align floor.json --spacing 1.5 --resolution 6

Or run via the main module:
    python -m grid_fit.cli count floor.json --spacing 1.5

Exit status is 0 on success, 1 for invalid input and 2 when the alignment
search was cancelled by its timeout.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .analysis.rasterizer import rasterize_region
from .config import RASTER_RESOLUTION
from .domain.geometry import GridPose, Point, Region, region_bounds
from .optimization.search import AlignmentCancelled, CancellationToken, find_best_alignment
from .utils.rendering import render_overlay
from .utils.transforms import fit_camera

logger = logging.getLogger(__name__)

OVERLAY_SIZE = (800, 600)


def _positive_int(value: str) -> int:
    """argparse type accepting integers of at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog='grid-fit',
        description='Fit a rotated square grid inside a polygonal region'
    )
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('region', type=str,
                        help='Region JSON file (nested coordinates or GeoJSON)')
    common.add_argument('--spacing', '-s', type=float, required=True,
                        help='Grid spacing in world units')
    common.add_argument('--origin', type=float, nargs=2, default=(0.0, 0.0),
                        metavar=('X', 'Y'), help='Grid origin (default: 0 0)')
    common.add_argument('--resolution', '-r', type=_positive_int, default=RASTER_RESOLUTION,
                        help=f'Raster cells per grid cell (default: {RASTER_RESOLUTION})')

    count = subparsers.add_parser('count', parents=[common],
                                  help='Count cells of the largest inside block')
    count.add_argument('--angle', '-a', type=float, default=0.0,
                       help='Grid rotation in degrees (default: 0)')
    count.add_argument('--overlay', '-o', type=str, default=None,
                       help='Write a PNG overlay of the inside cells')

    align = subparsers.add_parser('align', parents=[common],
                                  help='Search for the best grid rotation and offset')
    align.add_argument('--timeout', '-t', type=float, default=None,
                       help='Cancel the search after this many seconds')
    return parser


def load_region(path: str) -> Region:
    """Read a region from a JSON file.

    Args:
        path: File holding nested coordinates or a GeoJSON geometry.

    Returns:
        Region as nested lists of (x, y) tuples.

    Raises:
        ValueError: If the file is not valid JSON or not a supported shape.
    """
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid JSON ({e})") from e
    return parse_region(data)


def parse_region(data) -> Region:
    """Convert decoded JSON to a region.

    Raises:
        ValueError: If the structure is not a supported region shape.
    """
    if isinstance(data, dict):
        kind = data.get('type')
        if kind == 'Feature':
            return parse_region(data.get('geometry'))
        if kind == 'Polygon':
            polygons = [data.get('coordinates')]
        elif kind == 'MultiPolygon':
            polygons = data.get('coordinates')
        else:
            raise ValueError(f"unsupported GeoJSON type {kind!r}")
    elif isinstance(data, list):
        polygons = data
    else:
        raise ValueError("region must be a list of polygons or a GeoJSON geometry")

    try:
        return [
            [[(float(pt[0]), float(pt[1])) for pt in ring] for ring in polygon]
            for polygon in polygons
        ]
    except (TypeError, IndexError, KeyError) as e:
        raise ValueError(f"malformed region coordinates ({e})") from e


def _process_count_command(args) -> int:
    region = load_region(args.region)
    pose = GridPose(
        origin=Point.from_tuple(args.origin),
        angle=math.radians(args.angle),
        spacing=args.spacing,
    )
    result = rasterize_region(region, pose, args.resolution)
    count = result.grid_cell_count if result is not None else 0
    print(count)

    if args.overlay:
        camera = fit_camera(region_bounds(region), *OVERLAY_SIZE)
        image = render_overlay(result, pose, camera, OVERLAY_SIZE, region=region)
        image.save(args.overlay)
        logger.info("Overlay written to %s", args.overlay)
    return 0


def _process_align_command(args) -> int:
    region = load_region(args.region)
    pose = GridPose(origin=Point.from_tuple(args.origin), spacing=args.spacing)
    token = CancellationToken()

    timer = None
    if args.timeout is not None:
        timer = threading.Timer(args.timeout, token.cancel)
        timer.daemon = True
        timer.start()

    try:
        result = find_best_alignment(region, pose, token, resolution=args.resolution)
    except AlignmentCancelled:
        print(f"alignment cancelled after {args.timeout}s", file=sys.stderr)
        return 2
    finally:
        if timer is not None:
            timer.cancel()

    if result is None:
        print(json.dumps(None))
        return 0
    print(json.dumps({
        'angle': math.degrees(result.angle),
        'origin': list(result.origin.to_tuple()),
        'cell_count': result.cell_count,
    }))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for grid fitting.

    Args:
        argv: Argument list; defaults to ``sys.argv[1:]``.

    Returns:
        Process exit status.
    """
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        if args.command == 'count':
            return _process_count_command(args)
        return _process_align_command(args)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
