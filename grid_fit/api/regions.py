"""Boolean combination of regions.

Regions travel through the package as plain nested sequences (polygons of
rings of coordinate pairs). This module converts them to shapely geometry to
union and subtract user-drawn polygons, and back again.

The module provides the following functions:
    to_shapely / from_shapely: Conversion between the two forms.
    polyline_to_polygon: Close a drawn point list into a one-ring polygon.
    union / difference: Region boolean operations.
    apply_polygon_boolean: Add or subtract a polygon by mode name.

Example usage:
    Building a region from two strokes::

        from grid_fit.api.regions import apply_polygon_boolean, polyline_to_polygon

        region = apply_polygon_boolean(None, polyline_to_polygon(outline), 'add')
        region = apply_polygon_boolean(region, polyline_to_polygon(cutout), 'subtract')
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from shapely.geometry import GeometryCollection, MultiPolygon
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from ..config import CLOSE_EPSILON
from ..domain.geometry import Coord, Polygon, Region

BOOLEAN_MODES = ('add', 'subtract')


def to_shapely(region: Optional[Region]) -> BaseGeometry:
    """Convert a region to a valid shapely geometry.

    Ring 0 of each polygon becomes the shell, later rings become holes.
    Polygons whose shell has fewer than three vertices are skipped.
    """
    parts = []
    for polygon in region or ():
        if not polygon or len(polygon[0]) < 3:
            continue
        shell = [(float(x), float(y)) for x, y in polygon[0]]
        holes = [
            [(float(x), float(y)) for x, y in ring]
            for ring in polygon[1:] if len(ring) >= 3
        ]
        parts.append(ShapelyPolygon(shell, holes))
    if not parts:
        return GeometryCollection()
    geom = MultiPolygon(parts) if len(parts) > 1 else parts[0]
    return geom if geom.is_valid else make_valid(geom)


def from_shapely(geom: Optional[BaseGeometry]) -> Optional[List[List[List[Coord]]]]:
    """Convert shapely geometry back to a region; areal parts only.

    Returns:
        Region, or None when the geometry holds no polygon area.
    """
    if geom is None or geom.is_empty:
        return None
    region = [_polygon_rings(p) for p in _iter_polygons(geom) if not p.is_empty]
    return region or None


def polyline_to_polygon(points: Sequence[Sequence[float]]) -> Optional[Polygon]:
    """Turn a drawn point list into a single-ring polygon.

    Args:
        points: Drawn vertices in world coordinates.

    Returns:
        ``[ring]`` with the ring closed explicitly when the first and last
        points are further apart than the closing tolerance, or None for
        fewer than three points.
    """
    if points is None or len(points) < 3:
        return None
    ring = [(float(p[0]), float(p[1])) for p in points]
    (fx, fy), (lx, ly) = ring[0], ring[-1]
    if math.hypot(lx - fx, ly - fy) > CLOSE_EPSILON:
        ring.append(ring[0])
    return [ring]


def union(a: Optional[Region], b: Optional[Region]) -> Optional[List[List[List[Coord]]]]:
    """Area covered by either region."""
    return from_shapely(to_shapely(a).union(to_shapely(b)))


def difference(a: Optional[Region], b: Optional[Region]) -> Optional[List[List[List[Coord]]]]:
    """Area of ``a`` not covered by ``b``."""
    return from_shapely(to_shapely(a).difference(to_shapely(b)))


def apply_polygon_boolean(
    region: Optional[Region],
    polygon: Optional[Polygon],
    mode: str,
) -> Optional[List[List[List[Coord]]]]:
    """Combine a region with one polygon.

    Args:
        region: Current region, or None.
        polygon: Polygon to add or subtract, or None to leave the region as is.
        mode: ``'add'`` or ``'subtract'``.

    Returns:
        The combined region, or None when nothing is left.

    Raises:
        ValueError: If ``mode`` is not a known boolean mode.
    """
    if mode not in BOOLEAN_MODES:
        raise ValueError(f"unknown boolean mode {mode!r}, expected one of {BOOLEAN_MODES}")
    if polygon is None:
        return from_shapely(to_shapely(region)) if region else None
    if mode == 'add':
        return union(region, [polygon]) if region else from_shapely(to_shapely([polygon]))
    if not region:
        return None
    return difference(region, [polygon])


def _iter_polygons(geom: BaseGeometry):
    if isinstance(geom, ShapelyPolygon):
        yield geom
    elif hasattr(geom, 'geoms'):
        for part in geom.geoms:
            yield from _iter_polygons(part)


def _polygon_rings(polygon: ShapelyPolygon) -> List[List[Coord]]:
    # Shapely repeats the first vertex at the end of every ring
    rings = [polygon.exterior] + list(polygon.interiors)
    return [[(float(x), float(y)) for x, y in list(ring.coords)[:-1]] for ring in rings]
