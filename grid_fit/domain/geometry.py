"""Geometric value objects for grid fitting."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Sequence, Tuple

# Region form shared with the clipping library: plain nested sequences.
# Ring 0 of a polygon is its outer boundary, later rings are holes.
Coord = Tuple[float, float]
Ring = Sequence[Coord]
Polygon = Sequence[Ring]
Region = Sequence[Polygon]


@dataclass(frozen=True)
class Point:
    """Immutable 2D point."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Point:
        return Point(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Point:
        return Point(self.x / scalar, self.y / scalar)

    def to_tuple(self) -> Coord:
        """Convert to tuple for compatibility."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, t: Sequence[float]) -> Point:
        """Create from tuple."""
        return cls(float(t[0]), float(t[1]))


@dataclass(frozen=True)
class BBox:
    """Immutable axis-aligned bounding box."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def center(self) -> Point:
        return Point(
            (self.x_min + self.x_max) / 2,
            (self.y_min + self.y_max) / 2
        )


@dataclass(frozen=True)
class GridPose:
    """Placement of the square grid in world space.

    Attributes:
        origin: World position of the grid line intersection (0, 0).
        angle: Counter-clockwise rotation in radians.
        spacing: World distance between neighbouring grid lines.
    """
    origin: Point = Point(0.0, 0.0)
    angle: float = 0.0
    spacing: float = 1.0

    def __post_init__(self):
        if not math.isfinite(self.spacing) or self.spacing <= 0:
            raise ValueError(f"grid spacing must be positive, got {self.spacing!r}")

    def with_angle(self, angle: float) -> GridPose:
        return replace(self, angle=angle)

    def with_origin(self, origin: Point) -> GridPose:
        return replace(self, origin=origin)


@dataclass(frozen=True)
class Camera:
    """World-to-screen mapping: screen = world * zoom + offset."""
    offset: Point = Point(0.0, 0.0)
    zoom: float = 1.0


def iter_points(region: Region) -> Iterator[Coord]:
    """Yield every vertex of every ring in the region."""
    for polygon in region:
        for ring in polygon:
            for x, y in ring:
                yield (x, y)


def iter_edges(ring: Ring) -> Iterator[Tuple[Coord, Coord]]:
    """Yield consecutive vertex pairs of a ring, including the implicit closing edge."""
    n = len(ring)
    if n < 2:
        return
    for i in range(n):
        yield ring[i], ring[(i + 1) % n]


def region_bounds(region: Optional[Region]) -> Optional[BBox]:
    """Bounding box of all finite region vertices.

    Returns:
        BBox, or None when the region is absent or has no finite point.
    """
    if not region:
        return None
    x_min = y_min = math.inf
    x_max = y_max = -math.inf
    for x, y in iter_points(region):
        if not (math.isfinite(x) and math.isfinite(y)):
            continue
        x_min = min(x_min, x)
        y_min = min(y_min, y)
        x_max = max(x_max, x)
        y_max = max(y_max, y)
    if not math.isfinite(x_min) or not math.isfinite(y_min):
        return None
    return BBox(x_min, y_min, x_max, y_max)


def clone_region(region: Region) -> List[List[List[Coord]]]:
    """Deep copy of a region as lists of float tuples."""
    return [
        [[(float(x), float(y)) for x, y in ring] for ring in polygon]
        for polygon in region
    ]
