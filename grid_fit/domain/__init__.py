"""Domain objects for grid fitting.

This module provides the value objects shared by every stage of the grid
fitting pipeline: geometric primitives, the grid pose, and the records
produced by rasterization and alignment search.

The module exports the following classes:

Geometry classes:
    Point: Immutable 2D point with vector operations.
    BBox: Immutable axis-aligned bounding box.
    GridPose: Origin, rotation and spacing of the square grid.
    Camera: Zoom and offset mapping world space to screen pixels.

Raster classes:
    RasterMask: Occupancy mask with summed-area table.
    GridSampleBounds: Integer lattice bounds in grid-cell units.
    RasterResult: Rasterization output including the largest component.
    AlignmentResult: Best grid pose found by the search.
    RasterTimings: Per-stage timing accumulator.

Example usage:
    Working with poses::

        from grid_fit.domain import GridPose, Point

        pose = GridPose(origin=Point(0, 0), angle=0.0, spacing=2.0)
        turned = pose.with_angle(0.25)
"""

from .geometry import (
    BBox,
    Camera,
    GridPose,
    Point,
    Polygon,
    Region,
    Ring,
    clone_region,
    iter_edges,
    iter_points,
    region_bounds,
)
from .raster import (
    AlignmentResult,
    GridSampleBounds,
    RasterMask,
    RasterResult,
    RasterTimings,
)

__all__ = [
    'Point', 'BBox', 'GridPose', 'Camera',
    'Ring', 'Polygon', 'Region',
    'iter_points', 'iter_edges', 'region_bounds', 'clone_region',
    'RasterMask', 'GridSampleBounds', 'RasterResult', 'AlignmentResult', 'RasterTimings',
]
