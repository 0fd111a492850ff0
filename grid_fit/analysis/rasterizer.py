"""Region rasterization under a grid pose.

This module converts a region and a grid pose into a fine occupancy mask in
grid-local space, builds the mask's summed-area table, and finds the largest
connected block of grid cells fully covered by the region.

The rasterization process:
    1. Transform the region into grid-local space (axis-aligned grid)
    2. Pad the region bounds by more than half a grid cell
    3. Snap the padded box outward to whole raster cells
    4. Fill raster cells whose centre lies inside the region (even-odd
       per polygon, union across polygons)
    5. Build the prefix-sum table
    6. Derive the grid-cell lattice covering the mask
    7. Label the lattice for the largest inside component

Example usage:
    Counting cells::

        from grid_fit.analysis.rasterizer import rasterize_region
        from grid_fit.domain import GridPose

        square = [[[(0, 0), (10, 0), (10, 10), (0, 10)]]]
        result = rasterize_region(square, GridPose(spacing=2.0))
        print(result.grid_cell_count)  # 25
"""

from __future__ import annotations

import logging
import math
import time
from typing import List, Optional, Sequence

import numpy as np

from ..config import RASTER_MARGIN_CELLS, RASTER_RESOLUTION
from ..domain.geometry import BBox, GridPose, Point, Region
from ..domain.raster import RasterMask, RasterResult, RasterTimings
from ..utils.transforms import transform_region_to_grid
from .classifier import CellClassifier, lattice_bounds
from .components import largest_component

logger = logging.getLogger(__name__)


def rasterize_region(
    region: Optional[Region],
    pose: GridPose,
    resolution: int = RASTER_RESOLUTION,
    timings: Optional[RasterTimings] = None,
) -> Optional[RasterResult]:
    """Rasterize a region and find its largest block of inside grid cells.

    Args:
        region: Region in world coordinates, or None.
        pose: Grid pose to rasterize under.
        resolution: Raster cells per grid-cell edge.
        timings: Optional accumulator for per-stage durations.

    Returns:
        RasterResult, or None when the region is absent, empty, or has no
        finite vertex.
    """
    mask = rasterize_mask(region, pose, resolution, timings)
    if mask is None:
        return None

    t0 = time.perf_counter()
    bounds = lattice_bounds(mask, pose.spacing)
    component = largest_component(
        CellClassifier(mask, pose.spacing), bounds, collect_cells=True
    )
    if timings is not None:
        timings.component += time.perf_counter() - t0

    logger.debug(
        "Rasterized %dx%d mask, lattice %dx%d, %d cells inside",
        mask.width, mask.height, bounds.width, bounds.height, component.count,
    )
    return RasterResult(
        mask=mask,
        grid_spacing=pose.spacing,
        grid_sample_bounds=bounds,
        grid_cell_count=component.count,
        inside_cells=component.cells or frozenset(),
    )


def rasterize_mask(
    region: Optional[Region],
    pose: GridPose,
    resolution: int = RASTER_RESOLUTION,
    timings: Optional[RasterTimings] = None,
) -> Optional[RasterMask]:
    """Build the occupancy mask and prefix-sum table for one pose.

    Args:
        region: Region in world coordinates, or None.
        pose: Grid pose defining grid-local space.
        resolution: Raster cells per grid-cell edge.
        timings: Optional accumulator for per-stage durations.

    Returns:
        RasterMask, or None for an absent or degenerate region.

    Raises:
        ValueError: If resolution is less than 1.
    """
    if resolution < 1:
        raise ValueError(f"Resolution must be at least 1, got {resolution}")
    if not region:
        return None

    t0 = time.perf_counter()
    cell_size = pose.spacing / resolution
    region_grid = transform_region_to_grid(region, pose)
    bounds = _grid_bounds(region_grid)
    if bounds is None:
        return None

    # The margin must exceed half a grid cell so boundary cells are never clipped
    margin = max(RASTER_MARGIN_CELLS, math.ceil((pose.spacing / 2) / cell_size) + 2)
    ix0 = math.floor(bounds.x_min / cell_size) - margin
    iy0 = math.floor(bounds.y_min / cell_size) - margin
    ix1 = math.ceil(bounds.x_max / cell_size) + margin
    iy1 = math.ceil(bounds.y_max / cell_size) + margin
    width = max(1, ix1 - ix0)
    height = max(1, iy1 - iy0)
    origin_grid = Point(ix0 * cell_size, iy0 * cell_size)
    t_bounds = time.perf_counter()

    data = fill_mask(region_grid, origin_grid, cell_size, width, height)
    t_fill = time.perf_counter()

    prefix_sum = build_prefix_sum(data)
    t_prefix = time.perf_counter()

    if timings is not None:
        timings.bounds += t_bounds - t0
        timings.fill += t_fill - t_bounds
        timings.prefix += t_prefix - t_fill
        timings.calls += 1

    return RasterMask(
        data=data,
        prefix_sum=prefix_sum,
        cell_size=cell_size,
        origin_grid=origin_grid,
    )


def fill_mask(
    region_grid: Sequence[Sequence[np.ndarray]],
    origin_grid: Point,
    cell_size: float,
    width: int,
    height: int,
) -> np.ndarray:
    """Scanline fill of grid-local polygons into a raster.

    A raster cell is occupied when its centre is inside at least one polygon,
    where inside a polygon follows the even-odd rule over all of its rings.
    Crossings use a half-open rule on y, so horizontal and zero-length edges
    never contribute and a vertex shared by two edges is counted once.

    Args:
        region_grid: Polygons as lists of (N, 2) ring arrays in grid-local space.
        origin_grid: Grid-local lower-left corner of raster cell (0, 0).
        cell_size: Raster cell edge length.
        width: Raster columns.
        height: Raster rows.

    Returns:
        uint8 array of shape (height, width).
    """
    # Span boundaries per row; one extra column absorbs spans ending at the edge
    diff = np.zeros((height, width + 1), dtype=np.int32)

    for polygon in region_grid:
        edges = _polygon_edges(polygon, origin_grid, cell_size)
        if edges is None:
            continue
        rows, xs = _row_crossings(edges, height)
        if rows.size == 0:
            continue

        order = np.lexsort((xs, rows))
        rows = rows[order]
        xs = xs[order]

        # Every row holds an even number of crossings; consecutive pairs are spans
        span_rows = rows[0::2]
        start = np.clip(np.ceil(xs[0::2] - 0.5), 0, width).astype(np.int64)
        end = np.clip(np.ceil(xs[1::2] - 0.5), 0, width).astype(np.int64)
        np.add.at(diff, (span_rows, start), 1)
        np.add.at(diff, (span_rows, end), -1)

    coverage = np.cumsum(diff[:, :width], axis=1)
    return (coverage > 0).astype(np.uint8)


def build_prefix_sum(data: np.ndarray) -> np.ndarray:
    """Summed-area table with a leading row and column of zeros."""
    height, width = data.shape
    prefix_sum = np.zeros((height + 1, width + 1), dtype=np.int64)
    prefix_sum[1:, 1:] = data.astype(np.int64).cumsum(axis=0).cumsum(axis=1)
    return prefix_sum


def _grid_bounds(region_grid: Sequence[Sequence[np.ndarray]]) -> Optional[BBox]:
    rings = [ring for polygon in region_grid for ring in polygon if len(ring)]
    if not rings:
        return None
    pts = np.concatenate(rings)
    x_min, y_min = pts.min(axis=0)
    x_max, y_max = pts.max(axis=0)
    return BBox(float(x_min), float(y_min), float(x_max), float(y_max))


def _polygon_edges(
    polygon: Sequence[np.ndarray],
    origin_grid: Point,
    cell_size: float,
) -> Optional[np.ndarray]:
    """All ring edges of a polygon in raster units, shape (E, 4): x0, y0, x1, y1."""
    parts: List[np.ndarray] = []
    origin = np.array([origin_grid.x, origin_grid.y])
    for ring in polygon:
        if len(ring) < 2:
            continue
        pts = (ring - origin) / cell_size
        parts.append(np.hstack((pts, np.roll(pts, -1, axis=0))))
    if not parts:
        return None
    return np.concatenate(parts)


def _row_crossings(edges: np.ndarray, height: int):
    """Rows crossed by each edge and the x of each crossing.

    Row j samples y = j + 0.5. A vertex lies below row j when
    ``ceil(y - 0.5) <= j``; an edge crosses the row when exactly one of its
    vertices is below it.
    """
    x0, y0, x1, y1 = edges.T
    first = np.clip(np.ceil(np.minimum(y0, y1) - 0.5), 0, height).astype(np.int64)
    last = np.clip(np.ceil(np.maximum(y0, y1) - 0.5), 0, height).astype(np.int64)
    counts = last - first
    total = int(counts.sum())
    if total == 0:
        return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64)

    edge_idx = np.repeat(np.arange(len(edges)), counts)
    run_start = np.repeat(np.cumsum(counts) - counts, counts)
    rows = first[edge_idx] + (np.arange(total) - run_start)

    sample_y = rows + 0.5
    ey0 = y0[edge_idx]
    t = (sample_y - ey0) / (y1[edge_idx] - ey0)
    xs = x0[edge_idx] + t * (x1[edge_idx] - x0[edge_idx])
    return rows, xs
