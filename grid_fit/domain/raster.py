"""Raster and search result domain objects.

This module provides the data structures produced by rasterizing a region
under a grid pose and by searching for the best grid alignment. All of them
are created fresh per call and treated as read-only once returned.

The module provides the following classes:
    GridSampleBounds: Inclusive integer bounds of the grid-cell lattice.
    RasterMask: Fine occupancy mask plus its summed-area table.
    RasterResult: Mask, lattice bounds and the largest inside component.
    AlignmentResult: Best pose found by the alignment search.
    RasterTimings: Accumulated time spent in each rasterization stage.

Coordinates:
    Mask cell (i, j) is column i, row j. Its lower-left corner sits at
    ``origin_grid + (i, j) * cell_size`` in grid-local space, so its centre is
    at ``origin_grid + (i + 0.5, j + 0.5) * cell_size``. Rows grow with
    grid-local y.

Example usage:
    Reading a rasterization::

        from grid_fit.analysis import rasterize_region

        result = rasterize_region(region, pose)
        if result is not None:
            print(f"{result.grid_cell_count} cells inside")
            print(f"mask is {result.mask.width}x{result.mask.height}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

import numpy as np

from .geometry import BBox, GridPose, Point

Cell = Tuple[int, int]


@dataclass(frozen=True)
class GridSampleBounds:
    """Inclusive bounds of a grid-cell lattice in grid-index units."""
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1


@dataclass(frozen=True, eq=False)
class RasterMask:
    """Occupancy mask over grid-local space.

    Attributes:
        data: uint8 array of shape (height, width); 1 marks an occupied cell.
        prefix_sum: int64 array of shape (height + 1, width + 1) where
            ``prefix_sum[y, x]`` is the number of occupied cells in rows
            ``[0, y)`` and columns ``[0, x)``. Row and column 0 are zero.
        cell_size: Edge length of one raster cell in grid-local units.
        origin_grid: Grid-local position of the lower-left corner of cell (0, 0).
    """
    data: np.ndarray
    prefix_sum: np.ndarray
    cell_size: float
    origin_grid: Point

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def extent(self) -> BBox:
        """Grid-local rectangle covered by the mask."""
        return BBox(
            self.origin_grid.x,
            self.origin_grid.y,
            self.origin_grid.x + self.width * self.cell_size,
            self.origin_grid.y + self.height * self.cell_size,
        )

    def rect_sum(self, x0: int, y0: int, x1: int, y1: int) -> int:
        """Occupied cells in columns [x0, x1) and rows [y0, y1)."""
        ps = self.prefix_sum
        return int(ps[y1, x1] - ps[y0, x1] - ps[y1, x0] + ps[y0, x0])


@dataclass(frozen=True, eq=False)
class RasterResult:
    """Rasterization of one region under one grid pose.

    Attributes:
        mask: Occupancy mask with its prefix-sum table.
        grid_spacing: Grid spacing the mask was built for.
        grid_sample_bounds: Lattice of grid cells that may overlap the mask.
        grid_cell_count: Size of the largest 4-connected set of inside cells.
        inside_cells: Lattice coordinates of that set.
    """
    mask: RasterMask
    grid_spacing: float
    grid_sample_bounds: GridSampleBounds
    grid_cell_count: int = 0
    inside_cells: FrozenSet[Cell] = frozenset()


@dataclass(frozen=True)
class AlignmentResult:
    """Best pose found by the alignment search."""
    angle: float
    origin: Point
    cell_count: int

    def apply_to(self, pose: GridPose) -> GridPose:
        """Return ``pose`` moved to this alignment, spacing unchanged."""
        return GridPose(origin=self.origin, angle=self.angle, spacing=pose.spacing)


@dataclass
class RasterTimings:
    """Seconds accumulated in each rasterization stage."""
    bounds: float = 0.0
    fill: float = 0.0
    prefix: float = 0.0
    component: float = 0.0
    calls: int = 0

    @property
    def total(self) -> float:
        return self.bounds + self.fill + self.prefix + self.component
