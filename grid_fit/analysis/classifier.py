"""Erosion test for grid cells.

A grid cell is a ``spacing x spacing`` square in grid-local space. It counts
as inside the region only when every raster cell under its footprint is
occupied, which the mask's summed-area table answers in constant time.

Lattice convention:
    Lattice index (gx, gy) with sub-cell offset (ox, oy) names the cell whose
    lower-left corner is ``(gx * spacing + ox, gy * spacing + oy)``; its
    centre is half a spacing further along each axis.

Footprints touching or crossing the mask border are classified outside. The
rasterizer pads the mask so that no cell that can be inside ever gets there.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from ..config import ERODE_EPSILON
from ..domain.geometry import Point
from ..domain.raster import GridSampleBounds, RasterMask, RasterResult

ZERO_OFFSET = Point(0.0, 0.0)


def lattice_center(gx: int, gy: int, spacing: float, offset: Point = ZERO_OFFSET) -> Point:
    """Grid-local centre of lattice cell (gx, gy)."""
    return Point((gx + 0.5) * spacing + offset.x, (gy + 0.5) * spacing + offset.y)


def lattice_bounds(
    mask: RasterMask,
    spacing: float,
    offset: Point = ZERO_OFFSET,
) -> GridSampleBounds:
    """Lattice of cells that can overlap the mask, with one cell of slack."""
    extent = mask.extent
    return GridSampleBounds(
        min_x=math.floor((extent.x_min - offset.x) / spacing) - 1,
        max_x=math.ceil((extent.x_max - offset.x) / spacing),
        min_y=math.floor((extent.y_min - offset.y) / spacing) - 1,
        max_y=math.ceil((extent.y_max - offset.y) / spacing),
    )


class CellClassifier:
    """Constant-time erosion test against one raster mask.

    Attributes:
        mask: Occupancy mask with prefix-sum table.
        spacing: Grid-cell edge length in grid-local units.
        epsilon: Slack, in raster cells, absorbed when snapping footprint
            edges to raster indices.

    Example:
        >>> classifier = CellClassifier(result.mask, result.grid_spacing)
        >>> classifier.is_inside(lattice_center(0, 0, result.grid_spacing))
        True
    """

    def __init__(self, mask: RasterMask, spacing: float, epsilon: float = ERODE_EPSILON):
        self.mask = mask
        self.spacing = spacing
        self.epsilon = epsilon
        self._half = spacing / 2

    def footprint(self, center: Point) -> Optional[Tuple[int, int, int, int]]:
        """Raster-index rectangle under the cell centred at ``center``.

        Returns:
            ``(x0, y0, x1, y1)`` with half-open column range [x0, x1) and row
            range [y0, y1), or None when the footprint leaves the mask or is
            empty.
        """
        mask = self.mask
        cs = mask.cell_size
        ox, oy = mask.origin_grid.x, mask.origin_grid.y
        eps = self.epsilon

        x0 = math.floor((center.x - self._half - ox) / cs + eps)
        x1 = math.ceil((center.x + self._half - ox) / cs - eps)
        y0 = math.floor((center.y - self._half - oy) / cs + eps)
        y1 = math.ceil((center.y + self._half - oy) / cs - eps)

        if x0 < 0 or y0 < 0 or x1 > mask.width or y1 > mask.height:
            return None
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1

    def is_inside(self, center: Point) -> bool:
        """True when every raster cell under the footprint is occupied."""
        rect = self.footprint(center)
        if rect is None:
            return False
        x0, y0, x1, y1 = rect
        return self.mask.rect_sum(x0, y0, x1, y1) == (x1 - x0) * (y1 - y0)

    def classify_lattice(
        self,
        bounds: GridSampleBounds,
        offset: Point = ZERO_OFFSET,
    ) -> np.ndarray:
        """Erosion test for every cell of a lattice at once.

        Produces exactly the answers ``is_inside`` gives cell by cell, using
        the same arithmetic on numpy vectors.

        Args:
            bounds: Lattice to classify.
            offset: Sub-cell offset of the lattice in grid-local units.

        Returns:
            Boolean array of shape (bounds.height, bounds.width); element
            [j, i] is cell (bounds.min_x + i, bounds.min_y + j).
        """
        mask = self.mask
        cs = mask.cell_size
        eps = self.epsilon

        gx = np.arange(bounds.min_x, bounds.max_x + 1, dtype=np.float64)
        gy = np.arange(bounds.min_y, bounds.max_y + 1, dtype=np.float64)
        cx = (gx + 0.5) * self.spacing + offset.x
        cy = (gy + 0.5) * self.spacing + offset.y

        x0, x1, valid_x = self._axis_spans(cx, mask.origin_grid.x, cs, eps, mask.width)
        y0, y1, valid_y = self._axis_spans(cy, mask.origin_grid.y, cs, eps, mask.height)

        ps = mask.prefix_sum
        area = (
            ps[y1[:, None], x1[None, :]]
            - ps[y0[:, None], x1[None, :]]
            - ps[y1[:, None], x0[None, :]]
            + ps[y0[:, None], x0[None, :]]
        )
        expected = (y1 - y0)[:, None] * (x1 - x0)[None, :]
        return valid_y[:, None] & valid_x[None, :] & (area == expected)

    def _axis_spans(self, centers, origin, cs, eps, limit):
        start = np.floor((centers - self._half - origin) / cs + eps).astype(np.int64)
        end = np.ceil((centers + self._half - origin) / cs - eps).astype(np.int64)
        valid = (start >= 0) & (end <= limit) & (end > start)
        return np.clip(start, 0, limit), np.clip(end, 0, limit), valid


def is_cell_inside(raster: RasterResult, grid_point: Point) -> bool:
    """Erosion test for the grid cell centred at ``grid_point`` (grid-local)."""
    return CellClassifier(raster.mask, raster.grid_spacing).is_inside(grid_point)
