"""Rasterization and cell analysis.

This module turns a region and a grid pose into an occupancy mask and answers
questions about the grid cells laid over it.

The module exports the following:
    rasterize_region: Mask, lattice bounds and largest inside component.
    rasterize_mask: Mask and prefix-sum table only, for hot loops.
    CellClassifier: Constant-time erosion test against a mask.
    is_cell_inside: One-shot erosion test on a RasterResult.
    largest_component: Largest 4-connected block of inside cells.
    count_largest_component: Count-only variant for one sub-cell offset.

Example usage:
    Inspect which cells fit::

        from grid_fit.analysis import rasterize_region
        from grid_fit.domain import GridPose

        result = rasterize_region(region, GridPose(spacing=2.0))
        for gx, gy in sorted(result.inside_cells):
            print(gx, gy)
"""

from .classifier import CellClassifier, is_cell_inside, lattice_bounds, lattice_center
from .components import (
    ComponentResult,
    count_largest_component,
    label_largest,
    largest_component,
)
from .rasterizer import build_prefix_sum, fill_mask, rasterize_mask, rasterize_region

__all__ = [
    'rasterize_region', 'rasterize_mask', 'fill_mask', 'build_prefix_sum',
    'CellClassifier', 'is_cell_inside', 'lattice_bounds', 'lattice_center',
    'ComponentResult', 'largest_component', 'label_largest', 'count_largest_component',
]
