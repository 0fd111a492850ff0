"""Largest connected block of inside grid cells.

Components are labelled with ``scipy.ndimage.label`` over the classified
lattice using 4-connectivity (one step in grid x or grid y). Array element
``[j, i]`` is lattice cell ``(min_x + i, min_y + j)``.

Ties between components of equal size go to the one discovered first in
row-major order (gy outer, gx inner), which is also the order scipy numbers
its labels in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

import numpy as np
from scipy import ndimage

from ..domain.geometry import Point
from ..domain.raster import Cell, GridSampleBounds, RasterMask
from .classifier import ZERO_OFFSET, CellClassifier, lattice_bounds


@dataclass(frozen=True)
class ComponentResult:
    """Size of the largest inside component and, on request, its cells."""
    count: int
    cells: Optional[FrozenSet[Cell]] = None


def largest_component(
    classifier: CellClassifier,
    bounds: GridSampleBounds,
    offset: Point = ZERO_OFFSET,
    collect_cells: bool = False,
) -> ComponentResult:
    """Find the largest 4-connected set of inside cells on a lattice.

    Args:
        classifier: Erosion test bound to a raster mask.
        bounds: Inclusive lattice bounds to explore.
        offset: Sub-cell offset applied to every lattice cell.
        collect_cells: Also return the lattice coordinates of the winning
            component. Leave off in hot loops.

    Returns:
        ComponentResult with the component size (0 if no cell is inside) and,
        when requested, its cells.
    """
    inside = classifier.classify_lattice(bounds, offset)
    return label_largest(inside, bounds, collect_cells)


def label_largest(
    inside: np.ndarray,
    bounds: GridSampleBounds,
    collect_cells: bool = False,
) -> ComponentResult:
    """Label a pre-classified lattice and keep its largest component.

    Args:
        inside: Boolean array of shape (bounds.height, bounds.width).
        bounds: Lattice bounds the array was classified on.
        collect_cells: Also return the winning component's cells.

    Returns:
        ComponentResult for the largest component.
    """
    labeled, num_components = ndimage.label(inside)
    if num_components == 0:
        return ComponentResult(0, frozenset() if collect_cells else None)

    sizes = np.bincount(labeled.ravel())[1:]
    best = int(np.argmax(sizes))
    count = int(sizes[best])
    if not collect_cells:
        return ComponentResult(count)

    rows, cols = np.nonzero(labeled == best + 1)
    cells = frozenset(
        (bounds.min_x + int(i), bounds.min_y + int(j)) for j, i in zip(rows, cols)
    )
    return ComponentResult(count, cells)


def count_largest_component(
    mask: RasterMask,
    spacing: float,
    offset: Point = ZERO_OFFSET,
) -> int:
    """Count-only largest component for one sub-cell offset of the lattice."""
    classifier = CellClassifier(mask, spacing)
    bounds = lattice_bounds(mask, spacing, offset)
    return largest_component(classifier, bounds, offset).count
