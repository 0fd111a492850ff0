"""Grid fitting package.

Places a rotated, evenly spaced square grid over a polygonal region (holes
allowed), counts the largest connected block of grid cells lying fully inside
the region, and searches rotations and sub-cell offsets for the placement
that maximizes that count.

The package is organized into the following modules:
    domain: Value objects including Point, BBox, GridPose, RasterMask and
        the rasterization and alignment results.
    analysis: Rasterizer, erosion test and connected-component analysis.
    optimization: Candidate rotations and the cancellable alignment search.
    utils: Coordinate transforms and Pillow rendering.
    api: Editable session state, single-flight search service and shapely
        backed region booleans.
    cli: The ``grid-fit`` command.

Example usage:
    Counting cells::

        from grid_fit import GridPose, rasterize_region

        square = [[[(0, 0), (10, 0), (10, 10), (0, 10)]]]
        result = rasterize_region(square, GridPose(spacing=2.0))
        print(result.grid_cell_count)  # 25

    Finding the best alignment::

        from grid_fit import find_best_alignment

        best = find_best_alignment(square, GridPose(spacing=3.0))
        print(best.angle, best.origin, best.cell_count)

Attributes:
    __version__ (str): Package version string.
    __all__ (list): List of public symbols exported by this package.
"""

from .analysis import is_cell_inside, rasterize_region
from .api import AlignmentService, GridSession
from .domain import AlignmentResult, BBox, GridPose, Point, RasterMask, RasterResult
from .optimization import (
    AlignmentCancelled,
    AlignmentSearch,
    CancellationToken,
    find_best_alignment,
    find_best_alignment_async,
)

__all__ = [
    # Domain objects
    'Point', 'BBox', 'GridPose', 'RasterMask', 'RasterResult', 'AlignmentResult',
    # Analysis
    'rasterize_region', 'is_cell_inside',
    # Search
    'AlignmentSearch', 'find_best_alignment', 'find_best_alignment_async',
    'CancellationToken', 'AlignmentCancelled',
    # Services
    'GridSession', 'AlignmentService',
]

__version__ = '1.0.0'
