"""Grid alignment optimization.

This module searches grid rotations and sub-cell offsets for the pose that
keeps the most connected grid cells inside a region.

The module exports the following:
    AlignmentSearch: Configurable search with sync and asyncio drivers.
    find_best_alignment / find_best_alignment_async: One-call helpers.
    CancellationToken / AlignmentCancelled: Cooperative cancellation.
    SearchProgress / SearchStats: Progress and profiling records.
    candidate_angles: Rotations sampled by the search.

Example usage:
    Align a grid and apply the result::

        from grid_fit.optimization import CancellationToken, find_best_alignment

        token = CancellationToken()
        result = find_best_alignment(region, pose, token)
        if result is not None:
            pose = result.apply_to(pose)
"""

from .candidates import candidate_angles, edge_directions
from .search import (
    AlignmentCancelled,
    AlignmentSearch,
    CancellationToken,
    SearchProgress,
    SearchStats,
    find_best_alignment,
    find_best_alignment_async,
)

__all__ = [
    'AlignmentSearch', 'find_best_alignment', 'find_best_alignment_async',
    'CancellationToken', 'AlignmentCancelled',
    'SearchProgress', 'SearchStats',
    'candidate_angles', 'edge_directions',
]
