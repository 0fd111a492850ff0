"""API layer for grid fitting.

This module provides the stateful services and region editing helpers used by
interactive hosts and the command-line interface.

The module exports the following:
    GridSession: Region, grid pose and cached rasterization.
    AlignmentService: Single-flight alignment search bound to a session.
    polyline_to_polygon / union / difference / apply_polygon_boolean:
        Region boolean operations backed by shapely.

Example usage:
    Build a region and count cells::

        from grid_fit.api import GridSession
        from grid_fit.domain import GridPose

        session = GridSession(pose=GridPose(spacing=1.0))
        session.apply_polygon([(0, 0), (6, 0), (6, 4), (0, 4)])
        print(session.cell_count)
"""

from .regions import (
    apply_polygon_boolean,
    difference,
    from_shapely,
    polyline_to_polygon,
    to_shapely,
    union,
)
from .services import AlignmentService, GridSession

__all__ = [
    'GridSession', 'AlignmentService',
    'polyline_to_polygon', 'union', 'difference', 'apply_polygon_boolean',
    'to_shapely', 'from_shapely',
]
