"""Utility functions for grid fitting.

This module provides coordinate transforms and Pillow rendering helpers used
throughout the package and by the command-line interface.

The module exports the following functions:

Transform utilities:
    rotate: Counter-clockwise 2D rotation of a vector.
    world_to_grid / grid_to_world: Inverse pair for a grid pose.
    transform_region_to_grid: Region to grid-local numpy rings.
    world_to_screen / screen_to_world: Inverse pair for a camera.
    clamp_zoom / fit_camera: Camera helpers.

Rendering utilities:
    mask_to_image: Occupancy mask as a grayscale image.
    render_overlay: Inside cells drawn over a canvas.

Example usage:
    Round-tripping a point::

        from grid_fit.domain import GridPose, Point
        from grid_fit.utils import grid_to_world, world_to_grid

        pose = GridPose(origin=Point(3, 4), angle=0.5, spacing=1.0)
        local = world_to_grid(Point(10, 2), pose)
        back = grid_to_world(local, pose)  # Point(10, 2) up to rounding
"""

from .rendering import cell_corners, mask_to_image, render_overlay
from .transforms import (
    clamp_zoom,
    fit_camera,
    grid_to_world,
    rotate,
    screen_to_world,
    transform_region_to_grid,
    world_to_grid,
    world_to_screen,
)

__all__ = [
    'rotate', 'world_to_grid', 'grid_to_world', 'transform_region_to_grid',
    'world_to_screen', 'screen_to_world', 'clamp_zoom', 'fit_camera',
    'mask_to_image', 'cell_corners', 'render_overlay',
]
