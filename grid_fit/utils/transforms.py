"""Coordinate transforms between world, grid-local and screen space.

Grid-local space is world space translated by -origin and rotated by -angle,
which makes the grid axis-aligned. All raster and cell arithmetic happens
there. Screen space is world space scaled by the camera zoom and shifted by
the camera offset.

The module provides the following functions:
    rotate: Standard counter-clockwise 2D rotation.
    world_to_grid / grid_to_world: Inverse pair for a grid pose.
    transform_region_to_grid: Whole-region conversion to numpy rings.
    world_to_screen / screen_to_world: Inverse pair for a camera.
    clamp_zoom: Keep a zoom factor within the configured limits.
    fit_camera: Camera framing a bounding box inside a viewport.
"""

from __future__ import annotations

import math
from typing import List, Optional

import numpy as np

from ..config import FIT_MARGIN_PX, INITIAL_CAMERA_ZOOM, MAX_CAMERA_ZOOM, MIN_CAMERA_ZOOM
from ..domain.geometry import BBox, Camera, GridPose, Point, Region


def rotate(vec: Point, angle: float) -> Point:
    """Rotate a vector counter-clockwise by ``angle`` radians."""
    s = math.sin(angle)
    c = math.cos(angle)
    return Point(vec.x * c - vec.y * s, vec.x * s + vec.y * c)


def world_to_grid(point: Point, pose: GridPose) -> Point:
    """Map a world point into the grid-local frame."""
    return rotate(point - pose.origin, -pose.angle)


def grid_to_world(point: Point, pose: GridPose) -> Point:
    """Map a grid-local point back into world space."""
    return rotate(point, pose.angle) + pose.origin


def transform_region_to_grid(region: Region, pose: GridPose) -> List[List[np.ndarray]]:
    """Convert every ring of a region into grid-local coordinates.

    Args:
        region: Region in world coordinates.
        pose: Grid pose defining the grid-local frame.

    Returns:
        Polygons as lists of float64 arrays of shape (N, 2), one per ring.
        Rings with non-finite vertices keep only their finite vertices.
    """
    s = math.sin(-pose.angle)
    c = math.cos(-pose.angle)
    ox, oy = pose.origin.x, pose.origin.y
    polygons = []
    for polygon in region:
        rings = []
        for ring in polygon:
            pts = np.asarray(ring, dtype=np.float64).reshape(-1, 2)
            pts = pts[np.isfinite(pts).all(axis=1)]
            tx = pts[:, 0] - ox
            ty = pts[:, 1] - oy
            rings.append(np.column_stack((tx * c - ty * s, tx * s + ty * c)))
        polygons.append(rings)
    return polygons


def world_to_screen(point: Point, camera: Camera) -> Point:
    """Apply camera zoom and offset to a world point."""
    return point * camera.zoom + camera.offset


def screen_to_world(point: Point, camera: Camera) -> Point:
    """Inverse of world_to_screen."""
    return (point - camera.offset) / camera.zoom


def clamp_zoom(value: float) -> float:
    return min(MAX_CAMERA_ZOOM, max(MIN_CAMERA_ZOOM, value))


def fit_camera(
    bounds: Optional[BBox],
    width: float,
    height: float,
    margin: float = FIT_MARGIN_PX,
) -> Camera:
    """Frame a world bounding box inside a viewport.

    The zoom never exceeds the initial zoom, so small regions are not blown
    up. Without bounds the view is centred on the world origin.

    Args:
        bounds: World-space box to frame, or None.
        width: Viewport width in pixels.
        height: Viewport height in pixels.
        margin: Inset kept free on every side, in pixels.

    Returns:
        Camera centring the box in the usable viewport area.
    """
    usable_w = max(32.0, width - 2 * margin)
    usable_h = max(32.0, height - 2 * margin)
    screen_center = Point(margin + usable_w / 2, margin + usable_h / 2)
    if bounds is None:
        return Camera(offset=screen_center, zoom=INITIAL_CAMERA_ZOOM)

    fit_zoom = min(
        usable_w / max(bounds.width, 1e-3),
        usable_h / max(bounds.height, 1e-3),
    )
    zoom = clamp_zoom(min(INITIAL_CAMERA_ZOOM, fit_zoom))
    return Camera(offset=screen_center - bounds.center * zoom, zoom=zoom)
