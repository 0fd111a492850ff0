"""Raster and grid overlay rendering.

This module draws the results of rasterization with Pillow, for previews and
the command-line ``--overlay`` option.

The module provides the following functions:
    mask_to_image: Occupancy mask as a grayscale image.
    cell_corners: Screen-space corners of one grid cell.
    render_overlay: Inside cells (and optionally the region) on a canvas.

Example usage:
    Writing an overlay::

        from grid_fit.analysis import rasterize_region
        from grid_fit.domain import region_bounds
        from grid_fit.utils import fit_camera, render_overlay

        result = rasterize_region(region, pose)
        camera = fit_camera(region_bounds(region), 640, 480)
        render_overlay(result, pose, camera, (640, 480), region=region).save('out.png')
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from ..domain.geometry import Camera, GridPose, Point, Region
from ..domain.raster import RasterMask, RasterResult
from .transforms import grid_to_world, world_to_screen

Color = Tuple[int, int, int, int]

CELL_FILL: Color = (46, 139, 87, 110)
CELL_OUTLINE: Color = (46, 139, 87, 220)
REGION_OUTLINE: Color = (30, 30, 30, 255)


def mask_to_image(mask: RasterMask) -> Image.Image:
    """Convert an occupancy mask to an 'L' image, occupied cells white.

    Mask row 0 is the lowest grid-local row, so rows are flipped to put it at
    the bottom of the image.
    """
    pixels = np.flipud(mask.data).astype(np.uint8) * 255
    return Image.fromarray(np.ascontiguousarray(pixels))


def cell_corners(
    gx: int,
    gy: int,
    pose: GridPose,
    camera: Camera,
) -> List[Tuple[float, float]]:
    """Screen-space corners of lattice cell (gx, gy) under ``pose``."""
    s = pose.spacing
    local = [
        Point(gx * s, gy * s),
        Point((gx + 1) * s, gy * s),
        Point((gx + 1) * s, (gy + 1) * s),
        Point(gx * s, (gy + 1) * s),
    ]
    return [world_to_screen(grid_to_world(p, pose), camera).to_tuple() for p in local]


def render_overlay(
    raster: Optional[RasterResult],
    pose: GridPose,
    camera: Camera,
    size: Tuple[int, int],
    region: Optional[Region] = None,
    fill: Color = CELL_FILL,
    outline: Color = CELL_OUTLINE,
) -> Image.Image:
    """Draw the largest inside component as rotated squares.

    Args:
        raster: Rasterization to draw; None draws only the region.
        pose: Pose the rasterization was made under.
        camera: World-to-screen mapping.
        size: Canvas (width, height) in pixels.
        region: Optional region to outline on top of the cells.
        fill: RGBA cell fill.
        outline: RGBA cell outline.

    Returns:
        RGBA image on a white background.
    """
    image = Image.new('RGBA', size, (255, 255, 255, 255))
    layer = Image.new('RGBA', size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    if raster is not None:
        for gx, gy in sorted(raster.inside_cells):
            draw.polygon(cell_corners(gx, gy, pose, camera), fill=fill, outline=outline)

    if region:
        for polygon in region:
            for ring in polygon:
                if len(ring) < 2:
                    continue
                pts = [
                    world_to_screen(Point(float(x), float(y)), camera).to_tuple()
                    for x, y in ring
                ]
                draw.line(pts + [pts[0]], fill=REGION_OUTLINE, width=2)

    return Image.alpha_composite(image, layer)
