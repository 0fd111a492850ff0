"""Shared configuration for grid fitting.

This module centralizes the tuning values used by:
    - analysis.rasterizer (mask resolution and padding)
    - analysis.classifier (erosion tolerance)
    - optimization.candidates / optimization.search (angle sampling, yielding)
    - utils.transforms (camera limits)

Having these values in one place keeps the rasterizer and the alignment
search in agreement, since the raster resolution also sets the sub-cell
offset resolution of the search.
"""

# Raster cells per grid-cell edge. Sets both mask fidelity and the number of
# sub-cell offsets tried per axis by the alignment search.
RASTER_RESOLUTION = 8

# Minimum padding around the region bounds, in raster cells
RASTER_MARGIN_CELLS = 2

# Tolerance applied when flooring/ceiling cell footprints into raster indices
ERODE_EPSILON = 1e-7

# Angle histogram bucket width for candidate generation
ANGLE_BUCKET_DEGREES = 1.0

# Coarsest spacing between candidate angles inside an edge-free gap
MAX_ANGLE_STEP_DEGREES = 5.0

# Seconds of uninterrupted search work before ceding control
YIELD_INTERVAL_SECONDS = 0.012

# Distance under which a drawn polyline already counts as closed
CLOSE_EPSILON = 1e-6

# Edges shorter than this carry no direction
MIN_EDGE_LENGTH = 1e-9

# Camera defaults (screen pixels per world unit)
INITIAL_CAMERA_ZOOM = 60.0
MIN_CAMERA_ZOOM = 10.0
MAX_CAMERA_ZOOM = 200.0
FIT_MARGIN_PX = 12
