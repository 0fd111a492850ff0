"""Shared pytest fixtures for the grid_fit test suite.

Fixtures:
    square_region: 10x10 square with its lower-left corner at the origin.
    two_blocks_region: Two disjoint rectangles of different size.
    l_shape_region: L-shaped polygon.
    holed_square_region: 10x10 square with a 4x4 hole in the middle.
    floorplan_region: Irregular, slightly rotated floorplan outline.
    unit_pose: Unrotated grid pose with spacing 1 at the origin.

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from grid_fit.domain import GridPose, Point  # noqa: E402

FLOORPLAN = [
    [
        [
            (-5.21, -6.98), (-3.96, -7.13), (-4.02, -7.67), (0.08, -8.17),
            (0.22, -7.10), (5.40, -7.74), (5.70, -5.23), (4.10, -5.04),
            (4.05, -5.39), (1.02, -5.02), (1.67, 0.34), (2.39, 0.25),
            (2.54, 1.50), (5.58, 1.13), (5.89, 3.63), (5.17, 3.72),
            (5.61, 7.29), (2.93, 7.62), (2.82, 6.73), (1.03, 6.95),
            (1.17, 8.02), (-3.84, 8.63), (-4.17, 5.95), (-5.59, 6.13),
            (-6.08, 2.20), (-4.11, 1.96), (-5.21, -6.98),
        ],
    ],
]


def rect(x0, y0, x1, y1):
    """Counter-clockwise rectangle ring."""
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1)]


# -----------------------------------------------------------------------------
# Pytest Markers
# -----------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )


# -----------------------------------------------------------------------------
# Region Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def square_region():
    """Return a 10x10 square region.

    Returns:
        list: Region with one polygon and no holes.
    """
    return [[rect(0, 0, 10, 10)]]


@pytest.fixture
def two_blocks_region():
    """Return two disjoint axis-aligned blocks, 4x4 and 3x3 at spacing 1."""
    return [[rect(0, 0, 4, 4)], [rect(10, 0, 13, 3)]]


@pytest.fixture
def l_shape_region():
    """Return an L: a 6x2 foot and a 2x6 upright sharing a corner block."""
    return [[[(0, 0), (6, 0), (6, 2), (2, 2), (2, 6), (0, 6)]]]


@pytest.fixture
def holed_square_region():
    """Return a 10x10 square with a 4x4 hole at (3, 3)-(7, 7)."""
    return [[rect(0, 0, 10, 10), rect(3, 3, 7, 7)]]


@pytest.fixture
def floorplan_region():
    """Return an irregular floorplan whose walls are rotated a few degrees."""
    return [[list(ring) for ring in polygon] for polygon in FLOORPLAN]


@pytest.fixture
def unit_pose():
    """Return GridPose at the origin, unrotated, spacing 1."""
    return GridPose(origin=Point(0.0, 0.0), angle=0.0, spacing=1.0)
