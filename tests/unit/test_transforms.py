"""Unit tests for grid_fit.utils.transforms.

Tests the world/grid and world/screen inverse pairs, region conversion to
grid-local arrays, and camera fitting.
"""

import math

import numpy as np
import pytest

from grid_fit.config import INITIAL_CAMERA_ZOOM, MAX_CAMERA_ZOOM, MIN_CAMERA_ZOOM
from grid_fit.domain import BBox, Camera, GridPose, Point
from grid_fit.utils.transforms import (
    clamp_zoom,
    fit_camera,
    grid_to_world,
    rotate,
    screen_to_world,
    transform_region_to_grid,
    world_to_grid,
    world_to_screen,
)


def assert_point_close(a, b, tol=1e-9):
    assert a.x == pytest.approx(b.x, abs=tol)
    assert a.y == pytest.approx(b.y, abs=tol)


class TestRotate:
    """Tests for rotate."""

    def test_quarter_turn(self):
        assert_point_close(rotate(Point(1, 0), math.pi / 2), Point(0, 1))

    def test_preserves_length(self):
        p = rotate(Point(3, 4), 1.234)
        assert math.hypot(p.x, p.y) == pytest.approx(5.0)


class TestWorldGrid:
    """Tests for the world/grid-local pair."""

    @pytest.mark.parametrize("angle", [0.0, 0.3, math.pi / 4, -1.2, 2.9])
    def test_inverse_pair(self, angle):
        pose = GridPose(origin=Point(3.5, -2.0), angle=angle, spacing=1.5)
        p = Point(7.25, 11.0)
        assert_point_close(grid_to_world(world_to_grid(p, pose), pose), p)
        assert_point_close(world_to_grid(grid_to_world(p, pose), pose), p)

    def test_origin_maps_to_zero(self):
        pose = GridPose(origin=Point(2, 3), angle=0.7)
        assert_point_close(world_to_grid(Point(2, 3), pose), Point(0, 0))

    def test_axis_alignment(self):
        pose = GridPose(angle=math.pi / 6)
        along = grid_to_world(Point(1, 0), pose)
        assert math.atan2(along.y, along.x) == pytest.approx(math.pi / 6)


class TestTransformRegion:
    """Tests for transform_region_to_grid."""

    def test_matches_point_transform(self):
        pose = GridPose(origin=Point(1, 1), angle=0.4)
        region = [[[(0, 0), (5, 0), (5, 5)], [(1, 1), (2, 1), (2, 2)]]]
        converted = transform_region_to_grid(region, pose)
        assert len(converted) == 1
        assert [ring.shape for ring in converted[0]] == [(3, 2), (3, 2)]
        for ring_in, ring_out in zip(region[0], converted[0]):
            for (x, y), row in zip(ring_in, ring_out):
                expected = world_to_grid(Point(x, y), pose)
                assert row[0] == pytest.approx(expected.x)
                assert row[1] == pytest.approx(expected.y)

    def test_drops_non_finite_vertices(self):
        region = [[[(0, 0), (math.nan, 1), (2, 0), (1, math.inf)]]]
        ring = transform_region_to_grid(region, GridPose())[0][0]
        np.testing.assert_array_equal(ring, [[0.0, 0.0], [2.0, 0.0]])


class TestScreenMapping:
    """Tests for the camera transforms."""

    def test_inverse_pair(self):
        camera = Camera(offset=Point(400, 300), zoom=37.5)
        p = Point(-3.2, 8.1)
        assert_point_close(screen_to_world(world_to_screen(p, camera), camera), p)

    def test_clamp_zoom(self):
        assert clamp_zoom(1.0) == MIN_CAMERA_ZOOM
        assert clamp_zoom(1e6) == MAX_CAMERA_ZOOM
        assert clamp_zoom(42.0) == 42.0

    def test_fit_camera_without_bounds(self):
        camera = fit_camera(None, 800, 600, margin=12)
        assert camera.zoom == INITIAL_CAMERA_ZOOM
        assert_point_close(camera.offset, Point(400, 300))

    def test_fit_camera_centres_bounds(self):
        bounds = BBox(0, 0, 10, 10)
        camera = fit_camera(bounds, 800, 600, margin=12)
        assert camera.zoom == pytest.approx(57.6)
        assert_point_close(world_to_screen(bounds.center, camera), Point(400, 300))

    def test_fit_camera_caps_zoom(self):
        camera = fit_camera(BBox(0, 0, 0.5, 0.5), 800, 600)
        assert camera.zoom == INITIAL_CAMERA_ZOOM
