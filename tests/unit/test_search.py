"""Unit tests for the alignment search.

Tests grid_fit.optimization.search:
    - Best pose on regions with a known optimum
    - Cancellation before and during the search
    - Yield points and the asyncio driver
    - Progress and profiling callbacks
"""

import asyncio
import math

import pytest

from grid_fit.analysis import rasterize_region
from grid_fit.domain import GridPose, Point
from grid_fit.optimization import (
    AlignmentCancelled,
    AlignmentSearch,
    CancellationToken,
    candidate_angles,
    find_best_alignment,
    find_best_alignment_async,
)


@pytest.fixture
def offset_square():
    """9x9 square whose best spacing-3 grid needs a (0.75, 0.75) offset."""
    return [[[(0.75, 0.75), (9.75, 0.75), (9.75, 9.75), (0.75, 9.75)]]]


class TestBestAlignment:
    """Searches with a known answer."""

    def test_square_keeps_identity(self, square_region):
        result = find_best_alignment(square_region, GridPose(spacing=2.0), resolution=4)
        assert result.cell_count == 25
        assert result.angle == 0.0
        assert result.origin == Point(0.0, 0.0)

    def test_finds_sub_cell_offset(self, offset_square):
        result = find_best_alignment(offset_square, GridPose(spacing=3.0), resolution=4)
        assert result.cell_count == 9
        assert result.angle == 0.0
        assert result.origin.x == pytest.approx(0.75)
        assert result.origin.y == pytest.approx(0.75)

    def test_offset_is_relative_to_base_origin(self, offset_square):
        base = GridPose(origin=Point(-3.0, 6.0), spacing=3.0)
        result = find_best_alignment(offset_square, base, resolution=4)
        assert result.cell_count == 9
        assert result.origin.x == pytest.approx(-2.25)
        assert result.origin.y == pytest.approx(6.75)

    def test_rotated_square(self):
        angle = math.radians(30)
        c, s = math.cos(angle), math.sin(angle)
        corners = [(0, 0), (8, 0), (8, 8), (0, 8)]
        region = [[[(x * c - y * s, x * s + y * c) for x, y in corners]]]
        result = find_best_alignment(region, GridPose(spacing=2.0), resolution=4)
        assert result.cell_count == 16
        assert math.degrees(result.angle) == pytest.approx(30.0)

    def test_absent_region(self):
        assert find_best_alignment(None, GridPose()) is None
        assert find_best_alignment([], GridPose()) is None

    @pytest.mark.parametrize("resolution", [0, -4])
    def test_rejects_non_positive_resolution(self, square_region, resolution):
        with pytest.raises(ValueError, match="Resolution"):
            AlignmentSearch(resolution=resolution)
        with pytest.raises(ValueError, match="Resolution"):
            find_best_alignment(square_region, GridPose(spacing=2.0), resolution=resolution)

    @pytest.mark.slow
    def test_beats_every_unshifted_candidate(self, floorplan_region):
        pose = GridPose(spacing=1.0)
        result = find_best_alignment(floorplan_region, pose, resolution=4)
        for angle in candidate_angles(floorplan_region):
            count = rasterize_region(floorplan_region, pose.with_angle(angle), 4).grid_cell_count
            assert result.cell_count >= count

    @pytest.mark.slow
    def test_result_reproduces_under_applied_pose(self, floorplan_region):
        pose = GridPose(spacing=1.0)
        result = find_best_alignment(floorplan_region, pose, resolution=4)
        applied = rasterize_region(floorplan_region, result.apply_to(pose), 4)
        assert applied.grid_cell_count == result.cell_count


class TestCancellation:
    """Cooperative cancellation."""

    def test_token_state(self):
        token = CancellationToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled
        with pytest.raises(AlignmentCancelled):
            token.raise_if_cancelled()

    def test_cancelled_before_start(self, square_region):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AlignmentCancelled):
            find_best_alignment(square_region, GridPose(spacing=2.0), token)

    def test_cancelled_between_rotations(self, square_region):
        token = CancellationToken()
        seen = []

        def on_progress(progress):
            seen.append(progress.angle_index)
            token.cancel()

        search = AlignmentSearch(resolution=2, progress_callback=on_progress)
        with pytest.raises(AlignmentCancelled):
            search.run(square_region, GridPose(spacing=2.0), token)
        assert seen == [0]

    def test_cancelled_at_yield_point(self, square_region):
        token = CancellationToken()
        calls = []

        def yield_point():
            calls.append(1)
            token.cancel()

        search = AlignmentSearch(resolution=2, yield_interval=0.0)
        with pytest.raises(AlignmentCancelled):
            search.run(square_region, GridPose(spacing=2.0), token, yield_point)
        assert len(calls) == 1


class TestYielding:
    """Yield points never change the answer."""

    def test_yield_point_called(self, square_region):
        calls = []
        stats = []
        search = AlignmentSearch(resolution=2, yield_interval=0.0, profile_callback=stats.append)
        result = search.run(square_region, GridPose(spacing=2.0), yield_point=lambda: calls.append(1))
        assert result.cell_count == 25
        assert len(calls) == stats[0].yields == stats[0].samples

    def test_same_result_with_and_without_yields(self, offset_square):
        pose = GridPose(spacing=3.0)
        eager = AlignmentSearch(resolution=4, yield_interval=0.0).run(offset_square, pose)
        lazy = AlignmentSearch(resolution=4, yield_interval=60.0).run(offset_square, pose)
        assert eager == lazy


class TestCallbacks:
    """Progress and profiling reports."""

    def test_progress_per_rotation(self, square_region):
        reports = []
        search = AlignmentSearch(resolution=2, progress_callback=reports.append)
        search.run(square_region, GridPose(spacing=2.0))
        assert [r.angle_index for r in reports] == list(range(18))
        assert all(r.angle_count == 18 for r in reports)
        assert reports[-1].best.cell_count == 25

    def test_profile_counters(self, square_region):
        stats = []
        find_best_alignment(square_region, GridPose(spacing=2.0), resolution=3,
                            on_profile=stats.append)
        assert len(stats) == 1
        report = stats[0]
        assert report.orientations == 18
        assert report.offsets_per_orientation == 9
        assert report.samples == 18 * 9
        assert report.timings.calls == 18
        assert report.duration >= report.timings.component >= 0.0


class TestAsync:
    """The asyncio driver."""

    def test_matches_sync(self, offset_square):
        pose = GridPose(spacing=3.0)
        expected = find_best_alignment(offset_square, pose, resolution=4)
        result = asyncio.run(find_best_alignment_async(offset_square, pose, resolution=4))
        assert result == expected

    def test_cancel_from_another_task(self, square_region):
        async def scenario():
            token = CancellationToken()
            search = AlignmentSearch(resolution=4, yield_interval=0.0)
            task = asyncio.ensure_future(
                search.run_async(square_region, GridPose(spacing=2.0), token)
            )
            await asyncio.sleep(0)
            token.cancel()
            with pytest.raises(AlignmentCancelled):
                await task

        asyncio.run(scenario())
