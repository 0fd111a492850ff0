"""Unit tests for GridSession and AlignmentService."""

import asyncio
import unittest

import pytest

from grid_fit.api import AlignmentService, GridSession
from grid_fit.domain import AlignmentResult, GridPose, Point
from grid_fit.optimization import AlignmentSearch

OFFSET_SQUARE = [[[(0.75, 0.75), (9.75, 0.75), (9.75, 9.75), (0.75, 9.75)]]]


class TestGridSession(unittest.TestCase):
    """Tests for GridSession state handling."""

    def setUp(self):
        self.square = [[[(0, 0), (10, 0), (10, 10), (0, 10)]]]
        self.session = GridSession(self.square, GridPose(spacing=2.0))

    def test_initial_count(self):
        self.assertTrue(self.session.dirty)
        self.assertEqual(self.session.cell_count, 25)
        self.assertFalse(self.session.dirty)

    def test_raster_cached_until_edit(self):
        first = self.session.raster
        self.assertIs(self.session.raster, first)
        self.session.set_angle(0.1)
        self.assertTrue(self.session.dirty)
        self.assertIsNot(self.session.raster, first)

    def test_region_is_copied(self):
        self.square[0][0][1] = (100, 0)
        self.assertEqual(self.session.cell_count, 25)

    def test_clear_region(self):
        self.session.clear_region()
        self.assertIsNone(self.session.raster)
        self.assertEqual(self.session.cell_count, 0)

    def test_move_origin_and_reset(self):
        self.session.move_origin(Point(1.0, 1.0))
        self.assertEqual(self.session.cell_count, 16)
        self.session.set_angle(0.4)
        self.session.reset_grid()
        self.assertEqual(self.session.pose, GridPose(spacing=2.0))
        self.assertEqual(self.session.cell_count, 25)

    def test_set_spacing(self):
        self.session.set_spacing(1.0)
        self.assertEqual(self.session.cell_count, 100)

    def test_apply_polygon(self):
        session = GridSession(pose=GridPose(spacing=1.0))
        self.assertFalse(session.apply_polygon([(0, 0), (1, 1)]))
        self.assertTrue(session.apply_polygon([(0, 0), (6, 0), (6, 4), (0, 4)], 'add'))
        self.assertEqual(session.cell_count, 24)
        session.apply_polygon([(0, 0), (2, 0), (2, 4), (0, 4)], 'subtract')
        self.assertEqual(session.cell_count, 16)

    def test_apply_polygon_bad_mode(self):
        with self.assertRaises(ValueError):
            self.session.apply_polygon([(0, 0), (1, 0), (1, 1)], 'merge')

    def test_apply_alignment(self):
        self.session.apply_alignment(AlignmentResult(0.25, Point(1, 2), 3))
        self.assertEqual(self.session.pose, GridPose(Point(1, 2), 0.25, 2.0))


class TestAlignmentService:
    """Tests for single-flight auto alignment."""

    def test_commits_result(self):
        session = GridSession(OFFSET_SQUARE, GridPose(spacing=3.0), resolution=4)
        service = AlignmentService(session)
        result = asyncio.run(service.auto_align())
        assert result.cell_count == 9
        assert session.pose.origin.x == pytest.approx(0.75)
        assert session.pose.origin.y == pytest.approx(0.75)
        assert session.cell_count == 9
        assert not service.running

    def test_empty_region(self):
        session = GridSession(pose=GridPose(spacing=3.0))
        service = AlignmentService(session)
        assert asyncio.run(service.auto_align()) is None
        assert session.pose == GridPose(spacing=3.0)

    def test_newer_request_supersedes(self):
        session = GridSession(OFFSET_SQUARE, GridPose(spacing=3.0), resolution=4)
        search = AlignmentSearch(resolution=4, yield_interval=0.0)
        service = AlignmentService(session, search)

        async def scenario():
            return await asyncio.gather(service.auto_align(), service.auto_align())

        first, second = asyncio.run(scenario())
        assert first is None
        assert second.cell_count == 9
        assert session.cell_count == 9

    def test_cancel_without_search(self):
        service = AlignmentService(GridSession())
        asyncio.run(service.cancel())
        assert not service.running

    def test_cancelling_the_caller_propagates(self):
        session = GridSession(OFFSET_SQUARE, GridPose(spacing=3.0), resolution=4)
        search = AlignmentSearch(resolution=4, yield_interval=0.0)
        service = AlignmentService(session, search)

        async def scenario():
            caller = asyncio.ensure_future(service.auto_align())
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert service.running
            caller.cancel()
            with pytest.raises(asyncio.CancelledError):
                await caller
            assert not service.running

        asyncio.run(scenario())
        assert session.pose == GridPose(spacing=3.0)

    def test_cancel_superseded_search_returns_none(self):
        session = GridSession(OFFSET_SQUARE, GridPose(spacing=3.0), resolution=4)
        search = AlignmentSearch(resolution=4, yield_interval=0.0)
        service = AlignmentService(session, search)

        async def scenario():
            caller = asyncio.ensure_future(service.auto_align())
            await asyncio.sleep(0)
            await service.cancel()
            return await caller

        assert asyncio.run(scenario()) is None
        assert session.pose == GridPose(spacing=3.0)
