"""Service layer for grid fitting.

This module keeps the editable state of a grid fitting session and runs the
alignment search against it, one search at a time.

The module contains two main service classes:
    GridSession: Region, grid pose and the lazily refreshed rasterization.
    AlignmentService: Single-flight asyncio wrapper around AlignmentSearch
        that commits results back into a GridSession.

Example usage:
    Editing a session::

        from grid_fit.api import GridSession
        from grid_fit.domain import GridPose

        session = GridSession(pose=GridPose(spacing=2.0))
        session.apply_polygon([(0, 0), (10, 0), (10, 10), (0, 10)], 'add')
        print(session.cell_count)  # 25

    Auto-aligning from a coroutine::

        service = AlignmentService(session)
        result = await service.auto_align()
        if result is not None:
            print(f"{result.cell_count} cells at {session.pose.angle:.3f} rad")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence, Tuple

from ..analysis.rasterizer import rasterize_region
from ..config import RASTER_RESOLUTION
from ..domain.geometry import GridPose, Point, Region, clone_region
from ..domain.raster import AlignmentResult, RasterResult
from ..optimization.search import AlignmentCancelled, AlignmentSearch, CancellationToken
from .regions import apply_polygon_boolean, polyline_to_polygon

logger = logging.getLogger(__name__)


class GridSession:
    """Editable region and grid pose with a cached rasterization.

    Every edit marks the cached rasterization dirty; it is rebuilt on the
    next read of ``raster`` or ``cell_count``.

    Attributes:
        region: Current region in world coordinates, or None.
        pose: Current grid pose.
        resolution: Raster cells per grid-cell edge.
    """

    def __init__(
        self,
        region: Optional[Region] = None,
        pose: Optional[GridPose] = None,
        resolution: int = RASTER_RESOLUTION,
    ):
        self.region = clone_region(region) if region else None
        self.pose = pose or GridPose()
        self.resolution = resolution
        self._raster: Optional[RasterResult] = None
        self._dirty = True

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def raster(self) -> Optional[RasterResult]:
        """Rasterization of the current region under the current pose."""
        if self._dirty:
            self._raster = rasterize_region(self.region, self.pose, self.resolution)
            self._dirty = False
        return self._raster

    @property
    def cell_count(self) -> int:
        raster = self.raster
        return raster.grid_cell_count if raster is not None else 0

    def invalidate(self) -> None:
        self._dirty = True

    def set_region(self, region: Optional[Region]) -> None:
        self.region = clone_region(region) if region else None
        self.invalidate()

    def clear_region(self) -> None:
        self.set_region(None)

    def apply_polygon(self, points: Sequence[Sequence[float]], mode: str = 'add') -> bool:
        """Add or subtract a drawn polygon.

        Args:
            points: Drawn vertices; closed automatically.
            mode: ``'add'`` or ``'subtract'``.

        Returns:
            True if the region was changed, False for too few points.

        Raises:
            ValueError: If ``mode`` is unknown.
        """
        polygon = polyline_to_polygon(points)
        if polygon is None:
            return False
        self.region = apply_polygon_boolean(self.region, polygon, mode)
        self.invalidate()
        return True

    def set_pose(self, pose: GridPose) -> None:
        self.pose = pose
        self.invalidate()

    def move_origin(self, delta: Point) -> None:
        self.set_pose(self.pose.with_origin(self.pose.origin + delta))

    def set_angle(self, angle: float) -> None:
        self.set_pose(self.pose.with_angle(angle))

    def set_spacing(self, spacing: float) -> None:
        self.set_pose(GridPose(self.pose.origin, self.pose.angle, spacing))

    def reset_grid(self) -> None:
        """Move the grid back to the world origin, unrotated; spacing kept."""
        self.set_pose(GridPose(spacing=self.pose.spacing))

    def apply_alignment(self, result: AlignmentResult) -> None:
        self.set_pose(result.apply_to(self.pose))

    def snapshot(self) -> Tuple[Optional[Region], GridPose]:
        """Independent copy of the region plus the (immutable) pose."""
        return (clone_region(self.region) if self.region else None), self.pose


class AlignmentService:
    """Runs at most one alignment search per session at a time.

    Starting a search cancels the one in flight and waits for it to stop.
    Results are only committed to the session when no newer search started
    in the meantime.

    Attributes:
        session: Session read from and committed to.
        search: Search configuration.
    """

    def __init__(self, session: GridSession, search: Optional[AlignmentSearch] = None):
        self.session = session
        self.search = search or AlignmentSearch(resolution=session.resolution)
        self._generation = 0
        self._active: Optional[Tuple[asyncio.Task, CancellationToken]] = None

    @property
    def running(self) -> bool:
        return self._active is not None and not self._active[0].done()

    async def auto_align(self) -> Optional[AlignmentResult]:
        """Search for the best alignment and apply it to the session.

        Returns:
            The committed AlignmentResult, or None when the region is empty,
            the search was cancelled, or a newer call superseded this one.
        """
        self._generation += 1
        generation = self._generation
        await self.cancel()
        if generation != self._generation:
            logger.debug("Alignment request %d superseded before start", generation)
            return None

        region, pose = self.session.snapshot()
        token = CancellationToken()
        task = asyncio.ensure_future(self.search.run_async(region, pose, token))
        active = (task, token)
        self._active = active
        try:
            result = await task
        except AlignmentCancelled:
            logger.info("Alignment request %d cancelled", generation)
            return None
        except asyncio.CancelledError:
            # The caller was cancelled; stop the search and let it propagate
            token.cancel()
            logger.info("Alignment request %d interrupted", generation)
            raise
        finally:
            if self._active is active:
                self._active = None

        if generation != self._generation:
            logger.debug("Alignment request %d superseded, result dropped", generation)
            return None
        if result is None:
            logger.info("Alignment request %d found no grid placement", generation)
            return None

        self.session.apply_alignment(result)
        logger.info("Applied alignment with %d cells", result.cell_count)
        return result

    async def cancel(self) -> None:
        """Cancel the search in flight, if any, and wait for it to stop."""
        active = self._active
        if active is None:
            return
        task, token = active
        token.cancel()
        # The task's outcome belongs to the auto_align call awaiting it
        await asyncio.wait([task])
