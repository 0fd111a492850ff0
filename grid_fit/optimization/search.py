"""Brute-force grid alignment search.

This module searches rotations and sub-cell offsets of the grid for the pose
that keeps the largest connected block of grid cells inside a region. Each
candidate rotation is rasterized once; the lattice is then slid across all
``resolution x resolution`` sub-cell offsets of that raster.

The search is long-running, so it is written as a generator that pauses at
yield points whenever a wall-clock slice of uninterrupted work is used up.
Drivers decide what a pause means:
    - ``AlignmentSearch.run`` calls an optional host ``yield_point()``
      (a no-op, a thread yield, an event pump, ...).
    - ``AlignmentSearch.run_async`` awaits ``asyncio.sleep(0)``.
Which driver is used never changes the result.

Cancellation is cooperative: a ``CancellationToken`` is polled at the start
of every rotation, every offset, and after every pause. A set token raises
``AlignmentCancelled``, which callers treat as a normal outcome.

Example usage:
    Synchronous search::

        from grid_fit.optimization import find_best_alignment

        result = find_best_alignment(region, pose)
        if result is not None:
            pose = result.apply_to(pose)

    From a coroutine, with progress and profiling::

        search = AlignmentSearch(
            progress_callback=lambda p: print(f"{p.angle_index + 1}/{p.angle_count}"),
            profile_callback=lambda s: print(f"{s.duration:.2f}s"),
        )
        token = CancellationToken()
        result = await search.run_async(region, pose, token)
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Optional

from ..analysis.classifier import CellClassifier, lattice_bounds
from ..analysis.components import largest_component
from ..analysis.rasterizer import rasterize_mask
from ..config import (
    ANGLE_BUCKET_DEGREES,
    MAX_ANGLE_STEP_DEGREES,
    RASTER_RESOLUTION,
    YIELD_INTERVAL_SECONDS,
)
from ..domain.geometry import GridPose, Point, Region
from ..domain.raster import AlignmentResult, RasterTimings
from ..utils.transforms import rotate
from .candidates import candidate_angles

logger = logging.getLogger(__name__)


class AlignmentCancelled(Exception):
    """The search observed a cancellation request and stopped."""


class CancellationToken:
    """Thread-safe cancellation flag polled by the search."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AlignmentCancelled()


@dataclass(frozen=True)
class SearchProgress:
    """Snapshot reported after each rotation has been swept."""
    angle_index: int
    angle_count: int
    angle: float
    best: Optional[AlignmentResult]


@dataclass
class SearchStats:
    """Aggregate counters of one completed search.

    Attributes:
        duration: Wall-clock seconds from start to finish.
        orientations: Rotations that produced a mask.
        offsets_per_orientation: Sub-cell offsets swept per rotation.
        samples: Offsets evaluated in total.
        yields: Pauses taken at yield points.
        timings: Time split between bounds, fill, prefix sum and components.
    """
    duration: float = 0.0
    orientations: int = 0
    offsets_per_orientation: int = 0
    samples: int = 0
    yields: int = 0
    timings: RasterTimings = field(default_factory=RasterTimings)


@dataclass
class AlignmentSearch:
    """Rotation and offset search maximizing the largest inside component.

    Attributes:
        resolution: Raster cells per grid-cell edge; also the number of
            sub-cell offsets tried per axis.
        bucket_degrees: Width of the edge-direction histogram buckets.
        max_step_degrees: Largest gap between candidate rotations.
        yield_interval: Seconds of uninterrupted work before pausing.
        progress_callback: Optional function receiving a SearchProgress after
            every rotation.
        profile_callback: Optional function receiving SearchStats once the
            search completes.
    """
    resolution: int = RASTER_RESOLUTION
    bucket_degrees: float = ANGLE_BUCKET_DEGREES
    max_step_degrees: float = MAX_ANGLE_STEP_DEGREES
    yield_interval: float = YIELD_INTERVAL_SECONDS
    progress_callback: Callable[[SearchProgress], None] | None = None
    profile_callback: Callable[[SearchStats], None] | None = None

    def __post_init__(self):
        if self.resolution < 1:
            raise ValueError(f"Resolution must be at least 1, got {self.resolution}")

    def steps(
        self,
        region: Optional[Region],
        pose: GridPose,
        token: Optional[CancellationToken] = None,
    ) -> Generator[None, None, Optional[AlignmentResult]]:
        """Run the search, pausing at every yield point.

        Args:
            region: Region in world coordinates; never mutated.
            pose: Base pose. Its spacing is kept; its origin anchors offsets.
            token: Optional cancellation token.

        Yields:
            None at every pause.

        Returns:
            Best AlignmentResult (as the generator's return value), or None if
            the region is absent or no rotation produced a mask.

        Raises:
            AlignmentCancelled: If the token is set at a check point.
        """
        if not region:
            return None

        start = time.perf_counter()
        slice_start = start
        stats = SearchStats(offsets_per_orientation=self.resolution * self.resolution)
        angles = candidate_angles(region, self.bucket_degrees, self.max_step_degrees)
        offset_step = pose.spacing / self.resolution
        best: Optional[AlignmentResult] = None

        logger.info(
            "Alignment search: %d rotations x %d offsets, spacing %.4g",
            len(angles), stats.offsets_per_orientation, pose.spacing,
        )

        try:
            for angle_index, angle in enumerate(angles):
                _check(token)
                mask = rasterize_mask(region, pose.with_angle(angle), self.resolution, stats.timings)
                if mask is None:
                    continue
                stats.orientations += 1
                classifier = CellClassifier(mask, pose.spacing)

                for oy in range(self.resolution):
                    for ox in range(self.resolution):
                        _check(token)
                        if time.perf_counter() - slice_start >= self.yield_interval:
                            stats.yields += 1
                            yield
                            _check(token)
                            slice_start = time.perf_counter()

                        offset = Point(ox * offset_step, oy * offset_step)
                        t0 = time.perf_counter()
                        count = largest_component(
                            classifier, lattice_bounds(mask, pose.spacing, offset), offset
                        ).count
                        stats.timings.component += time.perf_counter() - t0
                        stats.samples += 1

                        if best is None or count > best.cell_count:
                            best = AlignmentResult(
                                angle=angle,
                                origin=pose.origin + rotate(offset, angle),
                                cell_count=count,
                            )

                logger.debug(
                    "Rotation %.2f deg swept, best so far %d",
                    math.degrees(angle), best.cell_count if best else 0,
                )
                if self.progress_callback:
                    self.progress_callback(SearchProgress(angle_index, len(angles), angle, best))
        except AlignmentCancelled:
            logger.info("Alignment search cancelled after %d samples", stats.samples)
            raise

        stats.duration = time.perf_counter() - start
        logger.info(
            "Alignment search finished in %.3fs: %d cells at %.2f deg",
            stats.duration,
            best.cell_count if best else 0,
            math.degrees(best.angle) if best else 0.0,
        )
        logger.debug(
            "Stage time %.3fs over %d rasterizations, %d yields",
            stats.timings.total, stats.timings.calls, stats.yields,
        )
        if self.profile_callback:
            self.profile_callback(stats)
        return best

    def run(
        self,
        region: Optional[Region],
        pose: GridPose,
        token: Optional[CancellationToken] = None,
        yield_point: Callable[[], None] | None = None,
    ) -> Optional[AlignmentResult]:
        """Drive the search to completion on the calling thread.

        Args:
            region: Region in world coordinates.
            pose: Base grid pose.
            token: Optional cancellation token.
            yield_point: Optional callable invoked at every pause.

        Returns:
            Best AlignmentResult or None.

        Raises:
            AlignmentCancelled: If cancellation was requested.
        """
        steps = self.steps(region, pose, token)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return stop.value
            if yield_point is not None:
                yield_point()

    async def run_async(
        self,
        region: Optional[Region],
        pose: GridPose,
        token: Optional[CancellationToken] = None,
    ) -> Optional[AlignmentResult]:
        """Drive the search inside an asyncio event loop.

        Pauses hand control back to the loop, so other tasks (including the
        one that sets the token) keep running during the search.

        Raises:
            AlignmentCancelled: If cancellation was requested.
        """
        steps = self.steps(region, pose, token)
        while True:
            try:
                next(steps)
            except StopIteration as stop:
                return stop.value
            await asyncio.sleep(0)


def _check(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()


def find_best_alignment(
    region: Optional[Region],
    pose: GridPose,
    token: Optional[CancellationToken] = None,
    *,
    yield_point: Callable[[], None] | None = None,
    on_profile: Callable[[SearchStats], None] | None = None,
    resolution: int = RASTER_RESOLUTION,
) -> Optional[AlignmentResult]:
    """Search for the grid pose keeping the most connected cells inside.

    Args:
        region: Region in world coordinates.
        pose: Base grid pose (spacing kept, origin used as the offset anchor).
        token: Optional cancellation token.
        yield_point: Optional callable invoked whenever the search pauses.
        on_profile: Optional receiver of SearchStats on completion.
        resolution: Raster cells per grid-cell edge.

    Returns:
        AlignmentResult, or None if the region is absent or degenerate.

    Raises:
        AlignmentCancelled: If the token was set during the search.
    """
    search = AlignmentSearch(resolution=resolution, profile_callback=on_profile)
    return search.run(region, pose, token, yield_point)


async def find_best_alignment_async(
    region: Optional[Region],
    pose: GridPose,
    token: Optional[CancellationToken] = None,
    *,
    on_profile: Callable[[SearchStats], None] | None = None,
    resolution: int = RASTER_RESOLUTION,
) -> Optional[AlignmentResult]:
    """Coroutine form of find_best_alignment."""
    search = AlignmentSearch(resolution=resolution, profile_callback=on_profile)
    return await search.run_async(region, pose, token)
