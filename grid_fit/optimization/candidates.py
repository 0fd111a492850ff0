"""Candidate grid rotations for the alignment search.

A square grid repeats every 90 degrees, so only [0, 90) needs sampling. Edge
directions of the region (mod 90) are histogrammed into buckets; every
occupied bucket contributes the exact direction of its longest edge, and the
gaps between consecutive occupied buckets, walked circularly, are filled with
evenly spaced angles no further apart than the maximum step.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from ..config import ANGLE_BUCKET_DEGREES, MAX_ANGLE_STEP_DEGREES, MIN_EDGE_LENGTH
from ..domain.geometry import Region, iter_edges


def edge_directions(region: Region) -> List[Tuple[float, float]]:
    """(direction in degrees mod 90, length) for every non-degenerate edge."""
    directions = []
    for polygon in region:
        for ring in polygon:
            for (ax, ay), (bx, by) in iter_edges(ring):
                dx = bx - ax
                dy = by - ay
                length = math.hypot(dx, dy)
                if not math.isfinite(length) or length < MIN_EDGE_LENGTH:
                    continue
                directions.append((math.degrees(math.atan2(dy, dx)) % 90.0, length))
    return directions


def candidate_angles(
    region: Optional[Region],
    bucket_degrees: float = ANGLE_BUCKET_DEGREES,
    max_step_degrees: float = MAX_ANGLE_STEP_DEGREES,
) -> List[float]:
    """Sorted candidate rotations in radians within [0, pi/2).

    Args:
        region: Region whose edge directions seed the candidates.
        bucket_degrees: Histogram bucket width.
        max_step_degrees: Largest allowed gap between candidates.

    Returns:
        Ascending list of angles in radians; ``[0.0]`` when the region has no
        usable edge.
    """
    if not region:
        return [0.0]

    bucket_count = max(1, int(round(90.0 / bucket_degrees)))
    anchors: Dict[int, Tuple[float, float]] = {}
    for degrees, length in edge_directions(region):
        bucket = int(degrees // bucket_degrees) % bucket_count
        if bucket not in anchors or length > anchors[bucket][0]:
            anchors[bucket] = (length, degrees)

    if not anchors:
        return [0.0]

    ordered = [anchors[b][1] for b in sorted(anchors)]
    angles = set()
    for i, start in enumerate(ordered):
        gap = (ordered[(i + 1) % len(ordered)] - start) % 90.0
        if gap == 0.0:
            gap = 90.0
        steps = max(1, math.ceil(gap / max_step_degrees - 1e-9))
        for k in range(steps):
            angles.add(round((start + gap * k / steps) % 90.0, 9) % 90.0)

    return [math.radians(a) for a in sorted(angles)]
