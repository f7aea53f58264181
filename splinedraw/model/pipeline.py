"""Stroke -> processed path pipeline.

``process_stroke`` runs smoothing and adaptive resampling and attaches
the default feed rate to every resulting point.

``reprocess_path`` reruns the pipeline on a path's frozen raw points and
tries to keep user-edited velocities.  Matching is by a *quantised
position key*: coordinates rounded to 0.1 mm.  A processed point that
moves by more than the quantisation step between runs loses its edited
velocity and falls back to the default.  This is a known, accepted
limitation of the matching heuristic.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Sequence

from splinedraw.geometry.resampling import adaptive_resample
from splinedraw.geometry.smoothing import smooth_stroke
from splinedraw.model.types import Path, ProcessedPoint, RawPoint

if TYPE_CHECKING:
    from splinedraw.configs.loader import ProcessingConfig

logger = logging.getLogger(__name__)

#: Positions are quantised to 1 / VELOCITY_KEY_SCALE mm.
VELOCITY_KEY_SCALE = 10


def process_stroke(
    raw_points: Sequence[RawPoint],
    processing: ProcessingConfig,
    default_velocity: float,
) -> list[ProcessedPoint]:
    """Smooth, resample and annotate a raw stroke.

    Parameters
    ----------
    raw_points : Sequence[RawPoint]
        Captured samples.
    processing : ProcessingConfig
        Smoothing factor and resampling thresholds.
    default_velocity : float
        Feed rate (mm/s) attached to every point.

    Returns
    -------
    list[ProcessedPoint]
        Empty when fewer than 2 raw points are given.
    """
    if len(raw_points) < 2:
        return []

    smoothed = smooth_stroke(raw_points, processing.smoothing_factor)
    resampled = adaptive_resample(
        smoothed,
        processing.min_point_distance_mm,
        processing.max_point_distance_mm,
        processing.curvature_threshold,
    )
    return [
        ProcessedPoint(
            x=float(x),
            y=float(y),
            velocity=default_velocity,
            curvature=float(c),
        )
        for (x, y), c in zip(resampled.points, resampled.curvature)
    ]


def velocity_key(x: float, y: float) -> tuple[int, int]:
    """Quantised position key (0.1 mm cells, ties round up)."""
    return (
        math.floor(x * VELOCITY_KEY_SCALE + 0.5),
        math.floor(y * VELOCITY_KEY_SCALE + 0.5),
    )


def reprocess_path(
    path: Path,
    processing: ProcessingConfig,
    default_velocity: float,
) -> int:
    """Recompute ``path.processed_points`` from ``path.raw_points``.

    Velocities are carried over for points whose quantised key matches a
    previous processed point; when several old points share a key the
    last one wins.  Paths with fewer than 2 raw points are left alone.

    Returns
    -------
    int
        Number of points whose velocity was restored.
    """
    if len(path.raw_points) < 2:
        return 0

    old_velocities = {
        velocity_key(p.x, p.y): p.velocity for p in path.processed_points
    }
    points = process_stroke(path.raw_points, processing, default_velocity)

    restored = 0
    for p in points:
        v = old_velocities.get(velocity_key(p.x, p.y))
        if v:
            p.velocity = v
            restored += 1

    logger.debug(
        "Reprocessed %s: %d -> %d points, %d velocities restored",
        path.name, len(path.processed_points), len(points), restored,
    )
    path.processed_points = points
    return restored
