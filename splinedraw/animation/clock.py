"""Arc-length animation table over the visible paths.

Every visible path with at least 2 processed points is sampled along its
spline at ``samples_per_segment`` samples per source segment.  For each
sample the table stores the position, the accumulated arc length (within
paths only; the jump between paths adds no distance), the feed rate
interpolated between the bracketing processed points, and the owning
path index.

Traversal time is integrated per micro-segment as
``dt = d_distance / mean(v1, v2)``.

A progress fraction ``p`` maps to arc length ``p * total_length``; the
bracketing samples are found by binary search and the position is
linearly interpolated between them.  Progress and elapsed time are
converted through the cumulative ``time`` column, so the preview slows
down where the feed rate drops and the time fraction differs from the
path fraction whenever velocity varies.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from splinedraw.geometry.primitives import cumulative_length
from splinedraw.geometry.spline import evaluate_spline
from splinedraw.model.types import Path

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_PER_SEGMENT = 50
#: Share of the total length drawn as a trail behind the tool.
TRAIL_FRACTION = 0.08


@dataclass(frozen=True)
class AnimationTable:
    """Sampled traversal of a drawing.

    Attributes
    ----------
    xy : np.ndarray
        Sample positions, shape ``(M, 2)``.
    distance : np.ndarray
        Accumulated arc length at each sample, non-decreasing, ``(M,)``.
    velocity : np.ndarray
        Interpolated feed rate (mm/s), ``(M,)``.
    path_index : np.ndarray
        Index (into the full path list) of the path owning each sample.
    time : np.ndarray
        Accumulated traversal time at each sample, non-decreasing, ``(M,)``.
    total_length : float
        Arc length in mm.
    total_time : float
        Traversal time in seconds.
    """

    xy: np.ndarray
    distance: np.ndarray
    velocity: np.ndarray
    path_index: np.ndarray
    time: np.ndarray
    total_length: float
    total_time: float

    def __len__(self) -> int:
        return int(self.distance.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def _bracket(self, progress: float) -> tuple[int, int, float]:
        """Samples bracketing ``progress * total_length`` and the local ratio."""
        target = min(max(progress, 0.0), 1.0) * self.total_length
        n = len(self)
        if n == 1:
            return 0, 0, 0.0
        low = int(np.searchsorted(self.distance, target, side="right")) - 1
        low = min(max(low, 0), n - 2)
        high = low + 1
        span = self.distance[high] - self.distance[low]
        ratio = (target - self.distance[low]) / span if span > 0 else 0.0
        return low, high, float(ratio)

    def position_at(self, progress: float) -> tuple[float, float] | None:
        """Position at *progress* in [0, 1], or ``None`` for an empty table."""
        if self.is_empty:
            return None
        low, high, ratio = self._bracket(progress)
        p = self.xy[low] + (self.xy[high] - self.xy[low]) * ratio
        return (float(p[0]), float(p[1]))

    def path_index_at(self, progress: float) -> int | None:
        if self.is_empty:
            return None
        low, _, _ = self._bracket(progress)
        return int(self.path_index[low])

    def time_at(self, progress: float) -> float:
        """Elapsed seconds to reach arc length ``progress * total_length``."""
        if self.is_empty:
            return 0.0
        low, high, ratio = self._bracket(progress)
        return float(self.time[low] + (self.time[high] - self.time[low]) * ratio)

    def progress_at_time(self, elapsed_s: float) -> float:
        """Inverse of ``time_at``: path fraction reached after *elapsed_s*."""
        if self.is_empty or self.total_time <= 0 or self.total_length <= 0:
            return 0.0
        target = min(max(elapsed_s, 0.0), self.total_time)
        n = len(self)
        low = int(np.searchsorted(self.time, target, side="right")) - 1
        low = min(max(low, 0), n - 2)
        high = low + 1
        span = self.time[high] - self.time[low]
        ratio = (target - self.time[low]) / span if span > 0 else 0.0
        dist = self.distance[low] + (self.distance[high] - self.distance[low]) * ratio
        return float(dist / self.total_length)

    def trail(self, progress: float, fraction: float = TRAIL_FRACTION) -> np.ndarray:
        """Samples within *fraction* of the total length behind *progress*."""
        start = max(0.0, progress - fraction) * self.total_length
        end = progress * self.total_length
        mask = (self.distance >= start) & (self.distance <= end)
        return self.xy[mask]


def _empty_table() -> AnimationTable:
    return AnimationTable(
        xy=np.zeros((0, 2)),
        distance=np.zeros(0),
        velocity=np.zeros(0),
        path_index=np.zeros(0, dtype=int),
        time=np.zeros(0),
        total_length=0.0,
        total_time=0.0,
    )


def _sample_path(
    path: Path, default_velocity: float, samples_per_segment: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Spline samples and interpolated velocities of one path."""
    points = path.processed_points
    n = len(points)
    total_samples = (n - 1) * samples_per_segment
    t = np.arange(total_samples + 1, dtype=float) / total_samples

    xy = evaluate_spline(points, t)

    vel = np.array([p.velocity or default_velocity for p in points], dtype=float)
    seg_t = t * (n - 1)
    seg = np.minimum(np.floor(seg_t).astype(int), n - 2)
    local_t = seg_t - seg
    v1 = vel[seg]
    v2 = vel[np.minimum(seg + 1, n - 1)]
    return xy, v1 + (v2 - v1) * local_t


def build_animation_table(
    paths: Sequence[Path],
    default_velocity: float,
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> AnimationTable:
    """Sample every visible path with >= 2 processed points.

    Parameters
    ----------
    paths : Sequence[Path]
        All paths of the drawing, in order; hidden ones are skipped.
    default_velocity : float
        Feed rate used for points without a velocity (mm/s).
    samples_per_segment : int
        Spline samples per source segment.

    Returns
    -------
    AnimationTable
        Empty when no path qualifies.
    """
    xy_parts: list[np.ndarray] = []
    dist_parts: list[np.ndarray] = []
    vel_parts: list[np.ndarray] = []
    idx_parts: list[np.ndarray] = []
    running = 0.0

    for index, path in enumerate(paths):
        if not path.visible or len(path.processed_points) < 2:
            continue
        xy, vel = _sample_path(path, default_velocity, samples_per_segment)

        dist = running + cumulative_length(xy)
        running = float(dist[-1])

        xy_parts.append(xy)
        dist_parts.append(dist)
        vel_parts.append(vel)
        idx_parts.append(np.full(xy.shape[0], index, dtype=int))

    if not xy_parts:
        return _empty_table()

    distance = np.concatenate(dist_parts)
    velocity = np.concatenate(vel_parts)

    d_dist = np.diff(distance)
    avg_vel = (velocity[:-1] + velocity[1:]) / 2.0
    dt = np.divide(
        d_dist, avg_vel, out=np.zeros_like(d_dist), where=avg_vel > 0,
    )

    time = np.concatenate(([0.0], np.cumsum(dt)))

    table = AnimationTable(
        xy=np.vstack(xy_parts),
        distance=distance,
        velocity=velocity,
        path_index=np.concatenate(idx_parts),
        time=time,
        total_length=running,
        total_time=float(time[-1]),
    )
    logger.debug(
        "Animation table: %d samples, %.1f mm, %.2f s",
        len(table), table.total_length, table.total_time,
    )
    return table


def format_clock(elapsed_s: float, total_s: float) -> str:
    """``MM:SS / MM:SS`` with truncated seconds."""

    def _fmt(seconds: float) -> str:
        seconds = max(seconds, 0.0)
        return f"{math.floor(seconds / 60):02d}:{math.floor(seconds % 60):02d}"

    return f"{_fmt(elapsed_s)} / {_fmt(total_s)}"
