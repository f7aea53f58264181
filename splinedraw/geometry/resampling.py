"""Curvature-adaptive point redistribution.

Three passes over a smoothed stroke:

1. **Curvature estimation** -- normalised turn angle at each interior
   point, measured against the nearest *significant* neighbours (at
   least ``1.5 * min_dist`` away).  Dense, nearly duplicate samples are
   skipped so digitisation jitter does not register as curvature.
2. **Corner detection** -- a point is a corner when its curvature
   exceeds the threshold and is a local maximum (ties count).
3. **Redistribution** -- target spacing before each point is
   ``0.5 * min_dist`` at corners, ``min_dist`` next to corners and
   ``max_dist`` elsewhere.  Longer gaps receive evenly spaced linear
   interpolants; points closer than ``0.3 * min_dist`` to the last
   emitted point are dropped unless they are corners.

The first input point is always emitted; the last is appended if the
walk left it more than ``0.01`` mm away.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from splinedraw.geometry.primitives import as_xy_array

#: Neighbour distance (in units of ``min_dist``) required for curvature.
SIGNIFICANT_SEGMENT_FACTOR = 1.5
#: Target spacing multiplier at a corner.
CORNER_SPACING_FACTOR = 0.5
#: Points closer than this (x ``min_dist``) to the last output are dropped.
SKIP_DISTANCE_FACTOR = 0.3
#: Tolerance for re-appending the final input point.
ENDPOINT_TOLERANCE_MM = 0.01


@dataclass(frozen=True)
class ResampleResult:
    """Resampled stroke.

    Attributes
    ----------
    points : np.ndarray
        Shape ``(M, 2)``.
    curvature : np.ndarray
        Shape ``(M,)``; 0 for inserted interpolants.
    is_corner : np.ndarray
        Shape ``(M,)`` bool; ``True`` where the output point is a
        detected corner of the input.
    corner_indices : tuple[int, ...]
        Indices of detected corners in the *input* sequence.
    """

    points: np.ndarray
    curvature: np.ndarray
    is_corner: np.ndarray
    corner_indices: tuple[int, ...]

    def __len__(self) -> int:
        return int(self.points.shape[0])


# ---------------------------------------------------------------------------
# Curvature
# ---------------------------------------------------------------------------


def turn_curvature(
    p1: tuple[float, float],
    p2: tuple[float, float],
    p3: tuple[float, float],
) -> float:
    """Normalised turn angle at *p2*: 0 = straight, 0.5 = right angle, 1 = reversal.

    Zero-length direction vectors yield 0.
    """
    v1x, v1y = p2[0] - p1[0], p2[1] - p1[1]
    v2x, v2y = p3[0] - p2[0], p3[1] - p2[1]
    len1 = math.hypot(v1x, v1y)
    len2 = math.hypot(v2x, v2y)
    if len1 == 0 or len2 == 0:
        return 0.0

    dot = (v1x / len1) * (v2x / len2) + (v1y / len1) * (v2y / len2)
    dot = max(-1.0, min(1.0, dot))
    return math.acos(dot) / math.pi


def _significant_neighbours(
    pts: np.ndarray, i: int, min_segment: float,
) -> tuple[int, float, int, float]:
    """Walk outwards from *i* until each neighbour is >= *min_segment* away."""
    n = pts.shape[0]
    x, y = pts[i]

    prev_idx = i - 1
    prev_dist = math.hypot(pts[prev_idx, 0] - x, pts[prev_idx, 1] - y)
    while prev_idx > 0 and prev_dist < min_segment:
        prev_idx -= 1
        prev_dist = math.hypot(pts[prev_idx, 0] - x, pts[prev_idx, 1] - y)

    next_idx = i + 1
    next_dist = math.hypot(pts[next_idx, 0] - x, pts[next_idx, 1] - y)
    while next_idx < n - 1 and next_dist < min_segment:
        next_idx += 1
        next_dist = math.hypot(pts[next_idx, 0] - x, pts[next_idx, 1] - y)

    return prev_idx, prev_dist, next_idx, next_dist


def estimate_curvature(points: Iterable[Any], min_dist: float) -> np.ndarray:
    """Per-point curvature using significant neighbours.

    Endpoints and points without a significant neighbour on either side
    get 0.

    Returns
    -------
    np.ndarray
        Shape ``(N,)``, values in [0, 1].
    """
    pts = as_xy_array(points)
    n = pts.shape[0]
    curvature = np.zeros(n)
    min_segment = min_dist * SIGNIFICANT_SEGMENT_FACTOR

    for i in range(1, n - 1):
        prev_idx, prev_dist, next_idx, next_dist = _significant_neighbours(
            pts, i, min_segment,
        )
        if prev_dist >= min_segment and next_dist >= min_segment:
            curvature[i] = turn_curvature(
                tuple(pts[prev_idx]), tuple(pts[i]), tuple(pts[next_idx]),
            )
    return curvature


def detect_corners(curvature: np.ndarray, threshold: float) -> set[int]:
    """Indices whose curvature exceeds *threshold* and peaks locally.

    Endpoints are never corners.  Equal neighbouring values still count
    as a peak.
    """
    corners: set[int] = set()
    for i in range(1, len(curvature) - 1):
        c = curvature[i]
        if c <= threshold:
            continue
        if c >= curvature[i - 1] and c >= curvature[i + 1]:
            corners.add(i)
    return corners


# ---------------------------------------------------------------------------
# Redistribution
# ---------------------------------------------------------------------------


def adaptive_resample(
    points: Iterable[Any],
    min_dist: float,
    max_dist: float,
    curvature_threshold: float,
) -> ResampleResult:
    """Redistribute points by local curvature.

    Parameters
    ----------
    points : Iterable
        Smoothed stroke (``(N, 2)`` array, pairs, or point records).
    min_dist, max_dist : float
        Spacing bounds in mm.
    curvature_threshold : float
        Minimum normalised curvature for a corner, in [0, 1].

    Returns
    -------
    ResampleResult
        Input returned unchanged (with zero curvature) when it has fewer
        than 2 points.
    """
    pts = as_xy_array(points)
    n = pts.shape[0]
    if n < 2:
        return ResampleResult(
            points=pts.copy(),
            curvature=np.zeros(n),
            is_corner=np.zeros(n, dtype=bool),
            corner_indices=(),
        )

    curvature = estimate_curvature(pts, min_dist)
    corners = detect_corners(curvature, curvature_threshold)

    out_xy: list[tuple[float, float]] = [(float(pts[0, 0]), float(pts[0, 1]))]
    out_curv: list[float] = [float(curvature[0])]
    out_corner: list[bool] = [False]

    for i in range(1, n):
        px, py = out_xy[-1]
        cx, cy = float(pts[i, 0]), float(pts[i, 1])
        dist = math.hypot(cx - px, cy - py)

        is_corner = i in corners
        near_corner = (i - 1) in corners or (i + 1) in corners

        if is_corner:
            target = min_dist * CORNER_SPACING_FACTOR
        elif near_corner:
            target = min_dist
        else:
            target = max_dist

        if target > 0 and dist > target:
            subdivisions = math.ceil(dist / target)
            for j in range(1, subdivisions):
                t = j / subdivisions
                out_xy.append((px + (cx - px) * t, py + (cy - py) * t))
                out_curv.append(0.0)
                out_corner.append(False)

        lx, ly = out_xy[-1]
        if is_corner or math.hypot(cx - lx, cy - ly) >= min_dist * SKIP_DISTANCE_FACTOR:
            out_xy.append((cx, cy))
            out_curv.append(float(curvature[i]))
            out_corner.append(is_corner)

    last = (float(pts[-1, 0]), float(pts[-1, 1]))
    lx, ly = out_xy[-1]
    if math.hypot(last[0] - lx, last[1] - ly) > ENDPOINT_TOLERANCE_MM:
        out_xy.append(last)
        out_curv.append(float(curvature[-1]))
        out_corner.append(False)

    return ResampleResult(
        points=np.array(out_xy, dtype=float),
        curvature=np.array(out_curv, dtype=float),
        is_corner=np.array(out_corner, dtype=bool),
        corner_indices=tuple(sorted(corners)),
    )
