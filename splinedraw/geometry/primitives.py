"""Polyline primitives shared by the pipeline stages.

Provides:
    - Conversion of point records / tuples to ``(N, 2)`` arrays
    - Segment lengths and cumulative arc length

All coordinates in millimeters (mm).
"""

from typing import Any, Iterable

import numpy as np


def as_xy_array(points: Iterable[Any]) -> np.ndarray:
    """Convert a point sequence to a float array of shape ``(N, 2)``.

    Parameters
    ----------
    points : Iterable
        ``(x, y)`` pairs, objects exposing ``.x`` / ``.y``, or an array
        with at least two columns.

    Returns
    -------
    np.ndarray
        Shape ``(N, 2)``, dtype float64.  ``(0, 2)`` for empty input.
    """
    if isinstance(points, np.ndarray):
        arr = np.asarray(points, dtype=float)
        if arr.size == 0:
            return np.zeros((0, 2))
        return arr.reshape(-1, arr.shape[-1])[:, :2].copy()

    rows = []
    for p in points:
        if hasattr(p, "x") and hasattr(p, "y"):
            rows.append((float(p.x), float(p.y)))
        else:
            rows.append((float(p[0]), float(p[1])))
    if not rows:
        return np.zeros((0, 2))
    return np.array(rows, dtype=float)


def segment_lengths(points: np.ndarray) -> np.ndarray:
    """Euclidean length of each consecutive segment, shape ``(N-1,)``."""
    if points.shape[0] < 2:
        return np.zeros(0)
    return np.hypot(*(points[1:] - points[:-1]).T)


def cumulative_length(points: np.ndarray) -> np.ndarray:
    """Arc length at every vertex, shape ``(N,)``, starting at 0."""
    if points.shape[0] == 0:
        return np.zeros(0)
    return np.concatenate(([0.0], np.cumsum(segment_lengths(points))))
