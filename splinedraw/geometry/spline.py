"""Catmull-Rom spline evaluation through an ordered point sequence.

Used two ways:
    - Rendering: ``tessellate_spline`` emits a fixed number of straight
      segments per source segment.
    - Animation: ``evaluate_spline`` / ``spline_point`` give random
      access to the whole curve with a global parameter ``t`` in [0, 1].

Boundary handling is *clamped*: for segment ``i`` the control points are
``p[i-1], p[i], p[i+1], p[i+2]`` with indices clamped to the valid range,
so the end points are duplicated rather than extrapolated.

Degenerate inputs:
    0 points -> nothing (``None`` / empty array)
    1 point  -> that point
    2 points -> straight-line interpolation
"""

from typing import Any, Iterable, Optional, Union

import numpy as np

from splinedraw.geometry.primitives import as_xy_array

#: Uniform Catmull-Rom tension (0.5 gives the standard centripetal-free form).
TENSION = 0.5


def catmull_rom(
    p0: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    p3: np.ndarray,
    t: Union[float, np.ndarray],
) -> np.ndarray:
    """Evaluate one Catmull-Rom segment between *p1* (t=0) and *p2* (t=1).

    Parameters
    ----------
    p0, p1, p2, p3 : np.ndarray
        Control points, shape ``(2,)`` or ``(N, 2)`` (one row per sample).
    t : float | np.ndarray
        Local parameter, scalar or shape ``(N,)``.

    Returns
    -------
    np.ndarray
        Shape ``(2,)`` for scalar input, ``(N, 2)`` otherwise.
    """
    t = np.asarray(t, dtype=float)
    if t.ndim > 0:
        t = t[:, None]
    t2 = t * t
    t3 = t2 * t
    return TENSION * (
        2.0 * p1
        + (-p0 + p2) * t
        + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t2
        + (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * t3
    )


def evaluate_spline(points: Iterable[Any], t: Union[float, np.ndarray]) -> np.ndarray:
    """Evaluate the whole-sequence spline at global parameter(s) *t*.

    ``t`` is clamped to [0, 1] and mapped to segment
    ``floor(t * (n - 1))`` (the last segment for ``t == 1``) and a local
    parameter within it.

    Returns
    -------
    np.ndarray
        Shape ``(M, 2)`` for ``M`` parameter values; ``(0, 2)`` when
        *points* is empty.
    """
    pts = as_xy_array(points)
    ts = np.clip(np.atleast_1d(np.asarray(t, dtype=float)), 0.0, 1.0)
    n = pts.shape[0]

    if n == 0:
        return np.zeros((0, 2))
    if n == 1:
        return np.repeat(pts, ts.shape[0], axis=0)
    if n == 2:
        out = pts[0] + (pts[1] - pts[0]) * ts[:, None]
    else:
        total_segments = n - 1
        seg_t = ts * total_segments
        seg = np.minimum(np.floor(seg_t).astype(int), total_segments - 1)
        local_t = seg_t - seg

        p0 = pts[np.maximum(seg - 1, 0)]
        p1 = pts[seg]
        p2 = pts[np.minimum(seg + 1, n - 1)]
        p3 = pts[np.minimum(seg + 2, n - 1)]
        out = catmull_rom(p0, p1, p2, p3, local_t)

    # Curve endpoints are the literal input endpoints (no rounding drift)
    out[ts == 0.0] = pts[0]
    out[ts == 1.0] = pts[-1]
    return out


def spline_point(points: Iterable[Any], t: float) -> Optional[tuple[float, float]]:
    """Single point on the spline, or ``None`` for an empty sequence."""
    result = evaluate_spline(points, t)
    if result.shape[0] == 0:
        return None
    return (float(result[0, 0]), float(result[0, 1]))


def tessellate_spline(points: Iterable[Any], segments: int = 20) -> np.ndarray:
    """Polyline approximation of the spline for drawing.

    Parameters
    ----------
    points : Iterable
        Source points.
    segments : int
        Straight segments per source segment, default 20.

    Returns
    -------
    np.ndarray
        Shape ``(1 + (n - 1) * segments, 2)`` for ``n >= 3``; the two
        endpoints for ``n == 2``; empty for ``n < 2``.
    """
    pts = as_xy_array(points)
    n = pts.shape[0]
    if n < 2:
        return np.zeros((0, 2))
    if n == 2:
        return pts.copy()

    local_t = np.arange(1, segments + 1, dtype=float) / segments
    pieces = [pts[:1]]
    for i in range(n - 1):
        p0 = pts[max(0, i - 1)]
        p1 = pts[i]
        p2 = pts[min(n - 1, i + 1)]
        p3 = pts[min(n - 1, i + 2)]
        pieces.append(catmull_rom(p0, p1, p2, p3, local_t))
    return np.vstack(pieces)
