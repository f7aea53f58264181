"""Single-pass Laplacian smoothing of a raw stroke.

Each interior sample is blended with the midpoint of its two neighbours::

    smoothed[i] = p[i] * (1 - f) + (p[i-1] + p[i+1]) / 2 * f

Endpoints pass through unchanged.  ``f == 0`` or fewer than 3 samples
returns an identical copy.  All neighbour reads use the *unsmoothed*
input, so the result does not depend on traversal order.
"""

from typing import Any, Iterable

import numpy as np

from splinedraw.geometry.primitives import as_xy_array


def smooth_stroke(points: Iterable[Any], factor: float) -> np.ndarray:
    """Low-pass filter a stroke.

    Parameters
    ----------
    points : Iterable
        Raw samples (``RawPoint``, ``(x, y)`` pairs or an ``(N, 2)`` array).
    factor : float
        Blend factor in [0, 1].

    Returns
    -------
    np.ndarray
        Smoothed points, shape ``(N, 2)`` -- same length as the input.
    """
    pts = as_xy_array(points)
    if factor == 0 or pts.shape[0] < 3:
        return pts.copy()

    out = pts.copy()
    midpoints = (pts[:-2] + pts[2:]) / 2.0
    out[1:-1] = pts[1:-1] * (1.0 - factor) + midpoints * factor
    return out
