"""
Geometry stages of the trajectory pipeline.

Pure functions over point arrays (mm, drawing frame):
    smoothing:  single-pass Laplacian stroke smoothing
    resampling: curvature estimation, corner detection, adaptive spacing
    spline:     clamped Catmull-Rom evaluation and tessellation
    envelope:   grid snapping and working-envelope classification
    primitives: polyline length / arc-length helpers
"""

from splinedraw.geometry.envelope import (
    BoundaryReport,
    BoundaryStatus,
    Envelope,
    classify_points,
    snap_to_grid,
)
from splinedraw.geometry.resampling import (
    ResampleResult,
    adaptive_resample,
    detect_corners,
    estimate_curvature,
    turn_curvature,
)
from splinedraw.geometry.smoothing import smooth_stroke
from splinedraw.geometry.spline import (
    catmull_rom,
    evaluate_spline,
    spline_point,
    tessellate_spline,
)

__all__ = [
    "BoundaryReport",
    "BoundaryStatus",
    "Envelope",
    "classify_points",
    "snap_to_grid",
    "ResampleResult",
    "adaptive_resample",
    "detect_corners",
    "estimate_curvature",
    "turn_curvature",
    "smooth_stroke",
    "catmull_rom",
    "evaluate_spline",
    "spline_point",
    "tessellate_spline",
]
