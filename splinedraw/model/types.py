"""Core data model -- strokes, processed paths, transitions, work planes.

Coordinates are stored in the **drawing frame**:

    x, y : the two canvas axes of the active work plane (mm)
    z    : depth along the perpendicular axis (mm, 0 on the drawing)

``WorkPlane.to_world()`` maps drawing-frame coordinates onto robot world
axes at the export boundary.  Transition offsets are expressed in
**world** axes and mapped back with ``WorkPlane.offset_to_drawing()``.

Feed rates are stored in **mm/s** throughout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Work plane
# ---------------------------------------------------------------------------


class WorkPlane(str, Enum):
    """Plane spanned by the two canvas axes."""

    XY = "XY"
    YZ = "YZ"
    XZ = "XZ"

    @property
    def axis_labels(self) -> tuple[str, str]:
        """World axis names carried by canvas axis 1 and axis 2."""
        return (self.value[0], self.value[1])

    @property
    def perpendicular_axis(self) -> str:
        """World axis not spanned by the plane."""
        return {"XY": "Z", "YZ": "X", "XZ": "Y"}[self.value]

    def to_world(self, x: float, y: float, z: float) -> tuple[float, float, float]:
        """Map a drawing-frame point to world ``(X, Y, Z)``."""
        if self is WorkPlane.YZ:
            return (z, x, y)
        if self is WorkPlane.XZ:
            return (x, z, y)
        return (x, y, z)

    def offset_to_drawing(
        self, offset_x: float, offset_y: float, offset_z: float,
    ) -> tuple[float, float, float]:
        """Map a world-axis offset onto drawing-frame ``(dx, dy, dz)``.

        Inverse of :meth:`to_world`; the perpendicular offset component
        always lands on the drawing-frame depth ``dz``.
        """
        if self is WorkPlane.YZ:
            return (offset_y, offset_z, offset_x)
        if self is WorkPlane.XZ:
            return (offset_x, offset_z, offset_y)
        return (offset_x, offset_y, offset_z)


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawPoint:
    """Captured pointer sample.

    Parameters
    ----------
    x, y : float
        Canvas position in mm.
    timestamp : float
        Monotonic capture time in seconds.
    """

    x: float
    y: float
    timestamp: float = 0.0


@dataclass(slots=True)
class ProcessedPoint:
    """Point on the canonical (smoothed, resampled) path.

    ``velocity`` is editable after processing; ``curvature`` is the
    normalised turn angle computed by the resampler (0 for inserted
    interpolants).
    """

    x: float
    y: float
    velocity: float
    z: float = 0.0
    curvature: float = 0.0


@dataclass(slots=True)
class WorldPoint:
    """Literal drawing-frame coordinate of a transition point."""

    x: float
    y: float
    z: float
    velocity: float


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


LAYER_COLORS: tuple[str, ...] = (
    "#00ff88", "#ff6b6b", "#4ecdc4", "#ffe66d",
    "#95e1d3", "#f38181", "#aa96da", "#fcbad3",
    "#a8d8ea", "#ff9a8b", "#88d8b0", "#ffeaa7",
)


@dataclass
class Path:
    """One independently drawn path (a drawing layer).

    ``raw_points`` is the frozen smoothing input; ``processed_points`` is
    derived from it and may be recomputed at any time.
    """

    id: str
    name: str
    raw_points: list[RawPoint] = field(default_factory=list)
    processed_points: list[ProcessedPoint] = field(default_factory=list)
    color: str = LAYER_COLORS[0]
    visible: bool = True
    locked: bool = False
    velocity: float = 30.0

    @property
    def first_point(self) -> ProcessedPoint | None:
        return self.processed_points[0] if self.processed_points else None

    @property
    def last_point(self) -> ProcessedPoint | None:
        return self.processed_points[-1] if self.processed_points else None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class TransitionPoint:
    """Offset record of one transition point (world axes, mm)."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    offset_z: float = 0.0
    velocity: float = 100.0


@dataclass
class Transition:
    """Connector between path ``index`` and path ``index + 1``.

    Layout of ``points``::

        [Exit, *Intermediate, Entry, Start]

    Exit is offset from the end of the previous path; every other point
    is offset from the start of the next path.  Start is always at zero
    offset.
    """

    points: list[TransitionPoint]

    @property
    def exit(self) -> TransitionPoint:
        return self.points[0]

    @property
    def entry(self) -> TransitionPoint:
        return self.points[-2]

    @property
    def start(self) -> TransitionPoint:
        return self.points[-1]

    @property
    def intermediates(self) -> list[TransitionPoint]:
        return self.points[1:-2]

    def is_mandatory(self, index: int) -> bool:
        """``True`` for the Exit, Entry and Start slots."""
        n = len(self.points)
        return index in (0, n - 2, n - 1)
