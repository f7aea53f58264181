"""Working envelope: grid snapping and in/out-of-bounds classification.

Boundary handling is a *reporting* step.  ``classify_points`` splits a
point sequence into the parts inside and outside the envelope; deciding
what to do with a partially out-of-bounds path is left to the caller
(see ``Drawing.propose_stroke`` / ``Drawing.commit_stroke``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned drawing-frame bounds (inclusive), in mm."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y


class BoundaryStatus(Enum):
    """Outcome of classifying a processed path against the envelope."""

    EMPTY = "empty"        # nothing to classify
    INSIDE = "inside"      # every point in bounds
    PARTIAL = "partial"    # needs an explicit accept / reject decision
    OUTSIDE = "outside"    # every point out of bounds -> rejected


@dataclass(frozen=True)
class BoundaryReport(Generic[T]):
    """In/out split of a point sequence, order preserved."""

    inside: tuple[T, ...]
    outside: tuple[T, ...]

    @property
    def inside_count(self) -> int:
        return len(self.inside)

    @property
    def outside_count(self) -> int:
        return len(self.outside)

    @property
    def total(self) -> int:
        return len(self.inside) + len(self.outside)

    @property
    def status(self) -> BoundaryStatus:
        if self.total == 0:
            return BoundaryStatus.EMPTY
        if not self.outside:
            return BoundaryStatus.INSIDE
        if not self.inside:
            return BoundaryStatus.OUTSIDE
        return BoundaryStatus.PARTIAL


def classify_points(points: Sequence[T], envelope: Envelope) -> BoundaryReport[T]:
    """Split *points* (objects with ``.x`` / ``.y``) by envelope membership."""
    inside = [p for p in points if envelope.contains(p.x, p.y)]  # type: ignore[attr-defined]
    outside = [p for p in points if not envelope.contains(p.x, p.y)]  # type: ignore[attr-defined]
    return BoundaryReport(inside=tuple(inside), outside=tuple(outside))


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def snap_to_grid(x: float, y: float, snap_size: float) -> tuple[float, float]:
    """Round a canvas sample to the nearest multiple of *snap_size*.

    Ties round towards +inf.  A non-positive *snap_size* disables
    snapping.
    """
    if snap_size <= 0:
        return (x, y)
    return (
        _round_half_up(x / snap_size) * snap_size,
        _round_half_up(y / snap_size) * snap_size,
    )
