"""Flattened motion list -- the vocabulary between drawing and emitters.

Every exported point is an immutable, slotted dataclass in drawing-frame
mm (see ``splinedraw.model.types``).  Emitters map them to world axes
with ``WorkPlane.to_world`` and choose their own motion statements.

Order produced by ``build_motion_list``::

    Approach, Path 1 points, Transition 1 points, Path 2 points, ..., Exit

Only visible paths with processed points take part.  The transition
emitted before a path is the one indexed by the *previous visible* path's
position in the full path list.  Path points outside the grid envelope
are skipped.
"""

from __future__ import annotations

import logging
from abc import ABC
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Generic, Literal, Sequence, TypeVar

from splinedraw.model.transitions import transition_world_points
from splinedraw.model.types import Path, ProcessedPoint, Transition

if TYPE_CHECKING:
    from splinedraw.configs.loader import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MotionPoint(ABC):
    """Base class for exported points (drawing frame, mm and mm/s)."""

    x: float
    y: float
    z: float
    velocity: float


@dataclass(frozen=True, slots=True)
class ApproachPoint(MotionPoint):
    """Clearance point above the first point of the first path."""

    pass


@dataclass(frozen=True, slots=True)
class ExitPoint(MotionPoint):
    """Clearance point above the last point of the last path."""

    pass


@dataclass(frozen=True, slots=True)
class PathPoint(MotionPoint):
    """Processed path point.

    Parameters
    ----------
    path_index : int
        Position of the owning path in the full path list.
    point_index : int
        Position within ``Path.processed_points``.
    """

    path_index: int
    point_index: int


@dataclass(frozen=True, slots=True)
class TransitionMovePoint(MotionPoint):
    """Transition point between two paths.

    Parameters
    ----------
    transition_index : int
        Index of the transition (its "from" path position).
    point_index : int
        Position within ``Transition.points``.
    """

    transition_index: int
    point_index: int


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------


def _lifted(
    base: ProcessedPoint, clearance: float, velocity: float, cls: type[MotionPoint],
) -> MotionPoint:
    """*base* raised by *clearance* along the perpendicular axis."""
    return cls(x=base.x, y=base.y, z=base.z + clearance, velocity=velocity)


def build_motion_list(
    paths: Sequence[Path],
    transitions: Sequence[Transition],
    settings: Settings,
) -> list[MotionPoint]:
    """Flatten the drawing into the ordered list of exported points.

    Parameters
    ----------
    paths : Sequence[Path]
        All paths, in order.
    transitions : Sequence[Transition]
        Transitions indexed by "from" path; missing entries are skipped.
    settings : Settings
        Envelope, clearance, default speeds and work plane.

    Returns
    -------
    list[MotionPoint]
        Empty when no visible path has processed points.
    """
    visible = [
        (index, path)
        for index, path in enumerate(paths)
        if path.visible and path.processed_points
    ]
    if not visible:
        return []

    envelope = settings.grid.envelope
    clearance = settings.speeds.transition_offset_mm
    transition_speed = settings.speeds.default_transition_speed_mm_s

    motion: list[MotionPoint] = []
    skipped = 0

    for vis_idx, (index, path) in enumerate(visible):
        if vis_idx == 0:
            motion.append(
                _lifted(path.processed_points[0], clearance, transition_speed, ApproachPoint)
            )
        else:
            prev_index, prev_path = visible[vis_idx - 1]
            if prev_index < len(transitions):
                world = transition_world_points(
                    prev_path, path, transitions[prev_index], settings.work_plane,
                )
                motion.extend(
                    TransitionMovePoint(
                        x=wp.x,
                        y=wp.y,
                        z=wp.z,
                        velocity=wp.velocity or transition_speed,
                        transition_index=prev_index,
                        point_index=k,
                    )
                    for k, wp in enumerate(world)
                )

        for k, p in enumerate(path.processed_points):
            if not envelope.contains(p.x, p.y):
                skipped += 1
                continue
            motion.append(
                PathPoint(
                    x=p.x,
                    y=p.y,
                    z=p.z,
                    velocity=p.velocity or path.velocity,
                    path_index=index,
                    point_index=k,
                )
            )

    motion.append(
        _lifted(visible[-1][1].processed_points[-1], clearance, transition_speed, ExitPoint)
    )

    if skipped:
        logger.warning("Skipped %d path point(s) outside the grid", skipped)
    return motion


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


@dataclass
class MotionGroup(Generic[T]):
    """Consecutive points of one path or one transition."""

    kind: Literal["path", "transition"]
    index: int
    items: list[T] = field(default_factory=list)


@dataclass
class GroupedMotion(Generic[T]):
    """Motion list split into approach, groups and exit."""

    approach: T | None = None
    exit: T | None = None
    groups: list[MotionGroup[T]] = field(default_factory=list)

    def count(self, kind: Literal["path", "transition"]) -> int:
        return sum(len(g.items) for g in self.groups if g.kind == kind)


def group_motion(
    items: Sequence[T],
    point_of: Callable[[T], MotionPoint] = lambda item: item,  # type: ignore[assignment,return-value]
) -> GroupedMotion[T]:
    """Split a flattened list into approach, exit and per-path/transition groups.

    A new path group starts whenever the path index changes; a new
    transition group starts whenever the current group is not the same
    transition.

    Parameters
    ----------
    items : Sequence[T]
        Motion points, or wrappers around them.
    point_of : Callable[[T], MotionPoint]
        Extracts the motion point from an item.
    """
    grouped: GroupedMotion[T] = GroupedMotion()
    current: MotionGroup[T] | None = None
    current_path = -1

    for item in items:
        point = point_of(item)
        if isinstance(point, ApproachPoint):
            grouped.approach = item
        elif isinstance(point, ExitPoint):
            grouped.exit = item
        elif isinstance(point, PathPoint):
            if point.path_index != current_path:
                current = MotionGroup("path", point.path_index)
                grouped.groups.append(current)
                current_path = point.path_index
            current.items.append(item)  # type: ignore[union-attr]
        elif isinstance(point, TransitionMovePoint):
            if (
                current is None
                or current.kind != "transition"
                or current.index != point.transition_index
            ):
                current = MotionGroup("transition", point.transition_index)
                grouped.groups.append(current)
            current.items.append(item)
        else:
            logger.warning("Unsupported motion point: %s", type(point).__name__)
    return grouped
