"""Transition synthesis between consecutive paths.

A transition always has three mandatory slots -- Exit, Entry, Start --
with any number of Intermediate points between Exit and Entry::

    [Exit, *Intermediate, Entry, Start]

World coordinates:
    Exit            = last point of the "from" path + offset
    everything else = first point of the "to" path + offset

Offsets are in world axes and are mapped onto the drawing frame by the
active ``WorkPlane``; the perpendicular component always lands on the
drawing-frame depth.

Transitions are indexed by the "from" path position.  ``ensure_transitions``
keeps exactly ``len(paths) - 1`` of them; deleting a path clears the list
entirely (see ``Drawing.delete_path``), so transition edits do not
survive a path-count change caused by deletion.
"""

from __future__ import annotations

import logging

from splinedraw.model.types import (
    Path,
    ProcessedPoint,
    Transition,
    TransitionPoint,
    WorkPlane,
    WorldPoint,
)

logger = logging.getLogger(__name__)


def perpendicular_offset(
    axis: str, distance: float,
) -> tuple[float, float, float]:
    """World offset of *distance* along world *axis* (``"X"``/``"Y"``/``"Z"``)."""
    if axis == "X":
        return (distance, 0.0, 0.0)
    if axis == "Y":
        return (0.0, distance, 0.0)
    return (0.0, 0.0, distance)


def default_transition(
    clearance: float, velocity: float, plane: WorkPlane,
) -> Transition:
    """Three-point transition lifted by *clearance* on the perpendicular axis.

    Exit and Entry carry the clearance; Start is always at zero offset.
    """
    ox, oy, oz = perpendicular_offset(plane.perpendicular_axis, clearance)
    return Transition(
        points=[
            TransitionPoint(ox, oy, oz, velocity),
            TransitionPoint(ox, oy, oz, velocity),
            TransitionPoint(0.0, 0.0, 0.0, velocity),
        ]
    )


def ensure_transitions(
    transitions: list[Transition],
    path_count: int,
    clearance: float,
    velocity: float,
    plane: WorkPlane,
) -> list[Transition]:
    """Grow or truncate *transitions* in place to ``path_count - 1`` entries.

    Existing transitions are kept as they are; missing ones are appended
    with the default layout.

    Returns
    -------
    list[Transition]
        The same list object, for chaining.
    """
    required = max(0, path_count - 1)
    created = 0
    while len(transitions) < required:
        transitions.append(default_transition(clearance, velocity, plane))
        created += 1
    if len(transitions) > required:
        del transitions[required:]
    if created:
        logger.debug("Created %d default transition(s)", created)
    return transitions


def add_intermediate_point(
    transition: Transition, velocity: float,
) -> int:
    """Insert an Intermediate point just before Entry.

    The new point copies Entry's offsets and uses *velocity*.

    Returns
    -------
    int
        Index of the inserted point.
    """
    entry_index = len(transition.points) - 2
    entry = transition.points[entry_index]
    transition.points.insert(
        entry_index,
        TransitionPoint(entry.offset_x, entry.offset_y, entry.offset_z, velocity),
    )
    return entry_index


def remove_intermediate_point(transition: Transition, index: int) -> bool:
    """Remove an Intermediate point; Exit, Entry and Start are kept.

    Returns
    -------
    bool
        ``True`` if a point was removed.
    """
    if not 0 <= index < len(transition.points):
        return False
    if transition.is_mandatory(index):
        return False
    del transition.points[index]
    return True


def apply_offset(
    base: ProcessedPoint, tp: TransitionPoint, plane: WorkPlane,
) -> WorldPoint:
    """Offset *base* by the world-axis offsets of *tp* on *plane*."""
    dx, dy, dz = plane.offset_to_drawing(tp.offset_x, tp.offset_y, tp.offset_z)
    return WorldPoint(
        x=base.x + dx,
        y=base.y + dy,
        z=base.z + dz,
        velocity=tp.velocity,
    )


def transition_world_points(
    from_path: Path,
    to_path: Path,
    transition: Transition,
    plane: WorkPlane,
) -> list[WorldPoint]:
    """Literal drawing-frame coordinates of every transition point.

    Returns an empty list when either path has no processed points.
    """
    end_point = from_path.last_point
    start_point = to_path.first_point
    if end_point is None or start_point is None:
        return []

    return [
        apply_offset(end_point if i == 0 else start_point, tp, plane)
        for i, tp in enumerate(transition.points)
    ]
