"""
Drawing data model and path/transition management.

    types:       points, paths, transitions, work planes
    pipeline:    stroke -> processed path, velocity-preserving reprocessing
    transitions: default transitions and world-coordinate synthesis
    drawing:     explicit per-program state and the program book
"""

from splinedraw.model.drawing import Drawing, ProgramBook, StrokeProposal
from splinedraw.model.pipeline import process_stroke, reprocess_path, velocity_key
from splinedraw.model.transitions import (
    add_intermediate_point,
    apply_offset,
    default_transition,
    ensure_transitions,
    remove_intermediate_point,
    transition_world_points,
)
from splinedraw.model.types import (
    LAYER_COLORS,
    Path,
    ProcessedPoint,
    RawPoint,
    Transition,
    TransitionPoint,
    WorkPlane,
    WorldPoint,
)

__all__ = [
    "Drawing",
    "ProgramBook",
    "StrokeProposal",
    "process_stroke",
    "reprocess_path",
    "velocity_key",
    "add_intermediate_point",
    "apply_offset",
    "default_transition",
    "ensure_transitions",
    "remove_intermediate_point",
    "transition_world_points",
    "LAYER_COLORS",
    "Path",
    "ProcessedPoint",
    "RawPoint",
    "Transition",
    "TransitionPoint",
    "WorkPlane",
    "WorldPoint",
]
