"""
Robot program generation.

    motion:   flattened motion list (approach, paths, transitions, exit)
    base:     emitter interface, export result, number formatting
    kuka:     KUKA KRL ``.src``
    fanuc:    FANUC TP ``.ls``
    stubs:    ABB / Yaskawa placeholders
    exporter: dialect registry, export and atomic file output
"""

from splinedraw.codegen.base import (
    CodeEmitter,
    ExportError,
    ExportResult,
    ExportStatus,
)
from splinedraw.codegen.exporter import (
    EMITTERS,
    export_drawing,
    export_motion,
    get_emitter,
    write_program,
)
from splinedraw.codegen.motion import (
    ApproachPoint,
    ExitPoint,
    MotionPoint,
    PathPoint,
    TransitionMovePoint,
    build_motion_list,
    group_motion,
)

__all__ = [
    "CodeEmitter",
    "ExportError",
    "ExportResult",
    "ExportStatus",
    "EMITTERS",
    "export_drawing",
    "export_motion",
    "get_emitter",
    "write_program",
    "ApproachPoint",
    "ExitPoint",
    "MotionPoint",
    "PathPoint",
    "TransitionMovePoint",
    "build_motion_list",
    "group_motion",
]
