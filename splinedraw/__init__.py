"""
splinedraw: freehand strokes to robot motion programs.

Pipeline (data flows strictly forward)::

    raw stroke -> smoothing -> adaptive resampling -> processed path
               -> transitions between paths -> spline samples
               -> preview animation | KUKA / FANUC program text

Subpackages:
    geometry:  pure point-array stages (smoothing, resampling, spline, envelope)
    model:     paths, transitions, explicit drawing state
    animation: arc-length animation table and cooperative player
    codegen:   motion list flattening and per-dialect emitters
    configs:   settings.yaml loading and validation
    utils:     filesystem, logging, input file schemas
    scripts:   command-line entry points
"""

__version__ = "0.1.0"

__all__ = [
    "animation",
    "codegen",
    "configs",
    "geometry",
    "model",
    "utils",
]
