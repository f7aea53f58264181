"""Feed-rate-aware preview animation (sampled table + cooperative player)."""

from splinedraw.animation.clock import (
    AnimationTable,
    build_animation_table,
    format_clock,
)
from splinedraw.animation.player import AnimationFrame, AnimationPlayer, PlayerState

__all__ = [
    "AnimationTable",
    "build_animation_table",
    "format_clock",
    "AnimationFrame",
    "AnimationPlayer",
    "PlayerState",
]
