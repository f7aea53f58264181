"""
Settings loading and validation.

Parses ``settings.yaml`` into frozen dataclasses consumed read-only by
the pipeline, the animation clock and the code emitters.
"""

from splinedraw.configs.loader import (
    ConfigError,
    RobotDialect,
    Settings,
    load_settings,
    settings_from_dict,
)

__all__ = [
    "ConfigError",
    "RobotDialect",
    "Settings",
    "load_settings",
    "settings_from_dict",
]
