"""Configuration loader for the trajectory pipeline.

Loads and validates ``settings.yaml`` into typed, frozen dataclasses.
Every tunable (smoothing, point spacing, feed rates, dialect parameters)
comes from the config -- nothing in the pipeline is hardcoded.

Feed rates are stored in **mm/s** throughout Python.  Conversion to
controller units (m/s for KUKA, integer mm/sec for FANUC) happens only
in the code emitters.

Usage::

    from splinedraw.configs.loader import load_settings
    cfg = load_settings()                        # default path
    cfg = load_settings("/custom/settings.yaml") # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from splinedraw.geometry.envelope import Envelope
from splinedraw.model.types import WorkPlane
from splinedraw.utils.fs import load_yaml

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


class RobotDialect(str, Enum):
    """Controller dialects known to the exporter."""

    KUKA = "kuka"
    FANUC = "fanuc"
    ABB = "abb"
    YASKAWA = "yaskawa"


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GridConfig:
    """Drawing grid bounds (the working envelope) and snapping, in mm."""

    min_axis1: float
    max_axis1: float
    min_axis2: float
    max_axis2: float
    grid_size: float
    snap_size: float
    enable_snap: bool

    @property
    def envelope(self) -> Envelope:
        return Envelope(
            min_x=self.min_axis1,
            max_x=self.max_axis1,
            min_y=self.min_axis2,
            max_y=self.max_axis2,
        )


@dataclass(frozen=True)
class ProcessingConfig:
    """Stroke smoothing and curvature-adaptive resampling parameters."""

    smoothing_factor: float
    min_point_distance_mm: float
    max_point_distance_mm: float
    curvature_threshold: float


@dataclass(frozen=True)
class SpeedsConfig:
    """Default feed rates (mm/s) and transition clearance (mm)."""

    default_path_speed_mm_s: float
    default_transition_speed_mm_s: float
    transition_offset_mm: float


@dataclass(frozen=True)
class ExportConfig:
    """Program export settings."""

    robot_type: RobotDialect
    basename: str
    program_index: int
    max_program_num: int
    output_directory: str

    def program_name(self, index: int | None = None) -> str:
        """``<basename><index>``, e.g. ``program1``."""
        return f"{self.basename}{self.program_index if index is None else index}"


@dataclass(frozen=True)
class KukaConfig:
    """KUKA KRL parameters (fixed orientation, status/turn, tool/base)."""

    s: int
    t: int
    a: float
    b: float
    c: float
    tool: int
    base: int
    output_enabled: bool
    output_id: int


@dataclass(frozen=True)
class FanucConfig:
    """FANUC TP parameters (frames, configuration string, orientation)."""

    config: str
    w: float
    p: float
    r: float
    uf: int
    ut: int
    output_enabled: bool
    output_id: int


@dataclass(frozen=True)
class AnimationConfig:
    """Preview animation sampling and refresh settings."""

    samples_per_segment: int
    render_segments: int
    rebuild_interval_s: float
    loop: bool


@dataclass(frozen=True)
class LoggingConfig:
    """Arguments forwarded to ``setup_logging``."""

    level: str
    file: str | None
    json: bool


@dataclass(frozen=True)
class Settings:
    """Top-level validated settings."""

    work_plane: WorkPlane
    grid: GridConfig
    processing: ProcessingConfig
    speeds: SpeedsConfig
    export: ExportConfig
    kuka: KukaConfig
    fanuc: FanucConfig
    animation: AnimationConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _parse_enum(enum_cls: type[Enum], key: str, raw: Any) -> Any:
    """Case-insensitive lookup of an enum member by value."""
    text = str(raw).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ConfigError(f"{key} must be one of [{allowed}], got {raw!r}")


def _parse_grid(data: dict[str, Any]) -> GridConfig:
    return GridConfig(
        min_axis1=float(data["min_axis1"]),
        max_axis1=float(data["max_axis1"]),
        min_axis2=float(data["min_axis2"]),
        max_axis2=float(data["max_axis2"]),
        grid_size=float(data.get("grid_size", 10.0)),
        snap_size=float(data.get("snap_size", 1.0)),
        enable_snap=bool(data.get("enable_snap", True)),
    )


def _parse_processing(data: dict[str, Any]) -> ProcessingConfig:
    return ProcessingConfig(
        smoothing_factor=float(data["smoothing_factor"]),
        min_point_distance_mm=float(data["min_point_distance_mm"]),
        max_point_distance_mm=float(data["max_point_distance_mm"]),
        curvature_threshold=float(data["curvature_threshold"]),
    )


def _parse_speeds(data: dict[str, Any]) -> SpeedsConfig:
    return SpeedsConfig(
        default_path_speed_mm_s=float(data["default_path_speed_mm_s"]),
        default_transition_speed_mm_s=float(
            data["default_transition_speed_mm_s"]
        ),
        transition_offset_mm=float(data.get("transition_offset_mm", 50.0)),
    )


def _parse_export(data: dict[str, Any]) -> ExportConfig:
    return ExportConfig(
        robot_type=_parse_enum(
            RobotDialect, "export.robot_type", data.get("robot_type", "kuka"),
        ),
        basename=str(data.get("basename", "program")),
        program_index=int(data.get("program_index", 1)),
        max_program_num=int(data.get("max_program_num", 999)),
        output_directory=str(data.get("output_directory", "outputs/programs")),
    )


def _parse_kuka(data: dict[str, Any]) -> KukaConfig:
    return KukaConfig(
        s=int(data.get("s", 2)),
        t=int(data.get("t", 35)),
        a=float(data.get("a", 0.0)),
        b=float(data.get("b", 0.0)),
        c=float(data.get("c", 0.0)),
        tool=int(data.get("tool", 1)),
        base=int(data.get("base", 1)),
        output_enabled=bool(data.get("output_enabled", False)),
        output_id=int(data.get("output_id", 1)),
    )


def _parse_fanuc(data: dict[str, Any]) -> FanucConfig:
    return FanucConfig(
        config=str(data.get("config", "N U T, 0, 0, 0")),
        w=float(data.get("w", -180.0)),
        p=float(data.get("p", 0.0)),
        r=float(data.get("r", 0.0)),
        uf=int(data.get("uf", 0)),
        ut=int(data.get("ut", 1)),
        output_enabled=bool(data.get("output_enabled", False)),
        output_id=int(data.get("output_id", 1)),
    )


def _parse_animation(data: dict[str, Any]) -> AnimationConfig:
    return AnimationConfig(
        samples_per_segment=int(data.get("samples_per_segment", 50)),
        render_segments=int(data.get("render_segments", 20)),
        rebuild_interval_s=float(data.get("rebuild_interval_s", 0.5)),
        loop=bool(data.get("loop", True)),
    )


def _parse_logging(data: dict[str, Any]) -> LoggingConfig:
    log_file = data.get("file")
    return LoggingConfig(
        level=str(data.get("level", "INFO")).upper(),
        file=str(log_file) if log_file else None,
        json=bool(data.get("json", False)),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_settings(cfg: Settings) -> None:
    """Cross-field checks that the dataclasses cannot express."""
    # -- Grid ---------------------------------------------------------------
    g = cfg.grid
    if g.min_axis1 >= g.max_axis1:
        raise ConfigError(
            f"grid.min_axis1 ({g.min_axis1}) must be < "
            f"grid.max_axis1 ({g.max_axis1})"
        )
    if g.min_axis2 >= g.max_axis2:
        raise ConfigError(
            f"grid.min_axis2 ({g.min_axis2}) must be < "
            f"grid.max_axis2 ({g.max_axis2})"
        )
    if g.snap_size <= 0:
        raise ConfigError(f"grid.snap_size must be > 0, got {g.snap_size}")
    if g.grid_size <= 0:
        raise ConfigError(f"grid.grid_size must be > 0, got {g.grid_size}")

    # -- Processing ---------------------------------------------------------
    p = cfg.processing
    if not 0.0 <= p.smoothing_factor <= 1.0:
        raise ConfigError(
            f"processing.smoothing_factor must be in [0, 1], "
            f"got {p.smoothing_factor}"
        )
    if p.min_point_distance_mm <= 0:
        raise ConfigError(
            f"processing.min_point_distance_mm must be > 0, "
            f"got {p.min_point_distance_mm}"
        )
    if p.max_point_distance_mm < p.min_point_distance_mm:
        raise ConfigError(
            f"processing.max_point_distance_mm ({p.max_point_distance_mm}) "
            f"must be >= min_point_distance_mm ({p.min_point_distance_mm})"
        )
    if not 0.0 <= p.curvature_threshold <= 1.0:
        raise ConfigError(
            f"processing.curvature_threshold must be in [0, 1], "
            f"got {p.curvature_threshold}"
        )

    # -- Speeds -------------------------------------------------------------
    s = cfg.speeds
    for name in ("default_path_speed_mm_s", "default_transition_speed_mm_s"):
        value = getattr(s, name)
        if value <= 0:
            raise ConfigError(f"speeds.{name} must be > 0, got {value}")

    # -- Export -------------------------------------------------------------
    e = cfg.export
    if not e.basename:
        raise ConfigError("export.basename must be non-empty")
    if e.max_program_num < 1:
        raise ConfigError(
            f"export.max_program_num must be >= 1, got {e.max_program_num}"
        )
    if not 1 <= e.program_index <= e.max_program_num:
        raise ConfigError(
            f"export.program_index must be in [1, {e.max_program_num}], "
            f"got {e.program_index}"
        )

    # -- Animation ----------------------------------------------------------
    a = cfg.animation
    if a.samples_per_segment < 1:
        raise ConfigError(
            f"animation.samples_per_segment must be >= 1, "
            f"got {a.samples_per_segment}"
        )
    if a.render_segments < 1:
        raise ConfigError(
            f"animation.render_segments must be >= 1, got {a.render_segments}"
        )
    if a.rebuild_interval_s <= 0:
        raise ConfigError(
            f"animation.rebuild_interval_s must be > 0, "
            f"got {a.rebuild_interval_s}"
        )

    if cfg.logging.level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown logging.level {cfg.logging.level!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build and validate ``Settings`` from an already-parsed mapping.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    """
    try:
        settings = Settings(
            work_plane=_parse_enum(
                WorkPlane, "work_plane", data.get("work_plane", "XY"),
            ),
            grid=_parse_grid(data["grid"]),
            processing=_parse_processing(data["processing"]),
            speeds=_parse_speeds(data["speeds"]),
            export=_parse_export(data.get("export") or {}),
            kuka=_parse_kuka(data.get("kuka") or {}),
            fanuc=_parse_fanuc(data.get("fanuc") or {}),
            animation=_parse_animation(data.get("animation") or {}),
            logging=_parse_logging(data.get("logging") or {}),
        )
    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc

    _validate_settings(settings)
    return settings


def load_settings(path: str | Path | None = None) -> Settings:
    """Load and validate settings from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``settings.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    Settings
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "settings.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading settings from %s", path)

    data: dict[str, Any] | None = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    settings = settings_from_dict(data)
    logger.info(
        "Settings loaded (plane=%s, dialect=%s)",
        settings.work_plane.value,
        settings.export.robot_type.value,
    )
    return settings
