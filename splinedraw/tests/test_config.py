"""Tests for the settings loader.

Validates that the shipped settings.yaml loads, that dialect and plane
names are parsed case-insensitively, and that every cross-field check
rejects a bad value with an actionable message.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest
import yaml

from splinedraw.configs import loader
from splinedraw.configs.loader import (
    ConfigError,
    RobotDialect,
    Settings,
    load_settings,
    settings_from_dict,
)
from splinedraw.model.types import WorkPlane
from splinedraw.utils.fs import load_yaml


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> Settings:
    return load_settings()


@pytest.fixture()
def raw() -> dict[str, Any]:
    """Parsed default settings.yaml, safe to mutate."""
    return copy.deepcopy(load_yaml(Path(loader.__file__).parent / "settings.yaml"))


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_loads(self, settings: Settings) -> None:
        assert settings.work_plane is WorkPlane.XY
        assert settings.export.robot_type is RobotDialect.KUKA

    def test_processing_bounds_consistent(self, settings: Settings) -> None:
        p = settings.processing
        assert 0.0 <= p.smoothing_factor <= 1.0
        assert 0 < p.min_point_distance_mm <= p.max_point_distance_mm

    def test_envelope_matches_grid(self, settings: Settings) -> None:
        g = settings.grid
        env = g.envelope
        assert (env.min_x, env.max_x) == (g.min_axis1, g.max_axis1)
        assert (env.min_y, env.max_y) == (g.min_axis2, g.max_axis2)

    def test_program_name(self, settings: Settings) -> None:
        assert settings.export.program_name(3) == f"{settings.export.basename}3"
        assert settings.export.program_name() == (
            f"{settings.export.basename}{settings.export.program_index}"
        )

    def test_settings_are_frozen(self, settings: Settings) -> None:
        with pytest.raises(AttributeError):
            settings.grid.snap_size = 5.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_dialect_case_insensitive(self, raw: dict[str, Any]) -> None:
        raw["export"]["robot_type"] = "FANUC"
        assert settings_from_dict(raw).export.robot_type is RobotDialect.FANUC

    def test_plane_lowercase(self, raw: dict[str, Any]) -> None:
        raw["work_plane"] = "yz"
        assert settings_from_dict(raw).work_plane is WorkPlane.YZ

    def test_optional_sections_default(self, raw: dict[str, Any]) -> None:
        for key in ("kuka", "fanuc", "animation", "logging"):
            del raw[key]
        settings = settings_from_dict(raw)
        assert settings.kuka.s == 2
        assert settings.fanuc.config == "N U T, 0, 0, 0"
        assert settings.animation.loop is True

    def test_load_from_path(self, raw: dict[str, Any], tmp_path: Path) -> None:
        raw["speeds"]["transition_offset_mm"] = 25.0
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(raw))
        assert load_settings(path).speeds.transition_offset_mm == 25.0


# ---------------------------------------------------------------------------
# Validation failures
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_section(self, raw: dict[str, Any]) -> None:
        del raw["grid"]
        with pytest.raises(ConfigError, match="Missing required configuration key"):
            settings_from_dict(raw)

    def test_non_numeric(self, raw: dict[str, Any]) -> None:
        raw["processing"]["min_point_distance_mm"] = "abc"
        with pytest.raises(ConfigError, match="Invalid configuration value"):
            settings_from_dict(raw)

    def test_unknown_plane(self, raw: dict[str, Any]) -> None:
        raw["work_plane"] = "AB"
        with pytest.raises(ConfigError, match="work_plane must be one of"):
            settings_from_dict(raw)

    def test_unknown_dialect(self, raw: dict[str, Any]) -> None:
        raw["export"]["robot_type"] = "motoman"
        with pytest.raises(ConfigError, match="robot_type"):
            settings_from_dict(raw)

    @pytest.mark.parametrize(
        "section, key, value, message",
        [
            ("grid", "min_axis1", 200.0, "min_axis1"),
            ("grid", "min_axis2", 100.0, "min_axis2"),
            ("grid", "snap_size", 0.0, "snap_size"),
            ("processing", "smoothing_factor", 1.5, "smoothing_factor"),
            ("processing", "min_point_distance_mm", 0.0, "min_point_distance_mm"),
            ("processing", "max_point_distance_mm", 1.0, "max_point_distance_mm"),
            ("processing", "curvature_threshold", -0.1, "curvature_threshold"),
            ("speeds", "default_path_speed_mm_s", 0.0, "default_path_speed_mm_s"),
            ("export", "program_index", 0, "program_index"),
            ("export", "basename", "", "basename"),
            ("animation", "rebuild_interval_s", 0.0, "rebuild_interval_s"),
            ("logging", "level", "LOUD", "logging.level"),
        ],
    )
    def test_rejects(
        self,
        raw: dict[str, Any],
        section: str,
        key: str,
        value: Any,
        message: str,
    ) -> None:
        raw[section][key] = value
        with pytest.raises(ConfigError, match=message):
            settings_from_dict(raw)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="Empty"):
            load_settings(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)
