"""YAML schema validation for drawing input files.

A drawing file (``drawing.v1``) carries the raw samples of each path as
captured by a UI or produced by another tool, plus optional per-path
attributes and transition overrides::

    schema: drawing.v1
    paths:
      - name: Outline          # optional, default "Path N"
        visible: true          # optional
        velocity: 40.0         # optional, mm/s for every point
        points: [[0, 0], [10, 0], [10, 10]]
    transitions:               # optional
      - index: 0               # "from" path position
        points:                # [Exit, *Intermediate, Entry, Start]
          - {offset_z: 50, velocity: 100}
          - {offset_z: 50}
          - {}

Units:
    - Geometry: millimeters (mm), drawing frame
    - Speed: mm/s

Usage:
    from splinedraw.utils import validators
    spec = validators.load_drawing_file("drawing.yaml")
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from splinedraw.utils import fs


class PathSpecV1(BaseModel):
    """One path: raw samples and optional attributes."""
    name: Optional[str] = Field(None, description="Display name")
    visible: bool = Field(True, description="Hidden paths are not exported")
    velocity: Optional[float] = Field(None, gt=0.0, description="Feed rate for all points (mm/s)")
    points: List[Tuple[float, float]] = Field(..., description="Raw (x, y) samples in mm")


class TransitionPointV1(BaseModel):
    """Offset record of a transition point (world axes)."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    offset_z: float = 0.0
    velocity: float = Field(100.0, gt=0.0, description="Feed rate (mm/s)")


class TransitionSpecV1(BaseModel):
    """Replacement point list for one transition."""
    index: int = Field(..., ge=0, description="Index of the 'from' path")
    points: List[TransitionPointV1] = Field(..., min_length=3)

    @field_validator('points')
    @classmethod
    def validate_start_at_zero(cls, v: List[TransitionPointV1]) -> List[TransitionPointV1]:
        start = v[-1]
        if (start.offset_x, start.offset_y, start.offset_z) != (0.0, 0.0, 0.0):
            raise ValueError("The last transition point (Start) must have zero offset")
        return v


class DrawingFileV1(BaseModel):
    """Drawing file (drawing.v1 schema)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("drawing.v1", alias="schema", description="Schema version")
    paths: List[PathSpecV1] = Field(..., description="Paths in drawing order")
    transitions: List[TransitionSpecV1] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "drawing.v1":
            raise ValueError(f"Expected schema 'drawing.v1', got '{v}'")
        return v

    @field_validator('transitions')
    @classmethod
    def validate_unique_indices(cls, v: List[TransitionSpecV1]) -> List[TransitionSpecV1]:
        indices = [t.index for t in v]
        if len(indices) != len(set(indices)):
            raise ValueError(f"Duplicate transition indices: {indices}")
        return v

    @model_validator(mode='after')
    def validate_transition_range(self) -> 'DrawingFileV1':
        limit = len(self.paths) - 1
        for t in self.transitions:
            if t.index >= limit:
                raise ValueError(
                    f"Transition index {t.index} out of range for {len(self.paths)} paths"
                )
        return self


def load_drawing_file(path: Union[str, Path]) -> DrawingFileV1:
    """Load and validate a drawing file from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to a drawing.v1 YAML file

    Returns
    -------
    DrawingFileV1
        Validated drawing file

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Drawing file not found: {path}")

    data = fs.load_yaml(path)
    try:
        return DrawingFileV1(**data)
    except Exception as e:
        raise ValueError(f"Drawing file validation failed at {path}: {e}") from e
