"""Emitter interface, export result and shared number formatting.

Feed rate convention:
    Python stores feed rates in **mm/s**.  Each emitter converts to its
    controller unit at the generation boundary (m/s for KUKA
    ``$VEL.CP``, integer mm/sec for FANUC).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Sequence

from splinedraw.configs.loader import RobotDialect
from splinedraw.codegen.motion import MotionPoint

if TYPE_CHECKING:
    from splinedraw.configs.loader import Settings

#: Name written into program headers.
GENERATOR_NAME = "splinedraw"


class ExportError(Exception):
    """Raised when an export cannot be written."""

    pass


class ExportStatus(Enum):
    """Outcome of an export request."""

    OK = "ok"
    PLACEHOLDER = "placeholder"   # dialect not implemented, stub text
    NO_POINTS = "no_points"       # nothing exportable, no text


@dataclass(frozen=True)
class ExportResult:
    """Generated program text and how it came about."""

    status: ExportStatus
    dialect: RobotDialect
    program_name: str
    filename: str
    code: str
    point_count: int

    @property
    def ok(self) -> bool:
        return self.status is ExportStatus.OK


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def fixed(value: float, digits: int) -> str:
    """Fixed-point text without a negative zero."""
    return f"{value + 0.0:.{digits}f}"


def round_half_up(value: float) -> int:
    """Nearest integer, ties towards +inf."""
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Emitter
# ---------------------------------------------------------------------------


class CodeEmitter(ABC):
    """One controller dialect.

    Parameters
    ----------
    settings : Settings
        Validated settings; emitters read their own dialect section.
    """

    dialect: ClassVar[RobotDialect]
    extension: ClassVar[str]
    #: ``True`` for dialects that only emit a marked placeholder.
    placeholder: ClassVar[bool] = False

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def world(self, point: MotionPoint) -> tuple[float, float, float]:
        """World ``(X, Y, Z)`` of *point* for the configured work plane."""
        return self._settings.work_plane.to_world(point.x, point.y, point.z)

    def filename(self, name: str) -> str:
        return f"{name}{self.extension}"

    @abstractmethod
    def generate(
        self, name: str, points: Sequence[MotionPoint], now: datetime,
    ) -> str:
        """Program text for a non-empty motion list."""
