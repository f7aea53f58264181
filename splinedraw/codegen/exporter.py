"""Program export: dialect registry, export results and file output.

Usage::

    from splinedraw.codegen.exporter import export_drawing, write_program
    result = export_drawing(drawing, settings)       # configured dialect
    if result.status is ExportStatus.OK:
        write_program(result, "outputs/programs")

``export_*`` never raises for an empty drawing or a placeholder dialect;
the condition is carried by ``ExportResult.status``.  Writing a result
that has no points raises ``ExportError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from splinedraw.codegen.base import (
    CodeEmitter,
    ExportError,
    ExportResult,
    ExportStatus,
)
from splinedraw.codegen.fanuc import FanucEmitter
from splinedraw.codegen.kuka import KukaEmitter
from splinedraw.codegen.motion import MotionPoint, build_motion_list
from splinedraw.codegen.stubs import AbbEmitter, YaskawaEmitter
from splinedraw.configs.loader import RobotDialect
from splinedraw.utils.fs import atomic_write_text

if TYPE_CHECKING:
    from splinedraw.configs.loader import Settings
    from splinedraw.model.drawing import Drawing

logger = logging.getLogger(__name__)

EMITTERS: dict[RobotDialect, type[CodeEmitter]] = {
    RobotDialect.KUKA: KukaEmitter,
    RobotDialect.FANUC: FanucEmitter,
    RobotDialect.ABB: AbbEmitter,
    RobotDialect.YASKAWA: YaskawaEmitter,
}


def get_emitter(dialect: RobotDialect | str, settings: Settings) -> CodeEmitter:
    """Emitter instance for *dialect* (enum member or its value).

    Raises
    ------
    ExportError
        If *dialect* is not a known dialect name.
    """
    if isinstance(dialect, RobotDialect):
        return EMITTERS[dialect](settings)
    try:
        key = RobotDialect(dialect.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(d.value for d in RobotDialect)
        raise ExportError(
            f"Unknown robot dialect {dialect!r} (expected one of: {allowed})"
        ) from exc
    return EMITTERS[key](settings)


def export_motion(
    points: Sequence[MotionPoint],
    settings: Settings,
    *,
    dialect: RobotDialect | str | None = None,
    program_index: int | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """Generate program text for an already flattened motion list.

    Parameters
    ----------
    points : Sequence[MotionPoint]
        Output of ``build_motion_list``.
    settings : Settings
        Validated settings.
    dialect : RobotDialect | str | None
        Overrides ``settings.export.robot_type``.
    program_index : int | None
        Overrides ``settings.export.program_index``.
    now : datetime | None
        Timestamp written into headers; defaults to the current UTC time.

    Returns
    -------
    ExportResult
        ``NO_POINTS`` with empty text when *points* is empty.

    Raises
    ------
    ExportError
        For an unknown dialect or a program index outside
        ``1..max_program_num``.
    """
    emitter = get_emitter(dialect or settings.export.robot_type, settings)
    export_cfg = settings.export
    index = export_cfg.program_index if program_index is None else program_index
    if not 1 <= index <= export_cfg.max_program_num:
        raise ExportError(
            f"Program index must be in [1, {export_cfg.max_program_num}], got {index}"
        )
    name = export_cfg.program_name(index)
    filename = emitter.filename(name)

    if not points:
        logger.warning("Nothing to export for %s", name)
        return ExportResult(
            status=ExportStatus.NO_POINTS,
            dialect=emitter.dialect,
            program_name=name,
            filename=filename,
            code="",
            point_count=0,
        )

    if now is None:
        now = datetime.now(timezone.utc)
    code = emitter.generate(name, points, now)

    if emitter.placeholder:
        status = ExportStatus.PLACEHOLDER
        logger.warning(
            "%s export is not implemented; generated placeholder %s",
            emitter.dialect.value.upper(), filename,
        )
    else:
        status = ExportStatus.OK
        logger.info(
            "Generated %s (%s, %d points)",
            filename, emitter.dialect.value, len(points),
        )

    return ExportResult(
        status=status,
        dialect=emitter.dialect,
        program_name=name,
        filename=filename,
        code=code,
        point_count=len(points),
    )


def export_drawing(
    drawing: Drawing,
    settings: Settings,
    *,
    dialect: RobotDialect | str | None = None,
    program_index: int | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """Bring transitions up to date, flatten and export *drawing*."""
    drawing.ensure_transitions(settings)
    points = build_motion_list(drawing.paths, drawing.transitions, settings)
    return export_motion(
        points,
        settings,
        dialect=dialect,
        program_index=program_index,
        now=now,
    )


def write_program(
    result: ExportResult,
    directory: str | Path,
) -> Path:
    """Write *result* atomically into *directory*.

    Returns
    -------
    Path
        The written file.

    Raises
    ------
    ExportError
        If the result has no points.
    """
    if result.status is ExportStatus.NO_POINTS:
        raise ExportError(f"{result.program_name}: no points to export")
    path = Path(directory) / result.filename
    atomic_write_text(result.code, path)
    logger.info("Wrote %s", path)
    return path
