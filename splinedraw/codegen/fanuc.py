"""FANUC TP (``.ls``) emitter.

Consecutive points closer than ``DUPLICATE_TOLERANCE_MM`` on every axis
are collapsed before numbering: the duplicate is dropped and the point
kept before it terminates with ``FINE`` instead of ``CNT100``.

Motion vocabulary:
    approach      ``J P[i] 100% CNT100`` (``FINE`` if collapsed)
    path start    ``L P[i] <v>mm/sec FINE``
    path points   ``S P[i] <v>mm/sec CNT100`` (``FINE`` on the last point)
    transitions   ``L P[i] <v>mm/sec CNT100``
    exit          ``J P[i] 100% CNT100``

Velocities are rounded to integer mm/sec.  Positions are world axes with
the fixed W/P/R orientation of the ``fanuc`` settings section.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from io import StringIO
from typing import Sequence

from splinedraw.codegen.base import (
    GENERATOR_NAME,
    CodeEmitter,
    round_half_up,
)
from splinedraw.codegen.motion import MotionPoint, group_motion
from splinedraw.configs.loader import RobotDialect

logger = logging.getLogger(__name__)

DUPLICATE_TOLERANCE_MM = 0.001


@dataclass
class _Stop:
    """Motion point plus its termination override."""

    point: MotionPoint
    fine: bool = False


def _same_position(a: MotionPoint, b: MotionPoint) -> bool:
    return (
        abs(a.x - b.x) < DUPLICATE_TOLERANCE_MM
        and abs(a.y - b.y) < DUPLICATE_TOLERANCE_MM
        and abs(a.z - b.z) < DUPLICATE_TOLERANCE_MM
    )


def collapse_duplicates(points: Sequence[MotionPoint]) -> list[_Stop]:
    """Drop consecutive duplicates, marking the kept point ``fine``."""
    stops: list[_Stop] = []
    for point in points:
        if stops and _same_position(stops[-1].point, point):
            stops[-1].fine = True
        else:
            stops.append(_Stop(point))
    dropped = len(points) - len(stops)
    if dropped:
        logger.debug("Collapsed %d duplicate point(s)", dropped)
    return stops


def _num(value: float) -> str:
    """``%10.3f`` position field."""
    return f"{value + 0.0:10.3f}"


class FanucEmitter(CodeEmitter):
    """Numbered ``/MN`` motion lines plus a ``/POS`` table."""

    dialect = RobotDialect.FANUC
    extension = ".ls"

    def generate(
        self, name: str, points: Sequence[MotionPoint], now: datetime,
    ) -> str:
        f = self._settings.fanuc
        motion = group_motion(collapse_duplicates(points), lambda s: s.point)

        lines: list[str] = []
        positions: list[MotionPoint] = []

        def move(prefix: str, point: MotionPoint, tail: str) -> None:
            positions.append(point)
            lines.append(f"   {len(lines) + 1}:{prefix} P[{len(positions)}] {tail}    ;")

        def note(text: str) -> None:
            lines.append(f"   {len(lines) + 1}:  {text} ;")

        if motion.approach is not None:
            term = "FINE" if motion.approach.fine else "CNT100"
            move("J", motion.approach.point, f"100% {term}")

        path_num = 0
        for group in motion.groups:
            if group.kind == "path":
                path_num += 1
                note(f"--eg:Path {path_num} Start")
                last = len(group.items) - 1
                for k, stop in enumerate(group.items):
                    vel = round_half_up(stop.point.velocity)
                    if k == 0:
                        move("L", stop.point, f"{vel}mm/sec FINE")
                        if f.output_enabled:
                            note(f"DO[{f.output_id}]=ON")
                    else:
                        term = "FINE" if k == last or stop.fine else "CNT100"
                        move("S", stop.point, f"{vel}mm/sec {term}")
                if f.output_enabled:
                    note(f"DO[{f.output_id}]=OFF")
                note(f"--eg:Path {path_num} End")
            else:
                for stop in group.items:
                    vel = round_half_up(stop.point.velocity)
                    term = "FINE" if stop.fine else "CNT100"
                    move("L", stop.point, f"{vel}mm/sec {term}")

        if motion.exit is not None:
            move("J", motion.exit.point, "100% CNT100")

        buf = StringIO()
        self._write_header(buf, name, len(lines), now)
        buf.write("\n".join(lines) + "\n")
        buf.write("/POS\n")
        for index, point in enumerate(positions, start=1):
            self._write_position(buf, index, point)
        buf.write("/END\n")
        return buf.getvalue()

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _write_header(
        self, buf: StringIO, name: str, line_count: int, now: datetime,
    ) -> None:
        date = now.strftime("%y-%m-%d")
        clock = now.strftime("%H:%M:%S")
        buf.write(f"/PROG  {name.upper()}\n")
        buf.write("/ATTR\n")
        buf.write("OWNER\t\t= MNEDITOR;\n")
        buf.write(f'COMMENT\t\t= "{GENERATOR_NAME}";\n')
        buf.write("PROG_SIZE\t= 0;\n")
        buf.write(f"CREATE\t\t= DATE {date}  TIME {clock};\n")
        buf.write(f"MODIFIED\t= DATE {date}  TIME {clock};\n")
        buf.write("FILE_NAME\t= ;\n")
        buf.write("VERSION\t\t= 0;\n")
        buf.write(f"LINE_COUNT\t= {line_count};\n")
        buf.write("MEMORY_SIZE\t= 0;\n")
        buf.write("PROTECT\t\t= READ_WRITE;\n")
        buf.write("TCD:  STACK_SIZE\t= 0,\n")
        buf.write("      TASK_PRIORITY\t= 50,\n")
        buf.write("      TIME_SLICE\t= 0,\n")
        buf.write("      BUSY_LAMP_OFF\t= 0,\n")
        buf.write("      ABORT_REQUEST\t= 0,\n")
        buf.write("      PAUSE_REQUEST\t= 0;\n")
        buf.write("DEFAULT_GROUP\t= 1,*,*,*,*;\n")
        buf.write("CONTROL_CODE\t= 00000000 00000000;\n")
        buf.write("LOCAL_REGISTERS\t= 0,0,0;\n")
        buf.write("/MN\n")

    def _write_position(self, buf: StringIO, index: int, point: MotionPoint) -> None:
        f = self._settings.fanuc
        x, y, z = self.world(point)
        buf.write(f"P[{index}]{{\n")
        buf.write("   GP1:\n")
        buf.write(f"\tUF : {f.uf}, UT : {f.ut},\t\tCONFIG : '{f.config}',\n")
        buf.write(f"\tX ={_num(x)}  mm,\tY ={_num(y)}  mm,\tZ ={_num(z)}  mm,\n")
        buf.write(f"\tW ={_num(f.w)} deg,\tP ={_num(f.p)} deg,\tR ={_num(f.r)} deg\n")
        buf.write("};\n")
