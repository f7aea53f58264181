"""KUKA KRL (``.src``) emitter.

Layout of the generated program::

    DEF name()
        ; header comments
        DECL ...              ; SP/SPVEL, TP/TPVEL, AP/APVEL, EP/EPVEL
        AP = {...}            ; point and velocity values
        SP[i] = {...}
        ...
        ; Movement Sequence
        $TOOL / $BASE
        PTP AP
        SLIN SP[1] WITH $VEL.CP = APVEL
        SPLINE ... ENDSPLINE  ; one block per path (blended)
        SLIN TP[i] ...        ; transitions, no blending
        SLIN EP WITH $VEL.CP = EPVEL
    END

Positions are E6POS records in world axes with the fixed orientation and
status/turn from the ``kuka`` settings section.  Velocities are written
in m/s with three decimals.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from io import StringIO
from typing import Sequence

from splinedraw.codegen.base import GENERATOR_NAME, CodeEmitter, fixed
from splinedraw.codegen.motion import GroupedMotion, MotionPoint, group_motion
from splinedraw.configs.loader import RobotDialect

logger = logging.getLogger(__name__)

_INDENT = "    "
_RULE = "    ; ========================================\n"


def _vel(velocity_mm_s: float) -> str:
    """mm/s -> ``$VEL.CP`` value in m/s."""
    return fixed(velocity_mm_s / 1000.0, 3)


def _timestamp(now: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. ``2024-05-01T12:00:00.000Z``."""
    utc = now.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class KukaEmitter(CodeEmitter):
    """SPLINE blocks per path, SLIN transitions, PTP approach."""

    dialect = RobotDialect.KUKA
    extension = ".src"

    def e6pos(self, point: MotionPoint) -> str:
        k = self._settings.kuka
        x, y, z = self.world(point)
        return (
            f"{{X {fixed(x, 3)}, Y {fixed(y, 3)}, Z {fixed(z, 3)}, "
            f"A {fixed(k.a, 1)}, B {fixed(k.b, 1)}, C {fixed(k.c, 1)}, "
            f"S {k.s}, T {k.t}}}"
        )

    def generate(
        self, name: str, points: Sequence[MotionPoint], now: datetime,
    ) -> str:
        motion = group_motion(points)
        buf = StringIO()
        buf.write(f"DEF {name}()\n")
        self._write_header(buf, motion, now)
        self._write_declarations(buf, motion)
        sp_index, tp_index = self._write_values(buf, motion)
        self._write_movement(buf, motion, sp_index, tp_index)
        buf.write("END\n")
        return buf.getvalue()

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _write_header(
        self, buf: StringIO, motion: GroupedMotion[MotionPoint], now: datetime,
    ) -> None:
        k = self._settings.kuka
        lines = [
            f"Generated by {GENERATOR_NAME}",
            _timestamp(now),
            f"Work Plane: {self._settings.work_plane.value}",
            f"Path points: {motion.count('path')}",
            f"Transition points: {motion.count('transition')}",
            f"Approach point: {'Yes' if motion.approach is not None else 'No'}",
            f"Exit point: {'Yes' if motion.exit is not None else 'No'}",
        ]
        if k.output_enabled:
            lines.append(f"Output $OUT[{k.output_id}] enabled for path start/end")
        for line in lines:
            buf.write(f"{_INDENT}; {line}\n")
        buf.write("\n")

    def _write_declarations(
        self, buf: StringIO, motion: GroupedMotion[MotionPoint],
    ) -> None:
        n_path = motion.count("path")
        n_trans = motion.count("transition")
        if n_path:
            buf.write(f"    DECL E6POS SP[{n_path}]    ; Spline path points\n")
            buf.write(f"    DECL REAL SPVEL[{n_path}]  ; Spline velocities\n")
        if n_trans:
            buf.write(f"    DECL E6POS TP[{n_trans}]    ; Transition points\n")
            buf.write(f"    DECL REAL TPVEL[{n_trans}]  ; Transition velocities\n")
        if motion.approach is not None:
            buf.write("    DECL E6POS AP    ; Approach point\n")
            buf.write("    DECL REAL APVEL  ; Approach velocity\n")
        if motion.exit is not None:
            buf.write("    DECL E6POS EP    ; Exit point\n")
            buf.write("    DECL REAL EPVEL  ; Exit velocity\n")
        buf.write("\n")

    def _write_values(
        self, buf: StringIO, motion: GroupedMotion[MotionPoint],
    ) -> tuple[dict[int, list[int]], dict[int, list[int]]]:
        """Assign values; returns SP / TP array indices per group position."""
        if motion.approach is not None:
            buf.write("    ; --- Approach point ---\n")
            buf.write(f"    AP = {self.e6pos(motion.approach)}\n")
            buf.write(f"    APVEL = {_vel(motion.approach.velocity)}\n\n")
        if motion.exit is not None:
            buf.write("    ; --- Exit point ---\n")
            buf.write(f"    EP = {self.e6pos(motion.exit)}\n")
            buf.write(f"    EPVEL = {_vel(motion.exit.velocity)}\n\n")

        sp_index: dict[int, list[int]] = {}
        tp_index: dict[int, list[int]] = {}
        sp = tp = 1
        for g, group in enumerate(motion.groups):
            if group.kind == "path":
                buf.write(f"    ; --- Path {group.index + 1} points ---\n")
                sp_index[g] = []
                for point in group.items:
                    buf.write(f"    SP[{sp}] = {self.e6pos(point)}\n")
                    buf.write(f"    SPVEL[{sp}] = {_vel(point.velocity)}\n")
                    sp_index[g].append(sp)
                    sp += 1
            else:
                buf.write(f"    ; --- Transition {group.index + 1} points ---\n")
                tp_index[g] = []
                for point in group.items:
                    buf.write(f"    TP[{tp}] = {self.e6pos(point)}\n")
                    buf.write(f"    TPVEL[{tp}] = {_vel(point.velocity)}\n")
                    tp_index[g].append(tp)
                    tp += 1
            buf.write("\n")
        return sp_index, tp_index

    def _write_movement(
        self,
        buf: StringIO,
        motion: GroupedMotion[MotionPoint],
        sp_index: dict[int, list[int]],
        tp_index: dict[int, list[int]],
    ) -> None:
        k = self._settings.kuka
        buf.write(_RULE)
        buf.write("    ; Movement Sequence\n")
        buf.write(_RULE)
        buf.write("\n")

        buf.write("    ; Tool and Base setup\n")
        buf.write(f"    $TOOL = TOOL_DATA[{k.tool}]\n")
        buf.write(f"    $BASE = BASE_DATA[{k.base}]\n\n")

        if motion.approach is not None:
            buf.write("    ; Approach sequence\n")
            buf.write("    PTP AP    ; Move to approach point (PTP)\n")

        first_path = True
        for g, group in enumerate(motion.groups):
            if group.kind == "path":
                path_num = group.index + 1
                indices = sp_index[g]
                if first_path:
                    if motion.approach is not None:
                        buf.write(
                            f"    SLIN SP[{indices[0]}] WITH $VEL.CP = APVEL"
                            "    ; Enter path\n\n"
                        )
                    else:
                        buf.write(f"    ; Approach Path {path_num}\n")
                        buf.write(f"    PTP SP[{indices[0]}]\n\n")
                    first_path = False

                if k.output_enabled:
                    buf.write(f"    ; Output ON - Path {path_num}\n")
                    buf.write("    WAIT SEC 0.0\n")
                    buf.write(f"    $OUT[{k.output_id}] = TRUE\n\n")

                buf.write(f"    ; Path {path_num} - SPLINE\n")
                buf.write("    SPLINE\n")
                for i in indices:
                    buf.write(f"        SPL SP[{i}] WITH $VEL.CP = SPVEL[{i}]\n")
                buf.write("    ENDSPLINE\n")

                if k.output_enabled:
                    buf.write(f"\n    ; Output OFF - Path {path_num}\n")
                    buf.write("    WAIT SEC 0.0\n")
                    buf.write(f"    $OUT[{k.output_id}] = FALSE\n")
                buf.write("\n")
            else:
                buf.write(
                    f"    ; Transition {group.index + 1} - SLIN (no blending)\n"
                )
                for i in tp_index[g]:
                    buf.write(f"    SLIN TP[{i}] WITH $VEL.CP = TPVEL[{i}]\n")
                buf.write("\n")

        if motion.exit is not None:
            buf.write("    ; Exit sequence\n")
            buf.write("    SLIN EP WITH $VEL.CP = EPVEL    ; Exit from last path\n\n")
