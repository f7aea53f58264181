"""Placeholder emitters for dialects without a generator yet.

They return a short, clearly marked text so an export request never
crashes and never produces an empty file; the exporter reports their
results with ``ExportStatus.PLACEHOLDER``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from splinedraw.codegen.base import CodeEmitter
from splinedraw.codegen.motion import MotionPoint
from splinedraw.configs.loader import RobotDialect


class AbbEmitter(CodeEmitter):
    dialect = RobotDialect.ABB
    extension = ".mod"
    placeholder = True

    def generate(
        self, name: str, points: Sequence[MotionPoint], now: datetime,
    ) -> str:
        return f"! ABB RAPID export - Coming soon\n! {name}"


class YaskawaEmitter(CodeEmitter):
    dialect = RobotDialect.YASKAWA
    extension = ".jbi"
    placeholder = True

    def generate(
        self, name: str, points: Sequence[MotionPoint], now: datetime,
    ) -> str:
        return f"; YASKAWA export - Coming soon\n; {name}"
