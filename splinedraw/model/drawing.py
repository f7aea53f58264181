"""Explicit application state: the paths and transitions of one program.

``Drawing`` owns the mutable state of a single motion program and is
passed around explicitly; the geometry stages it calls are pure
functions.  ``ProgramBook`` keeps one ``Drawing`` per program slot.

Adding a stroke is a two-step protocol so out-of-bounds points are never
dropped silently::

    proposal = drawing.propose_stroke(raw, settings)
    if proposal.status is BoundaryStatus.PARTIAL:
        ...  # show proposal.report.inside_count / outside_count
    drawing.commit_stroke(proposal, settings, accept_partial=True)
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

from splinedraw.geometry.envelope import (
    BoundaryReport,
    BoundaryStatus,
    Envelope,
    classify_points,
)
from splinedraw.model import transitions as tr
from splinedraw.model.pipeline import process_stroke, reprocess_path
from splinedraw.model.types import (
    LAYER_COLORS,
    Path,
    ProcessedPoint,
    RawPoint,
    Transition,
    WorldPoint,
)

if TYPE_CHECKING:
    from splinedraw.configs.loader import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrokeProposal:
    """A processed stroke awaiting a commit decision."""

    raw_points: tuple[RawPoint, ...]
    processed_points: tuple[ProcessedPoint, ...]
    report: BoundaryReport[ProcessedPoint]
    envelope: Envelope

    @property
    def status(self) -> BoundaryStatus:
        return self.report.status


def _new_path_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class Drawing:
    """Paths, transitions and selection of one program."""

    paths: list[Path] = field(default_factory=list)
    transitions: list[Transition] = field(default_factory=list)
    active_path_index: int = -1

    # -- Path creation -------------------------------------------------------

    def _new_path(self, velocity: float) -> Path:
        n = len(self.paths)
        return Path(
            id=_new_path_id(),
            name=f"Path {n + 1}",
            color=LAYER_COLORS[n % len(LAYER_COLORS)],
            velocity=velocity,
        )

    def propose_stroke(
        self, raw_points: Sequence[RawPoint], settings: Settings,
    ) -> StrokeProposal:
        """Run the pipeline on *raw_points* and classify against the grid."""
        processed = process_stroke(
            raw_points,
            settings.processing,
            settings.speeds.default_path_speed_mm_s,
        )
        envelope = settings.grid.envelope
        report = classify_points(processed, envelope)
        if report.status is BoundaryStatus.OUTSIDE:
            logger.warning(
                "Stroke rejected: all %d points outside the grid", report.total,
            )
        elif report.status is BoundaryStatus.PARTIAL:
            logger.warning(
                "Stroke partially outside the grid: %d inside, %d outside",
                report.inside_count, report.outside_count,
            )
        return StrokeProposal(
            raw_points=tuple(raw_points),
            processed_points=tuple(processed),
            report=report,
            envelope=envelope,
        )

    def commit_stroke(
        self,
        proposal: StrokeProposal,
        settings: Settings,
        *,
        accept_partial: bool = False,
    ) -> Path | None:
        """Add the proposed stroke as a new path.

        ``EMPTY`` and ``OUTSIDE`` proposals are never committed.  A
        ``PARTIAL`` proposal is committed with its outside points removed
        only when *accept_partial* is set; its raw points are filtered by
        the same envelope test and kept unfiltered if fewer than 2
        survive.

        Returns
        -------
        Path | None
            The new path, or ``None`` if nothing was committed.
        """
        status = proposal.status
        if status in (BoundaryStatus.EMPTY, BoundaryStatus.OUTSIDE):
            return None
        if status is BoundaryStatus.PARTIAL and not accept_partial:
            logger.info("Partial stroke declined")
            return None

        raw = list(proposal.raw_points)
        if status is BoundaryStatus.PARTIAL:
            processed = list(proposal.report.inside)
            inside_raw = [p for p in raw if proposal.envelope.contains(p.x, p.y)]
            if len(inside_raw) >= 2:
                raw = inside_raw
        else:
            processed = list(proposal.processed_points)

        path = self._new_path(settings.speeds.default_path_speed_mm_s)
        path.raw_points = raw
        path.processed_points = processed
        self.paths.append(path)
        self.active_path_index = len(self.paths) - 1
        logger.debug("Added %s with %d points", path.name, len(processed))
        return path

    def add_stroke(
        self,
        raw_points: Sequence[RawPoint],
        settings: Settings,
        *,
        accept_partial: bool = False,
    ) -> Path | None:
        """``propose_stroke`` followed by ``commit_stroke``."""
        proposal = self.propose_stroke(raw_points, settings)
        return self.commit_stroke(
            proposal, settings, accept_partial=accept_partial,
        )

    def add_empty_path(self, settings: Settings) -> Path:
        path = self._new_path(settings.speeds.default_path_speed_mm_s)
        self.paths.append(path)
        self.active_path_index = len(self.paths) - 1
        return path

    # -- Path management -----------------------------------------------------

    def delete_path(self, index: int) -> Path:
        """Remove a path; every transition is discarded and rebuilt lazily.

        Raises
        ------
        IndexError
            If *index* is out of range.
        """
        path = self.paths.pop(index)
        if self.transitions:
            logger.info(
                "Deleted %s: discarding %d transition(s)",
                path.name, len(self.transitions),
            )
        self.transitions = []
        if self.active_path_index >= len(self.paths):
            self.active_path_index = len(self.paths) - 1
        return path

    def clear(self) -> None:
        self.paths = []
        self.transitions = []
        self.active_path_index = -1

    def set_visible(self, index: int, visible: bool) -> None:
        self.paths[index].visible = visible

    def set_locked(self, index: int, locked: bool) -> None:
        self.paths[index].locked = locked

    def rename_path(self, index: int, name: str) -> None:
        self.paths[index].name = name

    def set_point_velocity(
        self, path_index: int, point_index: int, velocity: float,
    ) -> None:
        """Edit one point's feed rate (mm/s).

        Raises
        ------
        ValueError
            If *velocity* is not positive.
        """
        if velocity <= 0:
            raise ValueError(f"Velocity must be > 0, got {velocity}")
        self.paths[path_index].processed_points[point_index].velocity = velocity

    def apply_bulk_velocity(
        self, selection: Iterable[tuple[int, int]], velocity: float,
    ) -> int:
        """Set *velocity* on every ``(path_index, point_index)`` in *selection*.

        Unknown indices are skipped.

        Returns
        -------
        int
            Number of points updated.

        Raises
        ------
        ValueError
            If *velocity* is not positive.
        """
        if velocity <= 0:
            raise ValueError(f"Velocity must be > 0, got {velocity}")
        updated = 0
        for path_index, point_index in selection:
            if not 0 <= path_index < len(self.paths):
                continue
            points = self.paths[path_index].processed_points
            if 0 <= point_index < len(points):
                points[point_index].velocity = velocity
                updated += 1
        return updated

    def reprocess_all(self, settings: Settings) -> int:
        """Rerun the pipeline on every path after a processing change.

        Returns
        -------
        int
            Total number of velocities restored.
        """
        restored = 0
        total = 0
        for path in self.paths:
            restored += reprocess_path(
                path,
                settings.processing,
                settings.speeds.default_path_speed_mm_s,
            )
            total += len(path.processed_points)
        logger.info(
            "Reprocessed %d path(s): %d velocities restored, %d defaulted",
            len(self.paths), restored, total - restored,
        )
        return restored

    # -- Transitions ---------------------------------------------------------

    def ensure_transitions(self, settings: Settings) -> list[Transition]:
        return tr.ensure_transitions(
            self.transitions,
            len(self.paths),
            settings.speeds.transition_offset_mm,
            settings.speeds.default_transition_speed_mm_s,
            settings.work_plane,
        )

    def add_transition_point(
        self, transition_index: int, settings: Settings,
    ) -> int:
        self.ensure_transitions(settings)
        return tr.add_intermediate_point(
            self.transitions[transition_index],
            settings.speeds.default_transition_speed_mm_s,
        )

    def remove_transition_point(
        self, transition_index: int, point_index: int,
    ) -> bool:
        if not 0 <= transition_index < len(self.transitions):
            return False
        return tr.remove_intermediate_point(
            self.transitions[transition_index], point_index,
        )

    def transition_points(
        self, transition_index: int, settings: Settings,
    ) -> list[WorldPoint]:
        """World points of the transition leaving path *transition_index*."""
        self.ensure_transitions(settings)
        return tr.transition_world_points(
            self.paths[transition_index],
            self.paths[transition_index + 1],
            self.transitions[transition_index],
            settings.work_plane,
        )

    # -- Queries -------------------------------------------------------------

    @property
    def visible_paths(self) -> list[Path]:
        return [p for p in self.paths if p.visible]

    @property
    def point_count(self) -> int:
        return sum(len(p.processed_points) for p in self.paths)


class ProgramBook:
    """One ``Drawing`` per program index, ``1..max_program_num``.

    Switching programs stores a deep copy of the current drawing and
    loads a deep copy of the target (or an empty drawing).
    """

    def __init__(self, max_program_num: int, current_index: int = 1) -> None:
        if max_program_num < 1:
            raise ValueError(f"max_program_num must be >= 1, got {max_program_num}")
        self.max_program_num = max_program_num
        self._check_index(current_index)
        self.current_index = current_index
        self.drawing = Drawing()
        self._programs: dict[int, Drawing] = {}

    def _check_index(self, index: int) -> None:
        if not 1 <= index <= self.max_program_num:
            raise ValueError(
                f"Program index must be in [1, {self.max_program_num}], got {index}"
            )

    def save_current(self) -> None:
        self._programs[self.current_index] = copy.deepcopy(self.drawing)

    def switch(self, index: int) -> Drawing:
        """Store the current drawing and make program *index* current."""
        self._check_index(index)
        self.save_current()
        self.current_index = index
        stored = self._programs.get(index)
        self.drawing = copy.deepcopy(stored) if stored is not None else Drawing()
        self.drawing.active_path_index = 0 if self.drawing.paths else -1
        logger.debug("Switched to program %d", index)
        return self.drawing

    def stored_indices(self) -> list[int]:
        return sorted(self._programs)
