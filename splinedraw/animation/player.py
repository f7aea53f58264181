"""Cooperative preview player driven by an injectable wall clock.

The player never sleeps or spawns threads.  The caller pulls frames,
either one at a time with ``tick()`` or by iterating ``frames()``, and
decides how often to do so (e.g. once per display refresh)::

    player = AnimationPlayer.for_drawing(drawing, settings)
    player.start()
    for frame in player.frames():
        render(frame.position)
        if user_pressed_stop:
            player.stop()          # the generator ends at the next frame

State machine::

    STOPPED --start--> PLAYING --pause--> PAUSED --resume--> PLAYING
    PLAYING --progress >= 1, no loop--> FINISHED
    any     --stop--> STOPPED (progress reset to 0)

The sampled table is replaced wholesale every ``rebuild_interval_s``
while playing so that edits to the drawing show up; the current progress
is kept (clamped to 0.999) and the start time is re-derived from it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Iterator

from splinedraw.animation.clock import (
    AnimationTable,
    build_animation_table,
    format_clock,
)

if TYPE_CHECKING:
    from splinedraw.configs.loader import Settings
    from splinedraw.model.drawing import Drawing

logger = logging.getLogger(__name__)

#: Upper bound for progress carried across a table rebuild.
MAX_REMAPPED_PROGRESS = 0.999


class PlayerState(Enum):
    """Current playback state."""

    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()
    FINISHED = auto()


@dataclass(frozen=True)
class AnimationFrame:
    """Snapshot produced by one ``tick``."""

    state: PlayerState
    progress: float
    position: tuple[float, float] | None
    elapsed_s: float
    total_s: float
    path_index: int | None

    @property
    def clock(self) -> str:
        return format_clock(self.elapsed_s, self.total_s)


class AnimationPlayer:
    """Progress/time bookkeeping over a periodically rebuilt table.

    Parameters
    ----------
    source : Callable[[], AnimationTable]
        Builds a fresh table from the current drawing state.
    rebuild_interval_s : float
        Wall-clock seconds between table rebuilds while playing.
    loop : bool
        Restart from 0 on reaching the end instead of finishing.
    clock : Callable[[], float]
        Monotonic time source in seconds.
    """

    def __init__(
        self,
        source: Callable[[], AnimationTable],
        *,
        rebuild_interval_s: float = 0.5,
        loop: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._rebuild_interval = rebuild_interval_s
        self._loop = loop
        self._clock = clock

        self._state = PlayerState.STOPPED
        self._table: AnimationTable | None = None
        self._progress = 0.0
        self._start_time = 0.0
        self._last_build = 0.0

    @classmethod
    def for_drawing(
        cls,
        drawing: Drawing,
        settings: Settings,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> AnimationPlayer:
        """Player over the visible paths of *drawing*."""
        anim = settings.animation

        def source() -> AnimationTable:
            return build_animation_table(
                drawing.paths,
                settings.speeds.default_path_speed_mm_s,
                anim.samples_per_segment,
            )

        return cls(
            source,
            rebuild_interval_s=anim.rebuild_interval_s,
            loop=anim.loop,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def table(self) -> AnimationTable | None:
        return self._table

    @property
    def total_time(self) -> float:
        return self._table.total_time if self._table is not None else 0.0

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def _anchor(self, now: float) -> None:
        """Derive the start time that puts *now* at the current progress."""
        elapsed = self._table.time_at(self._progress) if self._table is not None else 0.0
        self._start_time = now - elapsed

    def start(self) -> bool:
        """Build the table and play from 0.

        Returns
        -------
        bool
            ``False`` (and stays stopped) if there is nothing to animate.
        """
        table = self._source()
        if table.is_empty:
            logger.warning("Nothing to animate")
            self._state = PlayerState.STOPPED
            return False

        now = self._clock()
        self._table = table
        self._progress = 0.0
        self._start_time = now
        self._last_build = now
        self._state = PlayerState.PLAYING
        logger.info(
            "Animation started: %.1f mm in %s",
            table.total_length, format_clock(0.0, table.total_time),
        )
        return True

    def refresh(self) -> None:
        """Rebuild the table, keeping (clamped) progress."""
        if self._state not in (PlayerState.PLAYING, PlayerState.PAUSED):
            return
        self._table = self._source()
        self._progress = min(self._progress, MAX_REMAPPED_PROGRESS)
        self._anchor(self._clock())

    def pause(self) -> None:
        if self._state is PlayerState.PLAYING:
            self._state = PlayerState.PAUSED

    def resume(self) -> None:
        if self._state is PlayerState.PAUSED:
            self._anchor(self._clock())
            self._state = PlayerState.PLAYING

    def toggle_pause(self) -> None:
        if self._state is PlayerState.PAUSED:
            self.resume()
        else:
            self.pause()

    def stop(self) -> None:
        self._state = PlayerState.STOPPED
        self._progress = 0.0

    def seek(self, progress: float) -> AnimationFrame:
        """Jump to *progress* (clamped to [0, 1]) without changing state."""
        self._progress = min(max(progress, 0.0), 1.0)
        self._anchor(self._clock())
        return self._frame()

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def _frame(self) -> AnimationFrame:
        table = self._table
        if table is None:
            return AnimationFrame(self._state, self._progress, None, 0.0, 0.0, None)
        return AnimationFrame(
            state=self._state,
            progress=self._progress,
            position=table.position_at(self._progress),
            elapsed_s=table.time_at(self._progress),
            total_s=table.total_time,
            path_index=table.path_index_at(self._progress),
        )

    def tick(self) -> AnimationFrame:
        """Advance progress from the wall clock and return the frame.

        Outside ``PLAYING`` the current frame is returned unchanged.
        """
        if self._state is not PlayerState.PLAYING:
            return self._frame()

        now = self._clock()
        if now - self._last_build > self._rebuild_interval:
            self.refresh()
            self._last_build = now

        total = self.total_time
        elapsed = now - self._start_time
        if total > 0 and elapsed >= total:
            self._progress = 1.0
        elif self._table is not None:
            self._progress = self._table.progress_at_time(elapsed)
        else:
            self._progress = 0.0

        if self._progress >= 1.0:
            if self._loop:
                self._progress = 0.0
                self._start_time = now
            else:
                self._progress = 1.0
                self._state = PlayerState.FINISHED
                logger.info("Animation finished")
        return self._frame()

    def frames(self) -> Iterator[AnimationFrame]:
        """Yield frames while playing.

        Ends after the frame on which playback finishes, or once the
        player has been paused or stopped between two frames.
        """
        while self._state is PlayerState.PLAYING:
            yield self.tick()
