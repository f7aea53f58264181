"""Tests for the arc-length animation table and the preview player.

The player is driven by a fake clock so every frame is deterministic.
"""

from __future__ import annotations

import dataclasses
import math

import pytest

from splinedraw.animation.clock import build_animation_table, format_clock
from splinedraw.animation.player import AnimationPlayer, PlayerState
from splinedraw.configs.loader import Settings, load_settings
from splinedraw.model.drawing import Drawing
from splinedraw.model.types import Path, ProcessedPoint


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock; ``step`` auto-advances on every read."""

    def __init__(self, step: float = 0.0) -> None:
        self.t = 0.0
        self.step = step

    def __call__(self) -> float:
        value = self.t
        self.t += self.step
        return value


def _path(*points: tuple[float, float, float], visible: bool = True) -> Path:
    return Path(
        id="p",
        name="Path",
        processed_points=[ProcessedPoint(x, y, v) for x, y, v in points],
        visible=visible,
    )


@pytest.fixture()
def settings() -> Settings:
    base = load_settings()
    return dataclasses.replace(
        base,
        animation=dataclasses.replace(
            base.animation, rebuild_interval_s=100.0, loop=True,
        ),
    )


@pytest.fixture()
def drawing() -> Drawing:
    """One 10 mm line at 10 mm/s: exactly one second of motion."""
    return Drawing(paths=[_path((0.0, 0.0, 10.0), (10.0, 0.0, 10.0))])


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Animation table
# ---------------------------------------------------------------------------


class TestTable:
    def test_constant_speed_time(self) -> None:
        table = build_animation_table([_path((0, 0, 20.0), (10, 0, 20.0))], 30.0)
        assert table.total_length == pytest.approx(10.0)
        assert table.total_time == pytest.approx(0.5)

    def test_linear_speed_ramp(self) -> None:
        table = build_animation_table([_path((0, 0, 10.0), (10, 0, 30.0))], 30.0)
        # v(x) = 10 + 2x  ->  t = ln(3) / 2
        assert table.total_time == pytest.approx(math.log(3.0) / 2.0, rel=1e-3)

    def test_time_follows_feed_rate(self) -> None:
        table = build_animation_table([_path((0, 0, 10.0), (10, 0, 30.0))], 30.0)
        # Reaching x = 5 takes ln(2) / 2, more than half the total time
        assert table.time_at(0.5) == pytest.approx(math.log(2.0) / 2.0, rel=1e-3)
        assert table.progress_at_time(math.log(2.0) / 2.0) == pytest.approx(0.5, rel=1e-3)
        assert table.time_at(1.0) == pytest.approx(table.total_time)

    def test_constant_speed_time_is_proportional(self) -> None:
        table = build_animation_table([_path((0, 0, 20.0), (10, 0, 20.0))], 30.0)
        for p in (0.0, 0.25, 0.6, 1.0):
            assert table.time_at(p) == pytest.approx(p * table.total_time)
            assert table.progress_at_time(p * table.total_time) == pytest.approx(p)

    def test_zero_velocity_falls_back_to_default(self) -> None:
        table = build_animation_table([_path((0, 0, 0.0), (10, 0, 0.0))], 20.0)
        assert table.total_time == pytest.approx(0.5)

    def test_positions(self) -> None:
        table = build_animation_table([_path((0, 0, 10.0), (10, 0, 10.0))], 30.0)
        assert table.position_at(0.0) == (0.0, 0.0)
        assert table.position_at(0.5) == pytest.approx((5.0, 0.0))
        assert table.position_at(1.0) == pytest.approx((10.0, 0.0))

    def test_jump_between_paths_adds_no_length(self) -> None:
        paths = [
            _path((0, 0, 10.0), (10, 0, 10.0)),
            _path((0, 10, 10.0), (10, 10, 10.0)),
        ]
        table = build_animation_table(paths, 30.0)
        assert table.total_length == pytest.approx(20.0)
        assert table.total_time == pytest.approx(2.0)
        assert table.path_index_at(0.25) == 0
        assert table.path_index_at(0.75) == 1
        assert table.position_at(0.75) == pytest.approx((5.0, 10.0))

    def test_hidden_paths_skipped(self) -> None:
        paths = [
            _path((0, 0, 10.0), (50, 0, 10.0), visible=False),
            _path((0, 0, 10.0), (10, 0, 10.0)),
        ]
        table = build_animation_table(paths, 30.0)
        assert table.total_length == pytest.approx(10.0)
        assert table.path_index_at(0.5) == 1

    def test_empty(self) -> None:
        table = build_animation_table([_path((0, 0, 10.0))], 30.0)
        assert table.is_empty
        assert table.total_time == 0.0
        assert table.position_at(0.5) is None
        assert table.path_index_at(0.5) is None

    def test_distance_non_decreasing(self) -> None:
        path = _path((0, 0, 10.0), (10, 5, 20.0), (20, -5, 30.0), (30, 0, 10.0))
        table = build_animation_table([path], 30.0, samples_per_segment=10)
        assert len(table) == 31
        assert all(b >= a for a, b in zip(table.distance, table.distance[1:]))

    def test_trail_behind_position(self) -> None:
        table = build_animation_table([_path((0, 0, 10.0), (100, 0, 10.0))], 30.0)
        trail = table.trail(0.5, fraction=0.1)
        assert trail[:, 0].min() >= 40.0 - 1e-9
        assert trail[:, 0].max() <= 50.0 + 1e-9

    def test_format_clock(self) -> None:
        assert format_clock(65.9, 3600.0) == "01:05 / 60:00"
        assert format_clock(-1.0, 0.4) == "00:00 / 00:00"


# ---------------------------------------------------------------------------
# Player
# ---------------------------------------------------------------------------


class TestPlayer:
    def test_start_and_tick(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        assert player.start() is True
        assert player.state is PlayerState.PLAYING

        clock.t = 0.25
        frame = player.tick()
        assert frame.progress == pytest.approx(0.25)
        assert frame.position == pytest.approx((2.5, 0.0))
        assert frame.elapsed_s == pytest.approx(0.25)
        assert frame.total_s == pytest.approx(1.0)
        assert frame.path_index == 0
        assert frame.clock == "00:00 / 00:01"

    def test_tick_slows_down_at_low_feed_rate(
        self, settings: Settings, clock: FakeClock,
    ) -> None:
        ramp = Drawing(paths=[_path((0.0, 0.0, 10.0), (10.0, 0.0, 30.0))])
        player = AnimationPlayer.for_drawing(ramp, settings, clock=clock)
        player.start()
        total = player.total_time

        clock.t = total / 2.0
        frame = player.tick()
        # v(x) = 10 + 2x: half the time reaches x = 5 * (sqrt(3) - 1)
        x = 5.0 * (math.sqrt(3.0) - 1.0)
        assert frame.position == pytest.approx((x, 0.0), abs=1e-2)
        assert frame.progress == pytest.approx(x / 10.0, abs=1e-3)
        assert frame.elapsed_s == pytest.approx(total / 2.0, rel=1e-6)

    def test_nothing_to_animate(self, settings: Settings, clock: FakeClock) -> None:
        player = AnimationPlayer.for_drawing(Drawing(), settings, clock=clock)
        assert player.start() is False
        assert player.state is PlayerState.STOPPED
        assert player.tick().position is None

    def test_pause_freezes_and_resume_continues(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        clock.t = 0.25
        player.tick()
        player.pause()

        clock.t = 0.75
        frame = player.tick()
        assert frame.state is PlayerState.PAUSED
        assert frame.progress == pytest.approx(0.25)

        player.resume()
        clock.t = 1.0
        assert player.tick().progress == pytest.approx(0.5)

    def test_toggle_pause(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        player.toggle_pause()
        assert player.state is PlayerState.PAUSED
        player.toggle_pause()
        assert player.state is PlayerState.PLAYING

    def test_loops_back_to_start(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        clock.t = 1.2
        assert player.tick().progress == 0.0
        clock.t = 1.45
        frame = player.tick()
        assert frame.state is PlayerState.PLAYING
        assert frame.progress == pytest.approx(0.25)

    def test_finishes_without_loop(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        once = dataclasses.replace(
            settings, animation=dataclasses.replace(settings.animation, loop=False),
        )
        player = AnimationPlayer.for_drawing(drawing, once, clock=clock)
        player.start()
        clock.t = 1.2
        frame = player.tick()
        assert frame.state is PlayerState.FINISHED
        assert frame.progress == 1.0
        assert frame.position == pytest.approx((10.0, 0.0))

    def test_stop_resets_progress(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        clock.t = 0.5
        player.tick()
        player.stop()
        assert player.state is PlayerState.STOPPED
        assert player.progress == 0.0

    def test_seek_reanchors_clock(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        frame = player.seek(0.5)
        assert frame.position == pytest.approx((5.0, 0.0))
        clock.t = 0.1
        assert player.tick().progress == pytest.approx(0.6)

    def test_frames_until_finished(self, drawing: Drawing, settings: Settings) -> None:
        once = dataclasses.replace(
            settings, animation=dataclasses.replace(settings.animation, loop=False),
        )
        player = AnimationPlayer.for_drawing(drawing, once, clock=FakeClock(step=0.3))
        player.start()
        frames = list(player.frames())
        assert [f.progress for f in frames[:-1]] == pytest.approx([0.3, 0.6, 0.9])
        assert frames[-1].state is PlayerState.FINISHED
        assert len(frames) == 4

    def test_frames_end_when_stopped(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        player = AnimationPlayer.for_drawing(drawing, settings, clock=clock)
        player.start()
        seen = 0
        for _ in player.frames():
            seen += 1
            clock.t += 0.1
            if seen == 3:
                player.stop()
        assert seen == 3

    def test_rebuild_picks_up_edits_and_keeps_progress(
        self, drawing: Drawing, settings: Settings, clock: FakeClock,
    ) -> None:
        live = dataclasses.replace(
            settings,
            animation=dataclasses.replace(settings.animation, rebuild_interval_s=0.5),
        )
        player = AnimationPlayer.for_drawing(drawing, live, clock=clock)
        player.start()
        clock.t = 0.4
        player.tick()

        # Lengthen the path to 20 mm: two seconds at 10 mm/s
        drawing.paths[0].processed_points[-1].x = 20.0
        clock.t = 0.6
        frame = player.tick()

        assert frame.total_s == pytest.approx(2.0)
        assert frame.progress == pytest.approx(0.4)
        assert frame.position == pytest.approx((8.0, 0.0))
