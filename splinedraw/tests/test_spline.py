"""Tests for clamped Catmull-Rom evaluation and tessellation."""

from __future__ import annotations

import numpy as np
import pytest

from splinedraw.geometry.spline import (
    catmull_rom,
    evaluate_spline,
    spline_point,
    tessellate_spline,
)


@pytest.fixture()
def wavy() -> list[tuple[float, float]]:
    return [(0.1, 0.2), (3.3, 4.7), (7.9, 1.3), (12.25, -3.5)]


class TestEvaluate:
    def test_endpoints_exact(self, wavy: list[tuple[float, float]]) -> None:
        assert spline_point(wavy, 0.0) == (0.1, 0.2)
        assert spline_point(wavy, 1.0) == (12.25, -3.5)

    def test_parameter_clamped(self, wavy: list[tuple[float, float]]) -> None:
        assert spline_point(wavy, -1.0) == (0.1, 0.2)
        assert spline_point(wavy, 2.0) == (12.25, -3.5)

    def test_passes_through_interior_points(self) -> None:
        pts = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]
        assert spline_point(pts, 0.5) == pytest.approx((1.0, 1.0))

    def test_two_points_linear(self) -> None:
        assert spline_point([(0.0, 0.0), (4.0, 2.0)], 0.5) == pytest.approx((2.0, 1.0))

    def test_single_point(self) -> None:
        assert spline_point([(3.0, 4.0)], 0.7) == (3.0, 4.0)

    def test_empty(self) -> None:
        assert spline_point([], 0.5) is None
        assert evaluate_spline([], np.linspace(0, 1, 5)).shape == (0, 2)

    def test_collinear_points_stay_on_line(self) -> None:
        pts = [(0.0, 0.0), (10.0, 0.0), (20.0, 0.0), (30.0, 0.0)]
        out = evaluate_spline(pts, np.linspace(0, 1, 61))
        np.testing.assert_allclose(out[:, 1], 0.0)
        assert np.all(np.diff(out[:, 0]) > 0)

    def test_vectorised_matches_scalar(self, wavy: list[tuple[float, float]]) -> None:
        ts = np.array([0.1, 0.45, 0.8])
        out = evaluate_spline(wavy, ts)
        for t, row in zip(ts, out):
            assert spline_point(wavy, float(t)) == pytest.approx(tuple(row))


class TestCatmullRom:
    def test_segment_endpoints(self) -> None:
        p0, p1, p2, p3 = (np.array(p, dtype=float) for p in ((0, 0), (1, 2), (3, 3), (4, 0)))
        np.testing.assert_allclose(catmull_rom(p0, p1, p2, p3, 0.0), p1)
        np.testing.assert_allclose(catmull_rom(p0, p1, p2, p3, 1.0), p2)

    def test_array_parameter_shape(self) -> None:
        p = np.zeros(2)
        assert catmull_rom(p, p, p, p, 0.5).shape == (2,)
        assert catmull_rom(p, p, p, p, np.linspace(0, 1, 7)).shape == (7, 2)


class TestTessellate:
    def test_segment_count(self, wavy: list[tuple[float, float]]) -> None:
        out = tessellate_spline(wavy, segments=20)
        assert out.shape == (61, 2)
        np.testing.assert_array_equal(out[0], wavy[0])
        np.testing.assert_allclose(out[-1], wavy[-1])

    def test_two_points_is_straight_segment(self) -> None:
        out = tessellate_spline([(0, 0), (5, 5)])
        np.testing.assert_array_equal(out, [[0, 0], [5, 5]])

    def test_fewer_than_two_points(self) -> None:
        assert tessellate_spline([(1, 1)]).shape == (0, 2)
