"""Tests for stroke smoothing, curvature estimation and adaptive resampling.

Validates that:
    - Smoothing keeps endpoints and length and blends interior points
    - Curvature is the normalised turn angle against significant neighbours
    - Corners are local maxima above the threshold
    - Resampling subdivides long gaps, densifies around corners, never
      drops a corner and always ends on the input's last point
"""

from __future__ import annotations

import numpy as np
import pytest

from splinedraw.geometry.primitives import as_xy_array, cumulative_length
from splinedraw.geometry.resampling import (
    adaptive_resample,
    detect_corners,
    estimate_curvature,
    turn_curvature,
)
from splinedraw.geometry.smoothing import smooth_stroke
from splinedraw.model.types import RawPoint


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class TestPrimitives:
    def test_point_records_and_pairs_convert_alike(self) -> None:
        records = [RawPoint(0.0, 1.0, 0.0), RawPoint(2.0, 3.0, 0.1)]
        np.testing.assert_array_equal(
            as_xy_array(records), as_xy_array([(0, 1), (2, 3)]),
        )

    def test_empty_input_has_two_columns(self) -> None:
        assert as_xy_array([]).shape == (0, 2)

    def test_cumulative_length_starts_at_zero(self) -> None:
        pts = np.array([[0.0, 0.0], [3.0, 4.0], [3.0, 10.0]])
        np.testing.assert_allclose(cumulative_length(pts), [0.0, 5.0, 11.0])


# ---------------------------------------------------------------------------
# Smoothing
# ---------------------------------------------------------------------------


class TestSmoothing:
    def test_zero_factor_is_identity(self) -> None:
        pts = [(0.0, 0.0), (1.0, 5.0), (2.0, 0.0)]
        np.testing.assert_array_equal(smooth_stroke(pts, 0.0), as_xy_array(pts))

    def test_two_points_unchanged(self) -> None:
        out = smooth_stroke([(0.0, 0.0), (4.0, 4.0)], 0.5)
        np.testing.assert_array_equal(out, [[0.0, 0.0], [4.0, 4.0]])

    def test_half_factor_blends_with_midpoint(self) -> None:
        out = smooth_stroke([(0.0, 0.0), (1.0, 2.0), (2.0, 0.0)], 0.5)
        np.testing.assert_allclose(out[1], [1.0, 1.0])

    def test_full_factor_moves_to_midpoint(self) -> None:
        out = smooth_stroke([(0.0, 0.0), (1.0, 2.0), (2.0, 0.0)], 1.0)
        np.testing.assert_allclose(out[1], [1.0, 0.0])

    def test_endpoints_and_length_preserved(self) -> None:
        rng = np.random.default_rng(0)
        pts = rng.uniform(-50, 50, size=(25, 2))
        out = smooth_stroke(pts, 0.7)
        assert out.shape == pts.shape
        np.testing.assert_array_equal(out[0], pts[0])
        np.testing.assert_array_equal(out[-1], pts[-1])

    def test_uses_unsmoothed_neighbours(self) -> None:
        pts = np.array([[0.0, 0.0], [1.0, 4.0], [2.0, 4.0], [3.0, 0.0]])
        out = smooth_stroke(pts, 1.0)
        # Point 2 reads the original point 1, not its smoothed value
        np.testing.assert_allclose(out[2], [2.0, 2.0])


# ---------------------------------------------------------------------------
# Curvature and corners
# ---------------------------------------------------------------------------


class TestCurvature:
    @pytest.mark.parametrize(
        "p3, expected",
        [
            ((2.0, 0.0), 0.0),
            ((1.0, 1.0), 0.5),
            ((0.0, 0.0), 1.0),
        ],
    )
    def test_turn_curvature(self, p3: tuple[float, float], expected: float) -> None:
        assert turn_curvature((0.0, 0.0), (1.0, 0.0), p3) == pytest.approx(expected)

    def test_zero_length_vector_is_straight(self) -> None:
        assert turn_curvature((0.0, 0.0), (0.0, 0.0), (1.0, 0.0)) == 0.0

    def test_endpoints_have_zero_curvature(self) -> None:
        curv = estimate_curvature([(0, 0), (10, 0), (10, 10)], 2.0)
        assert curv[0] == 0.0
        assert curv[-1] == 0.0
        assert curv[1] == pytest.approx(0.5)

    def test_jitter_between_dense_samples_is_ignored(self) -> None:
        pts = [(0, 0), (2, 0), (4, 0), (4.05, 0.05), (6, 0), (8, 0)]
        immediate = turn_curvature((4.0, 0.0), (4.05, 0.05), (6.0, 0.0))
        curv = estimate_curvature(pts, 1.0)
        assert immediate > 0.2
        assert curv[3] < 0.05

    def test_no_significant_neighbour_gives_zero(self) -> None:
        curv = estimate_curvature([(0, 0), (0.1, 0), (0.1, 0.1)], 2.0)
        assert curv[1] == 0.0


class TestCorners:
    def test_single_peak(self) -> None:
        assert detect_corners(np.array([0.0, 0.3, 0.6, 0.2, 0.0]), 0.1) == {2}

    def test_ties_both_count(self) -> None:
        assert detect_corners(np.array([0.0, 0.5, 0.5, 0.0]), 0.1) == {1, 2}

    def test_below_threshold_ignored(self) -> None:
        assert detect_corners(np.array([0.0, 0.05, 0.0]), 0.1) == set()


# ---------------------------------------------------------------------------
# Adaptive resampling
# ---------------------------------------------------------------------------


class TestAdaptiveResample:
    def test_right_angle_corner(self) -> None:
        """L-shaped stroke: dense run into the corner, min spacing after it."""
        result = adaptive_resample([(0, 0), (10, 0), (10, 10)], 2.0, 10.0, 0.1)

        assert result.corner_indices == (1,)
        assert len(result) == 16
        np.testing.assert_allclose(result.points[0], [0.0, 0.0])
        np.testing.assert_allclose(result.points[10], [10.0, 0.0])
        np.testing.assert_allclose(result.points[-1], [10.0, 10.0])
        assert result.is_corner[10]
        assert result.is_corner.sum() == 1
        assert result.curvature[10] == pytest.approx(0.5)

        spacing = np.hypot(*np.diff(result.points, axis=0).T)
        np.testing.assert_allclose(spacing[:10], 1.0)
        np.testing.assert_allclose(spacing[10:], 2.0)

    def test_straight_line_uses_max_spacing(self) -> None:
        result = adaptive_resample([(0, 0), (50, 0)], 2.0, 10.0, 0.1)
        np.testing.assert_allclose(result.points[:, 0], [0, 10, 20, 30, 40, 50])
        assert not result.is_corner.any()

    def test_interpolants_have_zero_curvature(self) -> None:
        result = adaptive_resample([(0, 0), (10, 0), (10, 10)], 2.0, 10.0, 0.1)
        np.testing.assert_array_equal(result.curvature[1:10], 0.0)

    def test_close_points_dropped(self) -> None:
        result = adaptive_resample([(0, 0), (5, 0), (5.2, 0), (10, 0)], 2.0, 10.0, 0.1)
        np.testing.assert_allclose(result.points, [[0, 0], [5, 0], [10, 0]])

    def test_corner_never_dropped(self) -> None:
        result = adaptive_resample([(0, 0), (5, 0), (5.2, 0), (5.2, 5)], 2.0, 10.0, 0.1)
        assert result.corner_indices == (2,)
        corner_rows = result.points[result.is_corner]
        np.testing.assert_allclose(corner_rows, [[5.2, 0.0]])

    def test_last_point_reappended(self) -> None:
        result = adaptive_resample([(0, 0), (5, 0), (5.3, 0)], 2.0, 10.0, 0.1)
        np.testing.assert_allclose(result.points[-1], [5.3, 0.0])
        assert len(result) == 3

    def test_spacing_never_exceeds_max(self) -> None:
        rng = np.random.default_rng(3)
        pts = np.cumsum(rng.uniform(-8, 8, size=(40, 2)), axis=0)
        result = adaptive_resample(pts, 2.0, 10.0, 0.1)
        spacing = np.hypot(*np.diff(result.points, axis=0).T)
        assert spacing.max() <= 10.0 + 1e-9
        np.testing.assert_allclose(result.points[0], pts[0])
        np.testing.assert_allclose(result.points[-1], pts[-1], atol=0.01)

    def test_single_point_returned_as_is(self) -> None:
        result = adaptive_resample([(3, 4)], 2.0, 10.0, 0.1)
        np.testing.assert_array_equal(result.points, [[3.0, 4.0]])
        assert result.corner_indices == ()
