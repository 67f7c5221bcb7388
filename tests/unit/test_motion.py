"""Unit tests for triangular-weighted bounding-box extrapolation."""

from __future__ import annotations

import numpy as np
import pytest

from coasttrack.geometry import BoundingBox
from coasttrack.motion import (
    estimate_motion,
    extrapolate_bounding_box,
    triangular_weights,
)


def _box(cx: float, cy: float, height: float = 100.0) -> BoundingBox:
    """Box with the default 0.4 aspect ratio centred on (cx, cy)."""
    return BoundingBox.from_center_size(cx, cy, 0.4 * height, height)


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------


def test_weights_empty_for_zero_deltas() -> None:
    assert triangular_weights(0).shape == (0,)


def test_weights_small_windows() -> None:
    np.testing.assert_allclose(triangular_weights(1), [0.25])
    np.testing.assert_allclose(triangular_weights(2), [1 / 12, 2 / 12])


@pytest.mark.parametrize("n", [1, 2, 5, 10])
def test_weights_sum_to_a_quarter_and_increase(n: int) -> None:
    weights = triangular_weights(n)
    assert weights.sum() == pytest.approx(0.25)
    assert np.all(np.diff(weights) > 0)


# ---------------------------------------------------------------------------
# Motion estimate
# ---------------------------------------------------------------------------


def test_estimate_motion_rejects_empty_history() -> None:
    with pytest.raises(ValueError, match="empty"):
        estimate_motion([])


def test_estimate_motion_single_box_is_zero() -> None:
    assert estimate_motion([_box(10.0, 10.0)]) == (0.0, 0.0, 0.0)


def test_constant_velocity_scaled_by_weight_sum() -> None:
    """Eleven boxes moving +4 px/frame in x give 10 deltas of 4 -> 4 * 0.25."""
    boxes = [_box(100.0 + 4.0 * i, 50.0) for i in range(11)]
    x_motion, y_motion, h_motion = estimate_motion(boxes)
    assert x_motion == pytest.approx(1.0)
    assert y_motion == pytest.approx(0.0)
    assert h_motion == pytest.approx(0.0)


def test_newer_deltas_weigh_more() -> None:
    late_jump = [_box(0.0, 0.0), _box(0.0, 0.0), _box(12.0, 0.0)]
    early_jump = [_box(0.0, 0.0), _box(12.0, 0.0), _box(12.0, 0.0)]
    assert estimate_motion(late_jump)[0] == pytest.approx(2.0)
    assert estimate_motion(early_jump)[0] == pytest.approx(1.0)


def test_window_is_capped_at_max_num_deltas() -> None:
    """Only the last 11 boxes matter with the default cap of 10 deltas."""
    wild = [_box(1000.0 * i, -500.0 * i, 300.0) for i in range(9)]
    still = [_box(60.0, 80.0) for _ in range(11)]
    assert estimate_motion(wild + still) == pytest.approx((0.0, 0.0, 0.0))


def test_custom_window_cap() -> None:
    boxes = [_box(0.0, 0.0), _box(100.0, 0.0), _box(100.0, 0.0)]
    # One delta (0) with weight 0.25 -> no motion.
    assert estimate_motion(boxes, max_num_deltas=1)[0] == pytest.approx(0.0)


# ---------------------------------------------------------------------------
# Extrapolated box
# ---------------------------------------------------------------------------


def test_single_box_returned_unchanged() -> None:
    box = BoundingBox(0.0, 0.0, 50.0, 100.0)
    assert extrapolate_bounding_box([box]) is box


def test_extrapolation_moves_center() -> None:
    boxes = [_box(100.0 + 4.0 * i, 50.0 - 8.0 * i) for i in range(11)]
    current = boxes[-1]
    out = extrapolate_bounding_box(boxes)
    assert out.center_x == pytest.approx(current.center_x + 1.0)
    assert out.center_y == pytest.approx(current.center_y - 2.0)
    assert out.height == pytest.approx(100.0)
    assert out.width == pytest.approx(40.0)


def test_width_derived_from_height() -> None:
    boxes = [BoundingBox(0.0, 0.0, 90.0, 100.0), BoundingBox(0.0, 0.0, 90.0, 140.0)]
    out = extrapolate_bounding_box(boxes)
    # Height motion 40 * 0.25 = 10 on top of 140.
    assert out.height == pytest.approx(150.0)
    assert out.width == pytest.approx(60.0)


def test_height_floor() -> None:
    """Height motion of -1000 clamps the height at 5.0 and width at 2.0."""
    boxes = [BoundingBox(0.0, 0.0, 40.0, 4100.0), BoundingBox(0.0, 0.0, 40.0, 100.0)]
    _, _, h_motion = estimate_motion(boxes)
    assert h_motion == pytest.approx(-1000.0)

    out = extrapolate_bounding_box(boxes)
    assert out.height == pytest.approx(5.0)
    assert out.width == pytest.approx(2.0)


def test_custom_aspect_ratio_and_floor() -> None:
    boxes = [BoundingBox(0.0, 0.0, 10.0, 100.0), BoundingBox(0.0, 0.0, 10.0, 20.0)]
    out = extrapolate_bounding_box(boxes, min_height=12.0, aspect_ratio=0.5)
    assert out.height == pytest.approx(12.0)
    assert out.width == pytest.approx(6.0)
