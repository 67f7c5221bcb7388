"""Bounding-box extrapolation from triangular-weighted finite differences.

Motion is estimated from the last few frame-to-frame changes in box centre
and height, with newer changes weighted linearly higher. Width is never
tracked; extrapolated boxes take a fixed aspect ratio.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from coasttrack.config import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_MAX_NUM_DELTAS,
    DEFAULT_MIN_EXTRAPOLATED_HEIGHT,
)
from coasttrack.geometry import BoundingBox


def triangular_weights(num_deltas: int) -> np.ndarray:
    """Linearly increasing weights for *num_deltas* deltas, oldest first.

    ``w_i = i / (n * (n + 1) / 0.5)``. Note the divisor is four times the
    triangular number, so the weights sum to 0.25 rather than 1.

    Args:
        num_deltas: Number of deltas ``n``. Zero gives an empty array.

    Returns:
        Float64 array of shape (n,).
    """
    if num_deltas <= 0:
        return np.zeros(0, dtype=np.float64)
    sum_value = num_deltas * (num_deltas + 1) / 0.5
    return np.arange(1, num_deltas + 1, dtype=np.float64) / sum_value


def _center_height(boxes: Sequence[BoundingBox]) -> np.ndarray:
    """Stack ``(center_x, center_y, height)`` rows, shape (N, 3)."""
    return np.array(
        [(b.center_x, b.center_y, b.height) for b in boxes], dtype=np.float64
    ).reshape(-1, 3)


def estimate_motion(
    boxes: Sequence[BoundingBox],
    max_num_deltas: int = DEFAULT_MAX_NUM_DELTAS,
) -> tuple[float, float, float]:
    """Weighted motion of centre x, centre y and height over recent boxes.

    Uses the last ``min(max_num_deltas, len(boxes) - 1)`` consecutive deltas.

    Args:
        boxes: Box history, oldest first. Must not be empty.
        max_num_deltas: Window cap on the number of deltas.

    Returns:
        ``(x_motion, y_motion, height_motion)``; all zero when fewer than
        two boxes are available.
    """
    if not boxes:
        raise ValueError("Cannot estimate motion from an empty box history")

    num_deltas = min(max_num_deltas, len(boxes) - 1)
    if num_deltas <= 0:
        return (0.0, 0.0, 0.0)

    window = _center_height(boxes[-(num_deltas + 1) :])
    deltas = np.diff(window, axis=0)  # (num_deltas, 3)
    motion = triangular_weights(num_deltas) @ deltas
    return (float(motion[0]), float(motion[1]), float(motion[2]))


def extrapolate_bounding_box(
    boxes: Sequence[BoundingBox],
    *,
    max_num_deltas: int = DEFAULT_MAX_NUM_DELTAS,
    min_height: float = DEFAULT_MIN_EXTRAPOLATED_HEIGHT,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> BoundingBox:
    """Predict the next box from the box history.

    With a single box there is no motion signal and that box is returned
    unchanged. Otherwise the current centre and height are advanced by
    :func:`estimate_motion`, the height is floored at *min_height* and the
    width is set to ``aspect_ratio * height``.

    Args:
        boxes: Box history, oldest first. The last entry is the current box.
        max_num_deltas: Window cap on the number of deltas.
        min_height: Floor on the extrapolated height.
        aspect_ratio: Width-to-height ratio of the extrapolated box.

    Returns:
        Extrapolated BoundingBox.
    """
    current = boxes[-1]
    if len(boxes) < 2 or max_num_deltas <= 0:
        return current

    x_motion, y_motion, height_motion = estimate_motion(boxes, max_num_deltas)

    height = max(current.height + height_motion, min_height)
    width = height * aspect_ratio
    return BoundingBox.from_center_size(
        current.center_x + x_motion,
        current.center_y + y_motion,
        width,
        height,
    )
