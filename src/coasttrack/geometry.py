"""Axis-aligned bounding box in image pixel coordinates."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned rectangle defined by its min and max corners.

    Image convention: y grows downwards, so ``y_min`` is the top edge.

    Attributes:
        x_min: Left edge (min corner x).
        y_min: Top edge (min corner y).
        x_max: Right edge (max corner x).
        y_max: Bottom edge (max corner y).
    """

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @classmethod
    def from_xyxy(cls, xyxy: Sequence[float]) -> BoundingBox:
        """Build a box from an ``(x_min, y_min, x_max, y_max)`` sequence.

        Args:
            xyxy: Four corner coordinates.

        Returns:
            New BoundingBox.

        Raises:
            ValueError: If *xyxy* is a string or does not hold exactly four
                values.
        """
        if isinstance(xyxy, (str, bytes)):
            raise ValueError(f"Expected 4 box coordinates, got string {xyxy!r}")
        if len(xyxy) != 4:
            raise ValueError(f"Expected 4 box coordinates, got {len(xyxy)}")
        x_min, y_min, x_max, y_max = (float(v) for v in xyxy)
        return cls(x_min=x_min, y_min=y_min, x_max=x_max, y_max=y_max)

    @classmethod
    def from_center_size(
        cls, center_x: float, center_y: float, width: float, height: float
    ) -> BoundingBox:
        """Build a box centred on ``(center_x, center_y)``."""
        return cls(
            x_min=center_x - width / 2,
            y_min=center_y - height / 2,
            x_max=center_x + width / 2,
            y_max=center_y + height / 2,
        )

    @property
    def min_corner(self) -> tuple[float, float]:
        return (self.x_min, self.y_min)

    @property
    def max_corner(self) -> tuple[float, float]:
        return (self.x_max, self.y_max)

    @property
    def center_x(self) -> float:
        return (self.x_max + self.x_min) / 2.0

    @property
    def center_y(self) -> float:
        return (self.y_max + self.y_min) / 2.0

    @property
    def center(self) -> tuple[float, float]:
        """Midpoint of the min and max corners."""
        return (self.center_x, self.center_y)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def as_xyxy(self) -> tuple[float, float, float, float]:
        """Return the box as an ``(x_min, y_min, x_max, y_max)`` tuple."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)
