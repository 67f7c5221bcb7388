"""Per-frame detection value consumed by a track."""

from __future__ import annotations

import dataclasses
from collections.abc import Hashable
from dataclasses import dataclass

from coasttrack.geometry import BoundingBox


@dataclass(frozen=True)
class Detection:
    """A single object observation for one frame.

    Produced upstream by the detector/associator for matched frames, or
    synthesized by :meth:`coasttrack.track.Track.skip_one_detection` for
    frames where nothing matched.

    Attributes:
        object_class: Class identifier (e.g. ``"pedestrian"``). Compared by
            equality only.
        bounding_box: Axis-aligned box in pixel coordinates.
        score: Detection confidence. Scores stored in a track history are
            reweighted and may exceed 1.0.
    """

    object_class: Hashable
    bounding_box: BoundingBox
    score: float

    def with_score(self, score: float) -> Detection:
        """Return a copy of this detection carrying *score*."""
        return dataclasses.replace(self, score=float(score))
