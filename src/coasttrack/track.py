"""Lifetime state of a single tracked object.

A :class:`Track` is mutated once per frame by the external track manager:
either :meth:`Track.add_matched_detection` when the associator matched a
detection to it, or :meth:`Track.skip_one_detection` when nothing matched and
the track coasts on an extrapolated box. The manager then reads
:attr:`Track.extrapolation_budget` to decide whether the track may keep
coasting. Creating and deleting tracks is the manager's job.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable

from coasttrack.config import TrackConfig
from coasttrack.detection import Detection
from coasttrack.errors import ClassMismatchError
from coasttrack.geometry import BoundingBox
from coasttrack.motion import extrapolate_bounding_box

logger = logging.getLogger(__name__)

STATUS_DETECTED = "detected"
"""Frame status of a founding or matched history entry."""

STATUS_COASTED = "coasted"
"""Frame status of an extrapolated history entry."""


class Track:
    """Detection history and counters for one object across frames.

    The history is append-only and mixes true detections with extrapolated
    ones. The current bounding box is always the last history entry's box.

    Args:
        track_id: Identity assigned by the track manager.
        detection: Founding detection; fixes the track's object class.
        config: Tracking policy. Defaults to :class:`TrackConfig` defaults.
    """

    def __init__(
        self,
        track_id: int,
        detection: Detection,
        config: TrackConfig | None = None,
    ) -> None:
        self._track_id = int(track_id)
        self._object_class = detection.object_class
        self._config = config or TrackConfig()

        self._detections: list[Detection] = [detection]
        self._frame_status: list[str] = [STATUS_DETECTED]

        self._max_detection_score = float(detection.score)
        self._num_true_detections = 0
        self._num_extrapolated_detections = 0
        self._num_consecutive_detections = 0
        self._max_consecutive_detections = 0

    def __len__(self) -> int:
        return len(self._detections)

    def __repr__(self) -> str:
        return (
            f"Track(track_id={self._track_id}, object_class={self._object_class!r}, "
            f"length={len(self)}, extrapolation_length="
            f"{self._num_extrapolated_detections})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def track_id(self) -> int:
        return self._track_id

    @property
    def object_class(self) -> Hashable:
        return self._object_class

    @property
    def config(self) -> TrackConfig:
        return self._config

    @property
    def max_extrapolation_length(self) -> int:
        """Configured ceiling on the extrapolation budget."""
        return self._config.max_extrapolation_length

    @property
    def length(self) -> int:
        """Number of history entries, founding and extrapolated included."""
        return len(self._detections)

    @property
    def current_detection(self) -> Detection:
        """Most recent history entry (true or extrapolated)."""
        return self._detections[-1]

    @property
    def current_bounding_box(self) -> BoundingBox:
        return self._detections[-1].bounding_box

    @property
    def detections_in_time(self) -> tuple[Detection, ...]:
        """Snapshot of the full history, oldest first."""
        return tuple(self._detections)

    @property
    def frame_status(self) -> tuple[str, ...]:
        """Per-entry ``"detected"`` / ``"coasted"`` labels, parallel to history."""
        return tuple(self._frame_status)

    @property
    def max_detection_score(self) -> float:
        """Highest raw score over the founding and all matched detections."""
        return self._max_detection_score

    @property
    def num_true_detections(self) -> int:
        """Matched detections added after creation (founding one excluded)."""
        return self._num_true_detections

    @property
    def extrapolation_length(self) -> int:
        """Consecutive extrapolated frames since the last matched detection."""
        return self._num_extrapolated_detections

    @property
    def num_consecutive_detections(self) -> int:
        return self._num_consecutive_detections

    @property
    def max_consecutive_detections(self) -> int:
        return self._max_consecutive_detections

    @property
    def is_coasting(self) -> bool:
        """True when the most recent entry was extrapolated."""
        return self._num_extrapolated_detections > 0

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_matched_detection(self, detection: Detection) -> Detection:
        """Absorb a detection the associator matched to this track.

        The stored entry carries a reweighted score::

            max_detection_score * (num_true_detections / length) * score_gain

        so confidence follows the best detection seen, discounted by the
        fraction of history that was actually observed. *detection* itself is
        left untouched.

        Args:
            detection: Matched detection; must share the track's class.

        Returns:
            The stored (reweighted) history entry.

        Raises:
            ClassMismatchError: If the detection's class differs from the
                track's. The track is not modified.
        """
        if detection.object_class != self._object_class:
            raise ClassMismatchError(
                self._track_id, self._object_class, detection.object_class
            )

        self._max_detection_score = max(self._max_detection_score, detection.score)
        self._num_true_detections += 1

        new_length = len(self._detections) + 1
        score = (
            self._max_detection_score
            * (self._num_true_detections / new_length)
            * self._config.score_gain
        )
        stored = detection.with_score(score)
        self._detections.append(stored)
        self._frame_status.append(STATUS_DETECTED)

        self._num_extrapolated_detections = 0
        self._num_consecutive_detections += 1
        self._max_consecutive_detections = max(
            self._max_consecutive_detections, self._num_consecutive_detections
        )
        return stored

    def skip_one_detection(self) -> Detection:
        """Coast one frame on an extrapolated box.

        The synthetic entry keeps the previous entry's score unchanged.

        Returns:
            The appended synthetic detection.
        """
        cfg = self._config
        bbox = extrapolate_bounding_box(
            [d.bounding_box for d in self._detections[-(cfg.max_num_deltas + 1) :]],
            max_num_deltas=cfg.max_num_deltas,
            min_height=cfg.min_extrapolated_height,
            aspect_ratio=cfg.aspect_ratio,
        )
        extrapolated = Detection(
            object_class=self._object_class,
            bounding_box=bbox,
            score=self._detections[-1].score,
        )
        self._detections.append(extrapolated)
        self._frame_status.append(STATUS_COASTED)

        self._num_extrapolated_detections += 1
        self._num_consecutive_detections = 0

        logger.debug(
            "Track %d coasting (%d consecutive), box=(%.1f, %.1f, %.1f, %.1f)",
            self._track_id,
            self._num_extrapolated_detections,
            *bbox.as_xyxy(),
        )
        return extrapolated

    # ------------------------------------------------------------------
    # Reliability gate
    # ------------------------------------------------------------------

    @property
    def extrapolation_budget(self) -> int:
        """Consecutive extrapolations this track is currently allowed.

        Only tracks with enough observed history (excluding the running
        coast) and a tall enough current box get the configured
        ``max_extrapolation_length``; all others get 0 and are expected to
        be dropped on their first miss.
        """
        cfg = self._config
        num_true_in_window = max(
            1, len(self._detections) - self._num_extrapolated_detections
        )
        has_enough_detections = (
            num_true_in_window > cfg.reliable_track_min_detections
        )
        is_high_enough = self.current_bounding_box.height > cfg.min_reliable_height

        if has_enough_detections and is_high_enough:
            return cfg.max_extrapolation_length
        return 0

    @property
    def should_terminate(self) -> bool:
        """True once the running coast exceeds the extrapolation budget."""
        return self._num_extrapolated_detections > self.extrapolation_budget
