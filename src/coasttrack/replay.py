"""Drive one track through a recorded frame sequence.

This stands in for the surrounding tracker: it applies the per-frame
confirm-or-coast call and the termination rule an external manager would
use, and records what the track looked like after every frame.

Replay files are YAML::

    track_id: 7
    object_class: pedestrian
    frames:
      - {box: [100, 50, 140, 150], score: 0.9}
      - null
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from coasttrack.config import TrackConfig
from coasttrack.detection import Detection
from coasttrack.geometry import BoundingBox
from coasttrack.track import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameObservation:
    """One recorded frame: a matched box and score, or a miss.

    Attributes:
        bbox: Matched bounding box, or ``None`` when nothing matched.
        score: Detector score of the match (ignored on a miss).
    """

    bbox: BoundingBox | None
    score: float = 0.0

    @property
    def is_miss(self) -> bool:
        return self.bbox is None


@dataclass(frozen=True)
class FrameReport:
    """Track state right after one frame was applied.

    Attributes:
        frame_index: Index of the frame in the replay sequence.
        status: ``"detected"`` or ``"coasted"``.
        bbox: Current box as ``(x_min, y_min, x_max, y_max)``.
        score: Stored (reweighted or carried) score of the current entry.
        extrapolation_length: Running coast length.
        extrapolation_budget: Reliability gate output after this frame.
    """

    frame_index: int
    status: str
    bbox: tuple[float, float, float, float]
    score: float
    extrapolation_length: int
    extrapolation_budget: int


@dataclass
class ReplayResult:
    """Outcome of :func:`replay_track`.

    Attributes:
        track: The track after the last applied frame.
        reports: One report per applied frame, founding frame included.
        terminated_at: Frame index at which the coast exceeded the budget,
            or ``None`` if the track survived the whole sequence.
    """

    track: Track
    reports: list[FrameReport] = field(default_factory=list)
    terminated_at: int | None = None


def _report(track: Track, frame_index: int) -> FrameReport:
    current = track.current_detection
    return FrameReport(
        frame_index=frame_index,
        status=track.frame_status[-1],
        bbox=current.bounding_box.as_xyxy(),
        score=current.score,
        extrapolation_length=track.extrapolation_length,
        extrapolation_budget=track.extrapolation_budget,
    )


def replay_track(
    object_class: Hashable,
    frames: Sequence[FrameObservation],
    config: TrackConfig | None = None,
    track_id: int = 0,
) -> ReplayResult:
    """Create a track from the first frame and apply the remaining ones.

    Replay stops right after the first frame where the running coast exceeds
    the track's extrapolation budget, which is where a track manager would
    drop it.

    Args:
        object_class: Class shared by every detection in the sequence.
        frames: Recorded frames; the first must be a match.
        config: Tracking policy for the replayed track.
        track_id: Identifier assigned to the track.

    Returns:
        ReplayResult with per-frame reports.

    Raises:
        ValueError: If *frames* is empty or starts with a miss.
    """
    if not frames:
        raise ValueError("Replay needs at least one frame")
    first = frames[0]
    if first.bbox is None:
        raise ValueError("First replay frame must be a detection, got a miss")

    track = Track(
        track_id,
        Detection(object_class, first.bbox, first.score),
        config=config,
    )
    result = ReplayResult(track=track, reports=[_report(track, 0)])

    for frame_index, frame in enumerate(frames[1:], start=1):
        if frame.is_miss:
            track.skip_one_detection()
        else:
            track.add_matched_detection(
                Detection(object_class, frame.bbox, frame.score)
            )
        result.reports.append(_report(track, frame_index))

        if track.should_terminate:
            result.terminated_at = frame_index
            logger.info(
                "Track %d terminated at frame %d after %d coasted frames "
                "(budget %d)",
                track.track_id,
                frame_index,
                track.extrapolation_length,
                track.extrapolation_budget,
            )
            break

    return result


# ---------------------------------------------------------------------------
# Replay file loading
# ---------------------------------------------------------------------------


def _parse_frame(index: int, entry: Any) -> FrameObservation:
    if entry is None:
        return FrameObservation(bbox=None)
    if not isinstance(entry, dict) or "box" not in entry:
        raise ValueError(f"Frame {index}: expected null or a mapping with 'box'")
    try:
        bbox = BoundingBox.from_xyxy(entry["box"])
        score = float(entry.get("score", 1.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Frame {index}: {exc}") from exc
    return FrameObservation(bbox=bbox, score=score)


def load_frames(
    path: str | Path,
) -> tuple[int, Hashable, list[FrameObservation]]:
    """Read a replay YAML file.

    Args:
        path: Path to the replay file.

    Returns:
        ``(track_id, object_class, frames)``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the document is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Replay file not found: {path}")
    with path.open() as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Replay file must hold a mapping: {path}")
    if "object_class" not in raw:
        raise ValueError(f"Replay file is missing 'object_class': {path}")
    entries = raw.get("frames")
    if not isinstance(entries, list):
        raise ValueError(f"Replay file 'frames' must be a list: {path}")

    track_id = raw.get("track_id", 0)
    if not isinstance(track_id, int) or isinstance(track_id, bool):
        raise ValueError(
            f"Replay file 'track_id' must be an integer, got {track_id!r}: {path}"
        )

    frames = [_parse_frame(i, entry) for i, entry in enumerate(entries)]
    return track_id, raw["object_class"], frames
