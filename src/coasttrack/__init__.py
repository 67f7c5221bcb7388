"""coasttrack: per-object track state with motion extrapolation.

A :class:`Track` absorbs matched detections with confidence reweighting,
coasts over missed frames on an extrapolated box, and reports how many
further coasted frames it is allowed through its reliability gate.
"""

from coasttrack.config import TrackConfig, load_config, serialize_config
from coasttrack.detection import Detection
from coasttrack.errors import ClassMismatchError
from coasttrack.geometry import BoundingBox
from coasttrack.motion import extrapolate_bounding_box
from coasttrack.track import Track

__all__ = [
    "BoundingBox",
    "ClassMismatchError",
    "Detection",
    "Track",
    "TrackConfig",
    "extrapolate_bounding_box",
    "load_config",
    "serialize_config",
]
