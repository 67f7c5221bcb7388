"""Exceptions raised by track mutators."""

from __future__ import annotations

from collections.abc import Hashable


class ClassMismatchError(ValueError):
    """A matched detection's class differs from the track's class.

    Raised before any track state is modified. This signals a bug in the
    caller's association step and is not meant to be recovered from.

    Attributes:
        track_id: Identifier of the track that rejected the detection.
        expected: The track's object class.
        actual: The offending detection's object class.
    """

    def __init__(self, track_id: int, expected: Hashable, actual: Hashable) -> None:
        self.track_id = track_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Track {track_id} has class {expected!r}; "
            f"cannot add a detection of class {actual!r}"
        )
