"""Frozen track configuration with YAML loading and serialization.

Loading precedence: defaults -> YAML file -> CLI overrides -> freeze.

Every tunable that shapes the tracking policy lives here rather than as a
literal inside the algorithm, so a run can be reproduced from its serialized
config alone.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

# --- Module-level defaults ---

DEFAULT_MAX_EXTRAPOLATION_LENGTH: int = 15
"""Coasting frames granted to a reliable track (15 frames ~= 1 second)."""

DEFAULT_RELIABLE_TRACK_MIN_DETECTIONS: int = 30
"""A track is reliable only with strictly more non-coasted entries than this."""

DEFAULT_MIN_RELIABLE_HEIGHT: float = 128.0
"""A track is reliable only if its current box is strictly taller (pixels)."""

DEFAULT_MAX_NUM_DELTAS: int = 10
"""Maximum number of frame-to-frame deltas in the motion window."""

DEFAULT_ASPECT_RATIO: float = 0.4
"""Extrapolated boxes get ``width = aspect_ratio * height``."""

DEFAULT_MIN_EXTRAPOLATED_HEIGHT: float = 5.0
"""Floor on extrapolated box height, avoids negative or micro windows."""

DEFAULT_SCORE_GAIN: float = 2.0
"""Constant gain applied when reweighting the score of a matched detection."""


@dataclass(frozen=True)
class TrackConfig:
    """Tunables for a single track's coasting and scoring policy.

    Attributes:
        max_extrapolation_length: Extrapolation budget returned by the
            reliability gate when the track qualifies as reliable.
        reliable_track_min_detections: History length minus the running
            coast must exceed this for the track to be reliable.
        min_reliable_height: Current box height (pixels) must exceed this
            for the track to be reliable.
        max_num_deltas: Upper bound on finite differences used by the
            motion extrapolator.
        aspect_ratio: Width-to-height ratio imposed on extrapolated boxes.
        min_extrapolated_height: Lower bound on extrapolated box height.
        score_gain: Multiplier in the matched-detection score reweighting.
    """

    max_extrapolation_length: int = DEFAULT_MAX_EXTRAPOLATION_LENGTH
    reliable_track_min_detections: int = DEFAULT_RELIABLE_TRACK_MIN_DETECTIONS
    min_reliable_height: float = DEFAULT_MIN_RELIABLE_HEIGHT
    max_num_deltas: int = DEFAULT_MAX_NUM_DELTAS
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    min_extrapolated_height: float = DEFAULT_MIN_EXTRAPOLATED_HEIGHT
    score_gain: float = DEFAULT_SCORE_GAIN

    def __post_init__(self) -> None:
        if self.max_extrapolation_length < 0:
            raise ValueError(
                "max_extrapolation_length must be >= 0, "
                f"got {self.max_extrapolation_length}"
            )
        if self.reliable_track_min_detections < 0:
            raise ValueError(
                "reliable_track_min_detections must be >= 0, "
                f"got {self.reliable_track_min_detections}"
            )
        if self.max_num_deltas < 0:
            raise ValueError(f"max_num_deltas must be >= 0, got {self.max_num_deltas}")
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be > 0, got {self.aspect_ratio}")
        if self.min_extrapolated_height <= 0:
            raise ValueError(
                "min_extrapolated_height must be > 0, "
                f"got {self.min_extrapolated_height}"
            )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_FIELD_TYPES: dict[str, type] = {
    f.name: type(f.default) for f in dataclasses.fields(TrackConfig)
}


def _unwrap_yaml(raw: dict[str, Any]) -> dict[str, Any]:
    """Accept either a flat mapping or one nested under a ``track`` key.

    Args:
        raw: Parsed YAML document.

    Returns:
        Flat field->value mapping.
    """
    if set(raw) == {"track"} and isinstance(raw["track"], dict):
        return dict(raw["track"])
    return dict(raw)


def _strip_prefix(overrides: dict[str, Any]) -> dict[str, Any]:
    """Drop an optional ``track.`` prefix from dot-notation override keys."""
    result: dict[str, Any] = {}
    for key, value in overrides.items():
        prefix, _, rest = key.partition(".")
        result[rest if prefix == "track" and rest else key] = value
    return result


def _convert(field_type: type, value: Any) -> Any:
    """Convert *value* to *field_type* without truncating into int fields.

    Raises:
        ValueError: If *value* is a bool or, for int fields, not integral.
    """
    if isinstance(value, bool):
        raise ValueError("booleans are not numeric config values")
    if field_type is not int:
        return field_type(value)
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{value!r} is not an integer")
    return int(number)


def _coerce(kwargs: dict[str, Any]) -> dict[str, Any]:
    """Validate keys and convert values to each field's declared type.

    CLI overrides always arrive as strings; YAML may give ints for float
    fields. Both are normalized here.

    Args:
        kwargs: Candidate field->value mapping.

    Returns:
        New mapping with converted values.

    Raises:
        ValueError: On an unknown key or an unconvertible value.
    """
    coerced: dict[str, Any] = {}
    for key, value in kwargs.items():
        field_type = _FIELD_TYPES.get(key)
        if field_type is None:
            known = ", ".join(sorted(_FIELD_TYPES))
            raise ValueError(f"Unknown track config key {key!r}. Known keys: {known}")
        try:
            coerced[key] = _convert(field_type, value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid value {value!r} for {key} "
                f"(expected {field_type.__name__})"
            ) from exc
    return coerced


# ---------------------------------------------------------------------------
# Public factory
# ---------------------------------------------------------------------------


def load_config(
    yaml_path: str | Path | None = None,
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> TrackConfig:
    """Construct a frozen :class:`TrackConfig` using layered overrides.

    Loading precedence (lowest → highest priority):

    1. Dataclass field defaults
    2. YAML file (*yaml_path*)
    3. CLI overrides (*cli_overrides*)
    4. Freeze

    The YAML file may list fields at top level or under a ``track:`` key.
    CLI override keys may carry a ``track.`` prefix.

    Args:
        yaml_path: Optional path to a YAML config file.
        cli_overrides: Optional dict of CLI overrides (highest precedence).

    Returns:
        Frozen :class:`TrackConfig` with all overrides applied.

    Raises:
        FileNotFoundError: If *yaml_path* does not exist.
        ValueError: On unknown keys or invalid values.
    """
    kwargs: dict[str, Any] = {}

    if yaml_path is not None:
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config not found: {yaml_path}")
        with yaml_path.open() as fh:
            try:
                raw = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in {yaml_path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must hold a mapping: {yaml_path}")
        kwargs.update(_unwrap_yaml(raw))

    if cli_overrides is not None:
        kwargs.update(_strip_prefix(cli_overrides))

    return TrackConfig(**_coerce(kwargs))


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def serialize_config(config: TrackConfig) -> str:
    """Serialize *config* to a YAML string nested under a ``track`` key.

    Args:
        config: Frozen track config to serialize.

    Returns:
        YAML string representation of the config.
    """
    return yaml.dump(
        {"track": dataclasses.asdict(config)},
        default_flow_style=False,
        sort_keys=True,
    )
