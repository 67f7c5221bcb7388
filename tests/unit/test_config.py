"""Unit tests for the track config module.

Covers: defaults, validation, YAML overrides, CLI overrides with type
coercion, override precedence, frozen mutation guard, and serialization
roundtrip.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest
import yaml

from coasttrack.config import TrackConfig, load_config, serialize_config


def _write_yaml(path: Path, content: object) -> Path:
    path.write_text(yaml.dump(content))
    return path


# ---------------------------------------------------------------------------
# 1. Defaults and validation
# ---------------------------------------------------------------------------


def test_load_config_defaults() -> None:
    config = load_config()

    assert config.max_extrapolation_length == 15
    assert config.reliable_track_min_detections == 30
    assert config.min_reliable_height == 128.0
    assert config.max_num_deltas == 10
    assert config.aspect_ratio == 0.4
    assert config.min_extrapolated_height == 5.0
    assert config.score_gain == 2.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_extrapolation_length": -1},
        {"reliable_track_min_detections": -3},
        {"max_num_deltas": -1},
        {"aspect_ratio": 0.0},
        {"min_extrapolated_height": -5.0},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        TrackConfig(**kwargs)


def test_config_is_frozen() -> None:
    config = TrackConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.max_extrapolation_length = 3  # type: ignore[misc]


# ---------------------------------------------------------------------------
# 2. YAML overrides
# ---------------------------------------------------------------------------


def test_yaml_flat_override(tmp_path: Path) -> None:
    path = _write_yaml(
        tmp_path / "cfg.yaml", {"max_extrapolation_length": 8, "aspect_ratio": 0.5}
    )
    config = load_config(path)

    assert config.max_extrapolation_length == 8
    assert config.aspect_ratio == 0.5
    assert config.max_num_deltas == 10


def test_yaml_nested_under_track_key(tmp_path: Path) -> None:
    path = _write_yaml(tmp_path / "cfg.yaml", {"track": {"min_reliable_height": 96}})
    config = load_config(path)

    assert config.min_reliable_height == 96.0
    assert isinstance(config.min_reliable_height, float)


def test_yaml_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == TrackConfig()


def test_yaml_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_yaml_non_mapping_rejected(tmp_path: Path) -> None:
    path = _write_yaml(tmp_path / "list.yaml", [1, 2, 3])
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_yaml_unknown_key_rejected(tmp_path: Path) -> None:
    path = _write_yaml(tmp_path / "cfg.yaml", {"max_age": 3})
    with pytest.raises(ValueError, match="Unknown track config key 'max_age'"):
        load_config(path)


# ---------------------------------------------------------------------------
# 3. CLI overrides
# ---------------------------------------------------------------------------


def test_cli_string_values_coerced() -> None:
    config = load_config(
        cli_overrides={"max_extrapolation_length": "8", "min_reliable_height": "100"}
    )
    assert config.max_extrapolation_length == 8
    assert isinstance(config.max_extrapolation_length, int)
    assert config.min_reliable_height == 100.0


def test_cli_track_prefix_accepted() -> None:
    config = load_config(cli_overrides={"track.score_gain": "1.5"})
    assert config.score_gain == 1.5


def test_cli_bad_value_rejected() -> None:
    with pytest.raises(ValueError, match="expected int"):
        load_config(cli_overrides={"max_num_deltas": "many"})


@pytest.mark.parametrize(
    "key",
    ["max_extrapolation_length", "max_num_deltas", "reliable_track_min_detections"],
)
def test_yaml_fractional_int_rejected(tmp_path: Path, key: str) -> None:
    path = _write_yaml(tmp_path / "cfg.yaml", {key: 2.9})
    with pytest.raises(ValueError, match=f"for {key}"):
        load_config(path)


def test_integral_values_accepted_for_int_fields() -> None:
    config = load_config(
        cli_overrides={"max_extrapolation_length": "4.0", "max_num_deltas": 6.0}
    )
    assert config.max_extrapolation_length == 4
    assert isinstance(config.max_num_deltas, int)


def test_bool_value_rejected() -> None:
    with pytest.raises(ValueError, match="score_gain"):
        load_config(cli_overrides={"score_gain": True})


def test_yaml_syntax_error_rejected(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("track: [\n  max_num_deltas: 3")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(path)


def test_cli_overrides_take_precedence(tmp_path: Path) -> None:
    path = _write_yaml(
        tmp_path / "cfg.yaml", {"max_extrapolation_length": 8, "max_num_deltas": 4}
    )
    config = load_config(path, cli_overrides={"max_extrapolation_length": "3"})

    assert config.max_extrapolation_length == 3
    assert config.max_num_deltas == 4


# ---------------------------------------------------------------------------
# 4. Serialization
# ---------------------------------------------------------------------------


def test_serialize_roundtrip(tmp_path: Path) -> None:
    original = TrackConfig(max_extrapolation_length=6, score_gain=3.0)
    path = tmp_path / "dump.yaml"
    path.write_text(serialize_config(original))

    assert yaml.safe_load(path.read_text())["track"]["score_gain"] == 3.0
    assert load_config(path) == original
