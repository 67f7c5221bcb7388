"""coasttrack CLI -- thin wrapper over replay_track and the config loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from coasttrack.config import TrackConfig, load_config, serialize_config
from coasttrack.replay import ReplayResult, load_frames, replay_track


def _parse_overrides(overrides: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``key=val`` strings into a dict.

    Raises:
        click.BadParameter: If an entry has no ``=`` or an empty key.
    """
    cli_overrides: dict[str, Any] = {}
    for item in overrides:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(
                f"expected key=val, got {item!r}", param_hint="'--set'"
            )
        cli_overrides[key.strip()] = value.strip()
    return cli_overrides


def _format_report_lines(result: ReplayResult) -> list[str]:
    lines = []
    for r in result.reports:
        x1, y1, x2, y2 = r.bbox
        lines.append(
            f"{r.frame_index:5d}  {r.status:<8s}  "
            f"[{x1:8.1f} {y1:8.1f} {x2:8.1f} {y2:8.1f}]  "
            f"score={r.score:.3f}  coast={r.extrapolation_length}  "
            f"budget={r.extrapolation_budget}"
        )
    return lines


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """coasttrack -- single-track coasting and reliability policy."""


@cli.command()
@click.argument("frames_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to track config YAML.",
)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    help="Config override as key=val (e.g. --set max_extrapolation_length=8).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Verbose output.")
def replay(
    frames_path: str,
    config_path: str | None,
    overrides: tuple[str, ...],
    verbose: bool,
) -> None:
    """Replay a recorded frame sequence through one track."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        config = load_config(
            yaml_path=config_path, cli_overrides=_parse_overrides(overrides)
        )
        track_id, object_class, frames = load_frames(frames_path)
        result = replay_track(object_class, frames, config=config, track_id=track_id)
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    for line in _format_report_lines(result):
        click.echo(line)

    track = result.track
    if result.terminated_at is None:
        click.echo(f"Track {track.track_id} survived {len(result.reports)} frames")
    else:
        click.echo(
            f"Track {track.track_id} terminated at frame {result.terminated_at}"
        )
    click.echo(
        f"max_detection_score={track.max_detection_score:.3f}  "
        f"true_detections={track.num_true_detections}  "
        f"max_consecutive={track.max_consecutive_detections}"
    )


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    default="coasttrack.yaml",
    type=click.Path(),
    help="Output file path (default: coasttrack.yaml).",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Overwrite existing file.",
)
def init_config(output: str, force: bool) -> None:
    """Generate a default template YAML config file with all track defaults."""
    output_path = Path(output)
    if output_path.exists() and not force:
        raise click.ClickException(
            f"'{output}' already exists. Use --force to overwrite."
        )
    output_path.write_text(serialize_config(TrackConfig()))
    click.echo(f"Config written to {output}")


def main() -> None:
    """Entry point for the ``coasttrack`` console script."""
    cli()
