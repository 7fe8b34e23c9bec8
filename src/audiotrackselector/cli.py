"""Command-line interface for audiotrackselector."""

import sys
from pathlib import Path
from typing import Optional

import click
import uvicorn
import yaml
from pydantic import ValidationError

from audiotrackselector import __version__
from audiotrackselector.api.app import create_app
from audiotrackselector.api.models import AudioTrackModel
from audiotrackselector.config import Config, DeviceProfileConfig, load_config
from audiotrackselector.core.analyzer import AudioAnalyzer
from audiotrackselector.core.selector import SelectionReport, TrackSelector
from audiotrackselector.models.profile import NO_PROFILE, ProfileState
from audiotrackselector.models.track import AudioTrack
from audiotrackselector.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """audiotrackselector - Pick the best audio track a device can play."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except (OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


def _resolve_profile(config: Config, device: Optional[str]) -> ProfileState:
    if not device:
        return NO_PROFILE

    profile = config.device_profile(device)
    if profile is None:
        click.secho(f"⊘ Device '{device}' not configured, using no profile", fg="yellow", err=True)
        return NO_PROFILE
    return profile


def _language(config: Config, language: Optional[str]) -> str:
    return language or config.selection.preferred_language


def _print_report(tracks: list[AudioTrack], report: SelectionReport, profile: ProfileState) -> None:
    """Display the tracks, their scores and the decision."""
    scores = {s.track.index: s for s in report.ranking}

    click.echo(f"Profile: {profile}")
    click.echo("")
    for track in tracks:
        marker = "→" if track.index == report.selected_index else " "
        score = scores.get(track.index)
        if score is not None:
            detail = f"score {score.total:6.2f}"
        elif report.method == "ranked":
            detail = "not playable"
        else:
            detail = ""
        click.echo(f" {marker} {track}  {detail}".rstrip())
    click.echo("")

    if report.selected_index is None:
        click.secho("⊘ No decision: keep the current default track", fg="yellow")
    elif report.method == "fallback":
        click.secho(f"⊙ Selected track {report.selected_index} (fallback)", fg="cyan")
    else:
        click.secho(f"✓ Selected track {report.selected_index} ({report.method})", fg="green")


@cli.command()
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--device", "-d", default=None, help="Configured device id to select for")
@click.option("--language", "-l", default=None, help="Preferred language (overrides config)")
@click.pass_context
def select(ctx, file, device, language):
    """Probe a media file and select its best audio track.

    Args:
        file: Path to the media file
    """
    config = ctx.obj["config"]

    try:
        tracks = AudioAnalyzer().analyze(file)
    except Exception as e:
        click.secho(f"✗ Failed to analyze {file}: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"File: {file}")
    profile = _resolve_profile(config, device)
    report = TrackSelector().evaluate(tracks, profile, _language(config, language))
    _print_report(tracks, report, profile)


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, path_type=Path))
@click.option("--device", "-d", default=None, help="Configured device id (overrides manifest profile)")
@click.option("--language", "-l", default=None, help="Preferred language (overrides manifest)")
@click.pass_context
def rank(ctx, manifest, device, language):
    """Rank audio tracks described in a YAML/JSON manifest.

    The manifest holds a ``tracks`` list and optionally an inline
    ``profile`` and a ``preferred_language``.

    Args:
        manifest: Path to the manifest file
    """
    config = ctx.obj["config"]

    try:
        with open(manifest) as f:
            raw = yaml.safe_load(f) or {}
        tracks = [AudioTrackModel(**t).to_track() for t in raw.get("tracks", [])]
        inline = raw.get("profile")
        inline_profile = DeviceProfileConfig(**inline).to_profile() if inline else None
    except (OSError, yaml.YAMLError, ValidationError, TypeError, AttributeError) as e:
        click.secho(f"✗ Invalid manifest {manifest}: {e}", fg="red", err=True)
        sys.exit(1)

    if device or inline_profile is None:
        profile = _resolve_profile(config, device)
    else:
        profile = inline_profile

    preferred = language or raw.get("preferred_language")
    report = TrackSelector().evaluate(tracks, profile, _language(config, preferred))
    _print_report(tracks, report, profile)


@cli.command()
@click.pass_context
def daemon(ctx):
    """Start the HTTP API daemon.

    Hosts call the playback endpoints to apply track decisions to
    playback-info responses and started playbacks.
    """
    config = ctx.obj["config"]

    click.echo("Starting audiotrackselector daemon...")
    click.echo(f"Listening on {config.api.host}:{config.api.port}")
    click.echo(f"Selection: {'enabled' if config.selection.enabled else 'disabled'}")
    click.echo("")
    click.echo("Endpoints:")
    click.echo(f"  - Select:         http://{config.api.host}:{config.api.port}/api/v1/select")
    click.echo(f"  - Playback info:  http://{config.api.host}:{config.api.port}/api/v1/playback-info")
    click.echo(f"  - Playback start: http://{config.api.host}:{config.api.port}/api/v1/playback-start")
    click.echo(f"  - Health check:   http://{config.api.host}:{config.api.port}/health")
    click.echo("")
    click.echo("Press Ctrl+C to stop")
    click.echo("")

    logger.info("Starting daemon", host=config.api.host, port=config.api.port)

    try:
        uvicorn.run(
            create_app(config),
            host=config.api.host,
            port=config.api.port,
            log_level=config.logging.level,
            access_log=False,  # Request logging is done by middleware
        )
    except KeyboardInterrupt:
        click.echo("\n\nDaemon stopped")
        sys.exit(0)
    finally:
        logger.info("Daemon stopped")


@cli.command()
@click.pass_context
def version(ctx):
    """Show version information."""
    click.echo(f"audiotrackselector v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
