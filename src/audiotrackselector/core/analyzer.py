"""Audio track analysis using ffprobe."""

import json
import subprocess
from pathlib import Path
from typing import Any, Optional

from audiotrackselector.models.track import AudioTrack, SpatialFormat
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)

FFPROBE_TIMEOUT = 30


def _detect_spatial_format(stream: dict[str, Any]) -> SpatialFormat:
    """Detect object-based audio from the ffprobe profile or track title."""
    tags = stream.get("tags") or {}
    hints = " ".join(
        str(value) for value in (stream.get("profile"), tags.get("title")) if value
    ).lower()

    if "atmos" in hints:
        return SpatialFormat.DOLBY_ATMOS
    if "dts:x" in hints or "dts-x" in hints:
        return SpatialFormat.DTSX
    return SpatialFormat.NONE


def _codec_name(stream: dict[str, Any]) -> str:
    """Codec name, with DTS-HD profiles spelled out ("dts-hd ma", "dts-hd hra")."""
    codec = (stream.get("codec_name") or "").lower()
    profile = (stream.get("profile") or "").lower()

    if codec == "dts":
        if "dts-hd ma" in profile:
            return "dts-hd ma"
        if "dts-hd hra" in profile:
            return "dts-hd hra"
    return codec


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def parse_streams(data: dict[str, Any]) -> list[AudioTrack]:
    """Convert ffprobe JSON output into audio tracks.

    Args:
        data: Parsed ``ffprobe -print_format json -show_streams`` output

    Returns:
        List of AudioTrack objects, indexed by ffprobe stream index
    """
    tracks = []
    for position, stream in enumerate(data.get("streams", [])):
        if stream.get("codec_type", "audio") != "audio":
            continue

        tags = stream.get("tags") or {}
        tracks.append(
            AudioTrack(
                index=stream.get("index", position),
                codec=_codec_name(stream),
                channels=_optional_int(stream.get("channels")),
                bitrate=_optional_int(stream.get("bit_rate")),
                spatial_format=_detect_spatial_format(stream),
                language=tags.get("language"),
                title=tags.get("title"),
                is_default=(stream.get("disposition") or {}).get("default", 0) == 1,
            )
        )
    return tracks


class AudioAnalyzer:
    """Analyze audio tracks in media files using ffprobe."""

    def analyze(self, file_path: Path) -> list[AudioTrack]:
        """Extract audio track information from a media file.

        Args:
            file_path: Path to media file

        Returns:
            List of AudioTrack objects

        Raises:
            FileNotFoundError: If file doesn't exist
            subprocess.CalledProcessError: If ffprobe fails
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.debug("Analyzing audio tracks", file=str(file_path))

        cmd = [
            "ffprobe",
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_streams",
            "-select_streams",
            "a",  # Audio streams only
            str(file_path),
        ]

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=FFPROBE_TIMEOUT
            )
            tracks = parse_streams(json.loads(result.stdout))
        except subprocess.TimeoutExpired:
            logger.error("ffprobe timeout", file=str(file_path), timeout=FFPROBE_TIMEOUT)
            raise
        except subprocess.CalledProcessError as e:
            logger.error(
                "ffprobe failed",
                file=str(file_path),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise
        except json.JSONDecodeError as e:
            logger.error("Failed to parse ffprobe output", file=str(file_path), error=str(e))
            raise

        logger.info(
            "Audio tracks analyzed",
            file=str(file_path),
            track_count=len(tracks),
            codecs=[t.codec for t in tracks],
            default_track=next((t.index for t in tracks if t.is_default), None),
        )

        return tracks
