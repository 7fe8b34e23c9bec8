"""Audio track data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StreamType(Enum):
    """Kind of stream inside a media source."""

    AUDIO = "audio"
    VIDEO = "video"
    SUBTITLE = "subtitle"
    OTHER = "other"


class SpatialFormat(Enum):
    """Object-based surround metadata layered on a base codec."""

    NONE = "none"
    DOLBY_ATMOS = "dolby_atmos"
    DTSX = "dtsx"
    OTHER = "other"


@dataclass(frozen=True)
class AudioTrack:
    """Represents one candidate audio track of a media source."""

    index: int  # Stream index within the media source
    codec: str = ""  # Codec name (e.g., "truehd", "eac3", "aac")
    channels: Optional[int] = None  # Number of audio channels
    bitrate: Optional[int] = None  # Bitrate in bits/second
    spatial_format: SpatialFormat = SpatialFormat.NONE
    language: Optional[str] = None  # ISO 639 language code
    title: Optional[str] = None  # Display label, never scored
    stream_type: StreamType = StreamType.AUDIO
    is_default: bool = False  # Whether the host currently marks it default

    @property
    def is_audio(self) -> bool:
        return self.stream_type is StreamType.AUDIO

    @property
    def normalized_codec(self) -> str:
        """Codec lower-cased and trimmed, empty string when unknown."""
        return (self.codec or "").strip().lower()

    @property
    def known_channels(self) -> Optional[int]:
        """Channel count, or None when absent or non-positive."""
        if self.channels is None or self.channels <= 0:
            return None
        return self.channels

    @property
    def known_bitrate(self) -> Optional[int]:
        """Bitrate, or None when absent or non-positive."""
        if self.bitrate is None or self.bitrate <= 0:
            return None
        return self.bitrate

    def __str__(self) -> str:
        """Human-readable representation."""
        channels = f" {self.channels}ch" if self.known_channels else ""
        kbps = f" {self.bitrate // 1000}kbps" if self.known_bitrate else ""
        spatial = (
            f" [{self.spatial_format.value}]"
            if self.spatial_format is not SpatialFormat.NONE
            else ""
        )
        language = self.language or "und"
        default_marker = " [DEFAULT]" if self.is_default else ""
        return (
            f"Track {self.index}: {language} {self.codec or '?'}"
            f"{channels}{kbps}{spatial}{default_marker}"
        )
