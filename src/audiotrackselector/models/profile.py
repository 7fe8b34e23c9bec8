"""Device profile data models.

A device profile describes what one client can decode: which audio codecs it
direct-plays or can reach through a transcode, how many channels it accepts,
and its static bitrate ceilings. A request with no registered profile is a
distinct state, represented by the ``NO_PROFILE`` singleton.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

# Codecs assumed playable on practically every client
UNIVERSAL_CODECS = frozenset({"aac", "ac3", "mp3", "eac3", "vorbis"})

APPLE_TV_NAME_PATTERNS = ("apple tv", "appletv", "swiftfin", "tvos")

DEFAULT_MAX_CHANNELS = 8
NO_PROFILE_MAX_CHANNELS = 2


class MediaType(Enum):
    """Stream type a direct-play entry applies to."""

    AUDIO = "audio"
    VIDEO = "video"  # Combined audio+video entry
    PHOTO = "photo"


@dataclass(frozen=True)
class DirectPlayProfile:
    """Codecs a device decodes natively for one media type."""

    type: MediaType
    audio_codecs: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChannelLimit:
    """Upper bound on audio channels (a LessThanEqual condition)."""

    max_channels: int
    applies_to_audio: bool = True


@dataclass(frozen=True)
class DeviceProfile:
    """Playback capabilities of one client device."""

    name: str = ""
    direct_play_profiles: tuple[DirectPlayProfile, ...] = field(default_factory=tuple)
    transcoding_codecs: tuple[str, ...] = field(default_factory=tuple)
    channel_limits: tuple[ChannelLimit, ...] = field(default_factory=tuple)
    max_static_bitrate: Optional[int] = None
    max_static_music_bitrate: Optional[int] = None

    @property
    def direct_play_codecs(self) -> frozenset[str]:
        """Normalized codecs from audio and combined audio+video entries."""
        return frozenset(
            codec.strip().lower()
            for entry in self.direct_play_profiles
            if entry.type in (MediaType.AUDIO, MediaType.VIDEO)
            for codec in entry.audio_codecs
            if codec.strip()
        )

    @property
    def normalized_transcoding_codecs(self) -> frozenset[str]:
        return frozenset(c.strip().lower() for c in self.transcoding_codecs if c.strip())

    @property
    def is_apple_tv_family(self) -> bool:
        """Whether the profile name identifies an Apple TV / SwiftFin client."""
        if not self.name:
            return False
        name = self.name.lower()
        return any(pattern in name for pattern in APPLE_TV_NAME_PATTERNS)

    def __str__(self) -> str:
        return self.name or "Unnamed profile"


@dataclass(frozen=True)
class NoProfile:
    """No capability information is registered for the requesting device."""

    name: str = "None"

    def __str__(self) -> str:
        return "No profile"


NO_PROFILE = NoProfile()

ProfileState = Union[DeviceProfile, NoProfile]


def resolve_profile(profile: Optional[ProfileState]) -> ProfileState:
    """Map a nullable profile onto the explicit profile/no-profile states.

    Args:
        profile: Device profile, NO_PROFILE, or None

    Returns:
        The profile itself, or NO_PROFILE when None was passed
    """
    if profile is None:
        return NO_PROFILE
    return profile


def split_codec_list(value: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated codec list ("aac,ac3, eac3").

    Args:
        value: Comma-separated codec names, or None

    Returns:
        Tuple of trimmed, lower-cased codec names
    """
    if not value:
        return ()
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())
