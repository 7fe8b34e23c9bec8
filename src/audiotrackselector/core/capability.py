"""Device capability matching for audio tracks."""

from typing import Optional

from audiotrackselector.models.profile import (
    DEFAULT_MAX_CHANNELS,
    NO_PROFILE_MAX_CHANNELS,
    UNIVERSAL_CODECS,
    DeviceProfile,
    NoProfile,
    ProfileState,
    resolve_profile,
)
from audiotrackselector.models.track import AudioTrack, SpatialFormat
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)


def is_universally_supported(codec: Optional[str]) -> bool:
    """Check whether a codec plays on practically every client.

    Args:
        codec: Codec name (any case, may be padded)

    Returns:
        True if codec is aac, ac3, mp3, eac3 or vorbis
    """
    if not codec:
        return False
    return codec.strip().lower() in UNIVERSAL_CODECS


class CapabilityMatcher:
    """Decide whether a client can decode an audio track.

    The matcher is stateless; one instance can serve concurrent requests.
    """

    def can_play(self, track: AudioTrack, profile: Optional[ProfileState]) -> bool:
        """Determine if a client can play the given audio track.

        With no profile only universally supported codecs are admitted. With
        a profile, the codec, channel, bitrate and spatial gates must all pass.

        Args:
            track: Candidate audio track
            profile: Device profile, NO_PROFILE or None

        Returns:
            True if the track is playable on the device

        Raises:
            ValueError: If track is None
        """
        if track is None:
            raise ValueError("track is required")

        if not track.is_audio or not track.normalized_codec:
            return False

        profile = resolve_profile(profile)
        if isinstance(profile, NoProfile):
            return is_universally_supported(track.codec)

        if not self._supports_codec(track.normalized_codec, profile):
            logger.debug(
                "Codec not supported by device profile",
                track_index=track.index,
                codec=track.codec,
                profile=profile.name,
            )
            return False

        channels = track.known_channels
        if channels is not None and channels > self.max_channels(profile):
            logger.debug(
                "Channel count exceeds device profile limits",
                track_index=track.index,
                channels=channels,
                max_channels=self.max_channels(profile),
                profile=profile.name,
            )
            return False

        bitrate = track.known_bitrate
        if bitrate is not None and not self._supports_bitrate(bitrate, profile):
            logger.debug(
                "Bitrate exceeds device profile limits",
                track_index=track.index,
                bitrate=bitrate,
                profile=profile.name,
            )
            return False

        if track.spatial_format is not SpatialFormat.NONE and not self._supports_spatial(
            track.spatial_format, profile
        ):
            logger.debug(
                "Spatial audio format not supported by device profile",
                track_index=track.index,
                spatial_format=track.spatial_format.value,
                profile=profile.name,
            )
            return False

        return True

    def max_channels(self, profile: Optional[ProfileState]) -> int:
        """Get the effective audio channel ceiling of a device.

        Args:
            profile: Device profile, NO_PROFILE or None

        Returns:
            Maximum channel count: 2 without a profile, otherwise the
            smallest audio channel limit (8 when none applies), never below 1
        """
        profile = resolve_profile(profile)
        if isinstance(profile, NoProfile):
            return NO_PROFILE_MAX_CHANNELS

        ceiling = DEFAULT_MAX_CHANNELS
        for limit in profile.channel_limits:
            if limit.applies_to_audio:
                ceiling = min(ceiling, limit.max_channels)

        # A non-positive configured limit would make the channel score divide
        # by zero; treat it as mono
        return max(1, ceiling)

    def _supports_codec(self, codec: str, profile: DeviceProfile) -> bool:
        """Codec gate. ``codec`` is already normalized."""
        # TrueHD is not decodable by SwiftFin / Apple TV
        if profile.is_apple_tv_family and "truehd" in codec:
            logger.debug("Excluding TrueHD for Apple TV/SwiftFin profile", profile=profile.name)
            return False

        if codec in profile.direct_play_codecs:
            return True

        if codec in profile.normalized_transcoding_codecs:
            return True

        return is_universally_supported(codec)

    def _supports_bitrate(self, bitrate: int, profile: DeviceProfile) -> bool:
        if profile.max_static_music_bitrate is not None and bitrate > profile.max_static_music_bitrate:
            return False

        if profile.max_static_bitrate is not None and bitrate > profile.max_static_bitrate:
            return False

        return True

    def _supports_spatial(self, spatial_format: SpatialFormat, profile: DeviceProfile) -> bool:
        # Apple TV plays Atmos as metadata carried over DD+
        if profile.is_apple_tv_family and spatial_format is SpatialFormat.DOLBY_ATMOS:
            return True

        # No per-device spatial restrictions are modelled; admit when the
        # base codec passed the codec gate
        return True
