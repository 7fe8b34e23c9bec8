"""Data models for audio tracks, device profiles and media sources.

This package contains the immutable inputs of a selection (tracks and
device profiles) and the host-side shapes used by the playback layer.
"""

from audiotrackselector.models.profile import (
    NO_PROFILE,
    ChannelLimit,
    DeviceProfile,
    DirectPlayProfile,
    MediaType,
    NoProfile,
    resolve_profile,
)
from audiotrackselector.models.track import AudioTrack, SpatialFormat, StreamType

__all__ = [
    "AudioTrack",
    "ChannelLimit",
    "DeviceProfile",
    "DirectPlayProfile",
    "MediaType",
    "NO_PROFILE",
    "NoProfile",
    "SpatialFormat",
    "StreamType",
    "resolve_profile",
]
