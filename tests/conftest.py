"""Shared pytest fixtures for audiotrackselector tests."""

import pytest

from audiotrackselector.config import (
    ChannelLimitConfig,
    Config,
    DeviceProfileConfig,
    DirectPlayConfig,
    SelectionConfig,
)
from audiotrackselector.models.profile import (
    ChannelLimit,
    DeviceProfile,
    DirectPlayProfile,
    MediaType,
)
from audiotrackselector.models.track import AudioTrack, SpatialFormat


@pytest.fixture
def apple_tv_profile():
    """Apple TV-like profile: no TrueHD, direct-plays eac3/ac3/aac, 6 channels."""
    return DeviceProfile(
        name="Apple TV (SwiftFin)",
        direct_play_profiles=(
            DirectPlayProfile(type=MediaType.VIDEO, audio_codecs=("eac3", "ac3", "aac")),
        ),
        channel_limits=(ChannelLimit(max_channels=6),),
    )


@pytest.fixture
def home_theater_profile():
    """Receiver-backed profile that direct-plays lossless formats up to 7.1."""
    return DeviceProfile(
        name="Android TV",
        direct_play_profiles=(
            DirectPlayProfile(
                type=MediaType.VIDEO,
                audio_codecs=("truehd", "eac3", "ac3", "aac", "dts", "flac"),
            ),
        ),
    )


@pytest.fixture
def movie_tracks():
    """Typical Blu-ray remux audio tracks."""
    return [
        AudioTrack(
            index=1,
            codec="truehd",
            channels=8,
            bitrate=3_500_000,
            spatial_format=SpatialFormat.DOLBY_ATMOS,
            language="eng",
            title="TrueHD Atmos 7.1",
            is_default=True,
        ),
        AudioTrack(
            index=2,
            codec="eac3",
            channels=6,
            bitrate=768_000,
            spatial_format=SpatialFormat.DOLBY_ATMOS,
            language="eng",
            title="DD+ Atmos 5.1",
        ),
        AudioTrack(index=3, codec="ac3", channels=6, bitrate=448_000, language="eng"),
        AudioTrack(index=4, codec="aac", channels=2, bitrate=192_000, language="eng"),
    ]


@pytest.fixture
def default_config():
    """Configuration with two registered devices."""
    return Config(
        selection=SelectionConfig(enabled=True, preferred_language="eng"),
        devices={
            "appletv-1": DeviceProfileConfig(
                name="Apple TV",
                direct_play=[DirectPlayConfig(type="video", audio_codecs=["eac3", "ac3", "aac"])],
                channel_limits=[ChannelLimitConfig(max_channels=6)],
            ),
            "shield-1": DeviceProfileConfig(
                name="NVIDIA Shield",
                direct_play=[
                    DirectPlayConfig(type="video", audio_codecs="truehd,eac3,ac3,aac,dts")
                ],
            ),
        },
    )
