"""Pydantic models for API requests and responses."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from audiotrackselector.config import DeviceProfileConfig
from audiotrackselector.core.selector import TrackScore
from audiotrackselector.models.media import (
    AudioSwitchCommand,
    MediaSource,
    PlaybackSession,
    SelectionOutcome,
)
from audiotrackselector.models.track import AudioTrack, SpatialFormat, StreamType


class AudioTrackModel(BaseModel):
    """Audio track as exchanged over the API."""

    index: int
    codec: Optional[str] = None
    channels: Optional[int] = None
    bitrate: Optional[int] = Field(default=None, description="Bits per second")
    spatial_format: Optional[Literal["none", "dolby_atmos", "dtsx", "other"]] = None
    language: Optional[str] = None
    title: Optional[str] = None
    stream_type: Literal["audio", "video", "subtitle", "other"] = "audio"
    is_default: bool = False

    def to_track(self) -> AudioTrack:
        return AudioTrack(
            index=self.index,
            codec=self.codec or "",
            channels=self.channels,
            bitrate=self.bitrate,
            spatial_format=SpatialFormat(self.spatial_format or "none"),
            language=self.language,
            title=self.title,
            stream_type=StreamType(self.stream_type),
            is_default=self.is_default,
        )

    @classmethod
    def from_track(cls, track: AudioTrack) -> "AudioTrackModel":
        return cls(
            index=track.index,
            codec=track.codec,
            channels=track.channels,
            bitrate=track.bitrate,
            spatial_format=track.spatial_format.value,
            language=track.language,
            title=track.title,
            stream_type=track.stream_type.value,
            is_default=track.is_default,
        )


class MediaSourceModel(BaseModel):
    """Media source with its streams."""

    id: str
    name: Optional[str] = None
    default_audio_index: Optional[int] = None
    tracks: List[AudioTrackModel] = Field(default_factory=list)

    def to_source(self) -> MediaSource:
        return MediaSource(
            id=self.id,
            name=self.name,
            default_audio_index=self.default_audio_index,
            tracks=[t.to_track() for t in self.tracks],
        )

    @classmethod
    def from_source(cls, source: MediaSource) -> "MediaSourceModel":
        return cls(
            id=source.id,
            name=source.name,
            default_audio_index=source.default_audio_index,
            tracks=[AudioTrackModel.from_track(t) for t in source.tracks],
        )


class SessionModel(BaseModel):
    """Client playback session."""

    session_id: str
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    client: Optional[str] = None

    def to_session(self) -> PlaybackSession:
        return PlaybackSession(
            session_id=self.session_id,
            device_id=self.device_id,
            device_name=self.device_name,
            client=self.client,
        )


class SelectRequest(BaseModel):
    """Ad-hoc selection request."""

    tracks: List[AudioTrackModel]
    profile: Optional[DeviceProfileConfig] = Field(
        default=None, description="Inline device profile (takes precedence over device_id)"
    )
    device_id: Optional[str] = Field(default=None, description="Configured device id")
    preferred_language: Optional[str] = Field(
        default=None, description="Overrides the configured preferred language"
    )


class TrackScoreModel(BaseModel):
    """Score breakdown of one track."""

    index: int
    codec: float
    channels: float
    bitrate: float
    spatial: float
    language: float
    total: float

    @classmethod
    def from_score(cls, score: TrackScore) -> "TrackScoreModel":
        return cls(**score.to_dict())


class SelectResponse(BaseModel):
    """Selection result."""

    selected_index: Optional[int] = None
    method: Literal["no_tracks", "single_track", "ranked", "fallback", "none"]
    profile: str
    admissible: List[int] = Field(default_factory=list)
    ranking: List[TrackScoreModel] = Field(default_factory=list)


class OutcomeModel(BaseModel):
    """Per-source selection outcome."""

    source_id: str
    previous_index: Optional[int] = None
    selected_index: Optional[int] = None
    changed: bool = False
    reason: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: SelectionOutcome) -> "OutcomeModel":
        return cls(
            source_id=outcome.source_id,
            previous_index=outcome.previous_index,
            selected_index=outcome.selected_index,
            changed=outcome.changed,
            reason=outcome.reason,
        )


class PlaybackInfoRequest(BaseModel):
    """Playback-info response to rewrite before it reaches the client."""

    device_id: Optional[str] = None
    media_sources: List[MediaSourceModel] = Field(default_factory=list)


class PlaybackInfoResponse(BaseModel):
    """Rewritten playback-info media sources."""

    media_sources: List[MediaSourceModel]
    outcomes: List[OutcomeModel]


class CommandModel(BaseModel):
    """General command to send to a client session."""

    session_id: str
    name: str
    arguments: Dict[str, str]

    @classmethod
    def from_command(cls, command: AudioSwitchCommand) -> "CommandModel":
        return cls(session_id=command.session_id, name=command.name, arguments=command.arguments)


class PlaybackStartRequest(BaseModel):
    """Playback-start event."""

    session: SessionModel
    media_sources: List[MediaSourceModel] = Field(default_factory=list)


class PlaybackStartResponse(BaseModel):
    """Track switch commands for a started playback."""

    commands: List[CommandModel]
    outcomes: List[OutcomeModel]


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    selection_enabled: bool
    devices_configured: int
    uptime_seconds: float
