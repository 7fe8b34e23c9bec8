"""Host-side media source and playback models."""

from dataclasses import dataclass, field
from typing import Optional

from audiotrackselector.models.track import AudioTrack

SET_AUDIO_STREAM_INDEX = "SetAudioStreamIndex"


@dataclass
class MediaSource:
    """One playable version of a media item, as supplied by the host."""

    id: str
    tracks: list[AudioTrack] = field(default_factory=list)
    name: Optional[str] = None
    default_audio_index: Optional[int] = None

    @property
    def audio_tracks(self) -> list[AudioTrack]:
        return [t for t in self.tracks if t.is_audio]

    @property
    def label(self) -> str:
        return self.name or self.id

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.label} ({len(self.audio_tracks)} audio tracks)"


@dataclass(frozen=True)
class PlaybackSession:
    """A client session that started playback."""

    session_id: str
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    client: Optional[str] = None


@dataclass(frozen=True)
class AudioSwitchCommand:
    """Runtime command telling a client to switch its audio stream."""

    session_id: str
    index: int
    name: str = SET_AUDIO_STREAM_INDEX

    @property
    def arguments(self) -> dict[str, str]:
        return {"Index": str(self.index)}


@dataclass
class SelectionOutcome:
    """Result of running selection against one media source."""

    source_id: str
    previous_index: Optional[int] = None
    selected_index: Optional[int] = None
    changed: bool = False
    reason: Optional[str] = None

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.changed:
            return (
                f"✓ {self.source_id}: default audio {self.previous_index} → "
                f"{self.selected_index}"
            )
        return f"⊘ {self.source_id}: unchanged ({self.reason})"
