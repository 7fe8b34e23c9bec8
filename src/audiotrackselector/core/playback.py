"""Playback integration: apply track decisions to host media sources.

The selector only returns a decision. This module wires it into the three
points of a host's playback flow (playback-info response, playback start,
runtime track switch) through two narrow interfaces the host implements:
a ``DeviceProfileProvider`` and a ``DecisionSink``.
"""

from typing import Iterable, Optional, Protocol

from audiotrackselector.config import Config
from audiotrackselector.core.selector import TrackSelector
from audiotrackselector.models.media import (
    AudioSwitchCommand,
    MediaSource,
    PlaybackSession,
    SelectionOutcome,
)
from audiotrackselector.models.profile import NO_PROFILE, ProfileState
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)


class DeviceProfileProvider(Protocol):
    """Looks up the capability profile of a device."""

    def get_profile(self, device_id: Optional[str]) -> ProfileState:
        ...


class DecisionSink(Protocol):
    """Applies a chosen audio track index on the host side."""

    def apply(self, source: MediaSource, session: Optional[PlaybackSession], index: int) -> None:
        ...


class ConfigProfileProvider:
    """Resolve device profiles from the ``devices`` configuration section."""

    def __init__(self, config: Config):
        self.config = config

    def get_profile(self, device_id: Optional[str]) -> ProfileState:
        profile = self.config.device_profile(device_id)
        if profile is None:
            logger.debug("No device profile registered", device_id=device_id)
            return NO_PROFILE
        return profile


class DefaultIndexSink:
    """Rewrite the default audio index of the media source in place.

    Used when the decision travels back inside a playback-info response.
    """

    def apply(self, source: MediaSource, session: Optional[PlaybackSession], index: int) -> None:
        source.default_audio_index = index


class SwitchCommandSink:
    """Collect SetAudioStreamIndex commands for the host to send."""

    def __init__(self):
        self.commands: list[AudioSwitchCommand] = []

    def apply(self, source: MediaSource, session: Optional[PlaybackSession], index: int) -> None:
        if session is None:
            raise ValueError("A session is required to send a track switch command")
        self.commands.append(AudioSwitchCommand(session_id=session.session_id, index=index))


class PlaybackCoordinator:
    """Run track selection for playback requests and hand decisions to a sink."""

    def __init__(
        self,
        config: Config,
        profiles: DeviceProfileProvider,
        selector: Optional[TrackSelector] = None,
    ):
        """Initialize playback coordinator.

        Args:
            config: Application configuration
            profiles: Device profile lookup
            selector: Track selector (a new one by default)
        """
        self.config = config
        self.profiles = profiles
        self.selector = selector or TrackSelector()

    def decide(self, source: MediaSource, profile: Optional[ProfileState]) -> Optional[int]:
        """Choose the audio track for one media source.

        Args:
            source: Media source
            profile: Device profile, NO_PROFILE or None

        Returns:
            Selected index, or None to keep the host default
        """
        if not self.config.selection.enabled:
            logger.debug("Track selection disabled, skipping", source=source.label)
            return None

        if len(source.audio_tracks) <= 1:
            return None

        return self.selector.select(
            source.tracks,
            profile,
            preferred_language=self.config.selection.preferred_language,
        )

    def handle_playback_info(
        self,
        sources: Iterable[MediaSource],
        device_id: Optional[str],
        sink: DecisionSink,
        session: Optional[PlaybackSession] = None,
    ) -> list[SelectionOutcome]:
        """Apply decisions to the media sources of a playback-info response.

        Args:
            sources: Media sources of the response
            device_id: Requesting device
            sink: Where decisions are applied
            session: Optional session of the requesting client

        Returns:
            One SelectionOutcome per source
        """
        profile = self.profiles.get_profile(device_id)
        logger.info("Handling playback info", device_id=device_id, profile=str(profile))

        outcomes = []
        for source in sources:
            index = self.decide(source, profile)
            outcomes.append(self._apply(source, session, index, sink, always_apply=True))
        return outcomes

    def handle_playback_start(
        self,
        session: PlaybackSession,
        sources: Iterable[MediaSource],
        sink: DecisionSink,
    ) -> list[SelectionOutcome]:
        """Switch audio tracks of a playback that has just started.

        A switch is only sent when the decision differs from the current
        default track.

        Args:
            session: Client session that started playback
            sources: Media sources of the playing item
            sink: Where switch decisions are applied

        Returns:
            One SelectionOutcome per source
        """
        profile = self.profiles.get_profile(session.device_id)
        logger.info(
            "Handling playback start",
            session_id=session.session_id,
            device=session.device_name,
            client=session.client,
            profile=str(profile),
        )

        outcomes = []
        for source in sources:
            index = self.decide(source, profile)
            outcomes.append(self._apply(source, session, index, sink, always_apply=False))
        return outcomes

    def _apply(
        self,
        source: MediaSource,
        session: Optional[PlaybackSession],
        index: Optional[int],
        sink: DecisionSink,
        always_apply: bool,
    ) -> SelectionOutcome:
        previous = source.default_audio_index
        outcome = SelectionOutcome(source_id=source.id, previous_index=previous, selected_index=index)

        if index is None:
            outcome.reason = "disabled" if not self.config.selection.enabled else "no_decision"
            logger.debug("Keeping default audio track", source=source.label, reason=outcome.reason)
            return outcome

        if index == previous and not always_apply:
            outcome.reason = "already_default"
            logger.info("Optimal track is already the default", source=source.label, track_index=index)
            return outcome

        try:
            sink.apply(source, session, index)
        except Exception as e:
            logger.error(
                "Failed to apply audio track decision",
                source=source.label,
                track_index=index,
                error=str(e),
            )
            outcome.reason = "sink_failed"
            return outcome

        outcome.changed = index != previous
        outcome.reason = "applied" if outcome.changed else "already_default"
        logger.info(
            "Applied audio track decision",
            source=source.label,
            previous_index=previous,
            track_index=index,
        )
        return outcome
