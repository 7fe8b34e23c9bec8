"""Unit tests for the playback coordinator and decision sinks."""

import pytest

from audiotrackselector.config import Config, SelectionConfig
from audiotrackselector.core.playback import (
    ConfigProfileProvider,
    DefaultIndexSink,
    PlaybackCoordinator,
    SwitchCommandSink,
)
from audiotrackselector.models.media import MediaSource, PlaybackSession
from audiotrackselector.models.profile import NO_PROFILE, DeviceProfile
from audiotrackselector.models.track import AudioTrack


class FailingSink:
    """Sink whose host call always fails."""

    def apply(self, source, session, index):
        raise RuntimeError("session gone")


@pytest.fixture
def coordinator(default_config):
    return PlaybackCoordinator(default_config, ConfigProfileProvider(default_config))


@pytest.fixture
def movie_source(movie_tracks):
    return MediaSource(id="src-1", name="Movie (2024)", tracks=list(movie_tracks), default_audio_index=1)


@pytest.fixture
def session():
    return PlaybackSession(
        session_id="sess-1", device_id="appletv-1", device_name="Living Room", client="Swiftfin"
    )


class TestConfigProfileProvider:
    """Device profile lookup from configuration."""

    def test_known_device(self, default_config):
        """Should return the configured profile for a known device."""
        profile = ConfigProfileProvider(default_config).get_profile("appletv-1")
        assert isinstance(profile, DeviceProfile)
        assert profile.is_apple_tv_family

    @pytest.mark.parametrize("device_id", [None, "", "unknown-device"])
    def test_unknown_device_has_no_profile(self, default_config, device_id):
        """Should return NO_PROFILE for unknown or missing devices."""
        assert ConfigProfileProvider(default_config).get_profile(device_id) is NO_PROFILE


class TestPlaybackInfo:
    """Rewriting the default track of playback-info responses."""

    def test_rewrites_default_index(self, coordinator, movie_source):
        """Should rewrite the default index to the selected track."""
        outcomes = coordinator.handle_playback_info([movie_source], "appletv-1", DefaultIndexSink())

        assert movie_source.default_audio_index == 2
        assert outcomes[0].changed is True
        assert outcomes[0].previous_index == 1
        assert outcomes[0].selected_index == 2
        assert outcomes[0].reason == "applied"

    def test_keeps_default_for_capable_device(self, coordinator, movie_source):
        """Should keep the default when it is already the best track."""
        outcomes = coordinator.handle_playback_info([movie_source], "shield-1", DefaultIndexSink())

        assert movie_source.default_audio_index == 1
        assert outcomes[0].changed is False
        assert outcomes[0].reason == "already_default"

    def test_single_track_source_untouched(self, coordinator):
        """Should leave single-track sources alone."""
        source = MediaSource(
            id="src-2", tracks=[AudioTrack(index=1, codec="aac", channels=2)], default_audio_index=1
        )
        outcomes = coordinator.handle_playback_info([source], "appletv-1", DefaultIndexSink())

        assert source.default_audio_index == 1
        assert outcomes[0].selected_index is None
        assert outcomes[0].reason == "no_decision"

    def test_no_decision_leaves_default(self, coordinator):
        """Should keep the default when no track can be selected."""
        source = MediaSource(
            id="src-3",
            tracks=[
                AudioTrack(index=1, codec="opus", channels=8),
                AudioTrack(index=2, codec="opus", channels=2),
            ],
            default_audio_index=1,
        )
        outcomes = coordinator.handle_playback_info([source], None, DefaultIndexSink())

        assert source.default_audio_index == 1
        assert outcomes[0].reason == "no_decision"

    def test_disabled_selection(self, movie_source):
        """Should do nothing when selection is disabled."""
        config = Config(selection=SelectionConfig(enabled=False))
        coordinator = PlaybackCoordinator(config, ConfigProfileProvider(config))

        outcomes = coordinator.handle_playback_info([movie_source], None, DefaultIndexSink())

        assert movie_source.default_audio_index == 1
        assert outcomes[0].reason == "disabled"

    def test_uses_configured_language(self, default_config):
        """Should prefer the configured language."""
        config = default_config.model_copy(
            update={"selection": SelectionConfig(preferred_language="FRE")}
        )
        coordinator = PlaybackCoordinator(config, ConfigProfileProvider(config))
        source = MediaSource(
            id="src-4",
            tracks=[
                AudioTrack(index=1, codec="ac3", channels=6, language="eng"),
                AudioTrack(index=2, codec="ac3", channels=6, language="fre"),
            ],
            default_audio_index=1,
        )

        coordinator.handle_playback_info([source], "shield-1", DefaultIndexSink())

        assert source.default_audio_index == 2

    def test_two_letter_language_tags(self, default_config):
        """Should match a two-letter configured language against two-letter tags."""
        config = default_config.model_copy(
            update={"selection": SelectionConfig(preferred_language="en")}
        )
        coordinator = PlaybackCoordinator(config, ConfigProfileProvider(config))
        source = MediaSource(
            id="src-5",
            tracks=[
                AudioTrack(index=0, codec="aac", channels=2, language="fr"),
                AudioTrack(index=1, codec="aac", channels=2, language="en"),
            ],
            default_audio_index=0,
        )

        outcomes = coordinator.handle_playback_info([source], "shield-1", DefaultIndexSink())

        assert source.default_audio_index == 1
        assert outcomes[0].reason == "applied"


class TestPlaybackStart:
    """Switching tracks of a started playback."""

    def test_sends_switch_command(self, coordinator, session, movie_source):
        """Should send a SetAudioStreamIndex command for a better track."""
        sink = SwitchCommandSink()

        outcomes = coordinator.handle_playback_start(session, [movie_source], sink)

        assert len(sink.commands) == 1
        command = sink.commands[0]
        assert command.session_id == "sess-1"
        assert command.name == "SetAudioStreamIndex"
        assert command.arguments == {"Index": "2"}
        assert outcomes[0].changed is True

    def test_no_command_when_already_default(self, coordinator, session, movie_tracks):
        """Should not send a command when the default is already best."""
        source = MediaSource(id="src-1", tracks=list(movie_tracks), default_audio_index=2)
        sink = SwitchCommandSink()

        outcomes = coordinator.handle_playback_start(session, [source], sink)

        assert sink.commands == []
        assert outcomes[0].reason == "already_default"

    def test_sink_failure_is_reported(self, coordinator, session, movie_tracks):
        """Should report sink failures and keep processing sources."""
        sources = [
            MediaSource(id="a", tracks=list(movie_tracks), default_audio_index=1),
            MediaSource(id="b", tracks=list(movie_tracks), default_audio_index=1),
        ]

        outcomes = coordinator.handle_playback_start(session, sources, FailingSink())

        assert [o.reason for o in outcomes] == ["sink_failed", "sink_failed"]
        assert not any(o.changed for o in outcomes)

    def test_switch_sink_requires_session(self, movie_source):
        """Should raise ValueError without a session."""
        with pytest.raises(ValueError):
            SwitchCommandSink().apply(movie_source, None, 2)
