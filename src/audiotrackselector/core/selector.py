"""Audio track ranking and selection."""

from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from audiotrackselector.core.capability import CapabilityMatcher
from audiotrackselector.models.profile import ProfileState, resolve_profile
from audiotrackselector.models.track import AudioTrack, SpatialFormat
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)

# Weights of the score components, summing to 1
CODEC_WEIGHT = 0.40
CHANNEL_WEIGHT = 0.30
BITRATE_WEIGHT = 0.15
SPATIAL_WEIGHT = 0.10
LANGUAGE_WEIGHT = 0.05

# 1.5 Mbps scores 100 on the bitrate component
REFERENCE_BITRATE = 1_500_000

SPATIAL_BONUS = 10.0
LANGUAGE_BONUS = 5.0

DEFAULT_LANGUAGE = "eng"

SelectionMethod = Literal["no_tracks", "single_track", "ranked", "fallback", "none"]


def codec_score(codec: Optional[str]) -> float:
    """Score codec quality on a 0-100 scale.

    Tiers are checked from lossless down, so a codec string matching several
    tiers resolves to the highest one.

    Args:
        codec: Codec name (any case)

    Returns:
        100 lossless, 80 high-quality lossy, 60 standard lossy, 40 low
        quality, 20 anything else, 0 when unknown
    """
    if not codec or not codec.strip():
        return 0.0

    normalized = codec.strip().lower()

    # Lossless
    if (
        "truehd" in normalized
        or "dts-hd ma" in normalized
        or "dts-hdma" in normalized
        or normalized in ("flac", "pcm", "alac")
    ):
        return 100.0

    # High-quality lossy
    if (
        normalized in ("eac3", "ec3", "dts")
        or "dts-hd hra" in normalized
        or "dts-hdhra" in normalized
    ):
        return 80.0

    if normalized in ("ac3", "aac"):
        return 60.0

    if normalized in ("mp3", "vorbis", "opus"):
        return 40.0

    return 20.0


def channel_score(channels: Optional[int], max_channels: int) -> float:
    """Score how much of the device's channel budget a track uses.

    Args:
        channels: Track channel count
        max_channels: Device channel ceiling

    Returns:
        0 when channels unknown, else 100 * channels / max_channels capped at 100
    """
    if channels is None or channels <= 0:
        return 0.0
    return min(100.0, channels / max(1, max_channels) * 100)


def bitrate_score(bitrate: Optional[int]) -> float:
    """Score bitrate linearly up to the 1.5 Mbps reference.

    Args:
        bitrate: Track bitrate in bits/second

    Returns:
        0-100 score
    """
    if bitrate is None or bitrate <= 0:
        return 0.0
    return min(100.0, bitrate / REFERENCE_BITRATE * 100)


def spatial_score(spatial_format: Optional[SpatialFormat]) -> float:
    if spatial_format in (SpatialFormat.DOLBY_ATMOS, SpatialFormat.DTSX):
        return SPATIAL_BONUS
    return 0.0


def language_score(track_language: Optional[str], preferred_language: Optional[str]) -> float:
    if not track_language or not preferred_language:
        return 0.0
    if track_language.strip().lower() == preferred_language.strip().lower():
        return LANGUAGE_BONUS
    return 0.0


@dataclass(frozen=True)
class TrackScore:
    """Per-component score breakdown of one track."""

    track: AudioTrack
    codec: float
    channels: float
    bitrate: float
    spatial: float
    language: float

    @property
    def total(self) -> float:
        return (
            self.codec * CODEC_WEIGHT
            + self.channels * CHANNEL_WEIGHT
            + self.bitrate * BITRATE_WEIGHT
            + self.spatial * SPATIAL_WEIGHT
            + self.language * LANGUAGE_WEIGHT
        )

    def to_dict(self) -> dict:
        return {
            "index": self.track.index,
            "codec": self.codec,
            "channels": self.channels,
            "bitrate": self.bitrate,
            "spatial": self.spatial,
            "language": self.language,
            "total": round(self.total, 4),
        }


def score_track(
    track: AudioTrack,
    profile: Optional[ProfileState],
    preferred_language: Optional[str] = DEFAULT_LANGUAGE,
    matcher: Optional[CapabilityMatcher] = None,
) -> TrackScore:
    """Compute the weighted quality score of a track for a device.

    Args:
        track: Audio track to score
        profile: Device profile, NO_PROFILE or None
        preferred_language: Preferred ISO 639 language code
        matcher: Capability matcher used for the channel ceiling

    Returns:
        TrackScore breakdown
    """
    matcher = matcher or CapabilityMatcher()
    return TrackScore(
        track=track,
        codec=codec_score(track.codec),
        channels=channel_score(track.channels, matcher.max_channels(profile)),
        bitrate=bitrate_score(track.bitrate),
        spatial=spatial_score(track.spatial_format),
        language=language_score(track.language, preferred_language),
    )


def find_fallback(tracks: Sequence[AudioTrack]) -> Optional[AudioTrack]:
    """Find a broadly playable track when nothing passed the compatibility filter.

    Priority: AAC stereo, AC3 stereo, any AAC, any AC3.

    Args:
        tracks: Unfiltered audio tracks

    Returns:
        First track matching the highest priority, or None
    """
    rules = (
        ("aac", 2),
        ("ac3", 2),
        ("aac", None),
        ("ac3", None),
    )
    for codec, channels in rules:
        for track in tracks:
            if track.normalized_codec != codec:
                continue
            if channels is None or track.channels == channels:
                return track
    return None


@dataclass
class SelectionReport:
    """Outcome of a selection, with the ranking that produced it."""

    selected_index: Optional[int]
    method: SelectionMethod
    admissible: list[int] = field(default_factory=list)
    ranking: list[TrackScore] = field(default_factory=list)

    @property
    def decided(self) -> bool:
        return self.selected_index is not None


class TrackSelector:
    """Select the audio track that best fits a device.

    Tracks the device cannot play are filtered out, survivors are ranked by
    weighted quality score, and when nothing survives a fixed AAC/AC3
    fallback is searched over the unfiltered list.
    """

    def __init__(self, matcher: Optional[CapabilityMatcher] = None):
        """Initialize track selector.

        Args:
            matcher: Capability matcher (a new one by default)
        """
        self.matcher = matcher or CapabilityMatcher()

    def select(
        self,
        tracks: Optional[Sequence[AudioTrack]],
        profile: Optional[ProfileState] = None,
        preferred_language: Optional[str] = DEFAULT_LANGUAGE,
    ) -> Optional[int]:
        """Select the optimal audio track.

        Args:
            tracks: Candidate tracks of one media source
            profile: Device profile, NO_PROFILE or None
            preferred_language: Preferred ISO 639 language code

        Returns:
            Index of the selected track, or None when no decision is made
        """
        return self.evaluate(tracks, profile, preferred_language).selected_index

    def evaluate(
        self,
        tracks: Optional[Sequence[AudioTrack]],
        profile: Optional[ProfileState] = None,
        preferred_language: Optional[str] = DEFAULT_LANGUAGE,
    ) -> SelectionReport:
        """Run selection and report how the decision was reached.

        Selection logic:
        1. No audio tracks → no decision
        2. Exactly one audio track → that track
        3. Rank tracks the device can play, highest score wins (ties keep
           the input order)
        4. If none can play → AAC/AC3 fallback over all audio tracks
        5. Else → no decision

        Args:
            tracks: Candidate tracks of one media source
            profile: Device profile, NO_PROFILE or None
            preferred_language: Preferred ISO 639 language code

        Returns:
            SelectionReport
        """
        audio_tracks = [t for t in (tracks or []) if t is not None and t.is_audio]

        if not audio_tracks:
            logger.debug("No audio tracks found, skipping selection")
            return SelectionReport(selected_index=None, method="no_tracks")

        if len(audio_tracks) == 1:
            logger.debug("Only one audio track available", track_index=audio_tracks[0].index)
            return SelectionReport(selected_index=audio_tracks[0].index, method="single_track")

        profile = resolve_profile(profile)

        logger.debug(
            "Selecting audio track",
            track_count=len(audio_tracks),
            profile=str(profile),
            preferred_language=preferred_language,
        )

        compatible = [t for t in audio_tracks if self.matcher.can_play(t, profile)]

        if not compatible:
            logger.warning(
                "No compatible audio tracks, trying fallback",
                profile=str(profile),
                codecs=[t.codec for t in audio_tracks],
            )
            fallback = find_fallback(audio_tracks)
            if fallback is None:
                logger.warning("No fallback track found, keeping host default", profile=str(profile))
                return SelectionReport(selected_index=None, method="none")

            logger.info(
                "Selected fallback audio track",
                track_index=fallback.index,
                codec=fallback.codec,
                channels=fallback.channels,
            )
            return SelectionReport(selected_index=fallback.index, method="fallback")

        ranking = self.rank(compatible, profile, preferred_language)
        best = ranking[0]

        logger.info(
            "Selected audio track",
            track_index=best.track.index,
            codec=best.track.codec,
            channels=best.track.channels,
            score=round(best.total, 2),
            profile=str(profile),
            selection_method="ranked",
        )

        return SelectionReport(
            selected_index=best.track.index,
            method="ranked",
            admissible=[t.index for t in compatible],
            ranking=ranking,
        )

    def rank(
        self,
        tracks: Sequence[AudioTrack],
        profile: Optional[ProfileState] = None,
        preferred_language: Optional[str] = DEFAULT_LANGUAGE,
    ) -> list[TrackScore]:
        """Score tracks and sort them best first.

        The sort is stable, so equal scores keep their input order.

        Args:
            tracks: Tracks to rank (assumed playable)
            profile: Device profile, NO_PROFILE or None
            preferred_language: Preferred ISO 639 language code

        Returns:
            TrackScore list, highest total first
        """
        scores = []
        for track in tracks:
            score = score_track(track, profile, preferred_language, self.matcher)
            logger.debug(
                "Track scored",
                track_index=track.index,
                codec=track.codec,
                channels=track.channels,
                score=round(score.total, 2),
            )
            scores.append(score)

        return sorted(scores, key=lambda s: s.total, reverse=True)
