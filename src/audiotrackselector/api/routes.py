"""API routes for track selection and playback hooks."""

import time

from fastapi import APIRouter, Request

from audiotrackselector import __version__
from audiotrackselector.api.models import (
    CommandModel,
    HealthResponse,
    MediaSourceModel,
    OutcomeModel,
    PlaybackInfoRequest,
    PlaybackInfoResponse,
    PlaybackStartRequest,
    PlaybackStartResponse,
    SelectRequest,
    SelectResponse,
    TrackScoreModel,
)
from audiotrackselector.core.playback import DefaultIndexSink, SwitchCommandSink
from audiotrackselector.models.profile import resolve_profile
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post("/api/v1/select", response_model=SelectResponse)
async def select_track(request: Request, payload: SelectRequest):
    """Rank the given tracks for a device and return the decision.

    Args:
        request: FastAPI request
        payload: Tracks plus an inline profile or a configured device id

    Returns:
        Selection result with the score breakdown
    """
    app_state = request.app.state.audiotrackselector
    config = app_state.config

    if payload.profile is not None:
        profile = payload.profile.to_profile()
    else:
        profile = app_state.profiles.get_profile(payload.device_id)
    profile = resolve_profile(profile)

    language = payload.preferred_language or config.selection.preferred_language

    report = app_state.selector.evaluate(
        [t.to_track() for t in payload.tracks], profile, preferred_language=language
    )

    logger.info(
        "Selection request handled",
        track_count=len(payload.tracks),
        device_id=payload.device_id,
        profile=str(profile),
        selected_index=report.selected_index,
        method=report.method,
    )

    return SelectResponse(
        selected_index=report.selected_index,
        method=report.method,
        profile=str(profile),
        admissible=report.admissible,
        ranking=[TrackScoreModel.from_score(s) for s in report.ranking],
    )


@router.post("/api/v1/playback-info", response_model=PlaybackInfoResponse)
async def playback_info(request: Request, payload: PlaybackInfoRequest):
    """Rewrite the default audio track of each media source in a playback-info response.

    Args:
        request: FastAPI request
        payload: Device id and media sources

    Returns:
        Media sources with updated default audio index
    """
    coordinator = request.app.state.audiotrackselector.coordinator

    sources = [s.to_source() for s in payload.media_sources]
    outcomes = coordinator.handle_playback_info(sources, payload.device_id, DefaultIndexSink())

    return PlaybackInfoResponse(
        media_sources=[MediaSourceModel.from_source(s) for s in sources],
        outcomes=[OutcomeModel.from_outcome(o) for o in outcomes],
    )


@router.post("/api/v1/playback-start", response_model=PlaybackStartResponse)
async def playback_start(request: Request, payload: PlaybackStartRequest):
    """Compute track switch commands for a playback that has started.

    Args:
        request: FastAPI request
        payload: Session and media sources of the playing item

    Returns:
        SetAudioStreamIndex commands the host should send
    """
    coordinator = request.app.state.audiotrackselector.coordinator

    sink = SwitchCommandSink()
    outcomes = coordinator.handle_playback_start(
        payload.session.to_session(),
        [s.to_source() for s in payload.media_sources],
        sink,
    )

    return PlaybackStartResponse(
        commands=[CommandModel.from_command(c) for c in sink.commands],
        outcomes=[OutcomeModel.from_outcome(o) for o in outcomes],
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint.

    Args:
        request: FastAPI request

    Returns:
        Health status
    """
    app_state = request.app.state.audiotrackselector
    config = app_state.config

    return HealthResponse(
        status="healthy",
        version=__version__,
        selection_enabled=config.selection.enabled,
        devices_configured=len(config.devices),
        uptime_seconds=round(time.time() - app_state.start_time, 2),
    )
