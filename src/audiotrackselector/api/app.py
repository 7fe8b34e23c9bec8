"""FastAPI application for the audiotrackselector daemon."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from audiotrackselector import __version__
from audiotrackselector.api import routes
from audiotrackselector.api.middleware import RequestLoggingMiddleware
from audiotrackselector.config import Config
from audiotrackselector.core.playback import ConfigProfileProvider, PlaybackCoordinator
from audiotrackselector.core.selector import TrackSelector
from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)


class AppState:
    """Application state container."""

    def __init__(self, config: Config):
        self.config = config
        self.start_time = time.time()
        # Stateless, shared by all requests
        self.selector = TrackSelector()
        self.profiles = ConfigProfileProvider(config)
        self.coordinator = PlaybackCoordinator(config, self.profiles, self.selector)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config = app.state.audiotrackselector.config

    logger.info(
        "Starting audiotrackselector daemon",
        version=__version__,
        selection_enabled=config.selection.enabled,
        preferred_language=config.selection.preferred_language,
        devices=sorted(config.devices),
    )

    yield

    logger.info("Shutting down audiotrackselector daemon")


def create_app(config: Config) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Application configuration

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="audiotrackselector",
        description="Optimal audio track selection for playback clients",
        version=__version__,
        lifespan=lifespan,
    )

    # Add request logging middleware (BEFORE other middleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.audiotrackselector = AppState(config)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with detailed logging."""
        logger.error(
            "Request payload validation failed",
            path=request.url.path,
            method=request.method,
            errors=exc.errors(),
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "status": "error",
                "message": "Invalid request payload",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions."""
        logger.error(
            "Unhandled exception in request handler",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": "Internal server error",
            },
        )

    app.include_router(routes.router)

    logger.info(
        "FastAPI application created",
        version=__version__,
        api_port=config.api.port,
    )

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the non-serializable ``ctx``/``input`` values."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
