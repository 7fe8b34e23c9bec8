"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from audiotrackselector.utils.logger import get_logger

logger = get_logger(__name__)
stdlib_logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log API requests and their response status."""

    async def dispatch(self, request: Request, call_next):
        """Log request before processing and response after."""
        # Only log API endpoints (exclude health checks)
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        start_time = time.time()

        log_data = {
            "method": request.method,
            "path": request.url.path,
        }

        # Client and headers only at debug level
        if stdlib_logger.isEnabledFor(logging.DEBUG):
            log_data["client"] = request.client.host if request.client else None
            log_data["headers"] = {
                k: v for k, v in request.headers.items() if k.lower() != "authorization"
            }

        logger.info("Incoming API request", **log_data)

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "API request completed",
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        return response
