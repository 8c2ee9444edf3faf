"""HTTP access logging middleware.

Logs one ``request_completed`` event per request with status and duration.
Trace id, client IP, method and path come from the structlog context bound by
RequestContextMiddleware, so they are not repeated here.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.infrastructure.logging.config import get_logger


logger = get_logger(__name__)

# Probes would otherwise dominate the access log
QUIET_SUFFIXES = ("/health",)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log status code and processing time for each request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        log = logger.debug if request.url.path.endswith(QUIET_SUFFIXES) else logger.info
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response
