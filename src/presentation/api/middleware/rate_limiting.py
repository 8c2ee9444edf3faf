"""Rate limiting using SlowAPI.

Only the standard address route carries a limit; the ``nolimit`` route is the
same lookup without one. The limiter is module-level because SlowAPI binds
limits at decoration time. Storage is in-memory, so limits are per process.
"""

from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, Request, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.infrastructure.config import Settings, get_settings


# Type alias for rate limit handler (slowapi uses sync handlers)
RateLimitHandler = Callable[[Request, Any], Response]


def get_client_identifier(request: Request) -> str:
    """Get client identifier for rate limiting.

    Uses client IP from request state (set by RequestContextMiddleware),
    falling back to the socket peer address.
    """
    if hasattr(request.state, "client_ip"):
        return str(request.state.client_ip)

    return str(get_remote_address(request))


# Populated by setup_rate_limiting so an app built with explicit settings uses them
_configured_limits: dict[str, str] = {}


def address_rate_limit() -> str:
    """Limit string for the standard address route, resolved per request."""
    return _configured_limits.get("address", get_settings().address_rate_limit)


limiter = Limiter(key_func=get_client_identifier)


def setup_rate_limiting(app: FastAPI, settings: Settings) -> Limiter:
    """Enable or disable the shared limiter and register the 429 handler."""
    limiter.enabled = settings.rate_limit_enabled
    _configured_limits["address"] = settings.address_rate_limit
    app.state.limiter = limiter

    handler: RateLimitHandler = _rate_limit_exceeded_handler
    app.add_exception_handler(RateLimitExceeded, handler)
    return limiter
