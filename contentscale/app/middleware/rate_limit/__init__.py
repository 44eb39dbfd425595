"""Rate limiting middleware for the API.

A limiter instance is created once at startup and handed to the middleware,
so each mounted limiter owns its own client windows.
"""

import hashlib

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from contentscale.app.core.logging import get_log_context, get_logger
from contentscale.app.exceptions import RateLimitExceededError
from contentscale.app.middleware.rate_limit.backends import (
    SlidingWindowRateLimiter,
    monotonic_ms,
)
from contentscale.app.middleware.rate_limit.models import RateLimitResult

logger = get_logger(__name__)

__all__ = [
    "RateLimitResult",
    "SlidingWindowRateLimiter",
    "RateLimitMiddleware",
    "get_client_ip",
    "monotonic_ms",
]


def get_client_ip(request: Request, trust_forwarded_for: bool = False) -> str:
    """Return the caller's address.

    X-Forwarded-For is only honoured when explicitly trusted, since any
    client can set it.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce a sliding window limit on a path prefix.

    Limits are applied per client address. The address is hashed so raw IPs
    are not kept in memory.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: SlidingWindowRateLimiter,
        path_prefix: str = "/api/",
        trust_forwarded_for: bool = False,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix
        self.trust_forwarded_for = trust_forwarded_for

    def _get_client_key(self, request: Request) -> str:
        client_ip = get_client_ip(request, self.trust_forwarded_for)
        # 32 hex chars (128 bits) is plenty for collision resistance
        ip_hash = hashlib.sha256(client_ip.encode()).hexdigest()[:32]
        return f"ratelimit:{self.limiter.name}:{ip_hash}"

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request with rate limiting."""
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self._get_client_key(request)
        result = self.limiter.admit(key, monotonic_ms())

        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded on {self.limiter.name} limiter",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    client=key,
                    path=request.url.path,
                    method=request.method,
                ),
            )
            return RateLimitExceededError(
                retry_after=result.retry_after,
                limit=result.limit,
            ).to_response()

        response = await call_next(request)

        # With nested limiters the outermost one writes these last.
        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)

        return response
