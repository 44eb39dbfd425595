"""Request admission middleware for the API."""

from contentscale.app.middleware.agent import AgentDetectionMiddleware, detect_agent
from contentscale.app.middleware.auth import ApiKeyMiddleware, AuthDecision, authorize
from contentscale.app.middleware.context import RequestContext, get_request_context
from contentscale.app.middleware.cors import AllowListCORSMiddleware, OriginAllowList
from contentscale.app.middleware.rate_limit import (
    RateLimitMiddleware,
    RateLimitResult,
    SlidingWindowRateLimiter,
)
from contentscale.app.middleware.request_id import RequestIdMiddleware, get_request_id
from contentscale.app.middleware.request_size import RequestSizeLimitMiddleware
from contentscale.app.middleware.sanitize import InputSanitizationMiddleware, sanitize
from contentscale.app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "AgentDetectionMiddleware",
    "AllowListCORSMiddleware",
    "ApiKeyMiddleware",
    "AuthDecision",
    "InputSanitizationMiddleware",
    "OriginAllowList",
    "RateLimitMiddleware",
    "RateLimitResult",
    "RequestContext",
    "RequestIdMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "SlidingWindowRateLimiter",
    "authorize",
    "detect_agent",
    "get_request_context",
    "get_request_id",
    "sanitize",
]
