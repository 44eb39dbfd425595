"""API key gate for write requests.

Only the presence and length of the key are checked. There is no
verification against issued keys; clients rely on this exact behaviour, so
tightening it belongs in a separate authentication layer.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from contentscale.app.core.logging import get_log_context, get_logger
from contentscale.app.exceptions import (
    ApiKeyError,
    InvalidApiKeyError,
    MissingApiKeyError,
)

logger = get_logger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY_PARAM = "apiKey"
DEFAULT_MIN_KEY_LENGTH = 10


@dataclass(frozen=True)
class AuthDecision:
    """Outcome of the API key gate."""
    ok: bool
    error: Optional[ApiKeyError] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error else None


def authorize(
    path: str,
    method: str,
    provided_key: Optional[str],
    api_prefix: str = "/api/",
    min_length: int = DEFAULT_MIN_KEY_LENGTH,
) -> AuthDecision:
    """Decide whether a request may pass the API key gate.

    Args:
        path: Request path
        method: HTTP method
        provided_key: Key from header or query string, None if absent
        api_prefix: Namespace the gate applies to
        min_length: Shortest key accepted

    Returns:
        AuthDecision; reads (GET) and paths outside the API always pass
    """
    if not path.startswith(api_prefix) or method.upper() == "GET":
        return AuthDecision(ok=True)
    if not provided_key:
        return AuthDecision(ok=False, error=MissingApiKeyError())
    if len(provided_key) < min_length:
        return AuthDecision(ok=False, error=InvalidApiKeyError())
    return AuthDecision(ok=True)


def get_provided_api_key(request: Request) -> Optional[str]:
    """Extract the API key from the x-api-key header or apiKey query param."""
    return request.headers.get(API_KEY_HEADER) or request.query_params.get(API_KEY_QUERY_PARAM)


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejects API write requests without a plausible key (HTTP 401)."""

    def __init__(
        self,
        app: ASGIApp,
        api_prefix: str = "/api/",
        min_length: int = DEFAULT_MIN_KEY_LENGTH,
    ):
        super().__init__(app)
        self.api_prefix = api_prefix
        self.min_length = min_length

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        decision = authorize(
            request.url.path,
            request.method,
            get_provided_api_key(request),
            api_prefix=self.api_prefix,
            min_length=self.min_length,
        )
        if not decision.ok:
            logger.info(
                f"API key rejected: {decision.reason}",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    path=request.url.path,
                    method=request.method,
                ),
            )
            return decision.error.to_response()
        return await call_next(request)
