"""Agent request detection.

Flags requests that come from automation (bots, AI agents, scripted
clients) so handlers can tell them apart. Detection never rejects.
"""

from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from contentscale.app.core.logging import get_log_context, get_logger
from contentscale.app.middleware.context import get_request_context

logger = get_logger(__name__)

AGENT_TYPE_HEADER = "x-agent-type"
AGENT_USER_AGENT_MARKERS = ("agent", "bot")


def detect_agent(user_agent: Optional[str], agent_type: Optional[str]) -> bool:
    """Return True if the headers identify an automated caller.

    Args:
        user_agent: User-Agent header value
        agent_type: X-Agent-Type header value; any non-empty value counts
    """
    if agent_type:
        return True
    ua = (user_agent or "").lower()
    return any(marker in ua for marker in AGENT_USER_AGENT_MARKERS)


class AgentDetectionMiddleware(BaseHTTPMiddleware):
    """Marks agent requests in the request context and logs them."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        user_agent = request.headers.get("user-agent")
        if detect_agent(user_agent, request.headers.get(AGENT_TYPE_HEADER)):
            get_request_context(request).is_agent_request = True
            client = request.client.host if request.client else "unknown"
            logger.info(
                f"Agent request: {request.method} {request.url.path} from {client}",
                extra=get_log_context(
                    request_id=getattr(request.state, "request_id", None),
                    path=request.url.path,
                    method=request.method,
                    user_agent=user_agent,
                    is_agent_request=True,
                ),
            )
        return await call_next(request)
