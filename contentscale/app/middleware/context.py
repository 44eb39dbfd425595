"""Per-request context shared by the middleware chain and route handlers.

The context lives in the ASGI scope state, so it is visible both to raw
ASGI middleware and through ``request.state`` in Starlette code.
"""

from dataclasses import dataclass
from typing import Any, MutableMapping

from fastapi import Request

STATE_KEY = "request_context"


@dataclass
class RequestContext:
    """Transient record created at request entry."""
    original_body: Any = None
    sanitized_body: Any = None
    body_was_sanitized: bool = False
    is_agent_request: bool = False


def context_from_scope(scope: MutableMapping[str, Any]) -> RequestContext:
    """Return the scope's context, creating it on first use."""
    state = scope.setdefault("state", {})
    context = state.get(STATE_KEY)
    if context is None:
        context = RequestContext()
        state[STATE_KEY] = context
    return context


def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency returning the current request's context."""
    return context_from_scope(request.scope)
