"""Security headers middleware.

Adds a fixed set of security headers to every HTTP response, including
responses produced by other middleware that reject the request.
"""

from typing import Dict, MutableMapping

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from contentscale.app.core.config import DEFAULT_CONTENT_SECURITY_POLICY


def build_security_headers(
    content_security_policy: str = DEFAULT_CONTENT_SECURITY_POLICY,
) -> Dict[str, str]:
    """Return the header set applied to every response.

    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - X-XSS-Protection: 1; mode=block
    - Referrer-Policy: strict-origin-when-cross-origin
    - Content-Security-Policy: the configured policy
    """
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": content_security_policy,
    }


def apply_security_headers(
    headers: MutableMapping[str, str],
    content_security_policy: str = DEFAULT_CONTENT_SECURITY_POLICY,
) -> None:
    for name, value in build_security_headers(content_security_policy).items():
        headers[name] = value


class SecurityHeadersMiddleware:
    """ASGI middleware that sets security headers on response start.

    Headers are injected into the ``http.response.start`` message, so they
    are in place before any body bytes are sent.
    """

    def __init__(
        self,
        app: ASGIApp,
        content_security_policy: str = DEFAULT_CONTENT_SECURITY_POLICY,
    ):
        self.app = app
        self.headers = build_security_headers(content_security_policy)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)
