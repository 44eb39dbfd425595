"""Request body size limit middleware.

Limits the size of incoming request bodies so the sanitizer never buffers
an arbitrarily large payload. Enforced for both Content-Length and chunked
transfer encoding.
"""

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import PayloadTooLargeError

logger = get_logger(__name__)


class SizeLimitedStream:
    """Wraps an ASGI receive callable and counts body bytes as they arrive."""

    class SizeExceededError(Exception):
        """Raised when request body exceeds size limit."""

    def __init__(self, receive: Receive, max_size: int):
        self._receive = receive
        self._max_size = max_size
        self._bytes_read = 0

    async def receive(self) -> Message:
        message = await self._receive()
        if message["type"] == "http.request":
            self._bytes_read += len(message.get("body", b""))
            if self._bytes_read > self._max_size:
                raise self.SizeExceededError(
                    f"Request body too large. Maximum allowed: {self._max_size} bytes"
                )
        return message


class RequestSizeLimitMiddleware:
    """ASGI middleware returning 413 when the body exceeds ``max_body_size``.

    Usage:
        app.add_middleware(RequestSizeLimitMiddleware, max_body_size=100 * 1024)
    """

    def __init__(self, app: ASGIApp, max_body_size: int = 100 * 1024):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # Fast path: reject on the declared length without reading the body
        for name, value in scope.get("headers", []):
            if name.lower() == b"content-length":
                try:
                    declared = int(value.decode("latin-1"))
                except ValueError:
                    break
                if declared > self.max_body_size:
                    await self._reject(scope, receive, send)
                    return
                break

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        limited = SizeLimitedStream(receive, self.max_body_size)
        try:
            await self.app(scope, limited.receive, tracking_send)
        except SizeLimitedStream.SizeExceededError:
            if response_started:
                raise
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(
            "Request body exceeds size limit",
            extra={"path": scope.get("path"), "method": scope.get("method")},
        )
        response = PayloadTooLargeError(self.max_body_size).to_response()
        await response(scope, receive, send)
