"""Input sanitization for JSON request bodies.

Strips script blocks, ``javascript:`` schemes and inline event handler
assignments from every string in a request body before route handlers see
it. This is a coarse filter, not an HTML sanitizer.
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import InvalidRequestBodyError
from contentscale.app.middleware.context import context_from_scope

logger = get_logger(__name__)

JSONValue = Union[str, int, float, bool, None, List["JSONValue"], Dict[str, "JSONValue"]]

SCRIPT_BLOCK_PATTERN = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>",
    re.IGNORECASE,
)
JAVASCRIPT_SCHEME_PATTERN = re.compile(r"javascript:", re.IGNORECASE)
EVENT_HANDLER_PATTERN = re.compile(r"on\w+\s*=", re.IGNORECASE)


def _clean_once(text: str) -> str:
    text = SCRIPT_BLOCK_PATTERN.sub("", text)
    text = JAVASCRIPT_SCHEME_PATTERN.sub("", text)
    return EVENT_HANDLER_PATTERN.sub("", text)


def sanitize_string(text: str) -> str:
    """Apply the cleaning rules until the string stops changing.

    A single pass can splice a new match together (``javajavascript:script:``),
    so the rules run to a fixpoint. Every pass that changes the string makes
    it shorter, which bounds the loop.
    """
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def sanitize_with_changes(value: JSONValue) -> Tuple[JSONValue, bool]:
    """Sanitize a JSON-like value and report whether any string changed.

    Containers are walked with an explicit stack, so nesting depth is
    bounded by memory rather than the interpreter recursion limit.
    """
    if isinstance(value, str):
        cleaned = sanitize_string(value)
        return cleaned, cleaned != value
    if not isinstance(value, (list, tuple, dict)):
        return value, False

    changed = False
    root: Any = {} if isinstance(value, dict) else []
    stack: List[Tuple[Any, Any]] = [(value, root)]
    while stack:
        source, target = stack.pop()
        items = source.items() if isinstance(source, dict) else enumerate(source)
        for key, item in items:
            if isinstance(item, str):
                cleaned: Any = sanitize_string(item)
                changed = changed or cleaned != item
            elif isinstance(item, (list, tuple, dict)):
                cleaned = {} if isinstance(item, dict) else []
                stack.append((item, cleaned))
            else:
                cleaned = item
            if isinstance(target, dict):
                target[key] = cleaned
            else:
                target.append(cleaned)
    return root, changed


def sanitize(value: JSONValue) -> JSONValue:
    """Return a sanitized copy of a JSON-like value.

    Strings are cleaned, lists are mapped element-wise and dicts value-wise
    with their keys untouched. Everything else is returned as is. The input
    is never mutated and any nesting depth is accepted.
    """
    return sanitize_with_changes(value)[0]


def _is_json_request(scope: Scope) -> bool:
    content_type = Headers(scope=scope).get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def _read_body(receive: Receive) -> Tuple[bytes, Optional[Message]]:
    """Drain the request body. Also returns a disconnect message if one arrived."""
    chunks = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            return b"".join(chunks), message
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks), None


def _replay_receive(body: bytes, pending: Optional[Message], receive: Receive) -> Receive:
    body_sent = False

    async def replay() -> Message:
        nonlocal body_sent
        if not body_sent:
            body_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        if pending is not None:
            return pending
        return await receive()

    return replay


def _with_content_length(scope: Scope, length: int) -> Scope:
    headers = [
        (name, value)
        for name, value in scope.get("headers", [])
        if name.lower() != b"content-length"
    ]
    headers.append((b"content-length", str(length).encode("latin-1")))
    return {**scope, "headers": headers}


class InputSanitizationMiddleware:
    """ASGI middleware that rewrites JSON bodies with their sanitized form.

    Creates the request context, records the original and sanitized bodies
    in it, and replays the (possibly rewritten) body to the application.
    Bodies that are not valid JSON are passed through untouched so request
    validation can report them.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        context = context_from_scope(scope)
        body, pending = await _read_body(receive)

        if body and _is_json_request(scope):
            try:
                parsed: Any = json.loads(body)
            except (ValueError, RecursionError):
                # Too deep to decode counts as malformed; body parsing rejects it
                logger.debug("Skipping sanitization of malformed JSON body")
            else:
                sanitized, changed = sanitize_with_changes(parsed)
                context.original_body = parsed
                context.sanitized_body = sanitized
                if changed:
                    try:
                        encoded = json.dumps(sanitized, ensure_ascii=False).encode("utf-8")
                    except RecursionError:
                        response = InvalidRequestBodyError(
                            "JSON body is nested too deeply"
                        ).to_response()
                        await response(scope, receive, send)
                        return
                    context.body_was_sanitized = True
                    body = encoded
                    scope = _with_content_length(scope, len(body))
                    logger.info(
                        "Request body sanitized",
                        extra={"path": scope.get("path"), "method": scope.get("method")},
                    )

        await self.app(scope, _replay_receive(body, pending, receive), send)
