"""CORS origin allow-list and hard-deny CORS middleware.

The allow-list is a sequence of small immutable entries evaluated in order:
exact origins, host suffixes (configured as ``https://*.example.com``) and
arbitrary predicates (configured as regular expressions).
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from contentscale.app.core.logging import get_logger
from contentscale.app.exceptions import CorsOriginRejectedError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExactOrigin:
    """Matches one origin string exactly."""
    origin: str

    def matches(self, origin: str) -> bool:
        return origin == self.origin


@dataclass(frozen=True)
class SuffixOrigin:
    """Matches origins whose host ends with ``suffix``.

    When ``scheme`` is set the origin must also use that scheme.
    """
    suffix: str
    scheme: Optional[str] = None

    def matches(self, origin: str) -> bool:
        if self.scheme is not None and not origin.startswith(f"{self.scheme}://"):
            return False
        return origin.endswith(self.suffix)


@dataclass(frozen=True)
class PredicateOrigin:
    """Matches origins accepted by an arbitrary predicate."""
    predicate: Callable[[str], bool]
    description: str = "predicate"

    def matches(self, origin: str) -> bool:
        return bool(self.predicate(origin))


AllowListEntry = Union[ExactOrigin, SuffixOrigin, PredicateOrigin]


def _any_origin(origin: str) -> bool:
    return True


def parse_origin_entry(value: str) -> AllowListEntry:
    """Turn one configured origin into an allow-list entry.

    ``*`` allows everything and ``scheme://*.host`` becomes a suffix match on
    ``.host``. Anything else must match exactly.
    """
    if value == "*":
        return PredicateOrigin(_any_origin, "*")
    scheme, sep, host = value.partition("://")
    if sep and host.startswith("*."):
        return SuffixOrigin(suffix=host[1:], scheme=scheme)
    return ExactOrigin(value)


def pattern_entry(pattern: str) -> PredicateOrigin:
    """Build a predicate entry from a regular expression (searched, not anchored)."""
    compiled = re.compile(pattern)
    return PredicateOrigin(lambda origin: compiled.search(origin) is not None, pattern)


class OriginAllowList:
    """Immutable, ordered CORS allow-list. First matching entry wins."""

    def __init__(self, entries: Iterable[AllowListEntry]):
        self._entries: Tuple[AllowListEntry, ...] = tuple(entries)

    @classmethod
    def from_config(
        cls,
        origins: Sequence[str],
        patterns: Sequence[str] = (),
    ) -> "OriginAllowList":
        entries = [parse_origin_entry(origin) for origin in origins]
        entries.extend(pattern_entry(pattern) for pattern in patterns)
        return cls(entries)

    @property
    def entries(self) -> Tuple[AllowListEntry, ...]:
        return self._entries

    def match(self, origin: str) -> Optional[AllowListEntry]:
        for entry in self._entries:
            if entry.matches(origin):
                return entry
        return None

    def is_allowed(self, origin: Optional[str]) -> bool:
        """Check an Origin header value.

        Requests without an origin (curl, server-to-server, mobile apps)
        are always allowed.
        """
        if not origin:
            return True
        return self.match(origin) is not None


class AllowListCORSMiddleware(CORSMiddleware):
    """Starlette CORS middleware driven by an OriginAllowList.

    Unlike the stock middleware, a request from a disallowed origin is
    refused outright with 403 and never reaches the application.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_list: OriginAllowList,
        allow_methods: Sequence[str] = ("GET",),
        allow_headers: Sequence[str] = (),
        allow_credentials: bool = False,
        expose_headers: Sequence[str] = (),
        max_age: int = 600,
    ):
        super().__init__(
            app,
            allow_origins=(),
            allow_methods=allow_methods,
            allow_headers=allow_headers,
            allow_credentials=allow_credentials,
            expose_headers=expose_headers,
            max_age=max_age,
        )
        self.allow_list = allow_list

    def is_allowed_origin(self, origin: str) -> bool:
        return self.allow_list.is_allowed(origin)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            origin = Headers(scope=scope).get("origin")
            if origin and not self.allow_list.is_allowed(origin):
                logger.warning(
                    f"Rejected request from disallowed origin {origin}",
                    extra={"path": scope.get("path"), "method": scope.get("method")},
                )
                response = CorsOriginRejectedError(origin).to_response()
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)
