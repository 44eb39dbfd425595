"""Sliding window rate limiter.

Keeps, per client, the acceptance timestamps that fall inside the trailing
window. Timestamps are monotonic milliseconds supplied by the caller so the
limiter itself stays deterministic.
"""

import math
import threading
import time
from collections import deque
from typing import Deque, Dict, Optional

from contentscale.app.middleware.rate_limit.models import RateLimitResult


def monotonic_ms() -> int:
    """Current monotonic clock reading in milliseconds."""
    return time.monotonic_ns() // 1_000_000


class SlidingWindowRateLimiter:
    """In-memory sliding window (request log) rate limiter.

    Client keys are never evicted, so memory grows with the number of
    distinct clients seen during the process lifetime. Stale timestamps of a
    key are dropped lazily on its next access.
    """

    def __init__(self, window_ms: int, max_requests: int, name: str = "default"):
        """Initialize rate limiter.

        Args:
            window_ms: Length of the trailing window in milliseconds
            max_requests: Requests admitted per client inside one window
            name: Label used in logs and client keys
        """
        if window_ms < 1 or max_requests < 1:
            raise ValueError("window_ms and max_requests must be at least 1")
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.name = name
        self._windows: Dict[str, Deque[int]] = {}
        self._lock = threading.Lock()

    @property
    def retry_after_seconds(self) -> int:
        """Retry hint reported on rejection: the whole window, rounded up."""
        return math.ceil(self.window_ms / 1000)

    def admit(self, client_id: str, now: Optional[int] = None) -> RateLimitResult:
        """Check and record a request for the given client.

        Args:
            client_id: Rate limit key of the caller
            now: Current time in monotonic milliseconds (defaults to the clock)

        Returns:
            RateLimitResult with allowed status and metadata
        """
        if now is None:
            now = monotonic_ms()
        window_start = now - self.window_ms

        with self._lock:
            timestamps = self._windows.get(client_id)
            if timestamps is None:
                timestamps = deque()
                self._windows[client_id] = timestamps

            while timestamps and timestamps[0] <= window_start:
                timestamps.popleft()

            if len(timestamps) >= self.max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    retry_after=self.retry_after_seconds,
                )

            timestamps.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - len(timestamps),
            )

    def window_size(self, client_id: str) -> int:
        """Number of timestamps currently stored for a client."""
        with self._lock:
            timestamps = self._windows.get(client_id)
            return len(timestamps) if timestamps else 0

    @property
    def tracked_clients(self) -> int:
        """Number of client keys held in memory."""
        with self._lock:
            return len(self._windows)
