"""Rate limiting data models.

This module contains dataclasses for rate limit results.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    retry_after: Optional[int] = None
