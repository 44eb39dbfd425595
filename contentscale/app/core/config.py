import json
import re
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline'; "
    "style-src 'self' 'unsafe-inline';"
)


def _parse_cors_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []
    if raw == "*":
        return ["*"]

    # Prefer JSON, but tolerate plain comma/space separated values so a
    # misconfigured deployment does not crash at startup.
    if raw.startswith(("[", '"', "'")):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]
        if isinstance(parsed, str):
            raw = parsed.strip()
            if not raw or raw == "[]":
                return []
            if raw == "*":
                return ["*"]

    parts = [p for p in re.split(r"[,\s]+", raw) if p]
    origins: list[str] = []
    for part in parts:
        if part == "*":
            return ["*"]
        if "://" in part:
            origins.append(part)
            continue
        # Browsers always send the scheme in Origin, so a bare host
        # allows both of them.
        origins.append(f"http://{part}")
        origins.append(f"https://{part}")

    seen: set[str] = set()
    result: list[str] = []
    for origin in origins:
        if origin in seen:
            continue
        seen.add(origin)
        result.append(origin)
    return result


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    They are read once at startup and treated as immutable afterwards.
    """

    app_name: str = "ContentScale Platform"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # Namespace guarded by the API key gate and the general rate limiter
    api_prefix: str = "/api/"

    # Rate limiting for the whole API namespace
    api_rate_limit_window_ms: int = 15 * 60 * 1000
    api_rate_limit_max_requests: int = 100

    # Tighter limit for automation endpoints (applies on top of the API one)
    agent_rate_limit_prefix: str = "/api/agent/"
    agent_rate_limit_window_ms: int = 5 * 60 * 1000
    agent_rate_limit_max_requests: int = 50

    # Only enable behind a proxy that overwrites X-Forwarded-For
    rate_limit_trust_forwarded_for: bool = False

    # API key gate
    api_key_min_length: int = 10

    # CORS settings
    # NoDecode keeps plain host lists (e.g. "example.com") from failing JSON
    # parsing at startup.
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "https://*.replit.app",
        "https://*.repl.co",
    ]
    # Regexes are searched against the full origin, not anchored. A pattern
    # without a trailing "$" also matches hosts such as
    # x.contentscale.site.evil.com, so end every pattern with "$".
    cors_origin_patterns: Annotated[list[str], NoDecode] = [r"\.contentscale\.site$"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization", "x-api-key"]

    # Security headers
    content_security_policy: str = DEFAULT_CONTENT_SECURITY_POLICY

    # Request body limit (matches a typical JSON body parser default)
    max_request_body_bytes: int = 100 * 1024

    # Delay before the background analysis of a new consultation starts
    analysis_delay_seconds: float = 1.0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator("cors_origin_patterns", mode="before")
    @classmethod
    def decode_cors_origin_patterns(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [str(p) for p in v if str(p)]
        raw = str(v).strip()
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [str(p) for p in parsed if str(p)]
        # Regexes may contain commas, so only whitespace separates entries.
        return [p for p in raw.split() if p]

    @field_validator("cors_origin_patterns")
    @classmethod
    def validate_cors_origin_patterns(cls, v: list[str]) -> list[str]:
        """Fail fast on patterns that do not compile."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid CORS origin pattern {pattern!r}: {exc}")
        return v

    @field_validator(
        "api_rate_limit_window_ms",
        "api_rate_limit_max_requests",
        "agent_rate_limit_window_ms",
        "agent_rate_limit_max_requests",
    )
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator("api_key_min_length", "max_request_body_bytes")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("analysis_delay_seconds")
    @classmethod
    def validate_analysis_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("analysis_delay_seconds must not be negative")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
