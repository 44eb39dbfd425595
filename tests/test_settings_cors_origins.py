import pytest
from pydantic import ValidationError

from contentscale.app.core.config import Settings


def test_cors_origins_accepts_host_without_json(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "43.163.94.63")

    settings = Settings(_env_file=None)
    assert "http://43.163.94.63" in settings.cors_origins
    assert "https://43.163.94.63" in settings.cors_origins


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["http://localhost:5173"]', ["http://localhost:5173"]),
        ("*", ["*"]),
        ("[]", []),
        ("", []),
        (
            "http://localhost:3000, https://*.replit.app",
            ["http://localhost:3000", "https://*.replit.app"],
        ),
    ],
)
def test_cors_origins_parsing_variants(monkeypatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("CORS_ORIGINS", raw)

    settings = Settings(_env_file=None)
    assert settings.cors_origins == expected


def test_default_cors_origins() -> None:
    settings = Settings(_env_file=None)

    assert settings.cors_origins == [
        "http://localhost:3000",
        "http://localhost:5173",
        "https://*.replit.app",
        "https://*.repl.co",
    ]
    assert settings.cors_origin_patterns == [r"\.contentscale\.site$"]


def test_cors_origin_patterns_split_on_whitespace(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGIN_PATTERNS", r"\.example\.com$ ^https://a{1,3}\.dev$")

    settings = Settings(_env_file=None)
    assert settings.cors_origin_patterns == [r"\.example\.com$", r"^https://a{1,3}\.dev$"]


def test_invalid_cors_origin_pattern_rejected(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ORIGIN_PATTERNS", "([unclosed")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


@pytest.mark.parametrize(
    "field",
    [
        "api_rate_limit_window_ms",
        "api_rate_limit_max_requests",
        "agent_rate_limit_window_ms",
        "agent_rate_limit_max_requests",
        "api_key_min_length",
        "max_request_body_bytes",
    ],
)
def test_non_positive_limits_rejected(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_rate_limit_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.api_rate_limit_window_ms == 900_000
    assert settings.api_rate_limit_max_requests == 100
    assert settings.agent_rate_limit_window_ms == 300_000
    assert settings.agent_rate_limit_max_requests == 50
    assert settings.max_request_body_bytes == 102_400
