"""Custom exceptions for the ContentScale API."""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse, PlainTextResponse, Response


class ContentScaleError(Exception):
    """Base class for API exceptions with HTTP status code.

    All custom exceptions inherit from this class and define their specific
    status_code. Middleware stages render rejections through to_response()
    because exception handlers do not run outside the router.
    """
    status_code: int = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}

    def headers(self) -> Optional[Dict[str, str]]:
        return None

    def to_response(self) -> Response:
        """Convert to the JSON error response sent to the client."""
        return JSONResponse(
            status_code=self.status_code,
            content=self.to_body(),
            headers=self.headers(),
        )


class RateLimitExceededError(ContentScaleError):
    """Raised when a client exceeds its request budget for the window.

    Maps to HTTP 429 Too Many Requests with a retry hint in seconds.
    """
    status_code = 429

    def __init__(self, retry_after: int, limit: Optional[int] = None):
        self.retry_after = retry_after
        self.limit = limit
        super().__init__("Too many requests")

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "retryAfter": self.retry_after}

    def headers(self) -> Optional[Dict[str, str]]:
        headers = {"Retry-After": str(self.retry_after)}
        if self.limit is not None:
            headers["X-RateLimit-Limit"] = str(self.limit)
            headers["X-RateLimit-Remaining"] = "0"
        return headers


class InvalidRequestBodyError(ContentScaleError):
    """Raised when a request body fails schema validation or cannot be decoded."""
    status_code = 400

    def __init__(self, *details: str):
        self.details = list(details)
        super().__init__("Invalid request data")

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class BadRequestError(ContentScaleError):
    """Raised when a request is well-formed JSON but lacks required input."""
    status_code = 400


class ApiKeyError(ContentScaleError):
    """Base for API key gate rejections (HTTP 401)."""
    status_code = 401


class MissingApiKeyError(ApiKeyError):
    """Raised when a write request to the API carries no key."""

    def __init__(self, message: str = "API key required for write operations"):
        super().__init__(message)


class InvalidApiKeyError(ApiKeyError):
    """Raised when the provided API key fails the shape check."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)


class CorsOriginRejectedError(ContentScaleError):
    """Raised when a browser origin is not on the allow-list.

    Rendered as a bare transport-level failure rather than a JSON body.
    """
    status_code = 403

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__("Not allowed by CORS")

    def to_response(self) -> Response:
        return PlainTextResponse(self.message, status_code=self.status_code)


class PayloadTooLargeError(ContentScaleError):
    """Raised when the request body exceeds the configured limit."""
    status_code = 413

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"Request body too large. Maximum allowed: {max_size} bytes")


class AnalysisFailedError(ContentScaleError):
    """Raised when the analyzer could not produce a result."""
    status_code = 500

    def __init__(self, consultation_id: str):
        self.consultation_id = consultation_id
        super().__init__("Failed to generate analysis")


class BusinessOverviewFailedError(ContentScaleError):
    """Raised when the analyzer could not produce a business overview."""
    status_code = 500

    def __init__(self):
        super().__init__("Failed to generate business overview")


class NotFoundError(ContentScaleError):
    """Raised when a requested resource does not exist."""
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")
