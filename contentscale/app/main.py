import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from contentscale.app.api import (
    agent_router,
    analysis_router,
    business_overview_router,
    business_profiles_router,
    consultations_router,
    health_router,
    statistics_router,
)
from contentscale.app.core.config import Settings, settings
from contentscale.app.core.logging import get_logger, setup_logging
from contentscale.app.exceptions import ContentScaleError, InvalidRequestBodyError
from contentscale.app.middleware import (
    AgentDetectionMiddleware,
    AllowListCORSMiddleware,
    ApiKeyMiddleware,
    InputSanitizationMiddleware,
    OriginAllowList,
    RateLimitMiddleware,
    RequestIdMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    SlidingWindowRateLimiter,
)
from contentscale.app.middleware.security_headers import apply_security_headers
from contentscale.app.services import AnalysisService, ConsultingStorage
from contentscale.app.services.analysis import Analyzer


def _format_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", "")


def create_app(
    config: Optional[Settings] = None,
    analyzer: Optional[Analyzer] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the global settings
        analyzer: Analyzer for consultations; defaults to FrameworkAnalyzer

    Returns:
        Configured FastAPI application instance
    """
    config = config or settings

    setup_logging(config)
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Application startup complete",
            extra={"environment": config.environment, "debug_mode": config.debug},
        )
        yield
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=config.app_name,
        description="Business consulting API with a request admission middleware chain",
        version=config.app_version,
        lifespan=lifespan,
    )

    # Services live for the lifetime of the app
    storage = ConsultingStorage()
    app.state.settings = config
    app.state.started_at = time.monotonic()
    app.state.storage = storage
    app.state.analysis_service = AnalysisService(storage, analyzer)
    app.state.api_rate_limiter = SlidingWindowRateLimiter(
        window_ms=config.api_rate_limit_window_ms,
        max_requests=config.api_rate_limit_max_requests,
        name="api",
    )
    app.state.agent_rate_limiter = SlidingWindowRateLimiter(
        window_ms=config.agent_rate_limit_window_ms,
        max_requests=config.agent_rate_limit_max_requests,
        name="agent",
    )

    # Add middleware (order matters: last added = first executed)
    # API key gate (innermost - closest to route)
    app.add_middleware(
        ApiKeyMiddleware,
        api_prefix=config.api_prefix,
        min_length=config.api_key_min_length,
    )

    # Agent endpoints are limited on top of the general API limit
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.agent_rate_limiter,
        path_prefix=config.agent_rate_limit_prefix,
        trust_forwarded_for=config.rate_limit_trust_forwarded_for,
    )
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.api_rate_limiter,
        path_prefix=config.api_prefix,
        trust_forwarded_for=config.rate_limit_trust_forwarded_for,
    )

    app.add_middleware(AgentDetectionMiddleware)

    # Sanitizer creates the request context, so it sits above agent detection
    app.add_middleware(InputSanitizationMiddleware)

    # Size limit before the sanitizer buffers the body
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=config.max_request_body_bytes)

    app.add_middleware(
        AllowListCORSMiddleware,
        allow_list=OriginAllowList.from_config(
            config.cors_origins, config.cors_origin_patterns
        ),
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
        allow_credentials=config.cors_allow_credentials,
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "Retry-After",
        ],
        max_age=600,
    )

    app.add_middleware(RequestIdMiddleware)

    # Security headers (outermost - covers every rejection)
    app.add_middleware(
        SecurityHeadersMiddleware,
        content_security_policy=config.content_security_policy,
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(consultations_router)
    app.include_router(analysis_router)
    app.include_router(business_profiles_router)
    app.include_router(business_overview_router)
    app.include_router(statistics_router)
    app.include_router(agent_router)

    @app.exception_handler(ContentScaleError)
    async def contentscale_error_handler(request: Request, exc: ContentScaleError) -> Response:
        """Render domain errors raised inside route handlers."""
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> Response:
        """Handle schema validation failures with HTTP 400."""
        return InvalidRequestBodyError(
            *(_format_validation_error(error) for error in exc.errors())
        ).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        # Undecodable bodies (e.g. nested past the parser's depth) surface as 400
        if exc.status_code == 400:
            return InvalidRequestBodyError(str(exc.detail)).to_response()
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled exceptions.

        Never returns a traceback to the client; the full details are
        logged server-side. This response is produced outside the
        middleware chain, so the security headers are applied here.
        """
        request_id = getattr(request.state, "request_id", "unknown")

        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
            },
        )

        content = {"error": "Internal server error", "requestId": request_id}
        if config.debug:
            content["message"] = str(exc)
            content["exceptionType"] = type(exc).__name__

        response = JSONResponse(status_code=500, content=content)
        apply_security_headers(response.headers, config.content_security_policy)
        response.headers["X-Request-ID"] = request_id
        return response

    return app


# Create the application instance
app = create_app()
