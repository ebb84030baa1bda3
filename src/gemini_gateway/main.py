"""
Main FastAPI application for gemini-gateway.

This module creates and configures the FastAPI application with all
middleware, routes, and error handlers. Services are built per application
instance and shared with routes through ``app.state``.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .api import auth_router, quota_router, stats_router, v1_router
from .auth import AuthManager, CredentialStore
from .core import (
    Settings,
    get_logger,
    get_settings,
    GatewayError,
    generate_request_id,
    log_error,
    log_request_start,
    log_request_end,
)
from .services import GeminiClient, QuotaCache, RequestStats
from .utils import HTTPClient


def _error_body(message: str, error_type: str, param: Optional[str] = None, code: Optional[str] = None) -> Dict[str, Any]:
    return {"error": {"message": message, "type": error_type, "param": param, "code": code}}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger = get_logger(__name__)
    settings: Settings = app.state.settings

    logger.info(
        "Starting gemini-gateway",
        version=settings.app_version,
        host=settings.server.host,
        port=settings.server.port,
    )

    state = await app.state.auth_manager.resolve_auth_optional()
    logger.info("Authentication resolved", method=state.method, project_id=state.project_id)

    yield

    # Shutdown
    logger.info("Shutting down gemini-gateway")
    await app.state.upstream.close()
    await app.state.auth_manager.http_client.aclose()


def create_app(
    settings: Optional[Settings] = None,
    auth_manager: Optional[AuthManager] = None,
    upstream: Optional[HTTPClient] = None,
    gemini_client: Optional[GeminiClient] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment)
        auth_manager: Pre-built auth manager; a keyring-backed one is created otherwise
        upstream: HTTP client for Code Assist generate calls
        gemini_client: Pre-built generation client
    """
    settings = settings or get_settings()

    if auth_manager is None:
        auth_http = httpx.AsyncClient(
            timeout=httpx.Timeout(30.0),
            headers={"User-Agent": f"{settings.app_name}/{settings.app_version}"},
        )
        auth_manager = AuthManager(CredentialStore.from_settings(settings.auth), auth_http, settings)
    if upstream is None:
        upstream = HTTPClient(
            timeout=settings.gemini.timeout,
            max_retries=settings.gemini.max_retries,
            retry_base_delay=settings.gemini.retry_base_delay,
        )
    if gemini_client is None:
        gemini_client = GeminiClient(auth_manager.container, upstream, settings)

    # Create FastAPI app
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.auth_manager = auth_manager
    app.state.upstream = upstream
    app.state.gemini_client = gemini_client
    app.state.stats = RequestStats()
    app.state.quota_cache = QuotaCache(settings.gemini.quota_cache_ttl)
    app.state.started_at = time.time()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=settings.server.cors_methods,
        allow_headers=settings.server.cors_headers,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Include API routers
    app.include_router(v1_router)
    app.include_router(auth_router)
    app.include_router(quota_router)
    app.include_router(stats_router)

    # Add health check endpoint
    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        container = request.app.state.auth_manager.container
        return {
            "status": "ok",
            "version": settings.app_version,
            "uptime": int(time.time() - request.app.state.started_at),
            "authenticated": container.is_authenticated,
            "auth_method": container.current.method,
        }

    # Add error handlers
    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        """Render gateway errors as OpenAI error envelopes."""
        logger = get_logger(__name__)
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            path=request.url.path,
            status_code=exc.status_code,
            error_type=exc.error_type,
            error_message=exc.message,
            **exc.details
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Report request body problems as 400 invalid_request_error."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        if first.get("type") == "json_invalid":
            message, param = "Invalid JSON in request body", None
        else:
            location = [str(part) for part in first.get("loc", ()) if part != "body"]
            param = ".".join(location) or None
            message = f"{param}: {first.get('msg')}" if param else str(first.get("msg", "Invalid request"))
        return JSONResponse(status_code=400, content=_error_body(message, "invalid_request_error", param))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        error_type = "invalid_request_error" if exc.status_code < 500 else "server_error"
        return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail), error_type))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger = get_logger(__name__)
        log_error(
            logger,
            exc,
            context={
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else "unknown"
            }
        )
        return JSONResponse(status_code=500, content=_error_body("Internal server error", "server_error"))

    return app


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests."""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger(__name__)

    async def dispatch(self, request: Request, call_next):
        """Process request with logging."""
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        log_request_start(
            self.logger,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "Request processing failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise

        log_request_end(
            self.logger,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(time.time() - start_time) * 1000,
        )
        response.headers["X-Request-ID"] = request_id
        return response
