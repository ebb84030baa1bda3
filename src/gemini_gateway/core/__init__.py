"""
Core modules for gemini-gateway.

This package contains the core infrastructure components including
configuration, exceptions, logging, and identifier generation.
"""

from __future__ import annotations

from .config import (
    AuthConfig,
    GeminiConfig,
    LoggingConfig,
    ServerConfig,
    Settings,
    get_settings,
    reload_settings,
)
from .exceptions import (
    GatewayError,
    AuthenticationError,
    ValidationError,
    RateLimitError,
    TokenError,
    TokenRefreshError,
    ProjectResolutionError,
    APIError,
    ModelNotFoundError,
    ConfigurationError,
    classify_upstream_status,
)
from .logging import (
    get_logger,
    setup_logging,
    log_request_start,
    log_request_end,
    log_auth_event,
    log_api_call,
    log_upstream_error,
    log_error,
)
from .security import (
    generate_state,
    generate_request_id,
    generate_completion_id,
    generate_tool_call_id,
    mask_sensitive_data,
)

__all__ = [
    # Configuration
    "AuthConfig",
    "GeminiConfig",
    "LoggingConfig",
    "ServerConfig",
    "Settings",
    "get_settings",
    "reload_settings",
    # Exceptions
    "GatewayError",
    "AuthenticationError",
    "ValidationError",
    "RateLimitError",
    "TokenError",
    "TokenRefreshError",
    "ProjectResolutionError",
    "APIError",
    "ModelNotFoundError",
    "ConfigurationError",
    "classify_upstream_status",
    # Logging
    "get_logger",
    "setup_logging",
    "log_request_start",
    "log_request_end",
    "log_auth_event",
    "log_api_call",
    "log_upstream_error",
    "log_error",
    # Identifiers
    "generate_state",
    "generate_request_id",
    "generate_completion_id",
    "generate_tool_call_id",
    "mask_sensitive_data",
]
