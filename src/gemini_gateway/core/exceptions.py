"""
Custom exceptions for gemini-gateway.

This module defines all custom exceptions used throughout the application,
following the OpenAI API error format for consistency.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "server_error",
        error_code: Optional[str] = None,
        status_code: int = 500,
        param: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.error_code = error_code
        self.status_code = status_code
        self.param = param
        self.upstream_status: Optional[int] = None
        # Logged only; never part of the public envelope
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the OpenAI error envelope."""
        return {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "param": self.param,
                "code": self.error_code,
            }
        }


class ValidationError(GatewayError):
    """Request validation errors."""

    def __init__(
        self,
        message: str = "Invalid request data",
        error_code: Optional[str] = None,
        param: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            error_code=error_code,
            status_code=400,
            param=param,
            details=details
        )


class AuthenticationError(GatewayError):
    """Authentication related errors."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="authentication_error",
            error_code=error_code,
            status_code=401,
            details=details
        )


class TokenError(AuthenticationError):
    """Token related errors."""

    def __init__(
        self,
        message: str = "Token error",
        error_code: Optional[str] = "token_error",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class TokenRefreshError(TokenError):
    """Token refresh error."""

    def __init__(
        self,
        message: str = "Failed to refresh token",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="token_refresh_failed",
            details=details
        )


class ProjectResolutionError(AuthenticationError):
    """The Code Assist project id could not be determined."""

    def __init__(
        self,
        message: str = "Could not determine project ID",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="project_resolution_failed",
            details=details
        )


class RateLimitError(GatewayError):
    """Rate limiting errors."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="rate_limit_error",
            error_code=error_code,
            status_code=429,
            details=details
        )


class APIError(GatewayError):
    """Upstream API errors."""

    def __init__(
        self,
        message: str = "Upstream API error",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="server_error",
            error_code=error_code,
            status_code=500,
            details=details
        )


class ModelNotFoundError(APIError):
    """Upstream reported the model as unknown."""

    def __init__(
        self,
        message: str = "Model not found",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code="model_not_found",
            details=details
        )


class ConfigurationError(GatewayError):
    """Configuration related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_type="server_error",
            error_code=error_code,
            status_code=500,
            details=details
        )


def classify_upstream_status(
    status_code: int,
    details: Optional[Dict[str, Any]] = None
) -> GatewayError:
    """
    Map an upstream HTTP status to a sanitized gateway error.

    The returned error carries a fixed message; the raw upstream body is
    never included.
    """
    details = {"upstream_status": status_code, **(details or {})}

    if status_code == 400:
        error: GatewayError = ValidationError(
            "Bad request to upstream API", error_code="upstream_bad_request", details=details
        )
    elif status_code in (401, 403):
        error = AuthenticationError(
            "Authentication failed with upstream API", error_code="upstream_auth_failed", details=details
        )
    elif status_code == 404:
        error = ModelNotFoundError(details=details)
    elif status_code == 429:
        error = RateLimitError(error_code="rate_limit_exceeded", details=details)
    else:
        error = APIError(f"Upstream API error ({status_code})", error_code="upstream_error", details=details)

    error.upstream_status = status_code
    return error
