"""
Logging configuration for gemini-gateway.

This module sets up structured logging using structlog with support for
both JSON and human-readable formats.

Google error bodies and token endpoint responses are logged verbatim for
debugging, so redaction covers token-shaped strings inside values as well
as sensitive keys.
"""

from __future__ import annotations

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from structlog.types import FilteringBoundLogger

from .config import LoggingConfig, get_settings

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset({
    "password", "token", "api_key", "secret", "authorization",
    "access_token", "refresh_token", "id_token", "client_secret", "code",
})

# Bearer headers, Google access tokens (ya29.) and refresh tokens (1//)
TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[\w.~+/=-]+"),
    re.compile(r"ya29\.[\w.-]+"),
    re.compile(r"1//[\w-]{20,}"),
    re.compile(r'("(?:access_token|refresh_token|id_token|client_secret)"\s*:\s*")[^"]*(")'),
)

# Upstream bodies beyond this are cut in logs
MAX_LOGGED_BODY = 2000


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Setup application logging configuration.

    Args:
        config: Logging configuration. If None, uses settings from environment.
    """
    if config is None:
        config = get_settings().logging

    logging.basicConfig(
        level=getattr(logging, config.level),
        format="%(message)s",
        handlers=_get_handlers(config),
        force=True
    )

    # request_id comes in through merge_contextvars (bound per request)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_sensitive_data,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if config.format == "json"
            else structlog.dev.ConsoleRenderer(colors=False)
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.level)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _get_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8"
        ))

    for handler in handlers:
        handler.setLevel(getattr(logging, config.level))
    return handlers


def redact_text(text: str) -> str:
    """Mask token-shaped substrings in free text."""
    for pattern in TOKEN_PATTERNS:
        if pattern.groups == 2:
            text = pattern.sub(lambda m: f"{m.group(1)}{REDACTED}{m.group(2)}", text)
        elif pattern.groups == 1:
            text = pattern.sub(lambda m: f"{m.group(1)}{REDACTED}", text)
        else:
            text = pattern.sub(REDACTED, text)
    return text


def _redact(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            key: REDACTED if isinstance(key, str) and key.lower() in SENSITIVE_KEYS
            else _redact(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        # exc_info tuples must stay tuples for format_exc_info
        return type(data)(_redact(item) for item in data)
    if isinstance(data, str):
        return redact_text(data)
    return data


def redact_sensitive_data(
    logger: FilteringBoundLogger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor: drop sensitive keys and token-shaped values."""
    return _redact(event_dict)


def get_logger(name: str = __name__) -> FilteringBoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Configured structlog logger instance.
    """
    return structlog.get_logger(name)


def log_request_start(
    logger: FilteringBoundLogger,
    method: str,
    path: str,
    client_ip: str,
    user_agent: Optional[str] = None
) -> None:
    logger.info(
        "Request started",
        method=method,
        path=path,
        client_ip=client_ip,
        user_agent=user_agent
    )


def log_request_end(
    logger: FilteringBoundLogger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float
) -> None:
    logger.info(
        "Request completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration_ms, 2)
    )


def log_auth_event(
    logger: FilteringBoundLogger,
    event_type: str,
    success: bool = True,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Log sign-in, refresh and logout events."""
    log = logger.info if success else logger.warning
    log(
        "Authentication event",
        event_type=event_type,
        success=success,
        **(details or {})
    )


def log_api_call(
    logger: FilteringBoundLogger,
    endpoint: str,
    method: str,
    status_code: int,
    duration_ms: float,
    attempt: Optional[int] = None,
    service: str = "code_assist"
) -> None:
    """Log one outbound call to a Google API."""
    logger.info(
        "External API call",
        service=service,
        endpoint=endpoint,
        method=method,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        attempt=attempt
    )


def log_upstream_error(
    logger: FilteringBoundLogger,
    endpoint: str,
    status_code: int,
    body: str,
    **context: Any
) -> None:
    """
    Log a failed upstream response with its (truncated) body.

    The body is for operators only; callers raise a sanitized error for
    the client.
    """
    logger.error(
        "Upstream API error",
        endpoint=endpoint,
        status_code=status_code,
        body=body[:MAX_LOGGED_BODY],
        **context
    )


def log_error(
    logger: FilteringBoundLogger,
    error: Exception,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log errors with context."""
    logger.error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        **(context or {}),
        exc_info=True
    )


# Initialize logging on module import
setup_logging()
