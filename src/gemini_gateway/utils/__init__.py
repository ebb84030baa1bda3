"""
Utility modules for gemini-gateway.

This package contains the upstream HTTP client and its retry helpers.
"""

from __future__ import annotations

from .http_client import HTTPClient, parse_retry_delay

__all__ = [
    "HTTPClient",
    "parse_retry_delay",
]
