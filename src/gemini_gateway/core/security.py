"""
Identifier and secret generation for gemini-gateway.

This module provides the random values used across the gateway: OAuth
state tokens, request ids, and the OpenAI-style completion and tool-call
identifiers.
"""

from __future__ import annotations

import base64
import secrets
import uuid
from typing import Any, Dict


def generate_state() -> str:
    """
    Generate a secure random state parameter for OAuth.

    Returns:
        Random state string
    """
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).decode('utf-8').rstrip('=')


def generate_request_id() -> str:
    """
    Generate a unique request ID for tracing.

    Returns:
        Random request ID string
    """
    return secrets.token_urlsafe(16)


def generate_completion_id() -> str:
    """Generate an OpenAI-style chat completion id."""
    return f"chatcmpl-{uuid.uuid4()}"


def generate_tool_call_id() -> str:
    """Generate an OpenAI-style tool call id."""
    return f"call_{uuid.uuid4().hex[:24]}"


def mask_sensitive_data(data: Dict[str, Any], sensitive_keys: set[str] | None = None) -> Dict[str, Any]:
    """
    Mask sensitive values in a dictionary.

    Args:
        data: Dictionary to mask
        sensitive_keys: Keys to mask (defaults to token fields)

    Returns:
        Copy of the dictionary with sensitive values masked
    """
    if sensitive_keys is None:
        sensitive_keys = {"access_token", "refresh_token", "id_token", "client_secret"}

    masked = {}
    for key, value in data.items():
        if key in sensitive_keys and isinstance(value, str) and value:
            masked[key] = value[:4] + "..." if len(value) > 8 else "***"
        else:
            masked[key] = value
    return masked
