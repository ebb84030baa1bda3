"""
Service modules for gemini-gateway.

This package contains the Code Assist generation client, quota lookup,
model resolution and request statistics.
"""

from __future__ import annotations

from .gemini_client import GeminiClient, PartialStream, wrap_request
from .models import AVAILABLE_MODELS, MODEL_ALIASES, list_models, resolve_model
from .quota import QuotaCache, fetch_quota, format_reset_time, percent_left, summarize_buckets
from .stats import RequestStats

__all__ = [
    # Generation
    "GeminiClient",
    "PartialStream",
    "wrap_request",
    # Models
    "AVAILABLE_MODELS",
    "MODEL_ALIASES",
    "list_models",
    "resolve_model",
    # Quota
    "QuotaCache",
    "fetch_quota",
    "format_reset_time",
    "percent_left",
    "summarize_buckets",
    # Stats
    "RequestStats",
]
