"""
FastAPI dependencies for gemini-gateway.

Services are created once per application by ``create_app`` and kept on
``app.state``; routes reach them through these dependencies.
"""

from __future__ import annotations

from fastapi import Request

from ..auth import AuthManager, Authenticated
from ..core import Settings
from ..services import GeminiClient, QuotaCache, RequestStats


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_manager(request: Request) -> AuthManager:
    return request.app.state.auth_manager


def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini_client


def get_request_stats(request: Request) -> RequestStats:
    return request.app.state.stats


def get_quota_cache(request: Request) -> QuotaCache:
    return request.app.state.quota_cache


def require_authenticated(request: Request) -> Authenticated:
    """Current authenticated state; raises AuthenticationError (401) otherwise."""
    return get_auth_manager(request).container.require()
