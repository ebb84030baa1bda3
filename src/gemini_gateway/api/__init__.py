"""
API modules for gemini-gateway.

This package contains all API endpoints and routing logic.
"""

from __future__ import annotations

from .v1 import router as v1_router
from .auth import router as auth_router
from .quota import router as quota_router
from .stats import router as stats_router

__all__ = ["v1_router", "auth_router", "quota_router", "stats_router"]
