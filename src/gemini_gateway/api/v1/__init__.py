"""
API v1 endpoints for gemini-gateway.

This package contains the OpenAI-compatible endpoints: chat completions
and models.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import chat, models

# Create main v1 router
router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(chat.router)
router.include_router(models.router)

__all__ = ["router"]
