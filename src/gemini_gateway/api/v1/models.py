"""
Models API endpoints for gemini-gateway.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...models import ModelsResponse
from ...services import list_models as available_models

# Create router
router = APIRouter(tags=["models"])


@router.get(
    "/models",
    response_model=ModelsResponse,
    summary="List models",
    description="Lists the Gemini models served by the gateway.",
)
async def list_models():
    return JSONResponse(content=available_models().model_dump())
