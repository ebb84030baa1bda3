"""
Request statistics endpoint for gemini-gateway.
"""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends

from ..services import RequestStats
from .deps import get_request_stats

router = APIRouter(tags=["stats"])


@router.get("/stats", summary="Request counts per model")
async def get_stats(stats: RequestStats = Depends(get_request_stats)) -> Dict[str, Dict[str, int]]:
    return stats.snapshot()
