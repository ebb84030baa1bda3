"""
Quota API endpoint for gemini-gateway.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import Authenticated, AuthManager
from ..core import Settings, get_logger
from ..models import QuotaResponse
from ..services import QuotaCache, fetch_quota
from .deps import get_app_settings, get_auth_manager, get_quota_cache, require_authenticated

router = APIRouter(tags=["quota"])
logger = get_logger(__name__)


@router.get(
    "/quota",
    response_model=QuotaResponse,
    response_model_by_alias=True,
    summary="Remaining quota",
    description="Remaining Code Assist quota per model for the signed-in account.",
)
async def get_quota(
    state: Authenticated = Depends(require_authenticated),
    auth_manager: AuthManager = Depends(get_auth_manager),
    cache: QuotaCache = Depends(get_quota_cache),
    settings: Settings = Depends(get_app_settings),
) -> QuotaResponse:
    quotas = cache.get(state.project_id)
    if quotas is None:
        quotas = await fetch_quota(
            state.client,
            state.project_id,
            auth_manager.http_client,
            settings.gemini.code_assist_base_url,
        )
        cache.put(state.project_id, quotas)
        logger.info("Quota refreshed", project_id=state.project_id, models=len(quotas))

    return QuotaResponse(quotas=quotas)
