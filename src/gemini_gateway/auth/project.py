"""
Code Assist project resolution.

Every Code Assist call is scoped to a GCP project. ``loadCodeAssist``
returns the project attached to the signed-in account; a configured hint
is sent along and used when the backend does not name one.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import httpx

from ..core import (
    get_logger,
    APIError,
    ProjectResolutionError,
    log_api_call,
    log_upstream_error,
)

logger = get_logger(__name__)


def build_load_request(project_hint: Optional[str]) -> Dict[str, Any]:
    return {
        "cloudaicompanionProject": project_hint,
        "metadata": {
            "ideType": "IDE_UNSPECIFIED",
            "platform": "PLATFORM_UNSPECIFIED",
            "pluginType": "GEMINI",
            "duetProject": project_hint,
        },
    }


async def load_project_id(
    http_client: httpx.AsyncClient,
    access_token: str,
    base_url: str,
    project_hint: Optional[str] = None,
) -> str:
    """
    Resolve the Code Assist project for an access token.

    Args:
        http_client: Shared HTTP client
        access_token: Valid OAuth access token
        base_url: Code Assist base URL
        project_hint: Configured project id, if any

    Returns:
        Project id from the backend, else the hint

    Raises:
        APIError: If loadCodeAssist answers with a non-2xx status
        ProjectResolutionError: If no project id is available
    """
    url = f"{base_url}:loadCodeAssist"
    start_time = time.time()

    try:
        response = await http_client.post(
            url,
            json=build_load_request(project_hint),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )
    except httpx.RequestError as e:
        raise APIError(f"loadCodeAssist request failed: {e}", error_code="upstream_unreachable")

    log_api_call(
        logger,
        service="code_assist",
        endpoint="loadCodeAssist",
        method="POST",
        status_code=response.status_code,
        duration_ms=(time.time() - start_time) * 1000,
    )

    if not response.is_success:
        log_upstream_error(logger, "loadCodeAssist", response.status_code, response.text)
        raise APIError(
            f"loadCodeAssist failed ({response.status_code})",
            error_code="load_code_assist_failed",
            details={"upstream_status": response.status_code},
        )

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    project_id = payload.get("cloudaicompanionProject") if isinstance(payload, dict) else None
    project_id = project_id or project_hint
    if not project_id:
        raise ProjectResolutionError(
            "Could not determine project ID. Set GOOGLE_CLOUD_PROJECT or run "
            "`gemini auth login` with gemini-cli to provision a Code Assist project."
        )

    logger.info("Resolved Code Assist project", project_id=project_id)
    return project_id
