"""
Quota lookup for gemini-gateway.

``retrieveUserQuota`` returns one bucket per model and token type. The
gateway reports the tightest bucket per model as a percentage together
with a human readable time until reset.
"""

from __future__ import annotations

import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..auth import OAuthClient
from ..core import (
    get_logger,
    APIError,
    log_api_call,
    log_upstream_error,
)
from ..models import QuotaBucket, QuotaInfo

logger = get_logger(__name__)

FRACTION_PATTERN = re.compile(r"(\.\d+)")


def _parse_timestamp(value: str) -> datetime:
    # Google timestamps carry a "Z" suffix and up to nanosecond precision
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = FRACTION_PATTERN.sub(lambda m: "." + (m.group(1)[1:] + "000000")[:6], value)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_reset_time(reset_time: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Describe the time left until a quota reset.

    Args:
        reset_time: ISO-8601 reset timestamp, or None
        now: Reference time (defaults to the current UTC time)

    Returns:
        ``"Resetting..."`` when due, ``"Resets in 2h 5m"`` / ``"Resets in 5m"``
        otherwise, or ``"Unknown"`` without a usable timestamp
    """
    if not reset_time:
        return "Unknown"
    try:
        reset_at = _parse_timestamp(reset_time)
    except ValueError:
        return "Unknown"

    now = now or datetime.now(timezone.utc)
    diff_ms = (reset_at - now).total_seconds() * 1000
    if diff_ms <= 0:
        return "Resetting..."

    hours = int(diff_ms // 3_600_000)
    minutes = int((diff_ms % 3_600_000) // 60_000)
    if hours > 0:
        return f"Resets in {hours}h {minutes}m"
    return f"Resets in {minutes}m"


def percent_left(fraction: float) -> int:
    """Round a remaining fraction to a 0-100 percentage, halves rounding up."""
    return max(0, min(100, math.floor(fraction * 100 + 0.5)))


def summarize_buckets(buckets: List[QuotaBucket], now: Optional[datetime] = None) -> List[QuotaInfo]:
    """
    Reduce raw buckets to one entry per model.

    ``_vertex`` buckets mirror a canonical bucket and are skipped; the
    lowest remaining fraction wins for each model. Output is sorted by
    model id.
    """
    by_model: Dict[str, Tuple[float, Optional[str]]] = {}

    for bucket in buckets:
        if bucket.remaining_fraction is None:
            continue
        model_id = bucket.model_id or "unknown"
        if model_id.endswith("_vertex"):
            continue
        existing = by_model.get(model_id)
        if existing is None or bucket.remaining_fraction < existing[0]:
            by_model[model_id] = (bucket.remaining_fraction, bucket.reset_time)

    return [
        QuotaInfo(
            model_id=model_id,
            percent_left=percent_left(fraction),
            reset_time=reset_time,
            reset_description=format_reset_time(reset_time, now),
        )
        for model_id, (fraction, reset_time) in sorted(by_model.items())
    ]


async def fetch_quota(
    oauth_client: OAuthClient,
    project_id: str,
    http_client: httpx.AsyncClient,
    base_url: str,
) -> List[QuotaInfo]:
    """
    Fetch and summarize the quota of a project.

    Raises:
        TokenError: If no access token can be obtained
        APIError: If retrieveUserQuota fails
    """
    access_token = await oauth_client.get_access_token()
    start_time = time.time()

    try:
        response = await http_client.post(
            f"{base_url}:retrieveUserQuota",
            json={"project": project_id},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )
    except httpx.RequestError as e:
        raise APIError(f"retrieveUserQuota request failed: {type(e).__name__}", error_code="upstream_unreachable")

    log_api_call(
        logger,
        service="code_assist",
        endpoint="retrieveUserQuota",
        method="POST",
        status_code=response.status_code,
        duration_ms=(time.time() - start_time) * 1000,
    )

    if not response.is_success:
        log_upstream_error(logger, "retrieveUserQuota", response.status_code, response.text)
        raise APIError(
            f"retrieveUserQuota failed ({response.status_code})",
            error_code="quota_lookup_failed",
            details={"upstream_status": response.status_code},
        )

    try:
        payload: Dict[str, Any] = response.json()
        buckets = [QuotaBucket.model_validate(raw) for raw in payload.get("buckets") or []]
    except (ValueError, AttributeError) as e:
        raise APIError(f"Unexpected retrieveUserQuota response: {e}", error_code="quota_lookup_failed")

    return summarize_buckets(buckets)


class QuotaCache:
    """Caches the last quota summary for a fixed time."""

    def __init__(self, ttl_seconds: float = 60.0):
        self.ttl_seconds = ttl_seconds
        self._entry: Optional[Tuple[str, float, List[QuotaInfo]]] = None

    def get(self, project_id: str) -> Optional[List[QuotaInfo]]:
        if self._entry is None:
            return None
        cached_project, stored_at, quotas = self._entry
        if cached_project != project_id or time.monotonic() - stored_at >= self.ttl_seconds:
            return None
        return quotas

    def put(self, project_id: str, quotas: List[QuotaInfo]) -> None:
        self._entry = (project_id, time.monotonic(), quotas)

    def clear(self) -> None:
        self._entry = None
