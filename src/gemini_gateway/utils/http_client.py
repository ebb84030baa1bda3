"""
HTTP client utilities for gemini-gateway.

This module provides a configured HTTP client with rate-limit retry,
timeout handling, and request logging.
"""

from __future__ import annotations

import asyncio
import json
import math
import re
import time
from typing import Any, Dict, Optional

import httpx
from httpx import Response

from ..core import (
    get_logger,
    get_settings,
    APIError,
    log_api_call,
    log_error,
)

RETRY_DELAY_PATTERN = re.compile(r"^([\d.]+)s$")


def parse_retry_delay(body: str) -> Optional[float]:
    """
    Extract the server-directed retry delay from a Google error body.

    Looks for ``error.details[].retryDelay`` values such as ``"3.168331203s"``.

    Returns:
        Delay in seconds rounded up to whole milliseconds, or None
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return None

    error = payload.get("error") if isinstance(payload, dict) else None
    details = error.get("details") if isinstance(error, dict) else None
    if not isinstance(details, list):
        return None

    for detail in details:
        if not isinstance(detail, dict) or not isinstance(detail.get("retryDelay"), str):
            continue
        match = RETRY_DELAY_PATTERN.match(detail["retryDelay"])
        if match:
            try:
                return math.ceil(float(match.group(1)) * 1000) / 1000
            except ValueError:
                continue
    return None


class HTTPClient:
    """HTTP client with 429 retry and logging."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        # Client configuration
        gemini = self.settings.gemini
        self.timeout = timeout or gemini.timeout
        self.max_retries = gemini.max_retries if max_retries is None else max_retries
        self.retry_base_delay = gemini.retry_base_delay if retry_base_delay is None else retry_base_delay

        # Default headers
        default_headers = {
            "User-Agent": f"{self.settings.app_name}/{self.settings.app_version}",
            "Accept": "application/json",
        }
        if headers:
            default_headers.update(headers)

        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=default_headers,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def send_with_retry(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        stream: bool = False,
    ) -> Response:
        """
        Send a request, retrying only on HTTP 429.

        The wait before each retry is the ``retryDelay`` carried in the
        error body, else ``retry_base_delay * (attempt + 1)`` seconds.
        Other statuses are returned to the caller unchanged.

        Args:
            method: HTTP method
            url: Request URL
            json: JSON body
            headers: Additional headers
            stream: Leave the body unread; the caller must close the response

        Returns:
            Final HTTP response (possibly a 429 once retries are exhausted)

        Raises:
            APIError: If the request cannot be sent
        """
        start_time = time.time()

        for attempt in range(self.max_retries + 1):
            request = self.client.build_request(method, url, json=json, headers=headers)
            try:
                response = await self.client.send(request, stream=stream)
            except httpx.RequestError as e:
                log_error(self.logger, e, context={"method": method, "url": url, "attempt": attempt + 1})
                raise APIError(
                    f"Upstream request failed: {type(e).__name__}",
                    error_code="upstream_unreachable",
                    details={"url": url, "error": str(e)},
                )

            log_api_call(
                self.logger,
                service="code_assist",
                endpoint=url,
                method=method,
                status_code=response.status_code,
                duration_ms=(time.time() - start_time) * 1000,
                attempt=attempt + 1,
            )

            if response.status_code != 429 or attempt >= self.max_retries:
                return response

            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()

            delay = parse_retry_delay(body)
            if delay is None:
                delay = self.retry_base_delay * (attempt + 1)

            self.logger.warning(
                "Rate limited, retrying",
                attempt=attempt + 1,
                max_retries=self.max_retries,
                delay_seconds=delay,
                url=url,
            )
            await asyncio.sleep(delay)

        # Unreachable: the final attempt always returns
        raise APIError("Retry loop exhausted", details={"url": url})

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
