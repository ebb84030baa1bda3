"""
Gemini Code Assist client for gemini-gateway.

This module sends ``generateContent`` and ``streamGenerateContent`` calls
to the Code Assist API. Requests are wrapped in the Code Assist envelope
(``{model, project, request}``) and responses are unwrapped from
``{response: ...}`` before being handed back as Gemini models.
"""

from __future__ import annotations

import json
from typing import Any, AsyncGenerator, AsyncIterator, Dict, Optional

import httpx
import pydantic
from httpx import Response

from ..auth import AuthContainer
from ..core import (
    Settings,
    get_logger,
    get_settings,
    APIError,
    classify_upstream_status,
    log_upstream_error,
)
from ..models.gemini import GenerateContentRequest, GenerateContentResponse
from ..utils import HTTPClient


def wrap_request(model: str, project_id: str, body: GenerateContentRequest) -> Dict[str, Any]:
    return {"model": model, "project": project_id, "request": body.to_wire()}


class GeminiClient:
    """Client for the Code Assist generate endpoints."""

    def __init__(
        self,
        auth_container: AuthContainer,
        http_client: HTTPClient,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self.auth_container = auth_container
        self.http_client = http_client
        self.base_url = self.settings.gemini.code_assist_base_url

    async def generate(self, model: str, body: GenerateContentRequest) -> GenerateContentResponse:
        """
        Run a non-streaming generation.

        Args:
            model: Resolved Gemini model name
            body: Inner generateContent request

        Returns:
            Unwrapped Gemini response

        Raises:
            AuthenticationError: If the gateway is not signed in
            GatewayError: Classified upstream failure
        """
        response = await self._post(f"{self.base_url}:generateContent", model, body, stream=False)

        try:
            payload = response.json()
        except ValueError:
            raise APIError("Upstream returned invalid JSON", error_code="upstream_invalid_response")

        if not isinstance(payload, dict):
            raise APIError("Upstream returned an unexpected response", error_code="upstream_invalid_response")

        try:
            return GenerateContentResponse.model_validate(payload.get("response") or {})
        except pydantic.ValidationError as e:
            self.logger.error("Unexpected upstream response shape", error=str(e))
            raise APIError("Upstream returned an unexpected response", error_code="upstream_invalid_response")

    async def generate_stream(
        self, model: str, body: GenerateContentRequest
    ) -> "PartialStream":
        """
        Open a streaming generation.

        The upstream request (including 429 retries and status checks) is
        made before returning, so failures surface here rather than
        mid-stream. The returned stream yields unwrapped partials and
        releases the connection when exhausted or closed, including when it
        is closed before the first partial is read.
        """
        response = await self._post(
            f"{self.base_url}:streamGenerateContent?alt=sse", model, body, stream=True
        )
        return PartialStream(response, self._iter_partials(response))

    async def _post(self, url: str, model: str, body: GenerateContentRequest, stream: bool) -> Response:
        state = self.auth_container.require()
        access_token = await state.client.get_access_token()

        response = await self.http_client.send_with_retry(
            "POST",
            url,
            json=wrap_request(model, state.project_id, body),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            stream=stream,
        )

        if not response.is_success:
            error_body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            # Raw body stays in the logs
            log_upstream_error(self.logger, url, response.status_code, error_body, model=model)
            raise classify_upstream_status(response.status_code, details={"model": model})

        return response

    async def _iter_partials(self, response: Response) -> AsyncIterator[GenerateContentResponse]:
        buffer = ""
        try:
            async for text in response.aiter_text():
                buffer += text
                lines = buffer.split("\n")
                # Keep the trailing partial line for the next read
                buffer = lines.pop()

                for line in lines:
                    data = self._sse_data(line)
                    if data is None:
                        continue
                    if data == "[DONE]":
                        return
                    partial = self._parse_partial(data)
                    if partial is not None:
                        yield partial

            data = self._sse_data(buffer)
            if data is not None and data != "[DONE]":
                partial = self._parse_partial(data)
                if partial is not None:
                    yield partial

        except httpx.HTTPError as e:
            self.logger.error("Upstream stream interrupted", error=str(e))
            raise APIError("Upstream stream interrupted", error_code="upstream_stream_error")
        finally:
            await response.aclose()

    @staticmethod
    def _sse_data(line: str) -> Optional[str]:
        line = line.strip()
        if not line.startswith("data: "):
            return None
        return line[len("data: "):]

    def _parse_partial(self, data: str) -> Optional[GenerateContentResponse]:
        try:
            envelope = json.loads(data)
            inner = envelope.get("response")
            if not isinstance(inner, dict):
                return None
            return GenerateContentResponse.model_validate(inner)
        except (ValueError, AttributeError) as e:
            # Unparseable lines are skipped
            self.logger.debug("Skipping stream line", error=str(e))
            return None


class PartialStream:
    """Partials of one open streaming response; owns the response."""

    def __init__(self, response: Response, partials: AsyncGenerator[GenerateContentResponse, None]):
        self.response = response
        self._partials = partials

    def __aiter__(self) -> "PartialStream":
        return self

    async def __anext__(self) -> GenerateContentResponse:
        return await self._partials.__anext__()

    async def aclose(self) -> None:
        # A generator closed before its first step skips its finally block
        await self._partials.aclose()
        await self.response.aclose()
