"""
Chat completions API endpoints for gemini-gateway.

This module implements the OpenAI-compatible chat completions API endpoint
with support for both streaming and non-streaming responses.
"""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ...adapters import ChatCompletionStream, build_request_body, convert_response
from ...core import (
    Settings,
    get_logger,
    ValidationError,
    log_error,
)
from ...models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ErrorResponse,
)
from ...services import GeminiClient, RequestStats, resolve_model
from ..deps import get_app_settings, get_gemini_client, get_request_stats

# Create router
router = APIRouter(prefix="/chat", tags=["chat"])
logger = get_logger(__name__)


@router.post(
    "/completions",
    response_model=ChatCompletionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        429: {"model": ErrorResponse, "description": "Rate Limited"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    },
    summary="Create chat completion",
    description="Creates a model response for the given chat conversation.",
)
async def create_chat_completion(
    request: ChatCompletionRequest,
    client: GeminiClient = Depends(get_gemini_client),
    stats: RequestStats = Depends(get_request_stats),
    settings: Settings = Depends(get_app_settings),
):
    """
    Create a chat completion.

    This endpoint is compatible with OpenAI's chat completions API and supports
    both streaming and non-streaming responses. Upstream failures are raised
    as gateway errors and rendered by the application error handler.
    """
    model = resolve_model(request.model, settings.gemini.default_model)
    stats.record_request(model)

    try:
        body = build_request_body(request)
    except ValueError as e:
        # Malformed tool call arguments in the conversation history
        raise ValidationError(
            f"Invalid tool call arguments: {e}",
            error_code="invalid_tool_arguments",
            param="messages",
        )

    logger.info(
        "Chat completion request",
        model=model,
        stream=request.stream,
        messages_count=len(request.messages),
    )

    if request.stream:
        upstream = await client.generate_stream(model, body)
        stream = ChatCompletionStream(upstream, model)
        return StreamingResponse(
            _relay(stream),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            # Releases the upstream when the body iterator never started
            background=BackgroundTask(stream.aclose),
        )

    result = await client.generate(model, body)
    response = convert_response(result, model)

    choice = response.choices[0]
    logger.info(
        "Chat completion finished",
        model=model,
        finish_reason=choice.finish_reason,
        total_tokens=response.usage.total_tokens if response.usage else None,
    )
    return JSONResponse(content=response.model_dump())


async def _relay(stream: ChatCompletionStream) -> AsyncIterator[str]:
    """
    Forward SSE frames to the client.

    The upstream is closed when the client disconnects or the stream ends.
    """
    try:
        async for frame in stream:
            yield frame
    except Exception as e:
        log_error(logger, e, context={"model": stream.model, "completion_id": stream.completion_id})
        raise
    finally:
        await stream.aclose()
