"""
Gemini response to OpenAI chat completion conversion.
"""

from __future__ import annotations

import json
import time
from typing import List, Optional

from ..core import generate_completion_id, generate_tool_call_id
from ..models import (
    ChatCompletionChoice,
    ChatCompletionMessage,
    ChatCompletionResponse,
    FinishReason,
    FunctionCallResult,
    ToolCall,
    Usage,
)
from ..models.gemini import FunctionCall, GenerateContentResponse, Part

FINISH_REASON_MAP = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
    "LANGUAGE": "content_filter",
    "BLOCKLIST": "content_filter",
    "PROHIBITED_CONTENT": "content_filter",
    "SPII": "content_filter",
    "MALFORMED_FUNCTION_CALL": "stop",
    "OTHER": "stop",
}


def map_finish_reason(reason: Optional[str]) -> Optional[FinishReason]:
    """Map a Gemini finish reason; unknown values map to ``stop``, absent to None."""
    if not reason:
        return None
    return FINISH_REASON_MAP.get(reason, "stop")


def text_parts(parts: List[Part]) -> List[str]:
    return [part.text for part in parts if part.text is not None]


def function_calls(parts: List[Part]) -> List[FunctionCall]:
    return [part.function_call for part in parts if part.function_call is not None]


def encode_arguments(function_call: FunctionCall) -> str:
    return json.dumps(function_call.args or {}, ensure_ascii=False)


def convert_usage(response: GenerateContentResponse) -> Optional[Usage]:
    metadata = response.usage_metadata
    if metadata is None:
        return None
    return Usage(
        prompt_tokens=metadata.prompt_token_count or 0,
        completion_tokens=metadata.candidates_token_count or 0,
        total_tokens=metadata.total_token_count or 0,
    )


def convert_response(response: GenerateContentResponse, model: str) -> ChatCompletionResponse:
    """
    Convert a complete Gemini response to an OpenAI chat completion.

    Only the first candidate is used. Function calls turn into tool calls
    with fresh ids and force ``finish_reason`` to ``tool_calls``.

    Args:
        response: Unwrapped Gemini response
        model: Model name to report

    Returns:
        Chat completion with exactly one choice
    """
    candidate = response.first_candidate
    parts = candidate.parts if candidate else []

    texts = text_parts(parts)
    content = "".join(texts) if texts else None
    calls = function_calls(parts)

    tool_calls = None
    if calls:
        tool_calls = [
            ToolCall(
                id=generate_tool_call_id(),
                function=FunctionCallResult(name=call.name, arguments=encode_arguments(call)),
            )
            for call in calls
        ]
        finish_reason: Optional[FinishReason] = "tool_calls"
        # Empty text next to tool calls is reported as null
        content = content or None
    else:
        finish_reason = map_finish_reason(candidate.finish_reason if candidate else None)

    return ChatCompletionResponse(
        id=generate_completion_id(),
        created=int(time.time()),
        model=model,
        choices=[
            ChatCompletionChoice(
                index=0,
                message=ChatCompletionMessage(content=content, tool_calls=tool_calls),
                finish_reason=finish_reason,
            )
        ],
        usage=convert_usage(response),
    )
