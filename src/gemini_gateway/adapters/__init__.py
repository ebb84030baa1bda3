"""
Protocol adapters between the OpenAI chat completions API and Gemini.
"""

from __future__ import annotations

from .openai_to_gemini import (
    ConvertedMessages,
    build_request_body,
    convert_messages,
    convert_tool_choice,
    convert_tools,
    extract_text,
)
from .gemini_to_openai import convert_response, map_finish_reason
from .streaming import DONE_FRAME, ChatCompletionStream, format_sse

__all__ = [
    "ConvertedMessages",
    "build_request_body",
    "convert_messages",
    "convert_tool_choice",
    "convert_tools",
    "extract_text",
    "convert_response",
    "map_finish_reason",
    "DONE_FRAME",
    "ChatCompletionStream",
    "format_sse",
]
