"""
OpenAI chat request to Gemini ``generateContent`` request conversion.

System messages are folded into ``systemInstruction``; the remaining
messages become Gemini contents with roles ``user`` and ``model``.
Tool results travel back to Gemini as user-role ``functionResponse`` parts.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, NamedTuple, Optional

from ..models import (
    AssistantMessage,
    ChatCompletionRequest,
    ChatMessage,
    MessageContent,
    SystemMessage,
    ToolChoice,
    ToolDefinition,
    ToolMessage,
    UserMessage,
)
from ..models.gemini import (
    Content,
    FunctionCall,
    FunctionCallingConfig,
    FunctionDeclaration,
    FunctionResponse,
    GenerateContentRequest,
    GenerationConfig,
    Part,
    Tool,
    ToolConfig,
)


class ConvertedMessages(NamedTuple):
    system_instruction: Optional[str]
    contents: List[Content]


TOOL_CHOICE_MODES = {
    "none": "NONE",
    "auto": "AUTO",
    "required": "ANY",
}


def extract_text(content: MessageContent) -> str:
    """Flatten message content to text; only ``text`` parts of a list count."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "\n".join(
        part["text"]
        for part in content
        if part.get("type") == "text" and part.get("text")
    )


def _tool_result(raw: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"result": raw}
    if isinstance(parsed, dict):
        return parsed
    return {"result": parsed}


def convert_messages(messages: List[ChatMessage]) -> ConvertedMessages:
    """
    Convert OpenAI messages to a system instruction and Gemini contents.

    Args:
        messages: Chat history in request order

    Returns:
        Newline-joined system text (None when there is none) and contents

    Raises:
        json.JSONDecodeError: If an assistant tool call carries malformed arguments
    """
    system_texts: List[str] = []
    contents: List[Content] = []

    for message in messages:
        if isinstance(message, SystemMessage):
            system_texts.append(extract_text(message.content))

        elif isinstance(message, UserMessage):
            contents.append(Content(role="user", parts=[Part(text=extract_text(message.content))]))

        elif isinstance(message, AssistantMessage):
            parts: List[Part] = []
            text = extract_text(message.content)
            if text:
                parts.append(Part(text=text))
            for tool_call in message.tool_calls or []:
                parts.append(Part(function_call=FunctionCall(
                    name=tool_call.function.name,
                    args=json.loads(tool_call.function.arguments),
                )))
            # Nothing to replay
            if parts:
                contents.append(Content(role="model", parts=parts))

        elif isinstance(message, ToolMessage):
            contents.append(Content(role="user", parts=[Part(function_response=FunctionResponse(
                name=message.name or "unknown",
                response=_tool_result(extract_text(message.content)),
            ))]))

    return ConvertedMessages("\n".join(system_texts) or None, contents)


def convert_tools(tools: Optional[List[ToolDefinition]]) -> Optional[List[Tool]]:
    if not tools:
        return None

    declarations = [
        FunctionDeclaration(
            name=tool.function.name,
            description=tool.function.description,
            parameters_json_schema=tool.function.parameters,
        )
        for tool in tools
    ]
    return [Tool(function_declarations=declarations)]


def convert_tool_choice(tool_choice: Optional[ToolChoice]) -> Optional[ToolConfig]:
    if tool_choice is None:
        return None

    if isinstance(tool_choice, str):
        config = FunctionCallingConfig(mode=TOOL_CHOICE_MODES[tool_choice])
    else:
        config = FunctionCallingConfig(mode="ANY", allowed_function_names=[tool_choice.function.name])
    return ToolConfig(function_calling_config=config)


def build_generation_config(request: ChatCompletionRequest) -> Optional[GenerationConfig]:
    params: Dict[str, Any] = {}
    if request.temperature is not None:
        params["temperature"] = request.temperature
    if request.max_tokens is not None:
        params["max_output_tokens"] = request.max_tokens
    if request.top_p is not None:
        params["top_p"] = request.top_p
    if request.stop is not None:
        params["stop_sequences"] = [request.stop] if isinstance(request.stop, str) else list(request.stop)

    config = GenerationConfig(**params)
    return None if config.is_empty() else config


def build_request_body(request: ChatCompletionRequest) -> GenerateContentRequest:
    """
    Build the inner Gemini request for a chat completion request.

    Raises:
        json.JSONDecodeError: If an assistant tool call carries malformed arguments
    """
    system_instruction, contents = convert_messages(request.messages)

    return GenerateContentRequest(
        contents=contents,
        system_instruction=Content(parts=[Part(text=system_instruction)]) if system_instruction else None,
        generation_config=build_generation_config(request),
        tools=convert_tools(request.tools),
        tool_config=convert_tool_choice(request.tool_choice),
    )
