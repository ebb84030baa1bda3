"""
API request models for gemini-gateway.

This module contains the request-side data models for the OpenAI
compatible chat completions endpoint. Chat messages are a discriminated
union on ``role`` so each variant only accepts the fields that belong to it.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Text, or a list of typed content parts ({"type": "text", "text": ...}, images, ...)
MessageContent = Union[str, List[Dict[str, Any]], None]


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments of an assistant tool call."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Function name", min_length=1)
    arguments: str = Field(..., description="JSON-encoded function arguments")


class ToolCallRequest(BaseModel):
    """Tool call carried by an assistant message in the conversation history."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(None, description="Tool call identifier")
    type: Literal["function"] = Field("function", description="Type of tool call")
    function: FunctionCall = Field(..., description="Function call details")


class SystemMessage(BaseModel):
    """System instruction message."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    role: Literal["system"]
    content: MessageContent = Field(..., description="Instruction text")
    name: Optional[str] = Field(None, description="Optional participant name")


class UserMessage(BaseModel):
    """End-user message."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    role: Literal["user"]
    content: MessageContent = Field(..., description="Message content (text or structured content)")
    name: Optional[str] = Field(None, description="Optional participant name")


class AssistantMessage(BaseModel):
    """Earlier model turn, optionally carrying tool calls."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    role: Literal["assistant"]
    content: MessageContent = Field(None, description="Assistant text, if any")
    name: Optional[str] = Field(None, description="Optional participant name")
    tool_calls: Optional[List[ToolCallRequest]] = Field(
        None, description="Tool calls made by the assistant"
    )
    refusal: Optional[str] = Field(None, description="Refusal text echoed back by clients")


class ToolMessage(BaseModel):
    """Result of a tool call, sent back to the model."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    role: Literal["tool"]
    content: MessageContent = Field(..., description="Tool output")
    tool_call_id: Optional[str] = Field(
        None, description="ID of the tool call this message responds to"
    )
    name: Optional[str] = Field(None, description="Name of the function that produced the output")


ChatMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]


class FunctionDefinition(BaseModel):
    """Function exposed to the model as a tool."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Function name", min_length=1)
    description: Optional[str] = Field(None, description="What the function does")
    parameters: Optional[Dict[str, Any]] = Field(
        None, description="JSON schema of the function parameters"
    )


class ToolDefinition(BaseModel):
    """Tool entry of the request ``tools`` array."""

    model_config = ConfigDict(extra="allow")

    type: Literal["function"] = Field("function", description="Tool type")
    function: FunctionDefinition


class NamedFunction(BaseModel):
    name: str = Field(..., min_length=1)


class NamedToolChoice(BaseModel):
    """Forces the model to call one specific function."""

    type: Literal["function"] = "function"
    function: NamedFunction


ToolChoice = Union[Literal["none", "auto", "required"], NamedToolChoice]


class ChatCompletionRequest(BaseModel):
    """
    Request model for OpenAI chat completions API.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="allow",  # Allow extra fields for forward compatibility
    )

    model: Optional[str] = Field(None, description="Model identifier or alias (e.g., flash, pro)")
    messages: List[ChatMessage] = Field(..., description="List of chat messages", min_length=1)
    temperature: Optional[float] = Field(
        None, description="Sampling temperature (0.0 to 2.0)", ge=0.0, le=2.0
    )
    top_p: Optional[float] = Field(None, description="Nucleus sampling parameter", ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(
        None, description="Maximum number of tokens to generate", gt=0
    )
    stop: Optional[Union[str, List[str]]] = Field(None, description="Stop sequences")
    stream: bool = Field(False, description="Whether to stream the response")
    tools: Optional[List[ToolDefinition]] = Field(
        None, description="Available tools for the model to call"
    )
    tool_choice: Optional[ToolChoice] = Field(
        None, description="Tool choice strategy"
    )
