"""
API response models for gemini-gateway.

This module contains all response-related data models for OpenAI
compatible API endpoints.

OpenAI clients distinguish between a key that is absent and a key that is
``null``: ``message.content`` and ``finish_reason`` are always present (and
may be null), while ``usage``, ``tool_calls`` and the delta fields are left
out entirely when unset. ``OpenAIResponseModel`` drops ``None`` values on
serialization except for the fields listed in ``nullable_fields``.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

FinishReason = Literal["stop", "length", "tool_calls", "content_filter"]


class OpenAIResponseModel(BaseModel):
    """Base model that omits unset optional fields when serialized."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_serializer(mode="wrap")
    def serialize_without_unset(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in self.nullable_fields
        }


class Usage(OpenAIResponseModel):
    """
    Token usage information.
    """

    prompt_tokens: int = Field(..., description="Number of tokens in the prompt", ge=0)
    completion_tokens: int = Field(..., description="Number of tokens in the completion", ge=0)
    total_tokens: int = Field(..., description="Total number of tokens used", ge=0)


class FunctionCallResult(OpenAIResponseModel):
    name: str = Field(..., description="Function name")
    arguments: str = Field(..., description="JSON-encoded function arguments")


class ToolCall(OpenAIResponseModel):
    """
    Tool call information.
    """

    id: str = Field(..., description="Unique identifier for the tool call", min_length=1)
    type: Literal["function"] = Field("function", description="Type of tool call")
    function: FunctionCallResult = Field(..., description="Function call details")


class ChatCompletionMessage(OpenAIResponseModel):
    """
    Chat completion message in response.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"content"})

    role: Literal["assistant"] = Field("assistant", description="Role of the message sender")
    content: Optional[str] = Field(None, description="Message content")
    tool_calls: Optional[List[ToolCall]] = Field(
        None, description="Tool calls made by the assistant"
    )


class ChatCompletionChoice(OpenAIResponseModel):
    """
    Individual choice in chat completion response.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"finish_reason"})

    index: int = Field(0, description="Index of this choice", ge=0)
    message: ChatCompletionMessage = Field(..., description="The completion message")
    finish_reason: Optional[FinishReason] = Field(
        None, description="Reason why the completion finished"
    )


class ChatCompletionResponse(OpenAIResponseModel):
    """
    Response model for chat completions API.
    """

    id: str = Field(..., description="Unique identifier for the completion", min_length=1)
    object: Literal["chat.completion"] = Field("chat.completion", description="Object type")
    created: int = Field(..., description="Unix timestamp of creation", gt=0)
    model: str = Field(..., description="Model used for completion", min_length=1)
    choices: List[ChatCompletionChoice] = Field(
        ..., description="List of completion choices", min_length=1
    )
    usage: Optional[Usage] = Field(None, description="Token usage information")


class ChunkFunctionCall(OpenAIResponseModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class ChunkToolCall(OpenAIResponseModel):
    """Tool call fragment inside a streaming delta, addressed by position."""

    index: int = Field(..., description="Position of the tool call in the message", ge=0)
    id: Optional[str] = Field(None, description="Tool call identifier")
    type: Optional[Literal["function"]] = Field(None, description="Type of tool call")
    function: ChunkFunctionCall = Field(default_factory=ChunkFunctionCall)


class ChoiceDelta(OpenAIResponseModel):
    """Incremental message content of a streaming chunk."""

    role: Optional[Literal["assistant"]] = Field(None, description="Sent on the first chunk only")
    content: Optional[str] = Field(None, description="Content fragment")
    tool_calls: Optional[List[ChunkToolCall]] = Field(None, description="Tool call fragments")


class ChatCompletionChunkChoice(OpenAIResponseModel):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"finish_reason"})

    index: int = Field(0, ge=0)
    delta: ChoiceDelta = Field(default_factory=ChoiceDelta)
    finish_reason: Optional[FinishReason] = None


class ChatCompletionChunk(OpenAIResponseModel):
    """
    Streaming chunk for chat completions.
    """

    id: str = Field(..., description="Unique identifier for the completion", min_length=1)
    object: Literal["chat.completion.chunk"] = Field(
        "chat.completion.chunk", description="Object type"
    )
    created: int = Field(..., description="Unix timestamp of creation", gt=0)
    model: str = Field(..., description="Model used for completion", min_length=1)
    choices: List[ChatCompletionChunkChoice] = Field(..., description="List of completion choice deltas")


class ModelInfo(OpenAIResponseModel):
    """
    Information about a single model.
    """

    id: str = Field(..., description="Model identifier", min_length=1)
    object: Literal["model"] = Field("model", description="Object type")
    created: int = Field(..., description="Unix timestamp of model creation", gt=0)
    owned_by: str = Field("google", description="Organization that owns the model")


class ModelsResponse(OpenAIResponseModel):
    """
    Response model for models list API.
    """

    object: Literal["list"] = Field("list", description="Object type")
    data: List[ModelInfo] = Field(..., description="List of available models")


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error: Dict[str, Any] = Field(..., description="Error details")
