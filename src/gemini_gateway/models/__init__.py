"""
gemini-gateway data models.

This module provides all Pydantic models: OpenAI request and response
shapes, the Gemini wire format, OAuth token records and quota summaries.
"""

from __future__ import annotations

# Authentication models
from .auth import (
    AuthMethod,
    OAuthCredentials,
    AuthStatus,
    LoginResponse,
    LogoutResponse,
)

# Request models
from .requests import (
    MessageContent,
    FunctionCall,
    ToolCallRequest,
    SystemMessage,
    UserMessage,
    AssistantMessage,
    ToolMessage,
    ChatMessage,
    FunctionDefinition,
    ToolDefinition,
    NamedToolChoice,
    ToolChoice,
    ChatCompletionRequest,
)

# Response models
from .responses import (
    FinishReason,
    Usage,
    ToolCall,
    FunctionCallResult,
    ChatCompletionMessage,
    ChatCompletionChoice,
    ChatCompletionResponse,
    ChunkFunctionCall,
    ChunkToolCall,
    ChoiceDelta,
    ChatCompletionChunkChoice,
    ChatCompletionChunk,
    ModelInfo,
    ModelsResponse,
    ErrorResponse,
)

# Quota models
from .quota import QuotaBucket, QuotaInfo, QuotaResponse

__all__ = [
    # Authentication models
    "AuthMethod",
    "OAuthCredentials",
    "AuthStatus",
    "LoginResponse",
    "LogoutResponse",
    # Request models
    "MessageContent",
    "FunctionCall",
    "ToolCallRequest",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "ChatMessage",
    "FunctionDefinition",
    "ToolDefinition",
    "NamedToolChoice",
    "ToolChoice",
    "ChatCompletionRequest",
    # Response models
    "FinishReason",
    "Usage",
    "ToolCall",
    "FunctionCallResult",
    "ChatCompletionMessage",
    "ChatCompletionChoice",
    "ChatCompletionResponse",
    "ChunkFunctionCall",
    "ChunkToolCall",
    "ChoiceDelta",
    "ChatCompletionChunkChoice",
    "ChatCompletionChunk",
    "ModelInfo",
    "ModelsResponse",
    "ErrorResponse",
    # Quota models
    "QuotaBucket",
    "QuotaInfo",
    "QuotaResponse",
]
