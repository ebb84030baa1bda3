"""
Gemini wire models for gemini-gateway.

Pydantic models for the Code Assist ``generateContent`` request and
response bodies. Field names are snake_case in Python and camelCase on the
wire; ``to_wire()`` produces the JSON-ready camelCase dictionary with unset
fields left out.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer, model_validator
from pydantic.alias_generators import to_camel


class GeminiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_serializer(mode="wrap")
    def serialize_without_unset(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        # Only this model's own None fields are dropped; values inside
        # free-form dicts (function args, schemas) pass through untouched.
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape expected by the API."""
        return self.model_dump(by_alias=True, mode="json")


class FunctionCall(GeminiModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(GeminiModel):
    name: str
    response: Dict[str, Any] = Field(default_factory=dict)


class Part(GeminiModel):
    """One content part: text, a function call, or a function response."""

    text: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    function_response: Optional[FunctionResponse] = None

    @model_validator(mode="after")
    def check_single_kind(self) -> "Part":
        kinds = [self.text, self.function_call, self.function_response]
        if sum(kind is not None for kind in kinds) > 1:
            raise ValueError("A part carries at most one of text, functionCall, functionResponse")
        return self


class Content(GeminiModel):
    role: Optional[str] = None  # "user" or "model"
    parts: List[Part] = Field(default_factory=list)


class FunctionDeclaration(GeminiModel):
    name: str
    description: Optional[str] = None
    parameters_json_schema: Optional[Dict[str, Any]] = None


class Tool(GeminiModel):
    function_declarations: List[FunctionDeclaration]


class FunctionCallingConfig(GeminiModel):
    mode: Literal["NONE", "AUTO", "ANY"]
    allowed_function_names: Optional[List[str]] = None


class ToolConfig(GeminiModel):
    function_calling_config: FunctionCallingConfig


class GenerationConfig(GeminiModel):
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop_sequences: Optional[List[str]] = None

    def is_empty(self) -> bool:
        return not self.model_fields_set


class GenerateContentRequest(GeminiModel):
    """Inner request placed under ``request`` in the Code Assist envelope."""

    contents: List[Content]
    system_instruction: Optional[Content] = None
    generation_config: Optional[GenerationConfig] = None
    tools: Optional[List[Tool]] = None
    tool_config: Optional[ToolConfig] = None


class Candidate(GeminiModel):
    content: Optional[Content] = None
    finish_reason: Optional[str] = None
    index: Optional[int] = None

    @property
    def parts(self) -> List[Part]:
        return self.content.parts if self.content else []


class UsageMetadata(GeminiModel):
    prompt_token_count: Optional[int] = None
    candidates_token_count: Optional[int] = None
    total_token_count: Optional[int] = None


class GenerateContentResponse(GeminiModel):
    """A complete response, or one partial of a streamed response."""

    candidates: List[Candidate] = Field(default_factory=list)
    usage_metadata: Optional[UsageMetadata] = None

    @property
    def first_candidate(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None
