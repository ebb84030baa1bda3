"""
Streaming conversion of Gemini partial responses to OpenAI SSE frames.

``ChatCompletionStream`` pulls partials from an upstream async iterator on
demand and yields ``data: {...}\\n\\n`` frames, ending with
``data: [DONE]\\n\\n`` once the upstream is exhausted. Closing the stream
closes the upstream iterator, which releases the HTTP connection.
"""

from __future__ import annotations

import time
from typing import AsyncIterator, List, Optional

from ..core import generate_completion_id, generate_tool_call_id, get_logger
from ..models import (
    ChatCompletionChunk,
    ChatCompletionChunkChoice,
    ChoiceDelta,
    ChunkFunctionCall,
    ChunkToolCall,
    FinishReason,
)
from ..models.gemini import GenerateContentResponse
from .gemini_to_openai import encode_arguments, function_calls, map_finish_reason, text_parts

DONE_FRAME = "data: [DONE]\n\n"

logger = get_logger(__name__)


def format_sse(chunk: ChatCompletionChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


class ChatCompletionStream:
    """Async iterator of SSE frames for one streamed chat completion."""

    def __init__(self, upstream: AsyncIterator[GenerateContentResponse], model: str):
        self.upstream = upstream
        self.model = model
        self.completion_id = generate_completion_id()
        self.created = int(time.time())

        self._role_sent = False
        self._tool_call_index = 0
        self._pending: List[str] = []
        self._finished = False

    def __aiter__(self) -> "ChatCompletionStream":
        return self

    async def __anext__(self) -> str:
        while not self._pending:
            if self._finished:
                raise StopAsyncIteration

            try:
                partial = await self.upstream.__anext__()
            except StopAsyncIteration:
                self._finished = True
                return DONE_FRAME
            except Exception as e:
                # No [DONE] after a failure; the client sees a truncated stream
                self._finished = True
                logger.error("Upstream stream failed", error=str(e), completion_id=self.completion_id)
                raise

            self._pending.extend(self._frames_for(partial))

        return self._pending.pop(0)

    async def aclose(self) -> None:
        """Stop pulling from the upstream and release it."""
        self._finished = True
        self._pending.clear()
        close = getattr(self.upstream, "aclose", None)
        if close is not None:
            await close()

    def _take_role(self) -> Optional[str]:
        if self._role_sent:
            return None
        self._role_sent = True
        return "assistant"

    def _chunk(self, delta: ChoiceDelta, finish_reason: Optional[FinishReason] = None) -> str:
        return format_sse(ChatCompletionChunk(
            id=self.completion_id,
            created=self.created,
            model=self.model,
            choices=[ChatCompletionChunkChoice(index=0, delta=delta, finish_reason=finish_reason)],
        ))

    def _frames_for(self, partial: GenerateContentResponse) -> List[str]:
        candidate = partial.first_candidate
        if candidate is None:
            return []

        frames: List[str] = []
        parts = candidate.parts

        calls = function_calls(parts)
        if calls:
            tool_calls = [
                ChunkToolCall(
                    index=self._tool_call_index + offset,
                    id=generate_tool_call_id(),
                    type="function",
                    function=ChunkFunctionCall(name=call.name, arguments=encode_arguments(call)),
                )
                for offset, call in enumerate(calls)
            ]
            self._tool_call_index += len(calls)
            frames.append(self._chunk(ChoiceDelta(role=self._take_role(), tool_calls=tool_calls)))

        text = "".join(text_parts(parts))
        if text:
            frames.append(self._chunk(ChoiceDelta(role=self._take_role(), content=text)))

        finish_reason = map_finish_reason(candidate.finish_reason)
        if finish_reason:
            if self._tool_call_index > 0:
                finish_reason = "tool_calls"
            frames.append(self._chunk(ChoiceDelta(), finish_reason=finish_reason))

        return frames
