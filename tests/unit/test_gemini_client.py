'''
Unit tests for the Code Assist generation client.
'''

from __future__ import annotations

import json
from typing import AsyncIterator, List

import httpx
import pytest

from gemini_gateway.adapters import ChatCompletionStream
from gemini_gateway.auth import AuthContainer
from gemini_gateway.core import (
    APIError,
    AuthenticationError,
    ModelNotFoundError,
    RateLimitError,
    ValidationError,
)
from gemini_gateway.models.gemini import Content, GenerateContentRequest, Part
from gemini_gateway.services import GeminiClient
from gemini_gateway.utils import HTTPClient

from support import RecordingHandler

BODY = GenerateContentRequest(contents=[Content(role='user', parts=[Part(text='hi')])])


def envelope(text: str, finish_reason: str = None) -> dict:
    candidate = {'content': {'role': 'model', 'parts': [{'text': text}]}}
    if finish_reason:
        candidate['finishReason'] = finish_reason
    return {'response': {'candidates': [candidate]}, 'traceId': 'abc'}


def sse(*events: dict) -> bytes:
    return ''.join(f'data: {json.dumps(event)}\r\n\r\n' for event in events).encode()


def make_client(container: AuthContainer, settings, handler) -> GeminiClient:
    upstream = HTTPClient(max_retries=3, retry_base_delay=0.0, transport=httpx.MockTransport(handler))
    return GeminiClient(container, upstream, settings)


async def drain(iterator: AsyncIterator) -> List:
    return [item async for item in iterator]


class TestGenerate:
    '''
    Test non-streaming generation.
    '''

    @pytest.mark.asyncio
    async def test_wraps_request_and_unwraps_response(self, authenticated_container, settings) -> None:
        handler = RecordingHandler([httpx.Response(200, json=envelope('hello', 'STOP'))])
        client = make_client(authenticated_container, settings, handler)

        response = await client.generate('gemini-2.5-flash', BODY)

        assert response.first_candidate.parts[0].text == 'hello'
        request = handler.requests[0]
        assert str(request.url) == 'https://cloudcode.test/v1internal:generateContent'
        assert request.headers['authorization'] == 'Bearer access-1'
        assert handler.json_body() == {
            'model': 'gemini-2.5-flash',
            'project': 'test-project',
            'request': {'contents': [{'role': 'user', 'parts': [{'text': 'hi'}]}]},
        }

    @pytest.mark.asyncio
    async def test_retry_then_success(self, authenticated_container, settings) -> None:
        handler = RecordingHandler([
            httpx.Response(429, json={'error': {'details': [{'retryDelay': '0.001s'}]}}),
            httpx.Response(200, json=envelope('after retry')),
        ])
        client = make_client(authenticated_container, settings, handler)

        response = await client.generate('m', BODY)

        assert handler.calls == 2
        assert response.first_candidate.parts[0].text == 'after retry'

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, authenticated_container, settings) -> None:
        handler = RecordingHandler([httpx.Response(429, json={'error': {'message': 'quota'}})])
        client = make_client(authenticated_container, settings, handler)

        with pytest.raises(RateLimitError) as exc_info:
            await client.generate('m', BODY)

        assert handler.calls == 4
        assert exc_info.value.upstream_status == 429
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status, error_cls, public_status', [
        (400, ValidationError, 400),
        (401, AuthenticationError, 401),
        (403, AuthenticationError, 401),
        (404, ModelNotFoundError, 500),
        (502, APIError, 500),
    ])
    async def test_error_classification(
        self, authenticated_container, settings, status, error_cls, public_status
    ) -> None:
        handler = RecordingHandler([httpx.Response(status, text='secret upstream details')])
        client = make_client(authenticated_container, settings, handler)

        with pytest.raises(error_cls) as exc_info:
            await client.generate('m', BODY)

        assert handler.calls == 1
        assert exc_info.value.status_code == public_status
        assert 'secret' not in json.dumps(exc_info.value.to_dict())

    @pytest.mark.asyncio
    async def test_requires_authentication(self, settings) -> None:
        handler = RecordingHandler([httpx.Response(200, json=envelope('x'))])
        client = make_client(AuthContainer(), settings, handler)

        with pytest.raises(AuthenticationError):
            await client.generate('m', BODY)

        assert handler.calls == 0


class TestGenerateStream:
    '''
    Test SSE parsing of streamed generations.
    '''

    @pytest.mark.asyncio
    async def test_parses_events(self, authenticated_container, settings) -> None:
        handler = RecordingHandler([httpx.Response(200, content=sse(envelope('a'), envelope('b', 'STOP')))])
        client = make_client(authenticated_container, settings, handler)

        partials = await drain(await client.generate_stream('m', BODY))

        assert [p.first_candidate.parts[0].text for p in partials] == ['a', 'b']
        assert str(handler.requests[0].url) == 'https://cloudcode.test/v1internal:streamGenerateContent?alt=sse'

    @pytest.mark.asyncio
    async def test_lines_split_across_reads(self, authenticated_container, settings) -> None:
        payload = sse(envelope('first'), envelope('second'))

        async def chunks():
            for index in range(0, len(payload), 7):
                yield payload[index:index + 7]

        handler = RecordingHandler([httpx.Response(200, content=chunks())])
        client = make_client(authenticated_container, settings, handler)

        partials = await drain(await client.generate_stream('m', BODY))

        assert [p.first_candidate.parts[0].text for p in partials] == ['first', 'second']

    @pytest.mark.asyncio
    async def test_trailing_line_without_newline(self, authenticated_container, settings) -> None:
        content = f'data: {json.dumps(envelope("only"))}'.encode()
        handler = RecordingHandler([httpx.Response(200, content=content)])
        client = make_client(authenticated_container, settings, handler)

        partials = await drain(await client.generate_stream('m', BODY))

        assert len(partials) == 1

    @pytest.mark.asyncio
    async def test_done_and_garbage_lines(self, authenticated_container, settings) -> None:
        content = (
            b': keep-alive\n'
            b'data: {not json}\n'
            b'data: {"traceId": "no envelope"}\n'
            + sse(envelope('kept'))
            + b'data: [DONE]\n'
            + sse(envelope('after done'))
        )
        handler = RecordingHandler([httpx.Response(200, content=content)])
        client = make_client(authenticated_container, settings, handler)

        partials = await drain(await client.generate_stream('m', BODY))

        assert [p.first_candidate.parts[0].text for p in partials] == ['kept']

    @pytest.mark.asyncio
    async def test_error_status_raises_before_streaming(self, authenticated_container, settings) -> None:
        handler = RecordingHandler([httpx.Response(401, text='denied')])
        client = make_client(authenticated_container, settings, handler)

        with pytest.raises(AuthenticationError):
            await client.generate_stream('m', BODY)


class TrackingBody(httpx.AsyncByteStream):
    '''
    Response body that records whether it was closed.
    '''

    def __init__(self, chunks: List[bytes]) -> None:
        self.chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class TestStreamRelease:
    '''
    Test that the upstream connection is released on every path.
    '''

    @pytest.mark.asyncio
    async def test_close_before_first_read(self, authenticated_container, settings) -> None:
        body = TrackingBody([sse(envelope('never read'))])
        handler = RecordingHandler([httpx.Response(200, stream=body)])
        client = make_client(authenticated_container, settings, handler)

        stream = ChatCompletionStream(await client.generate_stream('m', BODY), 'm')
        await stream.aclose()

        assert body.closed

    @pytest.mark.asyncio
    async def test_close_after_partial_read(self, authenticated_container, settings) -> None:
        body = TrackingBody([sse(envelope('one')), sse(envelope('two', 'STOP'))])
        handler = RecordingHandler([httpx.Response(200, stream=body)])
        client = make_client(authenticated_container, settings, handler)

        upstream = await client.generate_stream('m', BODY)
        first = await upstream.__anext__()
        await upstream.aclose()

        assert first.first_candidate.parts[0].text == 'one'
        assert body.closed

    @pytest.mark.asyncio
    async def test_exhausted_stream_is_closed(self, authenticated_container, settings) -> None:
        body = TrackingBody([sse(envelope('only', 'STOP'))])
        handler = RecordingHandler([httpx.Response(200, stream=body)])
        client = make_client(authenticated_container, settings, handler)

        partials = await drain(await client.generate_stream('m', BODY))

        assert len(partials) == 1
        assert body.closed
