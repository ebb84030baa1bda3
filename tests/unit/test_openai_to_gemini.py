'''
Unit tests for the OpenAI request to Gemini request conversion.
'''

from __future__ import annotations

import json

import pytest

from gemini_gateway.adapters import (
    build_request_body,
    convert_messages,
    convert_tool_choice,
    convert_tools,
    extract_text,
)
from gemini_gateway.models import ChatCompletionRequest, ToolDefinition


def make_request(**kwargs) -> ChatCompletionRequest:
    kwargs.setdefault('messages', [{'role': 'user', 'content': 'hello'}])
    return ChatCompletionRequest(**kwargs)


class TestConvertMessages:
    '''
    Test message conversion.
    '''

    def test_system_messages_join_in_order(self) -> None:
        request = make_request(messages=[
            {'role': 'system', 'content': 'A'},
            {'role': 'user', 'content': 'hi'},
            {'role': 'system', 'content': 'B'},
        ])
        converted = convert_messages(request.messages)

        assert converted.system_instruction == 'A\nB'
        assert [content.role for content in converted.contents] == ['user']

    def test_no_system_messages(self) -> None:
        converted = convert_messages(make_request().messages)
        assert converted.system_instruction is None

    def test_user_multipart_content_keeps_text_parts_only(self) -> None:
        request = make_request(messages=[{'role': 'user', 'content': [
            {'type': 'text', 'text': 'first'},
            {'type': 'image_url', 'image_url': {'url': 'data:image/png;base64,AAAA'}},
            {'type': 'text', 'text': 'second'},
        ]}])
        converted = convert_messages(request.messages)

        assert converted.contents[0].to_wire() == {'role': 'user', 'parts': [{'text': 'first\nsecond'}]}

    def test_assistant_text_precedes_function_calls(self) -> None:
        request = make_request(messages=[{
            'role': 'assistant',
            'content': 'Looking it up',
            'tool_calls': [
                {'id': 'call_1', 'type': 'function', 'function': {'name': 'lookup', 'arguments': '{"q": "x"}'}},
                {'id': 'call_2', 'type': 'function', 'function': {'name': 'fetch', 'arguments': '{}'}},
            ],
        }])
        converted = convert_messages(request.messages)

        assert converted.contents[0].to_wire() == {
            'role': 'model',
            'parts': [
                {'text': 'Looking it up'},
                {'functionCall': {'name': 'lookup', 'args': {'q': 'x'}}},
                {'functionCall': {'name': 'fetch', 'args': {}}},
            ],
        }

    def test_empty_assistant_message_is_skipped(self) -> None:
        request = make_request(messages=[
            {'role': 'user', 'content': 'hi'},
            {'role': 'assistant', 'content': ''},
        ])
        assert len(convert_messages(request.messages).contents) == 1

    def test_malformed_tool_arguments_raise(self) -> None:
        request = make_request(messages=[{
            'role': 'assistant',
            'content': None,
            'tool_calls': [{'id': 'c', 'type': 'function', 'function': {'name': 'f', 'arguments': '{not json'}}],
        }])

        with pytest.raises(json.JSONDecodeError):
            convert_messages(request.messages)

    def test_tool_result_object(self) -> None:
        request = make_request(messages=[
            {'role': 'tool', 'tool_call_id': 'c', 'name': 'lookup', 'content': '{"temp": 21}'},
        ])
        content = convert_messages(request.messages).contents[0]

        assert content.to_wire() == {
            'role': 'user',
            'parts': [{'functionResponse': {'name': 'lookup', 'response': {'temp': 21}}}],
        }

    def test_tool_result_plain_text_is_wrapped(self) -> None:
        request = make_request(messages=[{'role': 'tool', 'tool_call_id': 'c', 'content': 'sunny'}])
        part = convert_messages(request.messages).contents[0].parts[0]

        assert part.function_response.name == 'unknown'
        assert part.function_response.response == {'result': 'sunny'}

    def test_tool_result_scalar_and_array_are_wrapped(self) -> None:
        request = make_request(messages=[
            {'role': 'tool', 'tool_call_id': 'a', 'name': 'n', 'content': '42'},
            {'role': 'tool', 'tool_call_id': 'b', 'name': 'n', 'content': '[1, 2]'},
        ])
        contents = convert_messages(request.messages).contents

        assert contents[0].parts[0].function_response.response == {'result': 42}
        assert contents[1].parts[0].function_response.response == {'result': [1, 2]}


class TestExtractText:
    def test_none_and_string(self) -> None:
        assert extract_text(None) == ''
        assert extract_text('plain') == 'plain'

    def test_empty_text_parts_are_skipped(self) -> None:
        assert extract_text([{'type': 'text', 'text': ''}, {'type': 'text', 'text': 'x'}]) == 'x'


class TestTools:
    '''
    Test tool declaration and tool choice conversion.
    '''

    def test_convert_tools_renames_parameters(self) -> None:
        schema = {'type': 'object', 'properties': {'q': {'type': 'string'}}}
        tools = [ToolDefinition(function={'name': 'lookup', 'description': 'Find', 'parameters': schema})]

        assert [tool.to_wire() for tool in convert_tools(tools)] == [{
            'functionDeclarations': [
                {'name': 'lookup', 'description': 'Find', 'parametersJsonSchema': schema},
            ],
        }]

    def test_no_tools(self) -> None:
        assert convert_tools(None) is None
        assert convert_tools([]) is None

    @pytest.mark.parametrize('choice, mode', [('none', 'NONE'), ('auto', 'AUTO'), ('required', 'ANY')])
    def test_string_tool_choice(self, choice: str, mode: str) -> None:
        assert convert_tool_choice(choice).to_wire() == {'functionCallingConfig': {'mode': mode}}

    def test_named_tool_choice(self) -> None:
        request = make_request(tool_choice={'type': 'function', 'function': {'name': 'lookup'}})

        assert convert_tool_choice(request.tool_choice).to_wire() == {
            'functionCallingConfig': {'mode': 'ANY', 'allowedFunctionNames': ['lookup']},
        }

    def test_absent_tool_choice(self) -> None:
        assert convert_tool_choice(None) is None


class TestBuildRequestBody:
    '''
    Test the assembled Gemini request.
    '''

    def test_minimal_body(self) -> None:
        assert build_request_body(make_request()).to_wire() == {
            'contents': [{'role': 'user', 'parts': [{'text': 'hello'}]}],
        }

    def test_generation_config_and_system_instruction(self) -> None:
        request = make_request(
            messages=[{'role': 'system', 'content': 'Be brief'}, {'role': 'user', 'content': 'hi'}],
            temperature=0.2,
            max_tokens=64,
            top_p=0.9,
            stop='END',
        )
        body = build_request_body(request).to_wire()

        assert body['systemInstruction'] == {'parts': [{'text': 'Be brief'}]}
        assert body['generationConfig'] == {
            'temperature': 0.2,
            'maxOutputTokens': 64,
            'topP': 0.9,
            'stopSequences': ['END'],
        }

    def test_stop_list_and_zero_temperature(self) -> None:
        body = build_request_body(make_request(temperature=0.0, stop=['a', 'b'])).to_wire()
        assert body['generationConfig'] == {'temperature': 0.0, 'stopSequences': ['a', 'b']}

    def test_tools_and_tool_config(self) -> None:
        request = make_request(
            tools=[{'type': 'function', 'function': {'name': 'lookup'}}],
            tool_choice='auto',
        )
        body = build_request_body(request).to_wire()

        assert body['tools'] == [{'functionDeclarations': [{'name': 'lookup'}]}]
        assert body['toolConfig'] == {'functionCallingConfig': {'mode': 'AUTO'}}
