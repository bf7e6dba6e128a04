"""
Tests for the OpenAI completion adapter with a stubbed SDK client.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai

from errors import ErrorCode
from routers.chat_orchestration.session import ConversationContext
from services.llm_client import LLMClient, _translate_turns_for_openai, get_llm_client


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _client(create):
    stub = MagicMock()
    stub.chat.completions.create.side_effect = create
    return LLMClient(api_key="sk-test", openai_client=stub), stub


class TestTranslate:
    def test_turn_objects(self):
        context = ConversationContext.create("s", "sys")
        context.add_user_turn("hi")
        assert _translate_turns_for_openai(context.history()) == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ]

    def test_dicts(self):
        assert _translate_turns_for_openai([{"role": "assistant", "content": "yo"}]) == [
            {"role": "assistant", "content": "yo"}
        ]


class TestComplete:
    def test_success_sends_full_history(self):
        client, stub = _client(lambda **kw: _completion("Hello there"))
        context = ConversationContext.create("s", "sys")
        context.add_user_turn("hi")

        outcome = asyncio.run(client.complete(context.history()))

        assert outcome.ok
        assert outcome.value == "Hello there"
        kwargs = stub.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-3.5-turbo"
        assert kwargs["max_tokens"] == 150
        assert kwargs["messages"] == [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]

    def test_empty_choice(self):
        client, _ = _client(lambda **kw: _completion("   "))
        outcome = asyncio.run(client.complete([{"role": "user", "content": "hi"}]))
        assert outcome.code == ErrorCode.PROVIDER_RESPONSE_INVALID

    def test_no_choices(self):
        client, _ = _client(lambda **kw: SimpleNamespace(choices=[]))
        outcome = asyncio.run(client.complete([{"role": "user", "content": "hi"}]))
        assert outcome.code == ErrorCode.PROVIDER_RESPONSE_INVALID

    def test_sdk_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")

        def create(**kw):
            raise openai.APIConnectionError(request=request)

        client, _ = _client(create)
        outcome = asyncio.run(client.complete([{"role": "user", "content": "hi"}]))

        assert not outcome.ok
        assert outcome.code == ErrorCode.PROVIDER_COMPLETION_FAILED
        assert outcome.source == "completion"

    def test_invalid_role(self):
        client, stub = _client(lambda **kw: _completion("x"))
        outcome = asyncio.run(client.complete([{"role": "tool", "content": "x"}]))
        assert outcome.code == ErrorCode.PROVIDER_RESPONSE_INVALID
        stub.chat.completions.create.assert_not_called()


def test_get_llm_client_from_config(config):
    config.update(max_tokens=99)
    client = get_llm_client(config)
    assert client.model == config.model_chat
    assert client.max_tokens == 99
