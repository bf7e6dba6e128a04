"""
Tests for the response orchestrator: greeting, trigger path and fallback chain.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from config import RuntimeConfig
from errors import ErrorCode, Failure, Success
from routers.chat_executors import SearchResult
from routers.chat_executors.formatting import FALLBACK_PREAMBLE
from routers.chat_orchestration import (
    APOLOGY,
    GREETING,
    OrchestratorState,
    ResponseOrchestrator,
    Role,
    get_orchestrator,
    set_orchestrator,
)
from routers.chat_orchestration.strategies import DEFAULT_FALLBACK_MESSAGE
from services.credentials import ProviderCredentials


def _greeted(orchestrator, session_id="s1"):
    """Consume the greeting for a session."""
    asyncio.run(orchestrator.handle("hello", session_id=session_id))
    return orchestrator


class TestGreeting:
    def test_first_message_gets_greeting(self, orchestrator, fake_llm):
        reply = asyncio.run(orchestrator.handle("hello", session_id="s1"))

        assert reply == GREETING
        fake_llm.complete.assert_not_called()
        context = orchestrator.store.get("s1")
        assert context.started is True
        assert [t.role for t in context.history()] == [Role.SYSTEM]

    def test_second_message_goes_to_completion(self, orchestrator, fake_llm):
        _greeted(orchestrator)
        reply = asyncio.run(orchestrator.handle("tell me a joke", session_id="s1"))

        assert reply == "Hi from the model"
        history = orchestrator.store.get("s1").history()
        assert [(t.role, t.content) for t in history[1:]] == [
            (Role.USER, "tell me a joke"),
            (Role.ASSISTANT, "Hi from the model"),
        ]

    def test_greeting_is_per_session(self, orchestrator):
        _greeted(orchestrator, "a")
        assert asyncio.run(orchestrator.handle("hello", session_id="b")) == GREETING

    def test_reset_rearms_greeting(self, orchestrator):
        _greeted(orchestrator)
        orchestrator.reset("s1")
        assert asyncio.run(orchestrator.handle("hi again", session_id="s1")) == GREETING


class TestFallbackChain:
    def test_completion_history_is_complete(self, orchestrator, fake_llm):
        _greeted(orchestrator)
        asyncio.run(orchestrator.handle("first", session_id="s1"))
        asyncio.run(orchestrator.handle("second", session_id="s1"))

        history = fake_llm.complete.call_args.args[0]
        assert [t.content for t in history[1:]] == ["first", "Hi from the model", "second"]

    def test_search_fallback_with_answer(self, config, failing_llm, fake_search, search_result):
        fake_search.search.return_value = Success(search_result(answer="42 is the answer."))
        orchestrator = _greeted(ResponseOrchestrator(config=config, llm_client=failing_llm, search_client=fake_search))

        reply = asyncio.run(orchestrator.handle("meaning of life", session_id="s1"))

        assert reply == "42 is the answer."
        fake_search.search.assert_awaited_once_with("meaning of life")

    def test_search_fallback_snippets(self, config, failing_llm, fake_search):
        orchestrator = _greeted(ResponseOrchestrator(config=config, llm_client=failing_llm, search_client=fake_search))

        reply = asyncio.run(orchestrator.handle("python", session_id="s1"))

        assert reply.startswith(FALLBACK_PREAMBLE)
        assert "• Result 1: " in reply

    def test_failed_completion_keeps_user_turn_only(self, config, failing_llm, fake_search):
        orchestrator = _greeted(ResponseOrchestrator(config=config, llm_client=failing_llm, search_client=fake_search))
        asyncio.run(orchestrator.handle("python", session_id="s1"))

        roles = [t.role for t in orchestrator.store.get("s1").history()]
        assert roles == [Role.SYSTEM, Role.USER]

    def test_default_when_search_fails(self, config, failing_llm):
        search = AsyncMock()
        search.search.return_value = Failure(reason="down", code=ErrorCode.PROVIDER_SEARCH_FAILED)
        orchestrator = _greeted(ResponseOrchestrator(config=config, llm_client=failing_llm, search_client=search))

        reply = asyncio.run(orchestrator.handle("anything", session_id="s1"))
        assert reply == DEFAULT_FALLBACK_MESSAGE
        assert reply == (
            "I'm having trouble generating a response right now. Would you like to try a web search?"
        )

    def test_default_when_search_empty(self, config, failing_llm):
        search = AsyncMock()
        search.search.return_value = Success(SearchResult(query="anything"))
        orchestrator = _greeted(ResponseOrchestrator(config=config, llm_client=failing_llm, search_client=search))

        assert asyncio.run(orchestrator.handle("anything", session_id="s1")) == DEFAULT_FALLBACK_MESSAGE


class TestSearchTrigger:
    def test_trigger_bypasses_completion(self, orchestrator, fake_llm, fake_search):
        reply = asyncio.run(orchestrator.handle("/search python asyncio", session_id="s1"))

        assert reply.startswith('🌐 Web Search Results for "python"')
        fake_search.search.assert_awaited_once_with("python asyncio")
        fake_llm.complete.assert_not_called()

    def test_trigger_leaves_greeting_and_history_alone(self, orchestrator):
        asyncio.run(orchestrator.handle("lookup tides", session_id="s1"))

        context = orchestrator.store.get("s1")
        assert context.started is False
        assert len(context.history()) == 1
        assert asyncio.run(orchestrator.handle("hi", session_id="s1")) == GREETING

    def test_no_results(self, orchestrator, fake_search):
        fake_search.search.return_value = Success(SearchResult(query="zzz"))
        assert asyncio.run(orchestrator.handle("/web zzz")) == '❌ No results found for "zzz".'

    def test_search_failure(self, orchestrator, fake_search):
        fake_search.search.return_value = Failure(reason="down", code=ErrorCode.PROVIDER_SEARCH_FAILED)
        assert asyncio.run(orchestrator.handle("!search zzz")) == '❌ No results found for "zzz".'


class TestErrors:
    def test_unexpected_error_becomes_apology(self, orchestrator, fake_llm):
        _greeted(orchestrator)
        fake_llm.complete.side_effect = RuntimeError("boom")

        assert asyncio.run(orchestrator.handle("hi", session_id="s1")) == APOLOGY

    def test_uninitialized_returns_apology(self, config):
        orchestrator = ResponseOrchestrator(config=config)
        assert orchestrator.state == OrchestratorState.UNINITIALIZED
        assert asyncio.run(orchestrator.handle("hello")) == APOLOGY


class TestLifecycle:
    def test_initialize_builds_clients(self, config):
        orchestrator = ResponseOrchestrator(config=config)
        credentials = ProviderCredentials(openai_api_key=config.openai_api_key, tavily_api_key="tvly-new-key")

        with patch("routers.chat_orchestration.orchestrator.get_llm_client") as llm_factory, patch(
            "routers.chat_orchestration.orchestrator.get_search_client"
        ) as search_factory:
            orchestrator.initialize(credentials)

        assert orchestrator.is_ready
        llm_factory.assert_called_once_with(config)
        search_factory.assert_called_once_with(config)
        assert config.tavily_api_key == "tvly-new-key"
        assert orchestrator.chain.names == ["completion", "search", "default"]

    def test_open_and_close_session(self, orchestrator):
        orchestrator.open_session("127.0.0.1:5000")
        assert orchestrator.status()["sessions"] == 1
        orchestrator.close_session("127.0.0.1:5000")
        assert "127.0.0.1:5000" not in orchestrator.store

    def test_store_capped_from_config(self):
        config = RuntimeConfig(max_contexts=3, prompt_for_credentials=False)
        orchestrator = ResponseOrchestrator(config=config)
        orchestrator.open_session("127.0.0.1:5000")
        for i in range(10):
            orchestrator.store.get(f"http:{i}")

        assert len(orchestrator.store) == 3
        assert "127.0.0.1:5000" in orchestrator.store

    def test_global_orchestrator(self, orchestrator):
        set_orchestrator(orchestrator)
        try:
            assert get_orchestrator() is orchestrator
        finally:
            set_orchestrator(None)


@pytest.mark.parametrize("message", ["/search", "lookup"])
def test_trigger_with_empty_query(orchestrator, fake_search, message):
    fake_search.search.return_value = Success(SearchResult(query=""))
    reply = asyncio.run(orchestrator.handle(message))
    fake_search.search.assert_awaited_once_with("")
    assert reply == '❌ No results found for "the query".'
