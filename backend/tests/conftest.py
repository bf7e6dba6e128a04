"""
Shared pytest fixtures for the Eliza gateway tests.
"""

import pytest
from unittest.mock import AsyncMock

from config import RuntimeConfig
from errors import ErrorCode, Failure, Success
from routers.chat_executors import SearchResult, SearchSource
from routers.chat_orchestration import ResponseOrchestrator, set_orchestrator

TEST_OPENAI_KEY = "sk-test-0123456789abcdefghij"
TEST_TAVILY_KEY = "tvly-test-0123456789abcdef"


@pytest.fixture
def config():
    """Isolated RuntimeConfig (never the process singleton)."""
    return RuntimeConfig(
        openai_api_key=TEST_OPENAI_KEY,
        tavily_api_key=TEST_TAVILY_KEY,
        prompt_for_credentials=False,
    )


def make_search_result(query="python", answer=None, count=2):
    sources = [
        SearchSource(
            title=f"Result {i}",
            url=f"https://www.example.com/page-{i}",
            content=f"Content of result {i}. " * 5,
        )
        for i in range(1, count + 1)
    ]
    return SearchResult(query=query, answer=answer, sources=sources)


@pytest.fixture
def fake_llm():
    """Completion client whose complete() succeeds with a canned reply."""
    client = AsyncMock()
    client.complete.return_value = Success("Hi from the model", source="completion")
    return client


@pytest.fixture
def fake_search():
    """Search client whose search() returns two sources and no answer."""
    client = AsyncMock()
    client.search.return_value = Success(make_search_result(), source="search")
    return client


@pytest.fixture
def failing_llm():
    client = AsyncMock()
    client.complete.return_value = Failure(
        reason="quota exceeded", code=ErrorCode.PROVIDER_COMPLETION_FAILED, source="completion"
    )
    return client


@pytest.fixture
def orchestrator(config, fake_llm, fake_search):
    """READY orchestrator wired to fake providers."""
    return ResponseOrchestrator(config=config, llm_client=fake_llm, search_client=fake_search)


@pytest.fixture
def installed_orchestrator(orchestrator):
    """Install the fake-backed orchestrator as the process-wide one."""
    set_orchestrator(orchestrator)
    yield orchestrator
    set_orchestrator(None)


@pytest.fixture
def search_result():
    """Factory for SearchResult objects with numbered sources."""
    return make_search_result
