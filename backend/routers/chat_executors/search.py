"""
Eliza Chat Executors - Web Search (Tavily)

One Tavily search call per query. Results are normalized into a
SearchResult; every failure (HTTP error, network error, malformed body,
missing credential) becomes a Failure outcome. No retries.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from errors import (
    ProviderFailure,
    Success,
    handle_async_provider_errors,
)
from logging_config import log_provider

logger = logging.getLogger(__name__)

TAVILY_SEARCH_URL = "https://api.tavily.com/search"


@dataclass
class SearchSource:
    """One ranked search hit."""

    title: str
    url: str
    content: str


@dataclass
class SearchResult:
    """Normalized search response. Produced per call, not retained."""

    query: str
    answer: Optional[str] = None
    sources: List[SearchSource] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return bool(self.sources)


def _parse_tavily_results(query: str, data: Any, limit: int) -> SearchResult:
    """Normalize a Tavily JSON body. Raises ProviderFailure on unexpected shapes."""
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise ProviderFailure(
            "Malformed search response",
            details="Expected an object with a 'results' list",
            provider="search",
            error_type="invalid",
        )

    sources: List[SearchSource] = []
    for item in data["results"][:limit]:
        if not isinstance(item, dict):
            continue
        sources.append(
            SearchSource(
                title=(item.get("title") or "").strip(),
                url=(item.get("url") or "").strip(),
                content=(item.get("content") or "").strip(),
            )
        )

    answer = data.get("answer")
    if isinstance(answer, str):
        answer = answer.strip() or None
    else:
        answer = None

    return SearchResult(query=data.get("query") or query, answer=answer, sources=sources)


class TavilySearchClient:
    """Search Provider Adapter around the Tavily search endpoint."""

    def __init__(
        self,
        api_key: str,
        url: str = TAVILY_SEARCH_URL,
        max_results: int = 5,
        include_answer: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Tavily API key, sent as a bearer credential
            url: Search endpoint URL
            max_results: Number of results requested and kept
            include_answer: Ask Tavily for a direct answer
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        self.url = url
        self.max_results = max_results
        self.include_answer = include_answer
        self._transport = transport

    def _build_payload(self, query: str) -> Dict[str, Any]:
        return {
            "query": query,
            "max_results": self.max_results,
            "include_answer": self.include_answer,
        }

    @handle_async_provider_errors("search")
    async def search(self, query: str):
        """Run one search.

        Returns:
            Success(SearchResult) or Failure. Empty sources is a Success.
        """
        if not self.api_key:
            raise ProviderFailure(
                "Search credential missing",
                details="Set TAVILY_API_KEY to enable web search",
                provider="search",
                error_type="credential",
            )

        log_provider(logger, "search", "start", query=repr(query[:60]))
        start_time = time.time()
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.url, json=self._build_payload(query), headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            log_provider(logger, "search", "failed", duration=time.time() - start_time, status=status_code)
            raise ProviderFailure(
                "Search service error",
                details=f"Tavily returned status {status_code}",
                provider="search",
                status_code=status_code,
            ) from exc
        except httpx.RequestError as exc:
            log_provider(logger, "search", "failed", duration=time.time() - start_time, error=type(exc).__name__)
            raise ProviderFailure(
                "Search service unavailable",
                details=f"Could not reach the search service: {exc}",
                provider="search",
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderFailure(
                "Malformed search response",
                details="Response body is not JSON",
                provider="search",
                error_type="invalid",
            ) from exc

        result = _parse_tavily_results(query, data, self.max_results)
        log_provider(
            logger,
            "search",
            "end",
            duration=time.time() - start_time,
            results=len(result.sources),
            answer=result.answer is not None,
        )
        return Success(result, source="search")


def get_search_client(config=None) -> TavilySearchClient:
    """Build a search client from the runtime config."""
    if config is None:
        from config import runtime_config as config

    return TavilySearchClient(
        api_key=config.tavily_api_key,
        url=config.search_url,
        max_results=config.search_max_results,
        include_answer=config.search_include_answer,
    )
