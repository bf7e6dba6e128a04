"""
Eliza Chat Executors - Provider-backed executors for the chat pipeline.

- search: Tavily search adapter (SearchResult | Failure)
- formatting: Plain-text renderings of search output
"""

from .search import (
    SearchResult,
    SearchSource,
    TavilySearchClient,
    get_search_client,
)
from .formatting import (
    format_search_results,
    format_fallback_answer,
    no_results_message,
    truncate_url,
)

__all__ = [
    "SearchResult",
    "SearchSource",
    "TavilySearchClient",
    "get_search_client",
    "format_search_results",
    "format_fallback_answer",
    "no_results_message",
    "truncate_url",
]
