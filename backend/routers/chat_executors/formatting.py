"""
Eliza Chat Executors - Search result rendering

Plain-text renderings of a SearchResult for the two places search output
reaches the user: explicit search triggers and the completion fallback.
"""

from typing import Optional
from urllib.parse import urlparse

from .search import SearchResult

FALLBACK_PREAMBLE = "I couldn't generate a direct response, but here's some relevant information:\n\n"


def _snippet(content: str, limit: int) -> str:
    return content[:limit] + ("..." if len(content) > limit else "")


def no_results_message(query: Optional[str]) -> str:
    """Message for a search that failed or returned no sources."""
    return f'❌ No results found for "{query or "the query"}".'


def format_search_results(result: Optional[SearchResult], snippet_chars: int = 250, limit: int = 5) -> str:
    """Render search results for an explicit search request."""
    if result is None or not result.has_results:
        query = result.query if result is not None else None
        return f'🔍 No search results found for "{query or "the query"}"'

    output = f'🌐 Web Search Results for "{result.query}"\n\n'

    if result.answer:
        output += f"📌 Key Insights:\n{result.answer}\n\n"

    output += "🔍 Top Sources:\n"
    for index, source in enumerate(result.sources[:limit], start=1):
        output += f"\n{index}. {source.title}\n"
        output += f"   🔗 URL: {source.url}\n"
        output += f"   📄 Snippet: {_snippet(source.content, snippet_chars)}\n"

    output += "\n💡 Search Details:\n"
    output += f"- Total Sources: {len(result.sources)}\n"
    output += "- Powered by Tavily AI\n"

    return output


def format_fallback_answer(result: SearchResult, snippet_count: int = 5, snippet_chars: int = 200) -> str:
    """Render search output used in place of a failed completion.

    The direct answer wins when present; otherwise one bullet per source.
    """
    if result.answer:
        return result.answer

    lines = [f"• {source.title}: {source.content[:snippet_chars]}..." for source in result.sources[:snippet_count]]
    return FALLBACK_PREAMBLE + "\n".join(lines)


def truncate_url(url: str, max_length: int = 50) -> str:
    """Shorten a URL to domain + leading path for terminal display."""
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError(url)
        domain = parsed.hostname.replace("www.", "", 1)
        path = parsed.path[:20] + "..." if len(parsed.path) > 20 else parsed.path
        return f"{domain}{path}"
    except ValueError:
        return url[:max_length] + "..." if len(url) > max_length else url
