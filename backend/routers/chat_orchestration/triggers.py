"""
Eliza Search Triggers - Explicit web search detection

An ordered table of matchers (literal phrases or regex patterns). The first
matcher in table order that occurs anywhere in the message wins, even when
another trigger appears earlier in the text. The query is the message with
that matcher's first span removed.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TRIGGER_PHRASES: Tuple[str, ...] = (
    "/search",
    "/web",
    "!search",
    "find information about",
    "search the web for",
    "lookup",
    "what can you find about",
)


@dataclass(frozen=True)
class TriggerMatcher:
    """One entry of the trigger table."""

    name: str
    pattern: Pattern[str]

    @classmethod
    def literal(cls, phrase: str) -> "TriggerMatcher":
        return cls(name=phrase, pattern=re.compile(re.escape(phrase), re.IGNORECASE))

    @classmethod
    def regex(cls, name: str, pattern: str) -> "TriggerMatcher":
        return cls(name=name, pattern=re.compile(pattern, re.IGNORECASE))

    def find(self, text: str) -> Optional[Tuple[int, int]]:
        match = self.pattern.search(text)
        return match.span() if match else None


@dataclass(frozen=True)
class TriggerMatch:
    matcher: TriggerMatcher
    start: int
    end: int


class TriggerTable:
    """Ordered set of search triggers.

    Usage:
        table = TriggerTable.default()
        if table.is_search_trigger(message):
            query = table.extract_search_query(message)
    """

    def __init__(self, matchers: Iterable[TriggerMatcher]):
        self._matchers: List[TriggerMatcher] = list(matchers)

    @classmethod
    def from_phrases(cls, phrases: Iterable[str]) -> "TriggerTable":
        return cls(TriggerMatcher.literal(p) for p in phrases)

    @classmethod
    def default(cls) -> "TriggerTable":
        return cls.from_phrases(DEFAULT_TRIGGER_PHRASES)

    @property
    def names(self) -> List[str]:
        return [m.name for m in self._matchers]

    def match(self, text: str) -> Optional[TriggerMatch]:
        """First matcher in table order that occurs in text."""
        if not text:
            return None
        for matcher in self._matchers:
            span = matcher.find(text)
            if span is not None:
                return TriggerMatch(matcher, span[0], span[1])
        return None

    def is_search_trigger(self, text: str) -> bool:
        return self.match(text) is not None

    def extract_search_query(self, text: str) -> str:
        """Remove the winning trigger's first occurrence and trim.

        Messages without a trigger are returned unchanged.
        """
        found = self.match(text)
        if found is None:
            return text
        query = (text[: found.start] + text[found.end :]).strip()
        logger.debug(f"Search trigger '{found.matcher.name}' -> query {query!r}")
        return query


_default_table = TriggerTable.default()


def is_search_trigger(text: str) -> bool:
    """Module-level shortcut using the default trigger table."""
    return _default_table.is_search_trigger(text)


def extract_search_query(text: str) -> str:
    """Module-level shortcut using the default trigger table."""
    return _default_table.extract_search_query(text)
