"""
Response Strategies - Ordered fallback chain for chat replies.

Each strategy returns a tagged outcome. The chain runs them in order and
stops at the first Success:

    completion  - full history to the completion provider
    search      - raw message to the search provider
    default     - fixed "try a web search?" message
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from errors import ErrorCode, Failure, Success
from logging_config import log_provider
from ..chat_executors import format_fallback_answer
from .session import ConversationContext

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_MESSAGE = "I'm having trouble generating a response right now. Would you like to try a web search?"


@dataclass
class StrategyContext:
    """Input passed through the chain."""

    message: str
    conversation: ConversationContext


class ResponseStrategy(ABC):
    """One stage of the fallback chain."""

    name: str = "base"

    @abstractmethod
    async def respond(self, ctx: StrategyContext):
        """Produce Success(text) or Failure."""
        pass


class CompletionStrategy(ResponseStrategy):
    """Ask the completion provider with the whole ordered history.

    On success the reply is appended to the history as an assistant turn.
    """

    name = "completion"

    def __init__(self, client):
        self.client = client

    async def respond(self, ctx: StrategyContext):
        outcome = await self.client.complete(ctx.conversation.history())
        if outcome.ok:
            ctx.conversation.add_assistant_turn(outcome.value)
        return outcome


class SearchFallbackStrategy(ResponseStrategy):
    """Answer from web search using the raw message as the query.

    Search replies are not added to the history.
    """

    name = "search"

    def __init__(self, client, snippet_count: int = 5, snippet_chars: int = 200):
        self.client = client
        self.snippet_count = snippet_count
        self.snippet_chars = snippet_chars

    async def respond(self, ctx: StrategyContext):
        outcome = await self.client.search(ctx.message)
        if not outcome.ok:
            return outcome

        result = outcome.value
        if not result.has_results:
            return Failure(reason="Search returned no results", code=ErrorCode.PROVIDER_SEARCH_FAILED, source=self.name)

        return Success(
            format_fallback_answer(result, snippet_count=self.snippet_count, snippet_chars=self.snippet_chars),
            source=self.name,
        )


class DefaultStrategy(ResponseStrategy):
    """Terminal stage. Always succeeds."""

    name = "default"

    def __init__(self, message: str = DEFAULT_FALLBACK_MESSAGE):
        self.message = message

    async def respond(self, ctx: StrategyContext):
        return Success(self.message, source=self.name)


class FallbackChain:
    """
    Runs strategies in order until one succeeds.

    Usage:
        chain = FallbackChain([CompletionStrategy(llm), SearchFallbackStrategy(search), DefaultStrategy()])
        outcome = await chain.run(StrategyContext(message, conversation))
    """

    def __init__(self, strategies: List[ResponseStrategy]):
        self._strategies = list(strategies)

    @property
    def names(self) -> List[str]:
        return [s.name for s in self._strategies]

    async def run(self, ctx: StrategyContext):
        last_failure: Optional[Failure] = None
        for strategy in self._strategies:
            outcome = await strategy.respond(ctx)
            if outcome.ok:
                if last_failure is not None:
                    logger.info(f"Fallback chain answered by '{strategy.name}'")
                return outcome

            last_failure = outcome
            log_provider(logger, strategy.name, "failed", code=outcome.code.value, reason=repr(outcome.reason))

        return last_failure or Failure(reason="No strategies configured", code=ErrorCode.INTERNAL_STATE_ERROR)
