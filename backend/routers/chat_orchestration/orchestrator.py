"""
Eliza Response Orchestrator - decides how each inbound message is answered

Per message:
1. Explicit search trigger -> search provider directly, formatted results
2. First message of a session -> canned greeting (no provider call)
3. Otherwise -> fallback chain [completion, search, default]

Also manages:
- Per-session conversation contexts (ConversationStore)
- Lifecycle (UNINITIALIZED -> READY after credential bootstrap)
- Conversion of unexpected errors into a fixed apology
"""

import logging
import time
from enum import Enum
from typing import Any, Dict, Optional

from errors import InternalStateError
from ..chat_executors import format_search_results, get_search_client, no_results_message
from services.llm_client import get_llm_client
from .session import ConversationStore
from .strategies import (
    CompletionStrategy,
    DefaultStrategy,
    FallbackChain,
    SearchFallbackStrategy,
    StrategyContext,
)
from .triggers import TriggerTable

logger = logging.getLogger(__name__)

GREETING = "Hello! I'm Eliza, your AI assistant. How can I help you today?"
APOLOGY = "I'm having trouble generating a response right now."
DEFAULT_SESSION = "default"


class OrchestratorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class ResponseOrchestrator:
    """Turns one user message into one reply string.

    Provider clients are normally built by initialize(); tests pass them in
    directly, which makes the orchestrator READY at construction.
    """

    def __init__(
        self,
        config=None,
        llm_client: Any = None,
        search_client: Any = None,
        triggers: Optional[TriggerTable] = None,
        store: Optional[ConversationStore] = None,
    ):
        if config is None:
            from config import runtime_config as config

        self.config = config
        self.triggers = triggers or TriggerTable.default()
        if store is None:
            store = ConversationStore(system_prompt=config.system_prompt, max_contexts=config.max_contexts)
        self.store = store
        self.llm_client = llm_client
        self.search_client = search_client
        self.state = OrchestratorState.UNINITIALIZED
        self.chain: Optional[FallbackChain] = None

        if llm_client is not None and search_client is not None:
            self._build_chain()

    def _build_chain(self) -> None:
        self.chain = FallbackChain(
            [
                CompletionStrategy(self.llm_client),
                SearchFallbackStrategy(
                    self.search_client,
                    snippet_count=self.config.fallback_snippet_count,
                    snippet_chars=self.config.fallback_snippet_chars,
                ),
                DefaultStrategy(),
            ]
        )
        self.state = OrchestratorState.READY

    def initialize(self, credentials) -> None:
        """Build provider clients from bootstrapped credentials.

        Args:
            credentials: ProviderCredentials from resolve_credentials()
        """
        if self.llm_client is None:
            self.config.update(openai_api_key=credentials.openai_api_key)
            self.llm_client = get_llm_client(self.config)
        if self.search_client is None:
            if credentials.tavily_api_key:
                self.config.update(tavily_api_key=credentials.tavily_api_key)
            self.search_client = get_search_client(self.config)
        self._build_chain()
        logger.info(f"Orchestrator ready (chain: {' -> '.join(self.chain.names)})")

    @property
    def is_ready(self) -> bool:
        return self.state == OrchestratorState.READY

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise InternalStateError(
                "Orchestrator is not initialized",
                details="initialize() must run after credential bootstrap",
                state=self.state.value,
            )

    # Session lifecycle

    def open_session(self, session_id: str) -> None:
        self.store.pin(session_id)
        logger.debug(f"Context opened for {session_id} ({len(self.store)} active)")

    def close_session(self, session_id: str) -> None:
        if self.store.discard(session_id):
            logger.debug(f"Context discarded for {session_id} ({len(self.store)} active)")

    def reset(self, session_id: str = DEFAULT_SESSION) -> None:
        """Clear history and re-arm the greeting for a session."""
        self.store.reset(session_id)

    # Message handling

    async def handle(self, message: str, session_id: str = DEFAULT_SESSION) -> str:
        """Answer one message. Never raises."""
        start_time = time.time()
        try:
            self._require_ready()
            if self.triggers.is_search_trigger(message):
                reply = await self._handle_search_request(message)
            else:
                reply = await self.generate_chat_response(message, session_id)
        except Exception as e:
            logger.error(f"Orchestrator error for {session_id}: {e}", exc_info=True)
            return APOLOGY

        logger.debug(f"Handled message for {session_id} in {time.time() - start_time:.2f}s")
        return reply

    async def _handle_search_request(self, message: str) -> str:
        query = self.triggers.extract_search_query(message)
        logger.info(f"Explicit search request: {query!r}")

        outcome = await self.search_client.search(query)
        if not outcome.ok or not outcome.value.has_results:
            return no_results_message(query)

        return format_search_results(outcome.value, snippet_chars=self.config.result_snippet_chars)

    async def generate_chat_response(self, message: str, session_id: str = DEFAULT_SESSION) -> str:
        """Greeting on the first call for a session, otherwise the fallback chain."""
        self._require_ready()
        conversation = self.store.get(session_id)

        if not conversation.started:
            conversation.started = True
            return GREETING

        conversation.add_user_turn(message)
        outcome = await self.chain.run(StrategyContext(message=message, conversation=conversation))
        if not outcome.ok:
            raise InternalStateError("Fallback chain produced no reply", details=outcome.reason)

        logger.debug(f"Reply for {session_id} from '{outcome.source}'")
        return outcome.value

    def status(self) -> Dict[str, Any]:
        return {"state": self.state.value, "sessions": len(self.store)}


_orchestrator: Optional[ResponseOrchestrator] = None


def get_orchestrator() -> ResponseOrchestrator:
    """Get or create the process-wide orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ResponseOrchestrator()
    return _orchestrator


def set_orchestrator(orchestrator: Optional[ResponseOrchestrator]) -> None:
    """Replace the process-wide orchestrator (tests, alternate wiring)."""
    global _orchestrator
    _orchestrator = orchestrator
