"""
Eliza Chat Orchestration - Response pipeline components

Components:
- ConversationStore / ConversationContext: Per-session turn history
- TriggerTable: Ordered explicit search triggers
- FallbackChain: completion -> search -> default strategies
- ResponseOrchestrator: Greeting, trigger path and fallback chain
"""

from .session import ClientSession, ConversationContext, ConversationStore, ConversationTurn, Role
from .triggers import TriggerMatcher, TriggerTable, extract_search_query, is_search_trigger
from .strategies import (
    CompletionStrategy,
    DefaultStrategy,
    FallbackChain,
    ResponseStrategy,
    SearchFallbackStrategy,
    StrategyContext,
)
from .orchestrator import (
    APOLOGY,
    GREETING,
    OrchestratorState,
    ResponseOrchestrator,
    get_orchestrator,
    set_orchestrator,
)

__all__ = [
    "ClientSession",
    "ConversationContext",
    "ConversationStore",
    "ConversationTurn",
    "Role",
    "TriggerMatcher",
    "TriggerTable",
    "extract_search_query",
    "is_search_trigger",
    "CompletionStrategy",
    "DefaultStrategy",
    "FallbackChain",
    "ResponseStrategy",
    "SearchFallbackStrategy",
    "StrategyContext",
    "APOLOGY",
    "GREETING",
    "OrchestratorState",
    "ResponseOrchestrator",
    "get_orchestrator",
    "set_orchestrator",
]
