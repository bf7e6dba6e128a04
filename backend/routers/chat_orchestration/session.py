"""
Eliza Chat Session - Conversation state management

Dataclasses holding conversation state, keyed by client session id so
concurrent connections never share a turn history.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """One message in the replayed history."""

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ConversationContext:
    """Ordered turn history plus the greeting flag for one session.

    Attributes:
        session_id: Key of the owning client session
        turns: Ordered turns, replayed verbatim to the completion provider
        started: Set once the greeting has been sent
    """

    session_id: str
    turns: List[ConversationTurn] = field(default_factory=list)
    started: bool = False

    @classmethod
    def create(cls, session_id: str, system_prompt: Optional[str] = None) -> "ConversationContext":
        context = cls(session_id=session_id)
        if system_prompt:
            context.turns.append(ConversationTurn(Role.SYSTEM, system_prompt))
        return context

    def add_user_turn(self, content: str) -> None:
        self.turns.append(ConversationTurn(Role.USER, content))

    def add_assistant_turn(self, content: str) -> None:
        self.turns.append(ConversationTurn(Role.ASSISTANT, content))

    def history(self) -> List[ConversationTurn]:
        """Snapshot of the turns in insertion order."""
        return list(self.turns)

    def reset(self, system_prompt: Optional[str] = None) -> None:
        """Drop all turns except a fresh system prompt and re-arm the greeting."""
        self.turns = []
        if system_prompt:
            self.turns.append(ConversationTurn(Role.SYSTEM, system_prompt))
        self.started = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "turns": [turn.to_dict() for turn in self.turns],
            "started": self.started,
        }


@dataclass
class ClientSession:
    """One accepted duplex connection.

    Attributes:
        client_id: "{address}:{port}" of the remote end
        channel: The WebSocket handle
        connected_at: Connection timestamp (UTC)
    """

    client_id: str
    channel: Any = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ConversationStore:
    """Maps session id to ConversationContext.

    Contexts are created on demand and discarded when their session closes.
    Nothing is persisted. Sessions opened with pin() (live WebSocket
    connections) are kept until discarded; past max_contexts the
    least-recently-used unpinned context is evicted, which bounds the
    contexts created for client-chosen unary session ids.
    """

    def __init__(self, system_prompt: Optional[str] = None, max_contexts: Optional[int] = None):
        self.system_prompt = system_prompt
        self.max_contexts = max_contexts
        self._contexts: "OrderedDict[str, ConversationContext]" = OrderedDict()
        self._pinned: Set[str] = set()

    def get(self, session_id: str) -> ConversationContext:
        """Return the context for session_id, creating it if needed."""
        context = self._contexts.get(session_id)
        if context is None:
            context = ConversationContext.create(session_id, self.system_prompt)
            self._contexts[session_id] = context
            self._evict()
        else:
            self._contexts.move_to_end(session_id)
        return context

    def pin(self, session_id: str) -> ConversationContext:
        """Create or fetch a context that is exempt from eviction."""
        self._pinned.add(session_id)
        return self.get(session_id)

    def _evict(self) -> None:
        if self.max_contexts is None:
            return
        excess = len(self._contexts) - self.max_contexts
        if excess <= 0:
            return
        # Oldest first; the newest entry is never a candidate
        candidates = [sid for sid in list(self._contexts)[:-1] if sid not in self._pinned]
        for session_id in candidates[:excess]:
            del self._contexts[session_id]
            logger.debug(f"Evicted idle context {session_id}")

    def discard(self, session_id: str) -> bool:
        """Remove a context. Returns True if one existed."""
        self._pinned.discard(session_id)
        return self._contexts.pop(session_id, None) is not None

    def reset(self, session_id: str) -> None:
        self.get(session_id).reset(self.system_prompt)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
