"""
Eliza chat client - WebSocket counterpart of the browser chat UI.
"""

from .reconnect import (
    NOT_CONNECTED_MESSAGE,
    ConnectionAttemptState,
    ConnectionStatus,
    DisplayMessage,
    ReconnectionClient,
    parse_frame,
)

__all__ = [
    "NOT_CONNECTED_MESSAGE",
    "ConnectionAttemptState",
    "ConnectionStatus",
    "DisplayMessage",
    "ReconnectionClient",
    "parse_frame",
]
