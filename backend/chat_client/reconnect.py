"""
Eliza Reconnection Client - WebSocket client with endpoint fallback and backoff

Connection cycle:
1. Probe the endpoint list in order (one cursor, no delay between endpoints),
   each with a connect timeout
2. First endpoint that opens wins: CONNECTED, attempt counter reset
3. Every endpoint failed: attempt counter +1, wait
   min(base * (n + 1), max) seconds and run a new cycle
4. An open channel that closes schedules a new cycle after the base delay
5. No new cycle once the attempt counter reaches the cap (FAILED)
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

import websockets
from websockets.protocol import State

from errors import TransportFailure
from logging_config import log_connection

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "Sorry, I'm not connected right now. Please wait while I reconnect..."


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


@dataclass
class ConnectionAttemptState:
    """Probe cursor and consecutive full-cycle failures."""

    endpoint_index: int = 0
    attempt_count: int = 0
    status: ConnectionStatus = ConnectionStatus.DISCONNECTED


@dataclass
class DisplayMessage:
    text: str
    sender: str  # "user" or "ai"


def parse_frame(raw: Any) -> str:
    """Display text for an inbound frame.

    JSON with a truthy "response" field yields that field; anything else
    (non-JSON, other JSON) is shown as the raw frame text.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    try:
        data = json.loads(raw)
    except ValueError:
        return raw

    if isinstance(data, dict) and data.get("response"):
        return str(data["response"])
    return raw


class ReconnectionClient:
    """
    Maintains one chat channel to the first reachable endpoint.

    Usage:
        client = ReconnectionClient.from_config(on_message=print_message)
        client.start()
        await client.send("hello")
        ...
        await client.close()
    """

    def __init__(
        self,
        endpoints: List[str],
        connect_timeout: float = 5.0,
        base_delay: float = 5.0,
        max_delay: float = 30.0,
        max_attempts: int = 5,
        origin: Optional[str] = None,
        on_message: Optional[Callable[[DisplayMessage], None]] = None,
        connector: Optional[Callable[[str], Awaitable[Any]]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            endpoints: WebSocket URLs, probed in order
            connect_timeout: Seconds allowed per endpoint
            base_delay: Backoff unit in seconds
            max_delay: Backoff ceiling in seconds
            max_attempts: Full-cycle failures before giving up
            origin: Origin header sent on the handshake
            on_message: Called for every message shown to the user from the AI side
            connector: Coroutine function url -> channel (defaults to websockets.connect)
            sleep: Awaitable sleep (tests pass a recorder)
        """
        if not endpoints:
            raise ValueError("At least one endpoint is required")

        self.endpoints = list(endpoints)
        self.connect_timeout = connect_timeout
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_attempts = max_attempts
        self.origin = origin
        self.on_message = on_message
        self._connector = connector or self._default_connect
        self._sleep = sleep

        self.state = ConnectionAttemptState()
        self.messages: List[DisplayMessage] = []
        self._channel: Any = None
        self._reader_task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None
        self._closed = False

    @classmethod
    def from_config(cls, config=None, **kwargs) -> "ReconnectionClient":
        if config is None:
            from config import runtime_config as config

        return cls(
            endpoints=config.client_endpoints,
            connect_timeout=config.connect_timeout_s,
            base_delay=config.reconnect_base_delay_s,
            max_delay=config.reconnect_max_delay_s,
            max_attempts=config.reconnect_max_attempts,
            origin=config.client_origin,
            **kwargs,
        )

    async def _default_connect(self, url: str):
        return await websockets.connect(url, origin=self.origin)

    @property
    def is_connected(self) -> bool:
        return self._channel is not None and getattr(self._channel, "state", None) is State.OPEN

    def backoff_delay(self, failures: int) -> float:
        """Delay before the next cycle after `failures` earlier full-cycle failures."""
        return min(self.base_delay * (failures + 1), self.max_delay)

    def _add_message(self, text: str, sender: str) -> None:
        message = DisplayMessage(text=text, sender=sender)
        self.messages.append(message)
        if sender == "ai" and self.on_message is not None:
            try:
                self.on_message(message)
            except Exception as e:
                logger.error(f"Message callback failed: {e}", exc_info=True)

    # Connection cycle

    async def attempt_connection(self) -> bool:
        """Probe every endpoint once. Returns True when a channel opened."""
        self.state.status = ConnectionStatus.CONNECTING
        self.state.endpoint_index = 0

        while self.state.endpoint_index < len(self.endpoints):
            url = self.endpoints[self.state.endpoint_index]
            log_connection(
                logger, "connecting", url, attempt=self.state.attempt_count + 1, endpoint=self.state.endpoint_index
            )
            try:
                channel = await asyncio.wait_for(self._connector(url), timeout=self.connect_timeout)
            except asyncio.TimeoutError:
                failure = TransportFailure("Connection timed out", endpoint=url, error_type="timeout")
                logger.warning(f"{failure} after {self.connect_timeout}s")
            except Exception as e:
                failure = TransportFailure("Connection failed", details=str(e) or type(e).__name__, endpoint=url)
                logger.warning(str(failure))
            else:
                self._on_open(channel, url)
                return True

            self.state.endpoint_index += 1

        self.state.status = ConnectionStatus.DISCONNECTED
        self.state.attempt_count += 1
        logger.error(f"All WebSocket endpoints failed (attempt {self.state.attempt_count})")
        return False

    def _on_open(self, channel: Any, url: str) -> None:
        self._channel = channel
        self.state.status = ConnectionStatus.CONNECTED
        self.state.attempt_count = 0
        log_connection(logger, "connected", url)
        self._reader_task = asyncio.create_task(self._read_loop(channel, url))

    async def _run_cycle(self, initial_delay: Optional[float] = None) -> bool:
        if initial_delay is not None:
            self.state.status = ConnectionStatus.RECONNECTING
            logger.info(f"Reconnecting in {initial_delay:.0f}s")
            await self._sleep(initial_delay)

        while not self._closed:
            if await self.attempt_connection():
                return True

            if self.state.attempt_count >= self.max_attempts:
                self.state.status = ConnectionStatus.FAILED
                logger.error("Max connection attempts reached. Please check server status.")
                return False

            delay = self.backoff_delay(self.state.attempt_count - 1)
            self.state.status = ConnectionStatus.RECONNECTING
            logger.info(f"Reconnecting in {delay:.0f}s")
            await self._sleep(delay)

        return False

    def start(self, initial_delay: Optional[float] = None) -> Optional[asyncio.Task]:
        """Start a connection cycle unless one is already running or the cap is reached."""
        if self._closed:
            return None
        if self._cycle_task is not None and not self._cycle_task.done():
            return self._cycle_task
        if self.state.attempt_count >= self.max_attempts:
            self.state.status = ConnectionStatus.FAILED
            logger.error("Max connection attempts reached. Please check server status.")
            return None

        self._cycle_task = asyncio.create_task(self._run_cycle(initial_delay))
        return self._cycle_task

    async def maintain(self) -> bool:
        """Run a connection cycle to completion. True once connected."""
        task = self.start()
        if task is None:
            return False
        return await task

    async def _read_loop(self, channel: Any, url: str) -> None:
        try:
            async for raw in channel:
                self._add_message(parse_frame(raw), "ai")
        except websockets.ConnectionClosed as e:
            log_connection(logger, "closed", url, reason=str(e))
        finally:
            if self._channel is channel:
                self._channel = None
            if not self._closed and getattr(channel, "state", None) is not State.CLOSED:
                await channel.close()
            if not self._closed:
                self.state.status = ConnectionStatus.DISCONNECTED
                log_connection(logger, "disconnected", url)
                self.start(initial_delay=self.backoff_delay(self.state.attempt_count))

    # Outbound

    async def send(self, text: str) -> bool:
        """Send one user message. Returns False when it could not be sent."""
        if not text.strip():
            return False

        self._add_message(text, "user")

        if not self.is_connected:
            return self._not_connected()

        try:
            await self._channel.send(text)
        except websockets.ConnectionClosed as e:
            log_connection(logger, "closed", self.endpoints[self.state.endpoint_index], reason=str(e))
            return self._not_connected()
        return True

    def _not_connected(self) -> bool:
        self._add_message(NOT_CONNECTED_MESSAGE, "ai")
        logger.warning(f"WebSocket is not open (status={self.state.status.value})")
        self.start()
        return False

    async def close(self) -> None:
        self._closed = True
        for task in (self._cycle_task, self._reader_task):
            if task is not None and not task.done() and task is not asyncio.current_task():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if self._channel is not None:
            await self._channel.close()
            self._channel = None
        self.state.status = ConnectionStatus.DISCONNECTED
