"""
Eliza Chat Router - HTTP and WebSocket transport

Both transports hand the raw message to the ResponseOrchestrator and wrap
its reply:

- POST /chat        {message, session_id?} -> {response} | 500 {error}
- WebSocket / (/ws) text frame in -> JSON {response} out

WebSocket handshakes are refused (before accept) unless the Origin header
contains one of the allowed origins. Each accepted socket owns its own
conversation context, keyed by "{address}:{port}".
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from fastapi.websockets import WebSocketState
from pydantic import BaseModel

from errors import OriginRejected, ParseFailure, TransportFailure, log_error
from logging_config import log_connection, log_message_in, log_message_out
from .chat_orchestration import ClientSession, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

GATEWAY_APOLOGY = "I apologize, but I encountered an error. Please try again."
EMPTY_REPLY = "I'm unable to generate a response right now."

# Live WebSocket sessions by client id
_live_sessions: Dict[str, ClientSession] = {}


class ChatRequest(BaseModel):
    message: str = ""
    session_id: Optional[str] = None


def accept_connection(origin: Optional[str], config=None) -> bool:
    """Accept only a present Origin containing an allowed origin (substring)."""
    if config is None:
        from config import runtime_config as config

    return config.is_origin_allowed(origin)


def derive_client_id(address: Optional[str], port: Optional[int]) -> str:
    return f"{address}:{port}"


def _client_id(websocket: WebSocket) -> str:
    if websocket.client:
        return derive_client_id(websocket.client.host, websocket.client.port)
    return derive_client_id("unknown", 0)


def active_session_count() -> int:
    return len(_live_sessions)


@router.post("/chat")
async def handle_unary_request(body: ChatRequest, request: Request):
    """One request, one reply. Errors never leak to the caller."""
    host = request.client.host if request.client else "unknown"
    session_id = body.session_id or f"http:{host}"
    log_message_in(logger, session_id, body.message, channel="http")

    try:
        response = await get_orchestrator().handle(body.message, session_id=session_id)
    except Exception as e:
        log_error(logger, e, context=session_id)
        return JSONResponse(status_code=500, content={"error": GATEWAY_APOLOGY})

    log_message_out(logger, session_id, response, channel="http")
    return {"response": response}


def _decode_frame(frame: dict) -> str:
    """Text of an inbound websocket.receive frame."""
    text = frame.get("text")
    if text is not None:
        return text

    data = frame.get("bytes") or b""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseFailure("Malformed frame", details="Binary frame is not UTF-8 text") from e


async def _send_reply(websocket: WebSocket, client_id: str, reply: str) -> None:
    if websocket.application_state != WebSocketState.CONNECTED:
        logger.warning(f"Reply for {client_id} dropped: channel already closed")
        raise TransportFailure("Channel closed before reply", error_type="closed", client=client_id)

    try:
        await websocket.send_json({"response": reply})
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.warning(f"Reply for {client_id} dropped: {e}")
        raise TransportFailure("Send failed", details=str(e), error_type="closed", client=client_id) from e

    log_message_out(logger, client_id, reply, channel="ws")


async def handle_duplex_message(websocket: WebSocket, session: ClientSession, frame: dict) -> None:
    """Answer one inbound frame with exactly one {response} frame."""
    try:
        message = _decode_frame(frame)
        log_message_in(logger, session.client_id, message, channel="ws")
        reply = await get_orchestrator().handle(message, session_id=session.client_id)
        reply = reply or EMPTY_REPLY
    except Exception as e:
        log_error(logger, e, context=session.client_id)
        reply = GATEWAY_APOLOGY

    await _send_reply(websocket, session.client_id, reply)


@router.websocket("/")
@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    """WebSocket endpoint for chat."""
    client_id = _client_id(websocket)
    origin = websocket.headers.get("origin")

    if not accept_connection(origin):
        error = OriginRejected("WebSocket origin not allowed", origin=origin)
        log_error(logger, error, context=client_id, include_traceback=False)
        await websocket.close(code=1008)
        return

    await websocket.accept()
    session = ClientSession(client_id=client_id, channel=websocket)
    _live_sessions[client_id] = session
    orchestrator = get_orchestrator()
    orchestrator.open_session(client_id)
    log_connection(logger, "accept", client_id, origin=origin)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            await handle_duplex_message(websocket, session, frame)

    except WebSocketDisconnect as e:
        log_connection(logger, "close", client_id, code=e.code)
    except TransportFailure as e:
        log_connection(logger, "error", client_id, reason=e.message)
    except Exception as e:
        logger.error(f"WebSocket error for {client_id}: {e}", exc_info=True)
        log_connection(logger, "error", client_id, reason=type(e).__name__)
    finally:
        _live_sessions.pop(client_id, None)
        orchestrator.close_session(client_id)
