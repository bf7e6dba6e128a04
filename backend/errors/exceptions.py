"""
Exceptions raised along the gateway's message path.

Each failure a message can hit has its own class: a refused WebSocket
handshake, a completion or search provider call, an unreadable inbound
frame, a broken channel, a startup that cannot continue. The class sets the
default ErrorCode; keyword arguments narrow it (origin, provider,
error_type, credential) and land in `context` for the log line.

`recoverable` marks failures the gateway absorbs without dropping anything:
the fallback chain moves to its next stage, or the client shows the frame
as plain text. Non-recoverable ones end the handshake or the process.
"""

from typing import Any, Optional
from .codes import ErrorCode


class ElizaError(Exception):
    """Root of the gateway's exceptions.

    str() gives "message - details", the form used in provider Failure
    reasons and in log_error output. Nothing here reaches a chat client;
    callers reply with a fixed apology instead.
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Subclasses pass the code picked from their kwargs
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Structured form for diagnostics; secrets are never placed in context."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class OriginRejected(ElizaError):
    """Handshake refused because the Origin header is missing or not allowed."""

    code = ErrorCode.ORIGIN_REJECTED
    recoverable = False

    def __init__(self, message: str, details: Optional[str] = None, origin: Optional[str] = None, **context: Any):
        code = ErrorCode.ORIGIN_REJECTED if origin else ErrorCode.ORIGIN_MISSING
        ctx = {**context}
        if origin:
            ctx["origin"] = origin
        super().__init__(message, details, code=code, **ctx)


class ProviderFailure(ElizaError):
    """Completion or search provider call failed."""

    code = ErrorCode.PROVIDER_COMPLETION_FAILED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        # Set appropriate code based on provider and error type
        if error_type == "credential":
            code = ErrorCode.PROVIDER_CREDENTIAL_MISSING
        elif error_type == "invalid":
            code = ErrorCode.PROVIDER_RESPONSE_INVALID
        elif provider == "search":
            code = ErrorCode.PROVIDER_SEARCH_FAILED
        else:
            code = ErrorCode.PROVIDER_COMPLETION_FAILED

        ctx = {**context}
        if provider:
            ctx["provider"] = provider
        if status_code:
            ctx["status_code"] = status_code
        super().__init__(message, details, code=code, **ctx)


class ParseFailure(ElizaError):
    """Malformed inbound duplex frame."""

    code = ErrorCode.PARSE_FRAME_INVALID
    recoverable = True


class TransportFailure(ElizaError):
    """Channel error, close or connect timeout."""

    code = ErrorCode.TRANSPORT_CHANNEL_ERROR
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        endpoint: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "timeout":
            code = ErrorCode.TRANSPORT_CONNECT_TIMEOUT
        elif error_type == "closed":
            code = ErrorCode.TRANSPORT_CHANNEL_CLOSED
        else:
            code = ErrorCode.TRANSPORT_CHANNEL_ERROR

        ctx = {**context}
        if endpoint:
            ctx["endpoint"] = endpoint
        super().__init__(message, details, code=code, **ctx)


class FatalStartup(ElizaError):
    """Missing credential or listen-socket bind failure. The process exits."""

    code = ErrorCode.STARTUP_CREDENTIAL_MISSING
    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        credential: Optional[str] = None,
        **context: Any,
    ):
        code = ErrorCode.STARTUP_CREDENTIAL_MISSING if credential else ErrorCode.STARTUP_BIND_FAILED
        ctx = {**context}
        if credential:
            ctx["credential"] = credential
        super().__init__(message, details, code=code, **ctx)


class InternalStateError(ElizaError):
    """Component used before it reached its ready state."""

    code = ErrorCode.INTERNAL_STATE_ERROR
    recoverable = False
