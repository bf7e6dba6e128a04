"""
Error handling decorators and utilities for the Eliza chat gateway.

Provides decorators that turn exceptions raised inside provider adapters
into tagged Failure outcomes.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .codes import ErrorCode
from .exceptions import ElizaError
from .outcomes import Failure

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def _to_failure(provider: str, error: Exception) -> Failure:
    if isinstance(error, ElizaError):
        return Failure(reason=str(error), code=error.code, source=provider, error=error)
    return Failure(reason=f"{type(error).__name__}: {error}", code=ErrorCode.INTERNAL_UNEXPECTED, source=provider, error=error)


def handle_async_provider_errors(provider: str, logger: Optional[logging.Logger] = None):
    """Decorator that turns exceptions from an async provider call into a Failure.

    ElizaError subclasses are logged as warnings; anything else is logged
    with its traceback. Either way the caller gets a Failure tagged with
    the provider name, so the fallback chain can move on.

    Args:
        provider: Name of the provider for the outcome and log prefix
        logger: Optional logger instance (defaults to provider-specific logger)

    Example:
        >>> @handle_async_provider_errors("search")
        ... async def search(self, query):
        ...     response = await http.post(url, json={"query": query})
        ...     return Success(parse(response), source="search")
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"eliza.{provider}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            try:
                return await func(*args, **kwargs)
            except ElizaError as e:
                log.warning(f"[{provider}] {e.code.value}: {e}")
                return _to_failure(provider, e)
            except Exception as e:
                log.error(f"[{provider}] Unexpected error: {e}", exc_info=True)
                return _to_failure(provider, e)

        return wrapper  # type: ignore

    return decorator


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="ws")
        # Logs: "[ws] TRANSPORT_CHANNEL_ERROR: Connection reset"
    """
    if isinstance(error, ElizaError):
        message = f"{error.code.value}: {error}"
        if error.context:
            message += " (" + ", ".join(f"{k}={v}" for k, v in error.context.items()) + ")"
    else:
        message = f"{type(error).__name__}: {error}"

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)
