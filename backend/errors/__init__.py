"""
Eliza Error Handling Module

Provides standardized error codes, exceptions, tagged outcomes and
decorators for consistent error handling across the gateway.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        ElizaError,
        OriginRejected,
        ProviderFailure,
        ParseFailure,
        TransportFailure,
        FatalStartup,
        InternalStateError,

        # Outcomes
        Success,
        Failure,
        Outcome,

        # Decorators
        handle_async_provider_errors,
        log_error,
    )

Example:
    from errors import handle_async_provider_errors, ProviderFailure, Success

    @handle_async_provider_errors("search")
    async def search(query):
        response = await client.post(url, json={"query": query})
        if response.status_code >= 400:
            raise ProviderFailure(
                "Search service error",
                details=f"status {response.status_code}",
                provider="search",
                status_code=response.status_code,
            )
        return Success(parse(response.json()))
"""

from .codes import ErrorCode
from .exceptions import (
    ElizaError,
    OriginRejected,
    ProviderFailure,
    ParseFailure,
    TransportFailure,
    FatalStartup,
    InternalStateError,
)
from .outcomes import Success, Failure, Outcome
from .handlers import (
    handle_async_provider_errors,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "ElizaError",
    "OriginRejected",
    "ProviderFailure",
    "ParseFailure",
    "TransportFailure",
    "FatalStartup",
    "InternalStateError",
    # Outcomes
    "Success",
    "Failure",
    "Outcome",
    # Decorators
    "handle_async_provider_errors",
    "log_error",
]
