"""
Error codes for the Eliza chat gateway.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across logs and outcomes.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes.

    Categories:
    - ORIGIN_*: Handshake origin verification
    - PROVIDER_*: Completion and search provider calls
    - PARSE_*: Inbound frame parsing
    - TRANSPORT_*: Channel errors and closes
    - STARTUP_*: Fatal startup conditions
    - INTERNAL_*: Internal/unexpected errors
    """

    # Origin errors (handshake)
    ORIGIN_MISSING = "ORIGIN_MISSING"
    ORIGIN_REJECTED = "ORIGIN_REJECTED"

    # Provider errors (recovered by the fallback chain)
    PROVIDER_COMPLETION_FAILED = "PROVIDER_COMPLETION_FAILED"
    PROVIDER_SEARCH_FAILED = "PROVIDER_SEARCH_FAILED"
    PROVIDER_CREDENTIAL_MISSING = "PROVIDER_CREDENTIAL_MISSING"
    PROVIDER_RESPONSE_INVALID = "PROVIDER_RESPONSE_INVALID"

    # Parse errors (recovered as plain text)
    PARSE_FRAME_INVALID = "PARSE_FRAME_INVALID"

    # Transport errors (logged, session discarded)
    TRANSPORT_CHANNEL_ERROR = "TRANSPORT_CHANNEL_ERROR"
    TRANSPORT_CHANNEL_CLOSED = "TRANSPORT_CHANNEL_CLOSED"
    TRANSPORT_CONNECT_TIMEOUT = "TRANSPORT_CONNECT_TIMEOUT"

    # Startup errors (process exits)
    STARTUP_CREDENTIAL_MISSING = "STARTUP_CREDENTIAL_MISSING"
    STARTUP_BIND_FAILED = "STARTUP_BIND_FAILED"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
    INTERNAL_STATE_ERROR = "INTERNAL_STATE_ERROR"
