"""
Eliza Logging Configuration - Color-Coded Console Logs

Provides:
- ColorFormatter: ANSI color-coded log output with timestamps
- Helper functions: log_message_in, log_message_out, log_provider, log_connection
- setup_logging(): Configure application logging

Usage:
    from logging_config import setup_logging, log_message_in
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "127.0.0.1:52144", "hello")
"""

import logging
import sys
from typing import Union

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - incoming message
    "MSG_OUT": "\033[92m",  # Green - outgoing response
    "CONN": "\033[95m",  # Magenta - connection lifecycle
    "PROVIDER": "\033[94m",  # Blue - completion/search calls
    "ERROR": "\033[91m",  # Red - errors
    "WARN": "\033[33m",  # Orange/Yellow - warnings
    "DEBUG": "\033[90m",  # Gray - debug info
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["DEBUG"],
        logging.INFO: COLORS["RESET"],
        logging.WARNING: COLORS["WARN"],
        logging.ERROR: COLORS["ERROR"],
        logging.CRITICAL: COLORS["ERROR"] + COLORS["BOLD"],
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["RESET"])

        # Format: timestamp [LEVEL] message
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        level = record.levelname[:4]

        formatted = (
            f"{COLORS['DIM']}{timestamp}{COLORS['RESET']} "
            f"[{color}{level}{COLORS['RESET']}] "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure colored logging for the application."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter())

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


# =============================================================================
# COLORED LOG HELPER FUNCTIONS
# =============================================================================


def _preview(text: str, limit: int = 80) -> str:
    text = text or ""
    return text[:limit] + "..." if len(text) > limit else text


def log_message_in(logger: logging.Logger, client_id: str, message: str, **context) -> None:
    """Log an inbound payload.

    Args:
        logger: Logger instance
        client_id: "{address}:{port}" of the sender
        message: Raw message text
        **context: Additional context (channel, session, etc.)
    """
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"{COLORS['MSG_IN']}>>> MESSAGE{COLORS['RESET']} {client_id} {_preview(message)} [{ctx}]")


def log_message_out(logger: logging.Logger, client_id: str, response: str, **context) -> None:
    """Log an outbound payload.

    Args:
        logger: Logger instance
        client_id: "{address}:{port}" of the recipient
        response: Response text sent back
        **context: Additional context
    """
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(
        f"{COLORS['MSG_OUT']}<<< RESPONSE{COLORS['RESET']} {client_id} "
        f"chars={len(response or '')} {_preview(response)} [{ctx}]"
    )


def log_connection(logger: logging.Logger, event: str, client_id: str, **context) -> None:
    """Log a connection lifecycle event (accept, reject, close, error)."""
    ctx = " ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    logger.info(f"{COLORS['CONN']}=== {event.upper()}{COLORS['RESET']} {client_id} {ctx}".rstrip())


def log_provider(
    logger: logging.Logger,
    provider: str,
    state: str,
    duration: float = 0,
    **context,
) -> None:
    """Log a provider call.

    Args:
        logger: Logger instance
        provider: 'completion' or 'search'
        state: 'start', 'end' or 'failed'
        duration: Call duration in seconds (for end/failed states)
        **context: Additional context (model, query, results, reason)
    """
    ctx = " ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    if state == "start":
        logger.info(f"{COLORS['PROVIDER']}>>> {provider.upper()}{COLORS['RESET']} {ctx}".rstrip())
    elif state == "failed":
        logger.warning(
            f"{COLORS['ERROR']}!!! {provider.upper()}{COLORS['RESET']} failed after {duration:.1f}s {ctx}".rstrip()
        )
    else:
        logger.info(
            f"{COLORS['PROVIDER']}<<< {provider.upper()}{COLORS['RESET']} completed in {duration:.1f}s {ctx}".rstrip()
        )
