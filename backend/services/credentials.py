"""
Provider credential bootstrap.

Resolves the completion and search keys before the orchestrator becomes
ready. The completion key is required: when it is absent and the process
has an interactive terminal, it is asked for once. A missing search key
only disables web search.
"""

import getpass
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional

from errors import FatalStartup

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 20
OPENAI_KEY_URL = "https://platform.openai.com/account/api-keys"


@dataclass(frozen=True)
class ProviderCredentials:
    openai_api_key: str = field(repr=False)
    tavily_api_key: str = field(default="", repr=False)

    @property
    def search_enabled(self) -> bool:
        return bool(self.tavily_api_key)


def _default_prompt() -> Optional[Callable[[str], str]]:
    """Return getpass when stdin is a terminal, else None."""
    if sys.stdin is not None and sys.stdin.isatty():
        return getpass.getpass
    return None


def resolve_credentials(config, prompt: Optional[Callable[[str], str]] = None) -> ProviderCredentials:
    """Resolve provider keys from config, prompting for the completion key if allowed.

    Args:
        config: RuntimeConfig (reads openai_api_key, tavily_api_key, prompt_for_credentials)
        prompt: Callable used to ask for the key; defaults to getpass on a TTY

    Returns:
        ProviderCredentials

    Raises:
        FatalStartup: The completion key is missing or invalid
    """
    openai_key = (config.openai_api_key or "").strip()

    if not openai_key and config.prompt_for_credentials:
        ask = prompt or _default_prompt()
        if ask is not None:
            logger.info(f"OpenAI API key is required. Obtain one from {OPENAI_KEY_URL}")
            openai_key = (ask("Enter your OpenAI API Key: ") or "").strip()
            if len(openai_key) < MIN_KEY_LENGTH:
                raise FatalStartup(
                    "Invalid OpenAI API key",
                    details=f"Keys are at least {MIN_KEY_LENGTH} characters",
                    credential="OPENAI_API_KEY",
                )
            config.update(openai_api_key=openai_key)

    if not openai_key:
        raise FatalStartup(
            "OpenAI API key is not set",
            details="Set OPENAI_API_KEY in the environment or a .env file",
            credential="OPENAI_API_KEY",
        )

    tavily_key = (config.tavily_api_key or "").strip()
    if not tavily_key:
        logger.warning("TAVILY_API_KEY is not set, web search and search fallback are disabled")

    return ProviderCredentials(openai_api_key=openai_key, tavily_api_key=tavily_key)
