"""
Runtime Configuration for the Eliza chat gateway.

Provides a singleton RuntimeConfig class holding provider credentials,
transport settings and reconnection tuning. Every field defaults from an
environment variable (a local .env file is loaded first).

Usage:
    from config import runtime_config
    port = runtime_config.port
    runtime_config.update(max_tokens=200)
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from threading import Lock

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

DEFAULT_CLIENT_ENDPOINTS = [
    "ws://127.0.0.1:3000",
    "ws://localhost:3000",
]

DEFAULT_SYSTEM_PROMPT = (
    "You are Eliza, a friendly and intelligent AI assistant. "
    "You can engage in conversation, answer questions, and help with various tasks. "
    "Be warm, helpful, and show personality while remaining professional."
)


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


def _env_list(key: str, default: List[str]) -> List[str]:
    """Parse a comma-separated environment value into a list."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass
class RuntimeConfig:
    """
    Singleton configuration for the gateway, orchestrator and client.

    All values have defaults from environment variables, but can be
    changed at runtime via the update() method.
    """

    # Server
    host: str = field(default_factory=lambda: os.environ.get("ELIZA_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("ELIZA_PORT", "3000")))
    allowed_origins: List[str] = field(
        default_factory=lambda: _env_list("ELIZA_ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    )

    # Provider credentials (never logged)
    openai_api_key: str = field(default_factory=lambda: os.environ.get("OPENAI_API_KEY", ""), repr=False)
    tavily_api_key: str = field(default_factory=lambda: os.environ.get("TAVILY_API_KEY", ""), repr=False)
    prompt_for_credentials: bool = field(default_factory=lambda: _env_bool("ELIZA_PROMPT_FOR_KEYS", True))

    # Completion provider
    model_chat: str = field(
        default_factory=lambda: _first_env("ELIZA_CHAT_MODEL", "OPENAI_MODEL", default="gpt-3.5-turbo")
    )
    max_tokens: int = field(default_factory=lambda: int(os.environ.get("ELIZA_MAX_TOKENS", "150")))
    system_prompt: str = field(default_factory=lambda: os.environ.get("ELIZA_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT))
    # Least-recently-used unary contexts are evicted past this count
    max_contexts: int = field(default_factory=lambda: int(os.environ.get("ELIZA_MAX_CONTEXTS", "1000")))

    # Search provider
    search_url: str = field(
        default_factory=lambda: os.environ.get("TAVILY_SEARCH_URL", "https://api.tavily.com/search")
    )
    search_max_results: int = field(default_factory=lambda: int(os.environ.get("TAVILY_MAX_RESULTS", "5")))
    search_include_answer: bool = field(default_factory=lambda: _env_bool("TAVILY_INCLUDE_ANSWER", True))

    # Response formatting
    fallback_snippet_count: int = 5
    fallback_snippet_chars: int = 200
    result_snippet_chars: int = 250

    # Logging
    log_level: str = field(default_factory=lambda: os.environ.get("ELIZA_LOG_LEVEL", "INFO").upper())

    # Reconnection client
    client_endpoints: List[str] = field(
        default_factory=lambda: _env_list("ELIZA_CLIENT_ENDPOINTS", DEFAULT_CLIENT_ENDPOINTS)
    )
    client_origin: str = field(
        default_factory=lambda: os.environ.get("ELIZA_CLIENT_ORIGIN", "http://localhost:5173")
    )
    connect_timeout_s: float = field(default_factory=lambda: float(os.environ.get("ELIZA_CONNECT_TIMEOUT_S", "5.0")))
    reconnect_base_delay_s: float = field(
        default_factory=lambda: float(os.environ.get("ELIZA_RECONNECT_BASE_DELAY_S", "5.0"))
    )
    reconnect_max_delay_s: float = field(
        default_factory=lambda: float(os.environ.get("ELIZA_RECONNECT_MAX_DELAY_S", "30.0"))
    )
    reconnect_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("ELIZA_RECONNECT_MAX_ATTEMPTS", "5"))
    )

    # Internal state
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)
    _update_count: int = field(default=0, repr=False, compare=False)

    _VALIDATION_RANGES = {
        "port": (1, 65535),
        "max_tokens": (1, 4096),
        "max_contexts": (1, 100000),
        "search_max_results": (1, 20),
        "fallback_snippet_count": (1, 20),
        "fallback_snippet_chars": (20, 2000),
        "result_snippet_chars": (20, 2000),
        "connect_timeout_s": (0.1, 120.0),
        "reconnect_base_delay_s": (0.0, 600.0),
        "reconnect_max_delay_s": (0.0, 3600.0),
        "reconnect_max_attempts": (0, 100),
    }

    _SECRET_FIELDS = {"openai_api_key", "tavily_api_key"}

    def update(self, **kwargs) -> Dict[str, Any]:
        """
        Update configuration values at runtime.

        Returns:
            Dict with 'updated' (changed keys) and 'ignored' (unknown keys)
        """
        updated = []
        ignored = []

        with self._lock:
            for key, value in kwargs.items():
                if key.startswith("_"):
                    ignored.append(key)
                    continue

                if not hasattr(self, key):
                    ignored.append(key)
                    logger.warning(f"Config ignored unknown key: {key}")
                    continue

                if key == "search_url" and isinstance(value, str):
                    cleaned = value.strip()
                    if not cleaned.startswith(("http://", "https://")):
                        ignored.append(key)
                        logger.warning(f"Config rejected invalid URL: {key}={value!r}")
                        continue
                    value = cleaned

                if key == "client_endpoints":
                    if not value or not all(str(url).startswith(("ws://", "wss://")) for url in value):
                        ignored.append(key)
                        logger.warning(f"Config rejected invalid endpoints: {value!r}")
                        continue
                    value = list(value)

                if key in self._VALIDATION_RANGES:
                    lo, hi = self._VALIDATION_RANGES[key]
                    if not (lo <= value <= hi):
                        ignored.append(key)
                        logger.warning(f"Config rejected {key}={value} (must be {lo}-{hi})")
                        continue

                old_value = getattr(self, key)
                setattr(self, key, value)
                updated.append(key)
                if key in self._SECRET_FIELDS:
                    logger.info(f"Config updated: {key} = <redacted>")
                else:
                    logger.info(f"Config updated: {key} = {value} (was {old_value})")

            self._update_count += 1

        return {"updated": updated, "ignored": ignored, "update_count": self._update_count}

    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        """Substring match of an Origin header against the allow-list."""
        if not origin:
            return False
        return any(allowed in origin for allowed in self.allowed_origins)

    def to_dict(self) -> Dict[str, Any]:
        """Export current config as dict (excludes internal fields and secrets)."""
        from dataclasses import fields as dataclass_fields

        result = {}
        for field_info in dataclass_fields(self):
            if field_info.name.startswith("_"):
                continue
            if field_info.name in self._SECRET_FIELDS:
                result[field_info.name] = bool(getattr(self, field_info.name))
                continue
            result[field_info.name] = getattr(self, field_info.name)
        return result


# Singleton instance
runtime_config = RuntimeConfig()


def get_config() -> RuntimeConfig:
    """Get the singleton config instance."""
    return runtime_config
