"""
LLM Client - wraps the OpenAI SDK for chat completions.

One call per user turn with the full ordered history and a fixed token
budget. Any error (quota, network, malformed or empty choice) is returned
as a Failure; there are no retries.

Response:
    Success(text) | Failure(reason)
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from openai import OpenAI, OpenAIError

from errors import ProviderFailure, Success, handle_async_provider_errors
from logging_config import log_provider

logger = logging.getLogger(__name__)

VALID_ROLES = {"system", "user", "assistant"}


def _translate_turns_for_openai(history: Iterable[Any]) -> List[Dict[str, str]]:
    """Translate conversation turns (objects or dicts) to OpenAI message dicts."""
    translated = []
    for turn in history:
        if isinstance(turn, dict):
            role = turn.get("role", "user")
            content = turn.get("content", "")
        else:
            role = getattr(turn, "role", "user")
            content = getattr(turn, "content", "")

        role = getattr(role, "value", role)
        if role not in VALID_ROLES:
            raise ProviderFailure(
                "Invalid conversation turn",
                details=f"Unsupported role {role!r}",
                provider="completion",
                error_type="invalid",
            )
        translated.append({"role": role, "content": content or ""})
    return translated


class LLMClient:
    """Completion Provider Adapter around the OpenAI chat-completion API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        max_tokens: int = 150,
        base_url: Optional[str] = None,
        openai_client: Any = None,
    ):
        """
        Args:
            api_key: OpenAI API key
            model: Fixed model identifier for every call
            max_tokens: Fixed token budget per reply
            base_url: Optional OpenAI-compatible endpoint
            openai_client: Pre-built client (tests inject a stub)
        """
        self.model = model
        self.max_tokens = max_tokens
        if openai_client is not None:
            self._openai = openai_client
        else:
            kwargs: Dict[str, Any] = {"api_key": api_key}
            if base_url:
                kwargs["base_url"] = base_url
            self._openai = OpenAI(**kwargs)

    def chat(self, messages: List[Dict[str, str]]) -> str:
        """Blocking chat-completion call. Returns the reply text."""
        try:
            response = self._openai.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            raise ProviderFailure(
                "Completion service error",
                details=str(exc),
                provider="completion",
                status_code=getattr(exc, "status_code", None),
                model=self.model,
            ) from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise ProviderFailure(
                "Malformed completion response",
                details="No message in the first choice",
                provider="completion",
                error_type="invalid",
                model=self.model,
            ) from exc

        if not content or not content.strip():
            raise ProviderFailure(
                "Empty completion response",
                provider="completion",
                error_type="invalid",
                model=self.model,
            )
        return content

    @handle_async_provider_errors("completion")
    async def complete(self, history: Iterable[Any]):
        """Run one completion over the whole ordered history.

        The SDK call is blocking, so it runs in the default executor.

        Returns:
            Success(text) or Failure
        """
        messages = _translate_turns_for_openai(history)
        loop = asyncio.get_running_loop()

        log_provider(logger, "completion", "start", model=self.model, turns=len(messages))
        start_time = time.time()
        try:
            text = await loop.run_in_executor(None, lambda: self.chat(messages))
        except Exception as e:
            log_provider(
                logger, "completion", "failed", duration=time.time() - start_time, error=type(e).__name__
            )
            raise
        log_provider(logger, "completion", "end", duration=time.time() - start_time, chars=len(text))
        return Success(text, source="completion")


def get_llm_client(config=None) -> LLMClient:
    """Build a completion client from the runtime config."""
    if config is None:
        from config import runtime_config as config

    return LLMClient(
        api_key=config.openai_api_key,
        model=config.model_chat,
        max_tokens=config.max_tokens,
    )
