"""
Eliza Services - Provider clients and startup services.

- llm_client: OpenAI chat-completion adapter (Success | Failure)
- credentials: Provider credential bootstrap
"""

from .llm_client import LLMClient, get_llm_client
from .credentials import ProviderCredentials, resolve_credentials

__all__ = ["LLMClient", "get_llm_client", "ProviderCredentials", "resolve_credentials"]
