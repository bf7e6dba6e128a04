"""
Tests for provider credential bootstrap.
"""

import pytest

from config import RuntimeConfig
from errors import ErrorCode, FatalStartup
from services.credentials import resolve_credentials

GOOD_KEY = "sk-prompted-0123456789abcdef"


def _config(**kwargs):
    defaults = {"openai_api_key": "", "tavily_api_key": "", "prompt_for_credentials": True}
    defaults.update(kwargs)
    return RuntimeConfig(**defaults)


def test_keys_from_config(config):
    credentials = resolve_credentials(config)
    assert credentials.openai_api_key == config.openai_api_key
    assert credentials.search_enabled


def test_prompted_key_is_stored():
    cfg = _config()
    credentials = resolve_credentials(cfg, prompt=lambda text: GOOD_KEY)
    assert credentials.openai_api_key == GOOD_KEY
    assert cfg.openai_api_key == GOOD_KEY


def test_short_prompted_key_rejected():
    with pytest.raises(FatalStartup) as exc_info:
        resolve_credentials(_config(), prompt=lambda text: "short")
    assert exc_info.value.code == ErrorCode.STARTUP_CREDENTIAL_MISSING


def test_missing_key_without_prompt():
    with pytest.raises(FatalStartup):
        resolve_credentials(_config(prompt_for_credentials=False))


def test_prompt_not_used_when_key_present():
    def prompt(text):
        raise AssertionError("should not prompt")

    credentials = resolve_credentials(_config(openai_api_key=GOOD_KEY), prompt=prompt)
    assert credentials.openai_api_key == GOOD_KEY


def test_missing_search_key_only_warns(caplog):
    with caplog.at_level("WARNING"):
        credentials = resolve_credentials(_config(openai_api_key=GOOD_KEY))
    assert not credentials.search_enabled
    assert "TAVILY_API_KEY" in caplog.text


def test_credentials_repr_hides_keys():
    credentials = resolve_credentials(_config(openai_api_key=GOOD_KEY))
    assert GOOD_KEY not in repr(credentials)
