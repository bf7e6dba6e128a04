"""
Tests for RuntimeConfig.
"""

from unittest.mock import patch

from config import RuntimeConfig, DEFAULT_ALLOWED_ORIGINS, get_config, runtime_config


class TestDefaults:
    def test_transport_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            cfg = RuntimeConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 3000
        assert cfg.allowed_origins == DEFAULT_ALLOWED_ORIGINS
        assert cfg.client_endpoints == ["ws://127.0.0.1:3000", "ws://localhost:3000"]

    def test_provider_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            cfg = RuntimeConfig()
        assert cfg.model_chat == "gpt-3.5-turbo"
        assert cfg.max_tokens == 150
        assert cfg.search_max_results == 5
        assert cfg.search_include_answer is True
        assert cfg.max_contexts == 1000

    def test_reconnect_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            cfg = RuntimeConfig()
        assert cfg.connect_timeout_s == 5.0
        assert cfg.reconnect_base_delay_s == 5.0
        assert cfg.reconnect_max_delay_s == 30.0
        assert cfg.reconnect_max_attempts == 5

    def test_environment_overrides(self):
        env = {
            "ELIZA_PORT": "8080",
            "ELIZA_ALLOWED_ORIGINS": "http://a.test, http://b.test",
            "OPENAI_MODEL": "gpt-4o-mini",
            "TAVILY_INCLUDE_ANSWER": "false",
        }
        with patch.dict("os.environ", env, clear=True):
            cfg = RuntimeConfig()
        assert cfg.port == 8080
        assert cfg.allowed_origins == ["http://a.test", "http://b.test"]
        assert cfg.model_chat == "gpt-4o-mini"
        assert cfg.search_include_answer is False


class TestUpdate:
    def test_valid_update(self):
        cfg = RuntimeConfig()
        result = cfg.update(max_tokens=200)
        assert cfg.max_tokens == 200
        assert result["updated"] == ["max_tokens"]
        assert result["ignored"] == []

    def test_max_contexts_range(self):
        cfg = RuntimeConfig()
        assert cfg.update(max_contexts=0)["ignored"] == ["max_contexts"]
        assert cfg.update(max_contexts=50)["updated"] == ["max_contexts"]

    def test_out_of_range_rejected(self):
        cfg = RuntimeConfig()
        result = cfg.update(port=70000)
        assert cfg.port != 70000
        assert result["ignored"] == ["port"]

    def test_unknown_and_private_keys_ignored(self):
        cfg = RuntimeConfig()
        result = cfg.update(nope=1, _lock=None)
        assert sorted(result["ignored"]) == ["_lock", "nope"]

    def test_invalid_endpoints_rejected(self):
        cfg = RuntimeConfig()
        result = cfg.update(client_endpoints=["http://127.0.0.1:3000"])
        assert result["ignored"] == ["client_endpoints"]

    def test_secret_never_logged(self, caplog):
        cfg = RuntimeConfig()
        with caplog.at_level("INFO"):
            cfg.update(openai_api_key="sk-very-secret-value-123456")
        assert "sk-very-secret" not in caplog.text
        assert "<redacted>" in caplog.text


class TestOriginCheck:
    def test_allowed_origin(self):
        cfg = RuntimeConfig(allowed_origins=list(DEFAULT_ALLOWED_ORIGINS))
        assert cfg.is_origin_allowed("http://localhost:5173")

    def test_substring_match(self):
        cfg = RuntimeConfig(allowed_origins=list(DEFAULT_ALLOWED_ORIGINS))
        assert cfg.is_origin_allowed("http://localhost:5173.attacker.test")

    def test_missing_or_unknown_origin(self):
        cfg = RuntimeConfig(allowed_origins=list(DEFAULT_ALLOWED_ORIGINS))
        assert not cfg.is_origin_allowed(None)
        assert not cfg.is_origin_allowed("")
        assert not cfg.is_origin_allowed("http://example.com")


def test_to_dict_hides_secrets():
    cfg = RuntimeConfig(openai_api_key="sk-abc", tavily_api_key="")
    d = cfg.to_dict()
    assert d["openai_api_key"] is True
    assert d["tavily_api_key"] is False
    assert "_lock" not in d


def test_get_config_returns_singleton():
    assert get_config() is runtime_config
