import pytest

from mock_rest.config import ConfigError, ServerConfig


class TestServerConfig:
    def test_defaults(self, monkeypatch):
        for key in ("HOST", "PORT", "MOCK_PREFIX", "ADMIN_PREFIX", "MODEL", "LOG_LEVEL"):
            monkeypatch.delenv(f"MOCK_REST_{key}", raising=False)
        config = ServerConfig.from_env()
        assert config == ServerConfig()
        assert config.mock_prefix == "/api/mock"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MOCK_REST_HOST", "0.0.0.0")
        monkeypatch.setenv("MOCK_REST_PORT", "8080")
        monkeypatch.setenv("MOCK_REST_MOCK_PREFIX", "mocks/")
        monkeypatch.setenv("MOCK_REST_MODEL", "gpt-4o")
        monkeypatch.setenv("MOCK_REST_LOG_LEVEL", "DEBUG")
        config = ServerConfig.from_env()
        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.mock_prefix == "/mocks"
        assert config.model == "gpt-4o"
        assert config.log_level == "debug"

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("MOCK_REST_PORT", "http")
        with pytest.raises(ConfigError, match="MOCK_REST_PORT must be an integer"):
            ServerConfig.from_env()

    def test_override_ignores_none(self):
        config = ServerConfig().override(port=1234, host=None)
        assert config.port == 1234
        assert config.host == "127.0.0.1"
