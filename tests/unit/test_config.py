"""
Unit tests for ServerConfig.
"""

import pytest

from geoweather.config import ServerConfig


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.backlog == 16
        assert config.buffer_size == 8192
        assert config.max_query_value_length == 1024
        assert config.exact_routes is False
        assert config.log_format == "text"
        assert config.server_name == "GeoWeather/1.0"

    def test_defaults_are_valid(self):
        ServerConfig().validate()


class TestFromEnv:
    """Tests for ServerConfig.from_env()."""

    def test_empty_environment(self, monkeypatch):
        for name in ("HOST", "PORT", "TIMEOUT", "LOG_LEVEL", "LOG_FORMAT", "EXACT_ROUTES"):
            monkeypatch.delenv(f"GEOWEATHER_{name}", raising=False)

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.timeout == 10.0
        assert config.exact_routes is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("GEOWEATHER_HOST", "127.0.0.1")
        monkeypatch.setenv("GEOWEATHER_PORT", "3000")
        monkeypatch.setenv("GEOWEATHER_TIMEOUT", "2.5")
        monkeypatch.setenv("GEOWEATHER_LOG_LEVEL", "debug")
        monkeypatch.setenv("GEOWEATHER_LOG_FORMAT", "JSON")
        monkeypatch.setenv("GEOWEATHER_EXACT_ROUTES", "true")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.exact_routes is True

    @pytest.mark.parametrize("value", ["0", "no", "", "off"])
    def test_exact_routes_falsy(self, monkeypatch, value):
        monkeypatch.setenv("GEOWEATHER_EXACT_ROUTES", value)

        assert ServerConfig.from_env().exact_routes is False

    def test_bad_port(self, monkeypatch):
        monkeypatch.setenv("GEOWEATHER_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()


class TestValidate:
    """Tests for ServerConfig.validate()."""

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 512},
        {"timeout": 0},
        {"timeout": -1.0},
        {"max_request_size": 1024},
        {"max_query_value_length": 0},
        {"log_format": "xml"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    def test_blocking_timeout_allowed(self):
        ServerConfig(timeout=None).validate()
