from __future__ import annotations

import pydantic
import pytest

from libs.core import config
from libs.core.config import GatewaySettings


def test_defaults_from_empty_environment():
    settings = GatewaySettings.from_env({})
    assert settings.core_url == "http://localhost:8080"
    assert settings.core_token == "demo"
    assert settings.core_timeout_ms == 15000
    assert settings.core_timeout_s == 15.0
    assert settings.log_level == "info"
    assert settings.http_port == 7070
    assert settings.http_enabled is True
    assert settings.allow_origins == []
    assert settings.allow_hosts == []
    assert settings.otlp_endpoint is None


def test_reads_every_variable():
    settings = GatewaySettings.from_env(
        {
            "OPSORCH_CORE_URL": "http://core:9000/api",
            "OPSORCH_CORE_TOKEN": "secret",
            "OPSORCH_CORE_TIMEOUT_MS": "2500",
            "OPSORCH_LOG_LEVEL": "DEBUG",
            "MCP_HTTP_HOST": "127.0.0.1",
            "MCP_HTTP_PORT": "9090",
            "MCP_HTTP_ALLOW_ORIGINS": "http://a.test, http://b.test,",
            "MCP_HTTP_ALLOW_HOSTS": "gateway.internal:9090",
            "OTEL_EXPORTER_OTLP_ENDPOINT": "http://otel:4318",
        }
    )
    assert settings.core_url == "http://core:9000/api"
    assert settings.core_token == "secret"
    assert settings.core_timeout_s == 2.5
    assert settings.log_level == "debug"
    assert settings.http_host == "127.0.0.1"
    assert settings.http_port == 9090
    assert settings.allow_origins == ["http://a.test", "http://b.test"]
    assert settings.allow_hosts == ["gateway.internal:9090"]
    assert settings.otlp_endpoint == "http://otel:4318"


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("OPSORCH_CORE_TOKEN", "from-env")
    monkeypatch.setenv("MCP_HTTP_PORT", "0")
    settings = GatewaySettings.from_env()
    assert settings.core_token == "from-env"
    assert settings.http_enabled is False


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "info"), ("", "info"), ("warn", "warning"), ("WARNING", "warning"), ("error", "error"), ("loud", "info")],
)
def test_parse_log_level(raw, expected):
    assert config.parse_log_level(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "-5"])
def test_invalid_timeout_falls_back_to_default(raw):
    assert config.resolve_core_timeout_ms(raw) == 15000


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 7070), ("", 7070), (" ", 7070), ("8081", 8081), ("0", 0), ("-1", 0), ("http", 0)],
)
def test_resolve_http_port(raw, expected):
    assert config.resolve_http_port(raw) == expected


def test_settings_are_immutable():
    settings = GatewaySettings()
    with pytest.raises(pydantic.ValidationError):
        settings.core_token = "changed"


def test_rejects_non_positive_timeout():
    with pytest.raises(pydantic.ValidationError):
        GatewaySettings(core_timeout_ms=0)
