"""Tests for configuration loading."""
import pytest
from pydantic import ValidationError

from config import DEFAULT_SCRIPT_PATH, ServerConfig, Settings, load_config, normalize_instance_url
from utils.error_handler import ConfigError

REQUIRED_ENV = ("SERVICENOW_INSTANCE", "SERVICENOW_USERNAME", "SERVICENOW_PASSWORD", "NAME")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in REQUIRED_ENV + ("SERVICENOW_TIMEOUT", "SERVICENOW_SCRIPT_PATH", "DEBUG"):
        monkeypatch.delenv(name, raising=False)


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("dev12345.service-now.com", "https://dev12345.service-now.com"),
        ("https://dev12345.service-now.com/", "https://dev12345.service-now.com"),
        ("http://localhost:8080", "http://localhost:8080"),
    ],
)
def test_normalize_instance_url(raw, expected):
    assert normalize_instance_url(raw) == expected


def test_load_config_from_settings():
    config = load_config(
        _settings(
            servicenow_instance="dev12345.service-now.com/",
            servicenow_username="admin",
            servicenow_password="secret",
            name="servicenow",
        )
    )
    assert config.instance_url == "https://dev12345.service-now.com"
    assert config.api_url == "https://dev12345.service-now.com/api/now"
    assert config.auth.username == "admin"
    assert config.timeout == 30
    assert config.script_path == DEFAULT_SCRIPT_PATH


def test_load_config_from_environment(monkeypatch):
    monkeypatch.setenv("SERVICENOW_INSTANCE", "https://acme.service-now.com")
    monkeypatch.setenv("SERVICENOW_USERNAME", "integration")
    monkeypatch.setenv("SERVICENOW_PASSWORD", "pw")
    monkeypatch.setenv("NAME", "acme")
    monkeypatch.setenv("SERVICENOW_TIMEOUT", "12")

    config = load_config(_settings())
    assert config.name == "acme"
    assert config.timeout == 12


def test_missing_settings_are_all_reported():
    with pytest.raises(ConfigError) as exc_info:
        load_config(_settings(servicenow_username="admin"))
    assert exc_info.value.missing == ["SERVICENOW_INSTANCE", "SERVICENOW_PASSWORD", "NAME"]
    assert "SERVICENOW_INSTANCE, SERVICENOW_PASSWORD, NAME" in str(exc_info.value)


def test_blank_setting_counts_as_missing():
    with pytest.raises(ConfigError) as exc_info:
        load_config(
            _settings(
                servicenow_instance="  ",
                servicenow_username="admin",
                servicenow_password="pw",
                name="x",
            )
        )
    assert exc_info.value.missing == ["SERVICENOW_INSTANCE"]


def test_server_config_is_frozen(test_config: ServerConfig):
    with pytest.raises(ValidationError):
        test_config.timeout = 99
