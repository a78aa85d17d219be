import logging

import pytest
from pydantic import ValidationError

from proxy_client.core.config import ClientConfig, load_client_config
from proxy_client.core.http_client import ProxyClient
from proxy_client.core.logger import NULL_LOGGER_NAME, get_null_logger


def test_defaults():
    config = ClientConfig()

    assert config.root_url == "http://localhost"
    assert config.timeout_ms == 5000
    assert config.timeout_s == 5.0
    assert config.authorization is None
    assert config.headers == {}


def test_timeout_alias():
    assert ClientConfig(timeout=1500).timeout_ms == 1500
    assert ClientConfig(timeout_ms=250).timeout_ms == 250


def test_config_is_frozen():
    config = ClientConfig(root_url="https://api.example")

    with pytest.raises(ValidationError):
        config.root_url = "https://other.example"


def test_default_logger_is_silent():
    """Le logger par défaut ne propage rien vers le root logger."""
    client = ProxyClient()

    assert client.logger.name == NULL_LOGGER_NAME
    assert client.logger.propagate is False
    assert any(isinstance(h, logging.NullHandler) for h in client.logger.handlers)


def test_null_logger_handler_added_once():
    get_null_logger()
    logger = get_null_logger()

    assert len([h for h in logger.handlers if isinstance(h, logging.NullHandler)]) == 1


def test_load_client_config_from_env(monkeypatch):
    monkeypatch.setenv("PROXY_CLIENT_ROOT_URL", "https://env.example")
    monkeypatch.setenv("PROXY_CLIENT_TIMEOUT_MS", "1200")
    monkeypatch.setenv("PROXY_CLIENT_AUTHORIZATION", "Bearer env")

    config = load_client_config()

    assert config.root_url == "https://env.example"
    assert config.timeout_ms == 1200
    assert config.authorization == "Bearer env"


def test_load_client_config_priority(monkeypatch):
    """overrides > environnement > defaults"""
    monkeypatch.setenv("PROXY_CLIENT_ROOT_URL", "https://env.example")
    monkeypatch.delenv("PROXY_CLIENT_TIMEOUT_MS", raising=False)
    monkeypatch.delenv("PROXY_CLIENT_AUTHORIZATION", raising=False)

    config = load_client_config(defaults={"root_url": "https://default.example", "timeout_ms": 42})
    assert config.root_url == "https://env.example"
    assert config.timeout_ms == 42

    config = load_client_config(root_url="https://override.example")
    assert config.root_url == "https://override.example"
