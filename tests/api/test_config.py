"""
Tests for API configuration.
"""

import pytest
from pydantic import ValidationError

from api.config import APIConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    settings = APIConfig(_env_file=None)
    assert settings.port == 3000
    assert settings.server_url() == "http://localhost:3000"
    assert settings.docs_url() == "http://localhost:3000/api-docs"


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert APIConfig(_env_file=None).port == 8080


def test_log_settings_normalized():
    settings = APIConfig(log_level="debug", log_format="JSON", _env_file=None)
    assert settings.log_level == "DEBUG"
    assert settings.log_format == "json"


@pytest.mark.parametrize("field,value", [("log_level", "LOUD"), ("log_format", "xml"), ("port", 0)])
def test_invalid_settings_rejected(field, value):
    with pytest.raises(ValidationError):
        APIConfig(**{field: value}, _env_file=None)
