"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.main import create_app
from api.models import BookInput
from api.registry import BookRegistry


@pytest.fixture
def registry():
    """Create an empty book registry."""
    return BookRegistry()


@pytest.fixture
def api_config():
    """Settings isolated from the environment."""
    return APIConfig(port=3000, log_level="WARNING", log_format="console", _env_file=None)


@pytest.fixture
def app(registry, api_config):
    """Application bound to the test registry."""
    return create_app(registry=registry, app_config=api_config)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_book_payload():
    """Create sample book data for testing."""
    return {
        "title": "Effective JavaScript",
        "author": "David Herman",
        "publishedYear": 2013,
    }


@pytest.fixture
def populated_registry(registry):
    """Registry holding five books by three authors."""
    for title, author, year in [
        ("Dune", "Frank Herbert", 1965),
        ("Children of Dune", "Frank Herbert", 1976),
        ("Neuromancer", "William Gibson", 1984),
        ("Count Zero", "William Gibson", 1986),
        ("Hyperion", "Dan Simmons", 1989),
    ]:
        registry.create_book(BookInput(title=title, author=author, publishedYear=year))
    return registry
