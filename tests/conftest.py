"""
Pytest configuration and shared fixtures for the unit converter tests.
"""
import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SKIP_DOTENV", "1")

from modules.unitconvert.tool.app import create_app
from universe.settings import Settings


@pytest.fixture
def settings():
    """Test settings: rate limiting off, console logs."""
    return Settings(env="test", rate_limit_enabled=False, log_json=False)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
