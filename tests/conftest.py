"""
Test configuration and fixtures.
"""
import os
import sys

import pytest

# Add src and tests directories to Python path
src_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
tests_dir = os.path.abspath(os.path.dirname(__file__))
for path in (src_dir, tests_dir):
    if path not in sys.path:
        sys.path.insert(0, path)

from test_utils import FakeServiceNowClient, mock_server_config
from test_utils.snow_client import make_mock_snow_client


@pytest.fixture
def test_config():
    """Shared test server configuration."""
    return mock_server_config


@pytest.fixture
def mock_client():
    """Mock ServiceNow client with async record methods."""
    return make_mock_snow_client()


@pytest.fixture
def fake_client():
    """In-memory ServiceNow client."""
    return FakeServiceNowClient()


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "unit: mark test as a unit test")


def pytest_collection_modifyitems(items):
    """Add markers based on test location and name."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
