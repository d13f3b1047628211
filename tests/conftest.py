"""
Pytest configuration and fixtures
"""

import pytest
from raw_http import ClientConfig, RequestsAdapter

API_URL = "https://api.example.com"


@pytest.fixture
def config():
    """Create test configuration fixture"""
    return ClientConfig(max_workers=4)


@pytest.fixture
def adapter(config):
    """Create synchronous adapter fixture"""
    return RequestsAdapter(config=config)


@pytest.fixture
def api_url():
    return API_URL
