"""
Shared fixtures for pescador tests.
"""

import pytest

from pescador.config import ClientConfig


@pytest.fixture
def config():
    """Config with API keys set and no retry delay."""
    return ClientConfig(
        mapquest_api_key="test-mapquest",
        openweather_api_key="test-openweather",
        retry_backoff=0.0,
    )
