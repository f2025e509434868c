"""Pytest configuration and fixtures."""

import pytest

from helpers import FakeRedis


@pytest.fixture
def fake_redis():
    """Fake Redis backend."""
    return FakeRedis()


@pytest.fixture(scope="function")
def settings():
    """Create settings instance for testing."""
    from dispute_evidence.core.config import Settings

    return Settings(environment="testing")
