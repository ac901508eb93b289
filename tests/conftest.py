"""Pytest configuration and fixtures."""

import os

import pytest

TEST_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "test-key",
    "OPENAI_API_KEY": "test-openai-key",
    "ANTHROPIC_API_KEY": "test-anthropic-key",
    "HUDDLE_ENV": "test",
}

# Modules may read settings at import time during collection
for _key, _value in TEST_ENV.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ.update(TEST_ENV)

    from huddle.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
