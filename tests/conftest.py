"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator

from shortlink.database.sqlite import SQLiteLinkStore
from shortlink.keygen import KeyGenerator
from shortlink.service import LinkService
from shortlink.common.logging_config import setup_logging

from clocks import TickingClock


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def db_url(tmp_path) -> str:
    """SQLite URL for a fresh database file."""
    return f"sqlite:///{tmp_path / 'links.sqlite'}"


@pytest.fixture
async def store(db_url, logger) -> AsyncGenerator[SQLiteLinkStore, None]:
    """Create an initialized SQLite link store."""
    store = SQLiteLinkStore(db_url, logger=logger)
    await store.initialize()

    yield store

    await store.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def key_generator(clock):
    """Create key generator driven by the test clock."""
    return KeyGenerator(radix=36, clock=clock)


@pytest.fixture
def service(store, key_generator, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        store=store,
        key_generator=key_generator,
        cache=None,  # No cache for tests
        logger=logger,
    )


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/a/b",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
