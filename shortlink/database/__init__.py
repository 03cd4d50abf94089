"""Persistence layer for short links."""

import logging
from typing import Optional

from .base import LinkStoreBase
from .models import Link
from .sqlite import SQLiteLinkStore
from .postgres import PostgresLinkStore
from .cache import RedisCache


def create_link_store(
    database_url: str,
    logger: Optional[logging.Logger] = None,
) -> LinkStoreBase:
    """Build a link store for a database URL.

    ``postgres://`` and ``postgresql://`` URLs select PostgreSQL; anything
    else (``sqlite:///path`` or a plain file path) selects SQLite.
    """
    if database_url.startswith(("postgres://", "postgresql://")):
        return PostgresLinkStore(database_url, logger=logger)
    return SQLiteLinkStore(database_url, logger=logger)


__all__ = [
    "LinkStoreBase",
    "Link",
    "SQLiteLinkStore",
    "PostgresLinkStore",
    "RedisCache",
    "create_link_store",
]
