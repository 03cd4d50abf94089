"""SQLite implementation of the link store."""

import asyncio
import logging
import os
import sqlite3
import threading
from typing import Callable, Optional, TypeVar

from .base import LinkStoreBase
from ..errors import KeyConflict, StoreUnavailable


T = TypeVar("T")

SQLITE_SCHEME = "sqlite:///"


def sqlite_path_from_url(db_config: str) -> str:
    """Extract a file path from ``sqlite:///path`` (or return a bare path as is)."""
    if db_config.startswith(SQLITE_SCHEME):
        return db_config[len(SQLITE_SCHEME):] or ":memory:"
    return db_config


class SQLiteLinkStore(LinkStoreBase):
    """Link store backed by a single SQLite connection.

    The connection is opened once by :meth:`initialize` and shared by
    every request. Each operation runs in a worker thread while holding
    ``_conn_lock``, so at most one operation uses the connection at a
    time. Key uniqueness comes from the ``PRIMARY KEY`` constraint.
    """

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS links (
        key   TEXT PRIMARY KEY,
        uri   TEXT NOT NULL
    )
    """

    def __init__(
        self,
        db_config: str,
        timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite store.

        Args:
            db_config: ``sqlite:///path/to/file`` or a plain file path
            timeout_seconds: How long to wait on a locked database file
            logger: Optional logger instance
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.path = sqlite_path_from_url(db_config)
        self.timeout_seconds = timeout_seconds

        self._conn: Optional[sqlite3.Connection] = None
        self._conn_lock = threading.Lock()

    def _open(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        if self.path != ":memory:":
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self.path,
            timeout=self.timeout_seconds,
            check_same_thread=False,
        )
        try:
            with conn:
                conn.execute(self.CREATE_TABLE_SQL)
        except sqlite3.Error:
            conn.close()
            raise

        self._conn = conn

    async def _run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``operation`` on the shared connection in a worker thread."""

        def _locked() -> T:
            with self._conn_lock:
                if self._conn is None:
                    raise StoreUnavailable("SQLite link store is not initialized")
                return operation(self._conn)

        return await asyncio.to_thread(_locked)

    async def initialize(self) -> None:
        """Open the database file and ensure the links table exists."""
        if self._conn is not None:
            return

        self.logger.info(f"Opening SQLite link store at {self.path}")

        def _locked_open() -> None:
            with self._conn_lock:
                if self._conn is None:
                    self._open()

        try:
            await asyncio.to_thread(_locked_open)
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailable(f"Cannot open SQLite database {self.path}: {e}") from e

        self.logger.info("Links table ready")

    async def create(self, key: str, uri: str) -> None:
        """Insert a new link, rejecting an existing key."""

        def _insert(conn: sqlite3.Connection) -> None:
            # The connection context manager commits, or rolls back on error.
            with conn:
                conn.execute(
                    "INSERT INTO links (key, uri) VALUES (?, ?)",
                    (key, uri),
                )

        try:
            await self._run(_insert)
        except sqlite3.IntegrityError as e:
            raise KeyConflict(f"Key '{key}' already exists", key=key) from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Failed to insert link '{key}': {e}", key=key) from e

    async def resolve(self, key: str) -> Optional[str]:
        """Return the URI for ``key`` or None."""

        def _select(conn: sqlite3.Connection) -> Optional[str]:
            row = conn.execute(
                "SELECT uri FROM links WHERE key = ?",
                (key,),
            ).fetchone()
            return row[0] if row else None

        try:
            return await self._run(_select)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Failed to look up link '{key}': {e}", key=key) from e

    async def health_check(self) -> bool:
        """Check if the database answers a trivial query."""
        try:
            await self._run(lambda conn: conn.execute("SELECT 1").fetchone())
            return True
        except (sqlite3.Error, StoreUnavailable):
            return False

    async def close(self) -> None:
        """Close the shared connection."""

        def _locked_close() -> None:
            with self._conn_lock:
                if self._conn is not None:
                    self._conn.close()
                    self._conn = None

        await asyncio.to_thread(_locked_close)
        self.logger.debug(f"Closed SQLite link store at {self.path}")
