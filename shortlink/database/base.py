"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Optional


class LinkStoreBase(ABC):
    """Abstract base class for link store operations.

    Implementations own a single ``links`` table with two columns,
    ``key`` (primary key) and ``uri`` (not null). Rows are only ever
    inserted; there is no update or delete.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def initialize(self) -> None:
        """Open the backing medium and ensure the links table exists.

        Safe to call against an existing database; existing rows are kept.

        Raises:
            StoreUnavailable: If the medium cannot be opened or the schema created
        """
        pass

    @abstractmethod
    async def create(self, key: str, uri: str) -> None:
        """Insert a new link.

        Args:
            key: The link key
            uri: The original URI, stored verbatim

        Raises:
            KeyConflict: If the key already exists
            StoreUnavailable: If the medium cannot be reached or written
        """
        pass

    @abstractmethod
    async def resolve(self, key: str) -> Optional[str]:
        """Look up the URI for a key.

        Args:
            key: The link key

        Returns:
            The URI if the key exists, None otherwise

        Raises:
            StoreUnavailable: If the medium cannot be reached
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backing medium answers queries."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the backing medium."""
        pass
