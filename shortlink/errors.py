"""
Error classes for the short link core.

The core raises these and never renders them; the HTTP layer decides
how each one is presented to clients.
"""

from typing import Optional


class LinkStoreError(Exception):
    """
    Base class for link store failures.

    Attributes:
        key: The link key involved in the failed operation, if any
        message: Error message
    """
    message: str = "Link store error"

    def __init__(self, message: Optional[str] = None, key: Optional[str] = None):
        self.message = message or self.message
        self.key = key
        super().__init__(self.message)


class KeyConflict(LinkStoreError):
    """The key is already mapped to a URI."""
    message = "Key already exists"


class StoreUnavailable(LinkStoreError):
    """The backing medium could not be reached or written."""
    message = "Link store unavailable"


class ClockUnavailable(Exception):
    """The wall clock cannot be read or reports a time before the epoch."""
