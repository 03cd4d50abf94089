"""Core logic for the short link service."""

from .keygen import KeyGenerator, format_radix, parse_radix
from .service import LinkService
from .errors import LinkStoreError, KeyConflict, StoreUnavailable, ClockUnavailable

__all__ = [
    "KeyGenerator",
    "format_radix",
    "parse_radix",
    "LinkService",
    "LinkStoreError",
    "KeyConflict",
    "StoreUnavailable",
    "ClockUnavailable",
]
