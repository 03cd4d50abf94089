"""Common utilities for the short link service."""

from .urls import (
    build_base_url,
    build_short_url,
    get_forwarded_path_prefix,
    join_path_prefix,
    location_header_value,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "build_base_url",
    "build_short_url",
    "get_forwarded_path_prefix",
    "join_path_prefix",
    "location_header_value",
    "setup_logging",
    "get_logger",
]
