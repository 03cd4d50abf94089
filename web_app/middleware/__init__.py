"""Middleware and error handlers for the short link web app."""

from .logging import LoggingMiddleware
from .error_handling import register_error_handlers, error_response

__all__ = ["LoggingMiddleware", "register_error_handlers", "error_response"]
