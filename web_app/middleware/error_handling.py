"""
Error handlers for consistent JSON error responses.

Every failure leaves the service as
``{"error": <message>, "isError": true, "statusCode": <status>}``.
"""

from typing import Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.common.logging_config import get_logger
from shortlink.errors import KeyConflict, StoreUnavailable

logger = get_logger("web")


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Build the JSON error envelope."""
    return JSONResponse(
        {"error": message, "isError": True, "statusCode": status_code},
        status_code=status_code,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return error_response(422, "; ".join(messages) or "Invalid request")


async def key_conflict_handler(request: Request, exc: KeyConflict):
    logger.warning(f"Key conflict in {request.url.path}: {exc.message}")
    return error_response(status.HTTP_409_CONFLICT, exc.message)


async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Link store unavailable in {request.url.path}: {exc.message}")
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Link store unavailable")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error in {request.url.path}: {exc}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on ``app``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(KeyConflict, key_conflict_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
