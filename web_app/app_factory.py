"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from .api import api_router
from .middleware.error_handling import register_error_handlers
from .middleware.logging import LoggingMiddleware


def create_app(
    store_instance,
    cache_instance,
    service_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store_instance: Link store instance
        cache_instance: Cache instance (or None)
        service_instance: Link service instance
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Short Link Service",
        description="Maps long URLs to short keys and redirects keys back to the original URL",
        version="1.0.0",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/spec",
    )

    # Request handlers reach the store only through app.state.service
    app.state.store = store_instance
    app.state.cache = cache_instance
    app.state.service = service_instance
    app.state.config = config

    app.add_middleware(
        GZipMiddleware,
        minimum_size=config.gzip_minimum_size,
        compresslevel=9,
    )
    app.add_middleware(LoggingMiddleware)

    register_error_handlers(app)

    app.include_router(api_router)

    return app
