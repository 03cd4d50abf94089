#!/usr/bin/env python3
"""
Main entry point for the short link service.

Concurrency: requests are served on one asyncio event loop per worker.
The SQLite store serializes access to its single connection within a
process; run WORKERS > 1 only against PostgreSQL, where the database
itself enforces key uniqueness across processes.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - sqlite:///path/to/file (default sqlite:///db.sqlite) or postgresql://...
    REDIS_URL - Redis connection URL (optional)
    BASE_URL - Base URL for short links
    PATH_PREFIX - Nested path between base URL and key
    PORT - Port to listen on (default 3366)
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlink.database import create_link_store, RedisCache
from shortlink.keygen import KeyGenerator
from shortlink.service import LinkService
from shortlink.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store, cache and service on startup; close them on shutdown.

    Schema and clock failures propagate so the server never starts
    accepting requests without them.
    """
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting short link service...")

    generator = KeyGenerator(radix=config.key_radix)
    generator.current_millis()

    store = create_link_store(config.database_url, logger=logger)
    await store.initialize()

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    service = LinkService(
        store=store,
        key_generator=generator,
        cache=cache,
        logger=logger,
        max_collision_retries=config.max_collision_retries,
    )

    app.state.store = store
    app.state.cache = cache
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down short link service...")
    await service.close()
    logger.info("Service stopped")


def build_app(config=None) -> FastAPI:
    """Create the FastAPI app wired to the lifespan above."""
    config = config or load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    app = create_app(
        store_instance=None,  # Set in lifespan
        cache_instance=None,
        service_instance=None,
        config=config,
    )

    app.state.config = config
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    return app


def run_workers(config) -> None:
    """Serve with several worker processes.

    uvicorn only forks workers for an import string, so each worker calls
    build_app() itself and reads the same environment. uvicorn handles
    SIGINT/SIGTERM for the worker supervisor.
    """
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )
    logger.info(f"Starting {config.workers} workers on {config.host}:{config.port}")

    uvicorn.run(
        "app:build_app",
        factory=True,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )


def main():
    """Main entry point."""
    config = load_config()

    if config.workers > 1:
        run_workers(config)
        return

    app = build_app(config)
    logger = app.state.logger

    logger.info("Short Link Service")
    logger.info(f"Configuration: {config.model_dump()}")

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
