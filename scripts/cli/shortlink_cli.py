#!/usr/bin/env python3
"""
Command-line interface for the short link service.

Works directly against the configured link store, without going
through the HTTP server.

Usage:
    python shortlink_cli.py shorten <url>
    python shortlink_cli.py resolve <key>
    python shortlink_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os
from typing import Optional

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from shortlink.database import create_link_store, RedisCache
from shortlink.database.models import Link
from shortlink.errors import LinkStoreError
from shortlink.keygen import KeyGenerator
from shortlink.service import LinkService
from shortlink.common.logging_config import setup_logging
from shortlink.common.urls import build_short_url


class ShortLinkCLI:
    """Command-line interface for the short link service."""

    def __init__(
        self,
        db_url: str,
        base_url: str,
        redis_url: Optional[str] = None,
        verbose: bool = False,
    ):
        self.db_url = db_url
        self.base_url = base_url
        self.redis_url = redis_url
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[LinkService] = None

    async def initialize(self):
        """Open the store (and cache) and build the service."""
        store = create_link_store(self.db_url, logger=self.logger)
        await store.initialize()

        cache = None
        if self.redis_url:
            cache = RedisCache(redis_url=self.redis_url, logger=self.logger)
            await cache.connect()

        self.service = LinkService(
            store=store,
            key_generator=KeyGenerator(),
            cache=cache,
            logger=self.logger,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    @staticmethod
    def _emit(payload: dict, ok: bool) -> int:
        print(json.dumps(payload, indent=2), file=sys.stdout if ok else sys.stderr)
        return 0 if ok else 1

    async def shorten(self, url: str) -> int:
        """Create a short link."""
        try:
            link = await self.service.create_link(url)
        except LinkStoreError as e:
            return self._emit({"success": False, "error": e.message}, ok=False)

        return self._emit({
            "success": True,
            "url": build_short_url(link.key, self.base_url),
            **link.to_dict(),
        }, ok=True)

    async def resolve(self, key: str) -> int:
        """Look up the URL stored under a key."""
        try:
            uri = await self.service.resolve(key)
        except LinkStoreError as e:
            return self._emit({"success": False, "error": e.message}, ok=False)

        if uri is None:
            return self._emit({"success": False, "error": f"Key '{key}' not found"}, ok=False)

        return self._emit({"success": True, **Link(key=key, uri=uri).to_dict()}, ok=True)

    async def health(self) -> int:
        """Check store and cache health."""
        health_status = await self.service.health_check()
        return self._emit({"success": health_status["overall"], "health": health_status},
                          ok=health_status["overall"])


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Short link CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Look up a key
  %(prog)s resolve loyw3v28

  # Check health
  %(prog)s health
        """
    )

    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "sqlite:///db.sqlite"),
        help="Link store URL (default: from DATABASE_URL env or sqlite:///db.sqlite)"
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("BASE_URL", "http://localhost:3366"),
        help="Base URL printed in front of new keys (default: from BASE_URL env)"
    )
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")

    resolve_parser = subparsers.add_parser("resolve", help="Get the URL stored under a key")
    resolve_parser.add_argument("key", help="Key to look up")

    subparsers.add_parser("health", help="Check store health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortLinkCLI(
        db_url=args.db_url,
        base_url=args.base_url,
        redis_url=args.redis_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "resolve":
            return await cli.resolve(args.key)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    except LinkStoreError as e:
        print(json.dumps({"success": False, "error": e.message}, indent=2), file=sys.stderr)
        return 1
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
