"""Tests that the server handles many simultaneous requests correctly.

Links are created through the HTTP layer while other requests read them,
all sharing one SQLite connection. Most tests use a clock that ticks on
every read; the collision tests use a frozen clock and the wall clock.
"""

import asyncio
from contextlib import asynccontextmanager

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config
from shortlink.keygen import KeyGenerator
from shortlink.service import LinkService
from web_app import create_app

from clocks import FrozenClock


@pytest.fixture
def app(store, service, db_url):
    config = Config(database_url=db_url, base_url="http://testserver")
    return create_app(
        store_instance=store,
        cache_instance=None,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.mark.asyncio
class TestConcurrentConnections:
    """Prove the server handles many simultaneous requests."""

    async def test_concurrent_create_requests(self, client):
        """Many concurrent POST / on a ticking clock; all succeed with unique keys."""
        concurrency = 30
        urls = [f"https://example.com/page_{i}" for i in range(concurrency)]
        responses = await asyncio.gather(
            *(client.post("/", json={"url": url}) for url in urls),
            return_exceptions=True,
        )

        short_urls = []
        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code} body={r.text}"
            short_urls.append(r.json()["url"])

        assert len(set(short_urls)) == concurrency, "All keys must be unique under concurrency"

        redirects = await asyncio.gather(
            *(client.get(u.removeprefix("http://testserver"), follow_redirects=False) for u in short_urls)
        )
        assert [r.headers["location"] for r in redirects] == urls

    async def test_concurrent_redirect_requests(self, client):
        """Create one link, then many concurrent GET /{key} requests all redirect."""
        create_resp = await client.post("/", json={"url": "https://example.com/redirect-target"})
        assert create_resp.status_code == 200
        key = create_resp.json()["url"].rsplit("/", 1)[-1]

        responses = await asyncio.gather(
            *(client.get(f"/{key}", follow_redirects=False) for _ in range(40)),
            return_exceptions=True,
        )

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 301, f"Request {i}: status {r.status_code}"
            assert r.headers["location"] == "https://example.com/redirect-target"

    async def test_concurrent_mixed_read_after_write(self, client):
        """Writes, hits, misses and health checks interleaved."""
        create_resp = await client.post("/", json={"url": "https://example.com/concurrent-target"})
        key = create_resp.json()["url"].rsplit("/", 1)[-1]

        tasks = (
            [client.get(f"/{key}", follow_redirects=False) for _ in range(15)]
            + [client.get("/missing", follow_redirects=False) for _ in range(15)]
            + [client.post("/", json={"url": f"https://example.com/more_{i}"}) for i in range(15)]
            + [client.get("/api/health") for _ in range(5)]
        )
        responses = await asyncio.gather(*tasks)

        assert [r.status_code for r in responses[:15]] == [301] * 15
        assert [r.status_code for r in responses[15:30]] == [404] * 15
        assert [r.status_code for r in responses[30:45]] == [200] * 15
        assert all(r.json()["status"] == "healthy" for r in responses[45:])


@asynccontextmanager
async def client_for(store, db_url, key_generator, logger, max_collision_retries):
    service = LinkService(
        store=store,
        key_generator=key_generator,
        logger=logger,
        max_collision_retries=max_collision_retries,
    )
    app = create_app(
        store_instance=store,
        cache_instance=None,
        service_instance=service,
        config=Config(database_url=db_url, base_url="http://testserver"),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.mark.asyncio
class TestConcurrentKeyCollisions:
    """Simultaneous creates that draw the same millisecond."""

    @pytest.mark.parametrize("retries", [0, 2])
    async def test_one_success_per_millisecond(self, store, db_url, logger, retries):
        """With the clock stuck on one millisecond only one create can win."""
        concurrency = 10
        generator = KeyGenerator(radix=36, clock=FrozenClock())

        async with client_for(store, db_url, generator, logger, retries) as client:
            responses = await asyncio.gather(
                *(client.post("/", json={"url": f"https://example.com/{i}"}) for i in range(concurrency))
            )

        statuses = sorted(r.status_code for r in responses)
        assert statuses == [200] + [409] * (concurrency - 1)

        winner = next(r for r in responses if r.status_code == 200)
        assert winner.json() == {"url": "http://testserver/loyw3v28"}
        assert all(
            r.json() == {"error": "Key 'loyw3v28' already exists", "isError": True, "statusCode": 409}
            for r in responses
            if r.status_code == 409
        )

    async def test_burst_on_wall_clock_retries_into_unique_keys(self, store, db_url, logger):
        """A burst on the real clock collides, then spreads out on retry."""
        concurrency = 20
        urls = [f"https://example.com/burst_{i}" for i in range(concurrency)]

        async with client_for(store, db_url, KeyGenerator(), logger, 5) as client:
            responses = await asyncio.gather(*(client.post("/", json={"url": url}) for url in urls))

            assert [r.status_code for r in responses] == [200] * concurrency
            short_urls = [r.json()["url"] for r in responses]
            assert len(set(short_urls)) == concurrency

            redirects = await asyncio.gather(
                *(client.get(u.removeprefix("http://testserver"), follow_redirects=False) for u in short_urls)
            )
        assert [r.headers["location"] for r in redirects] == urls
