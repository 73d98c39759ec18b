# File: tests/conftest.py
import asyncio
import socket
from collections import Counter
from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from route_mapper.config import CrawlOptions
from route_mapper.logger import configure


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class Site:
    """Small aiohttp application that counts hits and concurrent requests per path."""

    def __init__(self) -> None:
        self.app = web.Application()
        self.hits: Counter[str] = Counter()
        self.in_flight = 0
        self.max_in_flight = 0
        self.headers: dict[str, str] = {}

    def page(
        self,
        path: str,
        body: str = "",
        *,
        status: int = 200,
        sleep: float = 0.0,
        content_type: str = "text/html",
    ) -> "Site":
        async def handler(request: web.Request) -> web.Response:
            self.hits[path] += 1
            self.headers = dict(request.headers)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                if sleep:
                    await asyncio.sleep(sleep)
                return web.Response(text=body, status=status, content_type=content_type)
            finally:
                self.in_flight -= 1

        self.app.router.add_get(path, handler)
        return self

    def redirect(self, path: str, target: str) -> "Site":
        async def handler(_: web.Request) -> web.Response:
            self.hits[path] += 1
            raise web.HTTPFound(target)

        self.app.router.add_get(path, handler)
        return self

    @property
    def total_hits(self) -> int:
        return sum(self.hits.values())


def links(*hrefs: str) -> str:
    """HTML body with one anchor per href."""
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><body>{anchors}</body></html>"


@pytest.fixture(autouse=True)
def reset_logging():
    """Tests see project logs through caplog; CLI tests may reconfigure handlers."""
    lg = configure(level="DEBUG", stream=False)
    lg.propagate = True
    yield lg


@pytest.fixture()
def site() -> Site:
    return Site()


@pytest.fixture()
def fast_options() -> CrawlOptions:
    """Options without politeness delay and with short retries."""
    return CrawlOptions(delay=0, timeout=2000, retry_backoff=10)


@pytest_asyncio.fixture
async def serve() -> AsyncIterator[Callable[[Site], Awaitable[str]]]:
    """Start a Site on a free port and return its base URL; servers are closed after the test."""
    servers: list[TestServer] = []

    async def _serve(target: Site) -> str:
        server = TestServer(target.app)
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}"

    yield _serve
    for server in servers:
        await server.close()


@pytest.fixture()
def closed_port_url() -> str:
    """URL of a local port nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/"
