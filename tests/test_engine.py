import asyncio
import logging

import pytest
from pydantic import ValidationError

import route_mapper.engine as engine_module
from conftest import Site, links
from route_mapper.config import CrawlOptions
from route_mapper.crawler.crawler import RouteCrawler
from route_mapper.crawler.models import Fetched, RouteNode
from route_mapper.engine import CrawlRequest, crawl_routes, run_crawl, validate_request


@pytest.mark.asyncio()
async def test_invalid_start_url():
    tree = await crawl_routes("not a url")
    assert tree.to_dict() == {
        "path": "/",
        "url": "not a url",
        "children": [],
        "error": "Invalid starting URL",
    }


@pytest.mark.asyncio()
async def test_crawl_routes_end_to_end(site: Site, serve):
    site.page("/", links("/b", "/c", "https://other.com/x")).page("/b").page("/c")
    base = await serve(site)

    tree = await crawl_routes(base, CrawlOptions(delay=0))

    assert tree.status == 200
    assert sorted(c.path for c in tree.children) == ["/b", "/c"]
    assert all(c.to_dict() == {"path": c.path, "url": c.url, "children": [], "status": 200} for c in tree.children)


@pytest.mark.asyncio()
async def test_crawl_routes_never_raises(monkeypatch):
    async def broken(self, start_url):
        raise RuntimeError("event loop on fire")

    monkeypatch.setattr(RouteCrawler, "crawl", broken)

    tree = await crawl_routes("https://example.com")

    assert tree.url == "https://example.com"
    assert tree.error == "event loop on fire"
    assert tree.status is None


def test_validate_request():
    req = validate_request({"url": " https://example.com ", "note": ""})
    assert req.url == "https://example.com"
    assert req.note is None
    assert validate_request({"url": "https://example.com", "note": "menu only"}).note == "menu only"


@pytest.mark.parametrize("url", ["", "example.com", "not a url", "ftp://example.com"])
def test_validate_request_rejects_bad_url(url):
    with pytest.raises(ValidationError) as exc_info:
        validate_request({"url": url})
    assert "Please enter a valid URL." in str(exc_info.value)


def test_run_crawl_uses_request_url(monkeypatch):
    seen = {}

    async def fake_crawl(url, options=None):
        seen["url"] = url
        seen["options"] = options
        return RouteNode(path="/", url=url, outcome=Fetched(200))

    monkeypatch.setattr(engine_module, "crawl_routes", fake_crawl)
    opts = CrawlOptions(max_depth=0)

    tree = run_crawl(CrawlRequest(url="https://example.com", note="hi"), opts)

    assert tree.status == 200
    assert seen == {"url": "https://example.com", "options": opts}


def test_run_crawl_logs_note(monkeypatch, caplog):
    async def fake_crawl(url, options=None):
        return RouteNode(path="/", url=url, outcome=Fetched(200))

    monkeypatch.setattr(engine_module, "crawl_routes", fake_crawl)

    with caplog.at_level(logging.INFO, logger="RouteMapper"):
        run_crawl(CrawlRequest(url="https://example.com", note="footer links"))

    assert "Note: footer links" in caplog.text


def test_run_crawl_timeout(monkeypatch):
    async def slow(url, options=None):
        await asyncio.sleep(2)
        return RouteNode(path="/", url=url, outcome=Fetched(200))

    monkeypatch.setattr(engine_module, "crawl_routes", slow)

    with pytest.raises(asyncio.TimeoutError):
        run_crawl(CrawlRequest(url="https://example.com"), timeout=0.1)
