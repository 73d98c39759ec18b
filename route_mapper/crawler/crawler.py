from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional, Set

from aiohttp import ClientSession

from route_mapper.config import CrawlOptions
from route_mapper.crawler.fetcher import Fetcher
from route_mapper.crawler.link_extractor import extract_links
from route_mapper.crawler.models import (
    Failed,
    FailureKind,
    Fetched,
    Outcome,
    RouteNode,
    SkipReason,
    Skipped,
)
from route_mapper.crawler.urls import host_of, route_path, url_key
from route_mapper.logger import get_logger

__all__ = ("CrawlContext", "RouteCrawler")

logger = get_logger("crawler")


class CrawlContext:
    """
    State shared by every branch of one crawl: visited URLs and the page budget.

    ``reserve`` checks and updates both without an ``await`` in between, so
    concurrent branches cannot push the page count past ``max_pages``.
    """

    def __init__(self, max_pages: int) -> None:
        self.max_pages = max_pages
        self.pages_fetched = 0
        self._visited: Set[str] = set()

    @property
    def exhausted(self) -> bool:
        return self.pages_fetched >= self.max_pages

    def is_visited(self, url: str) -> bool:
        return url_key(url) in self._visited

    def reserve(self, url: str) -> Optional[SkipReason]:
        """Claim one fetch for ``url``; return the skip reason if it must not be fetched."""
        if self.exhausted:
            return SkipReason.PAGE_BUDGET_EXCEEDED
        key = url_key(url)
        if key in self._visited:
            return SkipReason.ALREADY_VISITED
        self._visited.add(key)
        self.pages_fetched += 1
        return None


@dataclass(eq=False)
class _Expansion:
    """Pending work item: one URL plus the join state of its children."""

    url: str
    depth: int
    parent: Optional["_Expansion"] = None
    path: str = ""
    status: Optional[int] = None
    pending: int = 0
    children: List[RouteNode] = field(default_factory=list)
    node: Optional[RouteNode] = None
    spawned: bool = False

    def __post_init__(self) -> None:
        self.path = route_path(self.url)


class RouteCrawler:
    """Асинхронный обход сайта с ограничением глубины, числа страниц и параллелизма."""

    def __init__(self, options: Optional[CrawlOptions] = None) -> None:
        self.options = options or CrawlOptions()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self.context = CrawlContext(self.options.max_pages)
        self._root_host = ""
        self._queue: asyncio.Queue[_Expansion] = asyncio.Queue()

    async def __aenter__(self) -> RouteCrawler:
        self.session = ClientSession()
        self.fetcher = Fetcher(self.session, self.options)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self, start_url: str) -> RouteNode:
        """Expand ``start_url`` (already canonical) and return the finished tree."""
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        logger.info("Старт обхода: %s", start_url)
        started = time.monotonic()
        self.context = CrawlContext(self.options.max_pages)
        self._root_host = host_of(start_url) or ""
        self._queue = asyncio.Queue()

        root = _Expansion(start_url, 0)
        self._queue.put_nowait(root)
        workers = [asyncio.create_task(self._worker()) for _ in range(self.options.concurrency)]
        try:
            await self._queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - started
        logger.info(
            "Завершено: %d страниц за %.2f с",
            self.context.pages_fetched, duration,
        )
        if root.node is None:
            raise RuntimeError(f"Crawl of {start_url} ended without a result")
        return root.node

    async def _worker(self) -> None:
        while True:
            try:
                job = await self._queue.get()
            except asyncio.CancelledError:
                break
            try:
                await self._expand(job)
            except Exception as exc:
                logger.exception("Unexpected error while expanding %s", job.url)
                if job.node is None and not job.spawned:
                    self._settle(job, Failed(FailureKind.UNEXPECTED, detail=str(exc) or None))
            finally:
                self._queue.task_done()

    async def _expand(self, job: _Expansion) -> None:
        """
        Resolve one URL: skip it, fetch it, or fetch it and queue its links.

        The page budget is checked once over all candidates of a page, so when
        it runs out while siblings are queued, those siblings come back as
        "Max pages reached" nodes instead of being left out.
        """
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")

        if job.depth > self.options.max_depth:
            logger.debug("Skip %s: depth %d", job.url, job.depth)
            self._settle(job, Skipped(SkipReason.DEPTH_EXCEEDED))
            return

        skip = self.context.reserve(job.url)
        if skip is not None:
            logger.debug("Skip %s: %s", job.url, skip.name)
            self._settle(job, Skipped(skip))
            return

        if self.context.pages_fetched > 1 and self.options.delay:
            await asyncio.sleep(self.options.delay_s)

        page = await self.fetcher.fetch(job.url)
        if page is None:
            self._settle(job, Failed(FailureKind.TRANSPORT))
            return
        if not page.is_success:
            logger.warning("HTTP %d for %s", page.status, job.url)
            self._settle(job, Failed(FailureKind.HTTP_ERROR, status=page.status))
            return
        if not page.is_html:
            self._settle(job, Failed(FailureKind.NON_HTML, status=page.status))
            return

        job.status = page.status
        candidates = [
            link
            for link in extract_links(page.body, job.url, self._root_host)
            if not self.context.is_visited(link) and not self.context.exhausted
        ]
        logger.debug("%s: %d new link(s)", job.url, len(candidates))
        self._spawn(job, candidates)

    def _spawn(self, job: _Expansion, links: List[str]) -> None:
        job.spawned = True
        job.pending = len(links)
        if not links:
            self._settle(job, Fetched(job.status or 200))
            return
        for link in links:
            self._queue.put_nowait(_Expansion(link, job.depth + 1, parent=job))

    def _settle(self, job: _Expansion, outcome: Outcome) -> None:
        """Freeze ``job`` into a RouteNode and hand it to the parent's join."""
        job.node = RouteNode(
            path=job.path,
            url=job.url,
            outcome=outcome,
            children=tuple(job.children),
        )
        parent = job.parent
        if parent is None:
            return
        if job.path != parent.path:
            parent.children.append(job.node)
        parent.pending -= 1
        if parent.pending == 0:
            self._settle(parent, Fetched(parent.status or 200))
