"""
Fetcher module: time-bounded HTTP GET with bounded retries and linear backoff.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from route_mapper.config import CrawlOptions
from route_mapper.crawler.models import FetchResponse
from route_mapper.logger import get_logger

logger = get_logger("fetcher")


def browser_headers(user_agent: str) -> Dict[str, str]:
    """Request headers that make the crawler look like a desktop browser."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
    }


class Fetcher:
    """Handles HTTP fetching with per-attempt timeout and retries."""

    def __init__(self, session: ClientSession, options: CrawlOptions) -> None:
        self.session = session
        self.options = options
        self._timeout = ClientTimeout(total=options.timeout_s)
        self._headers = browser_headers(options.user_agent)

    async def fetch(self, url: str) -> Optional[FetchResponse]:
        """
        Fetch the URL, following redirects.

        Returns FetchResponse for any HTTP status (4xx/5xx are not retried),
        or None once every attempt failed on transport errors or timeouts.
        """
        attempts = self.options.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._attempt(url)
            except (ClientError, asyncio.TimeoutError) as exc:
                if attempt == attempts:
                    logger.warning("Failed %s after %d attempt(s): %r", url, attempts, exc)
                    break
                backoff = self.options.backoff_s(attempt)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s (%r)",
                    attempt, self.options.retries, url, backoff, exc,
                )
                await asyncio.sleep(backoff)
        return None

    async def _attempt(self, url: str) -> FetchResponse:
        # the timeout covers connect, headers and body
        async with self.session.get(
            url,
            headers=self._headers,
            timeout=self._timeout,
            allow_redirects=True,
            raise_for_status=False,
        ) as resp:
            ctype = resp.headers.get("Content-Type", "")
            page = FetchResponse(url=str(resp.url), status=resp.status, content_type=ctype)
            if page.is_success and page.is_html:
                page.body = await resp.text(errors="replace")
            logger.debug("GET %s -> %d (%s)", url, resp.status, ctype or "no content-type")
            return page


__all__ = ["Fetcher", "browser_headers"]
