# File: route_mapper/engine.py
"""route_mapper.engine: точка входа обхода и проверка входных данных формы."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError, field_validator

from route_mapper.config import CrawlOptions
from route_mapper.crawler.crawler import RouteCrawler
from route_mapper.crawler.models import Failed, FailureKind, RouteNode
from route_mapper.crawler.urls import parse_start_url
from route_mapper.logger import logger

__all__ = ["CrawlRequest", "validate_request", "crawl_routes", "run_crawl", "invalid_start_node"]

_http_url = TypeAdapter(HttpUrl)


class CrawlRequest(BaseModel):
    """Данные формы: адрес сайта и необязательная заметка."""
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    url: str
    note: Optional[str] = None

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError("Please enter a valid URL.") from None
        return v


def validate_request(data: Mapping[str, Any]) -> CrawlRequest:
    """Проверяет данные формы; пустая заметка считается отсутствующей."""
    payload = dict(data)
    if not payload.get("note"):
        payload["note"] = None
    return CrawlRequest.model_validate(payload)


def invalid_start_node(raw: str) -> RouteNode:
    return RouteNode(path="/", url=raw, outcome=Failed(FailureKind.INVALID_START_URL))


async def crawl_routes(url: str, options: Optional[CrawlOptions] = None) -> RouteNode:
    """
    Обходит сайт начиная с url и возвращает дерево маршрутов.

    Никогда не бросает исключений: любые ошибки записываются в поле error узлов.
    """
    start = parse_start_url(url)
    if start is None:
        logger.warning("Invalid starting URL: %r", url)
        return invalid_start_node(url)

    try:
        async with RouteCrawler(options) as crawler:
            return await crawler.crawl(start)
    except Exception as exc:
        logger.exception("Crawl of %s failed", start)
        return RouteNode(
            path="/",
            url=start,
            outcome=Failed(FailureKind.UNEXPECTED, detail=str(exc) or None),
        )


def run_crawl(
    request: CrawlRequest,
    options: Optional[CrawlOptions] = None,
    timeout: Optional[float] = None,
) -> RouteNode:
    """
    Синхронная обёртка для CLI и скриптов.

    Если задан timeout (секунды), обход прерывается с asyncio.TimeoutError.
    """
    if request.note:
        logger.info("Note: %s", request.note)
    if timeout:
        return asyncio.run(asyncio.wait_for(crawl_routes(request.url, options), timeout=timeout))
    return asyncio.run(crawl_routes(request.url, options))
