"""Crawl engine: URL canonicalization, fetching, link extraction and traversal."""
from route_mapper.crawler.crawler import CrawlContext, RouteCrawler
from route_mapper.crawler.models import (
    Failed,
    FailureKind,
    FetchResponse,
    Fetched,
    RouteNode,
    SkipReason,
    Skipped,
)

__all__ = [
    "CrawlContext",
    "RouteCrawler",
    "RouteNode",
    "Fetched",
    "Skipped",
    "Failed",
    "SkipReason",
    "FailureKind",
    "FetchResponse",
]
