"""
RouteMapper package initializer.
Defines package version and exposes the crawl entry point.
"""
__version__ = "0.1.0"

from route_mapper.config import CrawlOptions, load_config
from route_mapper.crawler.models import RouteNode
from route_mapper.engine import crawl_routes

__all__ = ["__version__", "CrawlOptions", "RouteNode", "crawl_routes", "load_config"]
