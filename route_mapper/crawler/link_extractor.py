"""
Link extraction for RouteMapper: anchors → canonical same-domain URLs.
"""
from __future__ import annotations

from typing import Set

from bs4 import BeautifulSoup
from bs4.element import Tag

from route_mapper.crawler.urls import is_same_domain, normalize_url


def extract_links(html: str, base_url: str, root_host: str) -> Set[str]:
    """
    Extract distinct internal links from an HTML document.

    Every ``<a href>`` is resolved against ``base_url``; javascript:, mailto:,
    tel:, data:, blob:, bare fragments and foreign hosts are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")
    links: Set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = normalize_url(href_val, base_url)
        if absolute and is_same_domain(absolute, root_host):
            links.add(absolute)
    return links


__all__ = ["extract_links"]
