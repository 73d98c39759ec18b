"""
URL canonicalization and same-domain filtering for RouteMapper.
"""
from __future__ import annotations

from typing import List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from pydantic import HttpUrl, TypeAdapter, ValidationError

_REJECTED_PREFIXES = ("javascript:", "#", "mailto:", "tel:", "data:", "blob:")
_DEFAULT_PORTS = {"http": 80, "https": 443}

_http_url = TypeAdapter(HttpUrl)


def normalize_url(link: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve ``link`` against ``base_url`` and drop query string and fragment.

    Returns None for empty links, non-navigable schemes
    (javascript:, mailto:, tel:, data:, blob:, bare fragments)
    and anything that does not parse as an http(s) URL.
    """
    if not link:
        return None
    raw = link.strip()
    if not raw or raw.lower().startswith(_REJECTED_PREFIXES):
        return None
    try:
        parts = urlsplit(urljoin(base_url, raw))
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme not in _DEFAULT_PORTS or not host:
        return None
    try:
        netloc = _canonical_netloc(parts.scheme, parts.netloc, host, parts.port)
    except ValueError:
        return None
    return urlunsplit((parts.scheme, netloc, _remove_dot_segments(parts.path), "", ""))


def _canonical_netloc(scheme: str, netloc: str, host: str, port: Optional[int]) -> str:
    """Lowercase host, no default port; userinfo is kept as written."""
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"
    userinfo, at, _ = netloc.rpartition("@")
    return f"{userinfo}@{host}" if at else host


def _remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments; a trailing ``/.`` or ``/..`` keeps the trailing slash."""
    if not path:
        return path
    segments = path.split("/")[1:]
    out: List[str] = []
    for seg in segments:
        if seg == "..":
            if out:
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in (".", ".."):
        out.append("")
    return "/" + "/".join(out)


def host_of(url: str) -> Optional[str]:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def is_same_domain(url: str, root_host: str) -> bool:
    """Exact host match: ``www.`` and other subdomains count as foreign."""
    host = host_of(url)
    return host is not None and host == root_host.lower()


def route_path(url: str) -> str:
    """Pathname of ``url`` for display, without trailing slash except for ``/``."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return url
    return path.rstrip("/") or "/"


def url_key(url: str) -> str:
    """Deduplication key: ``https://a.com`` and ``https://a.com/`` are the same page."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))


def parse_start_url(raw: str) -> Optional[str]:
    """
    Turn user input into the canonical root URL, or None if it is not a URL.

    Input without an http(s) scheme gets an ``https://`` prefix.
    """
    if not raw or not raw.strip():
        return None
    candidate = raw.strip()
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = f"https://{candidate}"
    try:
        _http_url.validate_python(candidate)
    except ValidationError:
        return None
    return normalize_url(candidate, candidate)


__all__ = [
    "normalize_url",
    "host_of",
    "is_same_domain",
    "route_path",
    "url_key",
    "parse_start_url",
]
