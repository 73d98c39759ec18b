"""
Data models for the RouteMapper crawler.

A crawl produces a tree of :class:`RouteNode`. Every node carries exactly one
outcome variant (:class:`Fetched`, :class:`Skipped` or :class:`Failed`); the
optional ``status`` / ``error`` view used by reports is derived from it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Union


class SkipReason(str, Enum):
    """Why a URL was resolved without being fetched."""

    DEPTH_EXCEEDED = "Max depth reached"
    PAGE_BUDGET_EXCEEDED = "Max pages reached"
    ALREADY_VISITED = "Already visited"


class FailureKind(str, Enum):
    INVALID_START_URL = "invalid_start_url"
    TRANSPORT = "transport"
    HTTP_ERROR = "http_error"
    NON_HTML = "non_html"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True, slots=True)
class Fetched:
    """HTML page fetched with a 2xx status and its links explored."""

    status: int

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Skipped:
    reason: SkipReason

    @property
    def status(self) -> None:
        return None

    @property
    def error(self) -> Optional[str]:
        # a URL reached twice is reported as a bare node
        if self.reason is SkipReason.ALREADY_VISITED:
            return None
        return self.reason.value


@dataclass(frozen=True, slots=True)
class Failed:
    """Terminal failure; ``status`` is set only when a response arrived."""

    kind: FailureKind
    status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def error(self) -> str:
        if self.kind is FailureKind.INVALID_START_URL:
            return "Invalid starting URL"
        if self.kind is FailureKind.TRANSPORT:
            return "Failed to fetch after retries"
        if self.kind is FailureKind.HTTP_ERROR:
            return f"HTTP {self.status}"
        if self.kind is FailureKind.NON_HTML:
            return "Not HTML content"
        return self.detail or "Unknown error"


Outcome = Union[Fetched, Skipped, Failed]


@dataclass(frozen=True, slots=True)
class RouteNode:
    """One resolved URL of the crawl tree. Children keep completion order."""

    path: str
    url: str
    outcome: Outcome
    children: Tuple["RouteNode", ...] = field(default_factory=tuple)

    @property
    def status(self) -> Optional[int]:
        return self.outcome.status

    @property
    def error(self) -> Optional[str]:
        return self.outcome.error

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Fetched)

    def walk(self) -> Iterator["RouteNode"]:
        """Yield this node and all descendants, depth-first, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "url": self.url,
            "children": [child.to_dict() for child in self.children],
        }
        if self.status is not None:
            data["status"] = self.status
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class FetchResponse:
    """What the fetcher hands back for any HTTP response, error statuses included."""

    url: str
    status: int
    content_type: str
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()
