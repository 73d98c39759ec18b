# File: route_mapper/aggregator.py
"""route_mapper.aggregator: плоский список маршрутов и сводка ошибок по дереву обхода."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from route_mapper.crawler.models import RouteNode


@dataclass
class RouteReport:
    """Сводка обхода для вывода пользователю."""

    root: RouteNode
    routes: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    pages_ok: int = 0
    total_nodes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.root.url,
            "error": self.root.error,
            "routes": list(self.routes),
            "errors": dict(self.errors),
            "pages_ok": self.pages_ok,
            "total_nodes": self.total_nodes,
        }


def build_report(tree: RouteNode) -> RouteReport:
    """Собирает уникальные пути в порядке обхода в глубину и ошибки по путям."""
    report = RouteReport(root=tree)
    seen = set()
    for node in tree.walk():
        report.total_nodes += 1
        if node.ok:
            report.pages_ok += 1
        if node.path not in seen:
            seen.add(node.path)
            report.routes.append(node.path)
        if node.error is not None:
            report.errors.setdefault(node.path, node.error)
    return report


__all__ = ["RouteReport", "build_report"]
