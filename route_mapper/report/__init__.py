"""route_mapper.report: JSON- и HTML-отчёты по дереву маршрутов."""

from route_mapper.report.html_report import render_html
from route_mapper.report.json_report import render_json

__all__ = ["render_json", "render_html"]
