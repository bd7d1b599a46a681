# File: polite_crawl/report/__init__.py
"""polite_crawl.report: Сохранение отчётов обхода, используемое CLI и тестами."""

from __future__ import annotations

from polite_crawl.report.json_report import render_json

__all__ = ["render_json"]
