# File: polite_crawl/aggregator.py
"""polite_crawl.aggregator: Сборка итогового отчёта по сессии обхода."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, List, TypedDict

from polite_crawl.crawler.models import FetchFailure, PageLinks


class PageInfo(TypedDict):
    """Страница и найденные на ней ссылки (в порядке документа)."""

    url: str
    links: List[str]
    strategy: str


class FailureInfo(TypedDict):
    """Страница, которую не удалось загрузить."""

    url: str
    reason: str


@dataclass(slots=True)
class CrawlReport:
    """Результаты обхода: страницы со ссылками, запреты robots.txt и ошибки загрузки."""

    pages: List[PageInfo] = field(default_factory=list)
    denied: List[str] = field(default_factory=list)
    failures: List[FailureInfo] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)


def _page_info(page: PageLinks) -> PageInfo:
    return {"url": page.url, "links": list(page.links), "strategy": page.strategy.value}


def aggregate_results(
    pages: List[PageLinks],
    denied: List[str] | None = None,
    failures: List[FetchFailure] | None = None,
) -> CrawlReport:
    """Собирает все части отчёта в CrawlReport."""
    return CrawlReport(
        pages=[_page_info(p) for p in pages],
        denied=list(denied or []),
        failures=[{"url": f.url, "reason": f.reason} for f in failures or []],
    )
