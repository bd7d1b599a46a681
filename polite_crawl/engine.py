# File: polite_crawl/engine.py
"""polite_crawl.engine: Слой оркестрации для запуска обхода и сборки отчёта."""

from __future__ import annotations

from typing import Optional, Sequence

from aiohttp import ClientSession
from bs4.element import Tag

from polite_crawl.aggregator import CrawlReport, aggregate_results
from polite_crawl.config import CrawlerConfig
from polite_crawl.crawler.crawler import AsyncCrawler, PageCallback
from polite_crawl.crawler.fetcher import RenderedFetcher, StaticFetcher
from polite_crawl.crawler.models import site_of
from polite_crawl.crawler.policy import PolicyResolver

__all__ = ["start_crawl", "check_url", "fetch_page_element"]


async def start_crawl(
    config: CrawlerConfig,
    seeds: Optional[Sequence[str]] = None,
    *,
    on_page: Optional[PageCallback] = None,
) -> CrawlReport:
    """Запускает одну сессию обхода и возвращает агрегированный отчёт."""
    async with AsyncCrawler(config, on_page=on_page) as crawler:
        pages = await crawler.crawl(seeds)
    return aggregate_results(pages, crawler.disallowed_pages, crawler.failures)


async def check_url(config: CrawlerConfig, url: str) -> bool:
    """Проверяет по robots.txt сайта, можно ли обходить *url*."""
    async with ClientSession(headers={"User-Agent": config.user_agent}) as session:
        policy = PolicyResolver.from_config(StaticFetcher(session, config), config)
        return await policy.check_access(site_of(url), url)


async def fetch_page_element(
    config: CrawlerConfig,
    url: str,
    selector: str,
    *,
    rendered: bool = False,
) -> Optional[Tag]:
    """Загружает страницу и возвращает первый узел, подходящий под CSS-селектор.

    Бросает FetchError, если страницу загрузить не удалось.
    """
    if rendered:
        doc = await RenderedFetcher(config).acquire(url)
    else:
        async with ClientSession(headers={"User-Agent": config.user_agent}) as session:
            doc = await StaticFetcher(session, config).acquire(url)
    return doc.query_one(selector)

