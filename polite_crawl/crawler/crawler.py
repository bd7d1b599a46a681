# === FILE: polite_crawl/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Set
from urllib.parse import urlsplit

from aiohttp import ClientSession

from polite_crawl.config import CrawlerConfig
from polite_crawl.crawler.fetcher import ContentAcquirer, StaticFetcher, build_acquirers
from polite_crawl.crawler.link_extractor import extract_links
from polite_crawl.crawler.models import (
    CrawlStats,
    CrawlTarget,
    FetchFailure,
    PageLinks,
    Strategy,
)
from polite_crawl.crawler.policy import PolicyResolver
from polite_crawl.errors import FetchError

__all__ = ("AsyncCrawler", "StopCondition", "StrategySelector")

StopCondition = Callable[[CrawlStats], bool]
StrategySelector = Callable[[CrawlTarget], Strategy]
PageCallback = Callable[[PageLinks], None]


class AsyncCrawler:
    """Асинхронный краулер с учётом robots.txt, двумя стратегиями загрузки и пулом воркеров.

    Each frontier entry goes through: visited check -> robots.txt check ->
    acquire (static or rendered) -> link extraction -> enqueue.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        acquirers: Optional[Dict[Strategy, ContentAcquirer]] = None,
        policy: Optional[PolicyResolver] = None,
        should_stop: Optional[StopCondition] = None,
        select_strategy: Optional[StrategySelector] = None,
        on_page: Optional[PageCallback] = None,
    ) -> None:
        self.config = config
        self.visited: Set[str] = set()
        self.pages: List[PageLinks] = []
        self.disallowed_pages: List[str] = []
        self.failures: List[FetchFailure] = []
        self.stats = CrawlStats()
        self.session: Optional[ClientSession] = None
        self.policy = policy
        self.logger = logging.getLogger("PoliteCrawl")
        self._acquirers = acquirers
        self._should_stop = should_stop or self._max_pages_reached
        self._select_strategy = select_strategy or self._strategy_for
        self._on_page = on_page
        self._stop_event = asyncio.Event()
        self._seed_sites: Set[str] = set()

    async def __aenter__(self) -> AsyncCrawler:
        self.session = ClientSession(
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        static = StaticFetcher(self.session, self.config)
        if self._acquirers is None:
            self._acquirers = build_acquirers(self.session, self.config, static)
        if self.policy is None:
            self.policy = PolicyResolver.from_config(static, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def stop(self) -> None:
        """Stop the session: no more dequeues, in-flight fetches are abandoned."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def crawl(self, seeds: Optional[Sequence[str]] = None) -> List[PageLinks]:
        if self._acquirers is None or self.policy is None:
            raise RuntimeError("Crawler not initialized, use 'async with AsyncCrawler(...)'")
        seeds = list(seeds) if seeds is not None else [self.config.seed]
        self.logger.info("Crawl started: %s", ", ".join(seeds))
        start = time.monotonic()

        queue: asyncio.Queue[CrawlTarget] = asyncio.Queue()
        for url in seeds:
            target = CrawlTarget.from_url(url)
            self._seed_sites.add(target.site)
            queue.put_nowait(target)

        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.config.concurrency)]
        drained = asyncio.create_task(queue.join())
        stopped = asyncio.create_task(self._stop_event.wait())
        try:
            await asyncio.wait({drained, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [*workers, drained, stopped]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d page(s), %d denied, %d failed in %.2f s",
            self.stats.pages, self.stats.denied, self.stats.failed, duration,
        )
        if self.stopped and not queue.empty():
            self.logger.info("Stopped with %d target(s) left in the frontier", queue.qsize())
        return list(self.pages)

    async def _worker(self, queue: asyncio.Queue[CrawlTarget]) -> None:
        while True:
            target = await queue.get()
            try:
                await self._process(target, queue)
            except Exception as exc:
                # a single page must never take the worker down
                self.logger.exception("Unexpected error on %s", target.url)
                self._record_failure(target.url, f"{type(exc).__name__}: {exc}")
            finally:
                queue.task_done()

    async def _process(self, target: CrawlTarget, queue: asyncio.Queue[CrawlTarget]) -> None:
        if self.stopped or self._should_stop(self.stats):
            self.stats.skipped += 1
            return
        if not self._claim(target.url):
            return

        if not await self.policy.check_access(target.site, target.url):
            self.stats.denied += 1
            self.disallowed_pages.append(target.url)
            self.logger.debug("Disallowed by robots.txt: %s", target.url)
            return

        strategy = Strategy(self._select_strategy(target))
        try:
            doc = await self._acquirers[strategy].acquire(target.url)
        except FetchError as exc:
            self._record_failure(target.url, exc.reason)
            return
        if self.stopped:
            return

        page = PageLinks(
            url=target.url,
            links=extract_links(doc, resolve_relative=self.config.resolve_relative),
            strategy=strategy,
        )
        self.pages.append(page)
        self.stats.pages += 1
        self.stats.by_strategy[strategy.value] = self.stats.by_strategy.get(strategy.value, 0) + 1
        if self._on_page is not None:
            self._on_page(page)
        self._enqueue(queue, page.links, target.depth + 1)

    def _claim(self, url: str) -> bool:
        # no await between the membership test and the insert
        if url in self.visited:
            return False
        self.visited.add(url)
        self.stats.visited += 1
        return True

    def _enqueue(self, queue: asyncio.Queue[CrawlTarget], links: Sequence[str], depth: int) -> None:
        if depth > self.config.max_depth:
            return
        for link in links:
            if link in self.visited:
                continue
            try:
                target = CrawlTarget.from_url(link, depth)
            except ValueError as exc:
                self.logger.debug("Skipping malformed link %s: %s", link, exc)
                continue
            if self.config.same_site_only and target.site not in self._seed_sites:
                continue
            queue.put_nowait(target)

    def _record_failure(self, url: str, reason: str) -> None:
        self.stats.failed += 1
        self.failures.append(FetchFailure(url, reason))
        self.logger.warning("Failed %s: %s", url, reason)

    def _max_pages_reached(self, stats: CrawlStats) -> bool:
        return stats.pages >= self.config.max_pages

    def _strategy_for(self, target: CrawlTarget) -> Strategy:
        if self.config.strategy == Strategy.RENDERED.value:
            return Strategy.RENDERED
        path = urlsplit(target.url).path or "/"
        if any(path.startswith(prefix) for prefix in self.config.rendered_paths):
            return Strategy.RENDERED
        return Strategy.STATIC

