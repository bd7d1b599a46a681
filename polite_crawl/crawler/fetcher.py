# polite_crawl/crawler/fetcher.py
"""
Fetcher module: the two content acquisition strategies.

* :class:`StaticFetcher` - plain GET over a shared aiohttp session with rate
  limit, retry/backoff and a per-call timeout.
* :class:`RenderedFetcher` - headless Chromium via Playwright. Every call owns
  its own browser and tears it down before returning.

Both return an :class:`ExtractedDocument` or raise :class:`FetchError`.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Callable, Optional, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout
from playwright.async_api import async_playwright

from polite_crawl.config import CrawlerConfig
from polite_crawl.crawler.document import ExtractedDocument
from polite_crawl.crawler.models import Strategy
from polite_crawl.errors import FetchError, FetchTimeout, RenderTimeout

__all__ = ("ContentAcquirer", "StaticFetcher", "RenderedFetcher", "build_acquirers", "RETRY_STATUS")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class ContentAcquirer(Protocol):
    """Anything that turns a URL into a parsed document."""

    async def acquire(self, url: str) -> ExtractedDocument:
        ...


class StaticFetcher:
    """Handles HTTP fetching with rate limit, retries/backoff, and timeout."""

    backoff_base: float = 1.0

    def __init__(
        self,
        session: ClientSession,
        config: CrawlerConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status
        self._timeout = ClientTimeout(total=config.timeout)
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0
        self.logger = logging.getLogger("PoliteCrawl")

    async def acquire(self, url: str) -> ExtractedDocument:
        text = await self.fetch_text(url)
        return ExtractedDocument.from_markup(url, text)

    async def fetch_text(self, url: str) -> str:
        """
        GET *url* and return the decoded body.

        Raises FetchTimeout on timeout (no retry) and FetchError on transport
        failure or a non-2xx status once retries are exhausted.
        """
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(url, timeout=self._timeout) as resp:
                    status = resp.status
                    if 200 <= status < 300:
                        return await resp.text(errors="replace")
            except asyncio.TimeoutError as exc:
                raise FetchTimeout(url, f"timed out after {self.config.timeout}s") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(url, str(exc) or type(exc).__name__) from exc
                await self._backoff(url, attempts)
                continue

            if status not in self._retry_status or attempts >= self.config.retry_times:
                raise FetchError(url, f"HTTP {status}", status=status)
            attempts += 1
            await self._backoff(url, attempts)

    async def _backoff(self, url: str, attempts: int) -> None:
        delay = min(60.0, self.backoff_base * (2 ** (attempts - 1) + random.random()))
        self.logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, delay)
        await asyncio.sleep(delay)

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()


class RenderedFetcher:
    """
    Renders pages in headless Chromium and parses the final DOM.

    Much slower than :class:`StaticFetcher`; meant for pages whose content is
    built by client-side scripts.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        headless: bool = True,
        wait_until: str = "load",
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.config = config
        self.headless = headless
        self.wait_until = wait_until
        self._playwright_factory = playwright_factory
        self.logger = logging.getLogger("PoliteCrawl")

    async def acquire(self, url: str) -> ExtractedDocument:
        try:
            markup = await asyncio.wait_for(self.render(url), timeout=self.config.render_timeout)
        except asyncio.TimeoutError as exc:
            raise RenderTimeout(url, f"render exceeded {self.config.render_timeout}s") from exc
        return ExtractedDocument.from_markup(url, markup)

    async def render(self, url: str) -> str:
        """Return the serialized DOM of *url* after the load event."""
        nav_timeout = self.config.render_timeout * 1000
        try:
            async with self._playwright_factory() as pw:
                browser = await pw.chromium.launch(headless=self.headless)
                try:
                    context = await browser.new_context(user_agent=self.config.user_agent)
                    try:
                        page = await context.new_page()
                        try:
                            self.logger.debug("Rendering: %s", url)
                            response = await page.goto(url, wait_until=self.wait_until, timeout=nav_timeout)
                            if response is not None and response.status >= 400:
                                raise FetchError(url, f"HTTP {response.status}", status=response.status)
                            await page.wait_for_load_state("load")
                            return await page.content()
                        finally:
                            await page.close()
                    finally:
                        await context.close()
                finally:
                    await browser.close()
        except PlaywrightTimeout as exc:
            raise RenderTimeout(url, f"navigation timed out: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(url, f"render failed: {exc}") from exc


def build_acquirers(
    session: ClientSession, config: CrawlerConfig, static: Optional[StaticFetcher] = None
) -> dict[Strategy, ContentAcquirer]:
    """Default strategy table used by the crawler."""
    return {
        Strategy.STATIC: static or StaticFetcher(session, config),
        Strategy.RENDERED: RenderedFetcher(config),
    }
