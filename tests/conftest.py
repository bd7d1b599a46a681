# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Union

import pytest
import pytest_asyncio
from aiohttp import web

from polite_crawl.config import CrawlerConfig
from polite_crawl.crawler.document import ExtractedDocument
from polite_crawl.errors import FetchError


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeTextFetcher:
    """Stands in for StaticFetcher.fetch_text: url -> text, or an exception to raise."""

    def __init__(self, texts: Dict[str, Union[str, Exception]], delay: float = 0.0) -> None:
        self.texts = texts
        self.delay = delay
        self.calls: list[str] = []

    async def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.texts.get(url)
        if value is None:
            raise FetchError(url, "HTTP 404", status=404)
        if isinstance(value, Exception):
            raise value
        return value


class FakeAcquirer:
    """In-memory ContentAcquirer: url -> markup, counting calls per URL."""

    def __init__(self, pages: Dict[str, str], delay: float = 0.0, block: Optional[set[str]] = None) -> None:
        self.pages = pages
        self.delay = delay
        self.block = block or set()
        self.calls: Counter[str] = Counter()
        self.cancelled: list[str] = []

    async def acquire(self, url: str) -> ExtractedDocument:
        self.calls[url] += 1
        try:
            if url in self.block:
                await asyncio.Event().wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        if url not in self.pages:
            raise FetchError(url, "HTTP 404", status=404)
        return ExtractedDocument.from_markup(url, self.pages[url])


@pytest.fixture()
def fake_text_fetcher():
    return FakeTextFetcher


@pytest.fixture()
def fake_acquirer():
    return FakeAcquirer


@pytest.fixture()
def basic_config() -> CrawlerConfig:
    """
    Return a basic valid CrawlerConfig for crawler tests.
    """
    return CrawlerConfig(
        base_url="http://example.com",
        max_depth=1,
        timeout=2.0,
        user_agent="TestAgent/1.0",
        robots_agent="TestAgent",
        rate_limit=1000.0,
        retry_times=0,
    )


ServeFn = Callable[[web.Application], Awaitable[str]]


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[ServeFn]:
    """Start aiohttp apps on free ports, yield their base URL (with trailing slash)."""
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}/"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()


@pytest.fixture()
def sample_html() -> str:
    return (
        "<html><body>"
        '<a href="https://a.com">A</a>'
        '<a href="/relative">R</a>'
        '<a href="ftp://x">F</a>'
        '<a href="">E</a>'
        "</body></html>"
    )
