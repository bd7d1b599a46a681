# File: tests/test_engine.py
from __future__ import annotations

import json

import pytest
from aiohttp import web

from polite_crawl.config import CrawlerConfig
from polite_crawl.engine import check_url, fetch_page_element, start_crawl
from polite_crawl.errors import FetchError
from polite_crawl.report.json_report import render_json


def build_app() -> web.Application:
    app = web.Application()

    async def root(request):
        base = f"http://{request.host}/"
        return web.Response(
            text=f'<h1 class="title">Home</h1><a href="{base}private">P</a><a href="{base}docs">D</a>',
            content_type="text/html",
        )

    async def docs(_):
        return web.Response(text="<h1>Docs</h1>", content_type="text/html")

    async def robots(_):
        return web.Response(text="User-agent: *\nDisallow: /private\n", content_type="text/plain")

    app.router.add_get("/", root)
    app.router.add_get("/docs", docs)
    app.router.add_get("/robots.txt", robots)
    return app


def make_config(base: str) -> CrawlerConfig:
    return CrawlerConfig(base_url=base, max_depth=1, timeout=2.0, rate_limit=1000.0, retry_times=0)


@pytest.mark.asyncio()
async def test_start_crawl_report(serve, tmp_path):
    base = await serve(build_app())
    seen = []

    report = await start_crawl(make_config(base), on_page=seen.append)

    assert {p["url"] for p in report.pages} == {base, base + "docs"}
    root = next(p for p in report.pages if p["url"] == base)
    assert root["links"] == [base + "private", base + "docs"]
    assert root["strategy"] == "static"
    assert report.denied == [base + "private"]
    assert report.failures == []
    assert len(seen) == 2

    saved = render_json(report, tmp_path / "report.json")
    assert json.loads(saved.read_text(encoding="utf-8")) == json.loads(report.json())


@pytest.mark.asyncio()
async def test_check_url(serve):
    base = await serve(build_app())
    config = make_config(base)
    assert await check_url(config, base + "docs") is True
    assert await check_url(config, base + "private/page") is False


@pytest.mark.asyncio()
async def test_fetch_page_element(serve):
    base = await serve(build_app())
    config = make_config(base)

    node = await fetch_page_element(config, base, "h1.title")
    assert node is not None and node.get_text() == "Home"
    assert await fetch_page_element(config, base, "table") is None

    with pytest.raises(FetchError):
        await fetch_page_element(config, base + "missing", "h1")
