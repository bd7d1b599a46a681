# polite_crawl/crawler/policy.py
"""
Site-level robots.txt checks with a per-site, single-flight cache.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Literal, Protocol
from urllib.parse import urlsplit

from polite_crawl.config import CrawlerConfig
from polite_crawl.crawler.models import AgentRuleSet
from polite_crawl.crawler.robots import WILDCARD_AGENT, Precedence, is_allowed, parse_robots
from polite_crawl.errors import FetchError, PolicyFetchError

__all__ = ("PolicyResolver", "UNREACHABLE_POLICY", "request_path")

#: stands in for robots.txt when it cannot be fetched; parses to no agents
UNREACHABLE_POLICY = "failed to fetch"

AgentPolicy = Literal["union", "agent_first"]


class TextFetcher(Protocol):
    async def fetch_text(self, url: str) -> str:
        ...


def request_path(url: str) -> str:
    """Path (plus query) that robots rules are matched against."""
    parts = urlsplit(url)
    path = parts.path or "/"
    if parts.query:
        path += "?" + parts.query
    return path


class PolicyResolver:
    """
    Decides whether a page may be crawled under its site's robots.txt.

    robots.txt is fetched at most once per site per session. Concurrent first
    lookups for a site wait on the same in-flight download.
    """

    def __init__(
        self,
        fetcher: TextFetcher,
        agent: str,
        *,
        precedence: Precedence = "last_match",
        agent_policy: AgentPolicy = "union",
    ) -> None:
        self._fetcher = fetcher
        self.agent = agent
        self.precedence = precedence
        self.agent_policy = agent_policy
        self._rules: Dict[str, AgentRuleSet] = {}
        self._inflight: Dict[str, asyncio.Task[AgentRuleSet]] = {}
        self.fetch_count = 0
        self.logger = logging.getLogger("PoliteCrawl")

    @classmethod
    def from_config(cls, fetcher: TextFetcher, config: CrawlerConfig) -> PolicyResolver:
        return cls(
            fetcher,
            config.robots_agent,
            precedence=config.precedence,
            agent_policy=config.agent_policy,
        )

    async def check_access(self, site_root: str, page_url: str) -> bool:
        """True if *page_url* on *site_root* may be crawled. Never raises on fetch problems."""
        rules = await self.rules_for(site_root)
        path = request_path(page_url)
        primary = is_allowed(self.agent, path, rules, precedence=self.precedence)
        wildcard = is_allowed(WILDCARD_AGENT, path, rules, precedence=self.precedence)
        if self.agent_policy == "agent_first":
            return primary if self.agent in rules else wildcard
        return primary or wildcard

    async def rules_for(self, site_root: str) -> AgentRuleSet:
        site_root = _with_slash(site_root)
        cached = self._rules.get(site_root)
        if cached is not None:
            return cached
        task = self._inflight.get(site_root)
        if task is None:
            task = asyncio.create_task(self._load(site_root))
            self._inflight[site_root] = task
        # a cancelled waiter must not cancel the shared download
        return await asyncio.shield(task)

    async def _load(self, site_root: str) -> AgentRuleSet:
        try:
            try:
                text = await self._download(site_root)
            except PolicyFetchError as exc:
                self.logger.warning("Error loading robots.txt %s: %s", exc.url, exc.reason)
                text = UNREACHABLE_POLICY
            rules = parse_robots(text)
            self._rules[site_root] = rules
            self.logger.debug("robots.txt for %s: %d agent(s)", site_root, len(rules))
            return rules
        finally:
            self._inflight.pop(site_root, None)

    async def _download(self, site_root: str) -> str:
        robots_url = site_root + "robots.txt"
        self.fetch_count += 1
        try:
            return await self._fetcher.fetch_text(robots_url)
        except FetchError as exc:
            raise PolicyFetchError(robots_url, exc.reason, status=exc.status) from exc


def _with_slash(site_root: str) -> str:
    return site_root if site_root.endswith("/") else site_root + "/"
