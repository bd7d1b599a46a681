# polite_crawl/crawler/models.py
"""
Data models for the PoliteCrawl crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple
from urllib.parse import urlsplit


class DirectiveKind(str, Enum):
    """Kind of a path rule in robots.txt."""

    ALLOW = "allow"
    DISALLOW = "disallow"


class Rule(NamedTuple):
    """One ``Allow``/``Disallow`` line for an agent, in declaration order."""

    kind: DirectiveKind
    path: str


#: agent name (case-sensitive, as declared) -> ordered rules
AgentRuleSet = Dict[str, List[Rule]]


class Strategy(str, Enum):
    """How a page is acquired."""

    STATIC = "static"
    RENDERED = "rendered"


def site_of(url: str) -> str:
    """Return ``scheme://host/`` for *url*; robots.txt lives right under it."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/"


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A frontier entry: URL, its site root and link depth from the seed."""

    url: str
    site: str
    depth: int = 0

    @classmethod
    def from_url(cls, url: str, depth: int = 0) -> CrawlTarget:
        return cls(url=url, site=site_of(url), depth=depth)


@dataclass(slots=True)
class PageLinks:
    """Outbound links extracted from one allowed, successfully fetched page."""

    url: str
    links: List[str]
    strategy: Strategy = Strategy.STATIC


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """A page that was allowed but could not be acquired."""

    url: str
    reason: str


@dataclass(slots=True)
class CrawlStats:
    """Running counters of a crawl session, passed to the stop hook."""

    pages: int = 0
    denied: int = 0
    failed: int = 0
    skipped: int = 0
    visited: int = 0
    by_strategy: Dict[str, int] = field(default_factory=dict)
