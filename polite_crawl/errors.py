# File: polite_crawl/errors.py
"""Exception hierarchy for PoliteCrawl.

Only fetch-side failures are exceptions. Malformed robots.txt lines and pages
without links are normal outcomes and never raise.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "CrawlError",
    "FetchError",
    "FetchTimeout",
    "RenderTimeout",
    "PolicyFetchError",
)


class CrawlError(Exception):
    """Base class for all PoliteCrawl errors."""


class FetchError(CrawlError):
    """A page could not be acquired (transport error, bad status, render failure)."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"{url}: {reason}")


class FetchTimeout(FetchError):
    """Static fetch exceeded its per-call timeout."""


class RenderTimeout(FetchError):
    """Browser render exceeded its per-call timeout."""


class PolicyFetchError(FetchError):
    """robots.txt could not be retrieved; recovered inside the policy resolver."""
