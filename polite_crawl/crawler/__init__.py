"""
Crawler package: robots.txt rules, content acquisition, link extraction and
the crawl orchestrator.
"""

from polite_crawl.crawler.crawler import AsyncCrawler
from polite_crawl.crawler.document import ExtractedDocument
from polite_crawl.crawler.fetcher import RenderedFetcher, StaticFetcher
from polite_crawl.crawler.link_extractor import extract_links
from polite_crawl.crawler.policy import PolicyResolver
from polite_crawl.crawler.robots import is_allowed, parse_robots

__all__ = [
    "AsyncCrawler",
    "ExtractedDocument",
    "RenderedFetcher",
    "StaticFetcher",
    "extract_links",
    "PolicyResolver",
    "is_allowed",
    "parse_robots",
]
