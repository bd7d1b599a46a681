# polite_crawl/crawler/link_extractor.py
"""
Outbound link extraction for PoliteCrawl.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin

from polite_crawl.crawler.document import ExtractedDocument

_ABSOLUTE_PREFIXES = ("http://", "https://")


def extract_links(doc: ExtractedDocument, *, resolve_relative: bool = False) -> List[str]:
    """
    Extract absolute http(s) link targets from every <a> in document order.

    Empty or missing hrefs are skipped, duplicates are kept. Hrefs that cannot
    be resolved are dropped. The scheme check is literal and case-sensitive. With ``resolve_relative`` relative targets
    are first resolved against ``doc.url``.
    """
    links: List[str] = []
    for node in doc.query_all("a"):
        href = doc.attribute(node, "href")
        if not href:
            continue
        if resolve_relative:
            try:
                href = urljoin(doc.url, href.strip())
            except ValueError:
                continue
        if href.startswith(_ABSOLUTE_PREFIXES):
            links.append(href)
    return links
