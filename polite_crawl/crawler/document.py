# === FILE: polite_crawl/crawler/document.py ===
"""Parsed-page abstraction shared by both acquisition strategies.

The rest of the crawler depends only on this small capability surface
(:meth:`ExtractedDocument.query_all` and :meth:`ExtractedDocument.attribute`),
not on BeautifulSoup directly.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("ExtractedDocument",)


class ExtractedDocument:
    """A parsed HTML page that can be queried with CSS selectors."""

    __slots__ = ("url", "_soup")

    def __init__(self, url: str, soup: BeautifulSoup) -> None:
        self.url = url
        self._soup = soup

    @classmethod
    def from_markup(cls, url: str, markup: str | bytes) -> ExtractedDocument:
        return cls(url, BeautifulSoup(markup, "html.parser"))

    def query_all(self, selector: str) -> list[Tag]:
        """All nodes matching *selector*, in document order."""
        return [node for node in self._soup.select(selector) if isinstance(node, Tag)]

    def query_one(self, selector: str) -> Optional[Tag]:
        node = self._soup.select_one(selector)
        return node if isinstance(node, Tag) else None

    @staticmethod
    def attribute(node: Tag, name: str) -> Optional[str]:
        """Attribute value of *node*; multi-valued attributes are space-joined."""
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def text(self, node: Optional[Tag] = None) -> str:
        target = self._soup if node is None else node
        return target.get_text(" ", strip=True)

    def __repr__(self) -> str:
        return f"ExtractedDocument(url={self.url!r})"
