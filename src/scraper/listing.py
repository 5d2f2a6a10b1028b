"""
Listing page extraction.

``extract_news`` is the pure entry point: it parses the listing HTML, lets the
selector cascade discover the current layout and extracts items with the
structured extractor, or falls back to the heuristic link extractor when no
candidate selector matches.
"""

from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from ..config.logging import get_logger
from ..config.models import SourceConfig
from ..config.sources import NINTENDO_WHATSNEW_CONFIG
from .cascade import SelectorCascade
from .heuristic import HeuristicLinkExtractor
from .models import NewsItem, absolutize_url, clean_text


logger = get_logger(__name__)


# Per-field fallback chains, tried in order
TITLE_SELECTORS = ["h3", "h2", ".title", ".heading"]
DATE_SELECTORS = [".DateUtility-module__date", ".date", "time"]
DESCRIPTION_SELECTORS = ["p", ".description", ".summary"]


class StructuredItemExtractor:
    """Extracts news items from the nodes matched by the selector cascade."""

    def __init__(self, source: Optional[SourceConfig] = None):
        self.source = source or NINTENDO_WHATSNEW_CONFIG

    def extract_from(self, nodes: Sequence[Tag], limit: int) -> List[NewsItem]:
        """
        Build up to ``limit`` items from the matched nodes.

        Nodes with neither a title nor a description are dropped and do not
        count toward ``limit``. Iteration stops as soon as ``limit`` items
        have been kept.

        Args:
            nodes: Nodes matched by the winning selector, in document order
            limit: Maximum number of items to return

        Returns:
            List of NewsItem in document order
        """
        items: List[NewsItem] = []
        if limit <= 0:
            return items

        for index, node in enumerate(nodes):
            if len(items) >= limit:
                break

            title = self._first_text(node, TITLE_SELECTORS)
            description = self._first_text(node, DESCRIPTION_SELECTORS)

            if not title and not description:
                logger.debug("Dropping node without title or description", node_index=index)
                continue

            if not title:
                logger.debug("Substituting title placeholder", node_index=index)

            items.append(NewsItem(
                title=title or self.source.title_placeholder,
                link=self._extract_link(node),
                date=self._first_text(node, DATE_SELECTORS),
                image_url=self._extract_image(node),
                description=description
            ))

        logger.log_extraction("structured", len(items), nodes=len(nodes))
        return items

    def _first_text(self, node: Tag, selectors: Sequence[str]) -> str:
        """Text of the first selector in the chain that yields any."""
        for selector in selectors:
            element = node.select_one(selector)
            if element is None:
                continue
            text = clean_text(element.get_text(" "))
            if text:
                return text
        return ""

    def _extract_link(self, node: Tag) -> str:
        anchor = node.select_one("a[href]")
        href = anchor.get("href") if anchor is not None else None
        if not href and node.name == "a":
            href = node.get("href")
        if not href:
            return self.source.listing_url
        return absolutize_url(href, self.source.origin)

    def _extract_image(self, node: Tag) -> str:
        image = node.select_one("img[src]") or node.select_one(".image img[src]")
        src = image.get("src") if image is not None else ""

        if not src:
            source = node.select_one("picture source[srcset]")
            if source is not None:
                src = first_srcset_url(source.get("srcset", ""))

        return absolutize_url(src, self.source.origin)


def first_srcset_url(srcset: str) -> str:
    """First candidate URL from a ``srcset`` attribute."""
    for candidate in srcset.split(","):
        parts = candidate.strip().split()
        if parts:
            return parts[0]
    return ""


def extract_news(html: str, limit: int, source: Optional[SourceConfig] = None) -> List[NewsItem]:
    """
    Turn listing page HTML into at most ``limit`` news items.

    Args:
        html: Raw listing page HTML
        limit: Maximum number of items
        source: Listing source configuration; defaults to Nintendo What's New

    Returns:
        Ordered list of NewsItem, possibly empty
    """
    source = source or NINTENDO_WHATSNEW_CONFIG

    if not html or not html.strip() or limit <= 0:
        return []

    document = BeautifulSoup(html, "html.parser")

    match = SelectorCascade(source.candidate_selectors).select(document)
    if match is not None:
        logger.set_context(strategy="structured")
        return StructuredItemExtractor(source).extract_from(match.nodes, limit)

    logger.set_context(strategy="heuristic")
    logger.info("Falling back to heuristic link extraction")
    return HeuristicLinkExtractor(source).extract_fallback(document, limit)
