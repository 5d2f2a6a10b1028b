"""
Heuristic fallback for listing pages with no recognizable container markup.

The "What's New" feed is sometimes rendered as a flat list of anchors such as
``03/15/24Some headlineRead more``. This extractor recovers items from the
anchor text alone: it strips the marker phrase, splits off a leading
``MM/DD/YY`` date and looks for a nearby or best-guess image.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from ..config.logging import get_logger
from ..config.models import SourceConfig
from ..config.sources import NINTENDO_WHATSNEW_CONFIG
from .models import NewsItem, absolutize_url, clean_text


logger = get_logger(__name__)

DATE_PREFIX_PATTERN = re.compile(r'^(\d{2}/\d{2}/\d{2})')
DATE_FORMAT = "%m/%d/%y"

# Ancestor levels searched above an anchor for an image
ANCESTOR_DEPTH = 3
TITLE_PREFIX_LENGTH = 20


@dataclass
class PooledImage:
    """An image from anywhere on the page that looks news related."""

    src: str
    alt: str = ""


def score(alt_text: str, title: str) -> bool:
    """
    Decide whether a pooled image plausibly belongs to an item.

    True when the title contains the alt text, or the alt text contains the
    first 20 characters of the title.
    """
    if not alt_text:
        return False
    return alt_text in title or title[:TITLE_PREFIX_LENGTH] in alt_text


def split_date_prefix(raw_title: str):
    """
    Split a leading ``MM/DD/YY`` token off an anchor title.

    The remaining title is stripped, so ``"03/15/24 New Update — "`` yields
    ``"New Update —"`` with no surrounding whitespace.

    Returns:
        Tuple of (date, title); date is empty when no prefix is present
    """
    match = DATE_PREFIX_PATTERN.match(raw_title)
    if not match:
        return "", raw_title
    found = match.group(1)
    return found, raw_title[len(found):].strip()


def parse_listing_date(value: str) -> Optional[date]:
    """Calendar date for a ``MM/DD/YY`` string, or None if it does not parse."""
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


class HeuristicLinkExtractor:
    """Infers news items from "Read more" anchors when no selector matches."""

    def __init__(self, source: Optional[SourceConfig] = None):
        self.source = source or NINTENDO_WHATSNEW_CONFIG

    def extract_fallback(self, document: BeautifulSoup, limit: int) -> List[NewsItem]:
        """
        Scan anchors for the marker phrase and build items from their text.

        Items are sorted newest first by calendar date; undated items follow
        the dated ones in document order. The result is truncated to ``limit``.

        Args:
            document: Parsed listing page
            limit: Maximum number of items

        Returns:
            List of NewsItem
        """
        image_pool = self.collect_image_pool(document)
        items: List[NewsItem] = []

        for anchor in document.find_all("a"):
            text = anchor.get_text().strip()
            href = anchor.get("href")
            if not text or not href or self.source.marker_phrase not in text:
                continue

            raw_title = clean_text(text.replace(self.source.marker_phrase, "", 1))
            item_date, title = split_date_prefix(raw_title)

            logger.debug("Found fallback news item", date=item_date, title=title)

            image_url = self._nearby_image(anchor)
            if not image_url:
                image_url = self._best_pooled_image(image_pool, title)

            if not title:
                logger.debug("Substituting title placeholder", href=href)

            items.append(NewsItem(
                title=title or self.source.title_placeholder,
                link=absolutize_url(href, self.source.origin),
                date=item_date,
                image_url=absolutize_url(image_url, self.source.origin),
                description=self.source.description_placeholder
            ))

        items.sort(key=_recency_key, reverse=True)

        logger.log_extraction(
            "heuristic",
            min(len(items), max(limit, 0)),
            items_found=len(items),
            pooled_images=len(image_pool)
        )
        return items[:max(limit, 0)]

    def collect_image_pool(self, document: BeautifulSoup) -> List[PooledImage]:
        """
        Collect images whose alt text, parent text or source path mentions a
        news keyword.
        """
        keywords = [k.lower() for k in self.source.image_keywords]
        pool: List[PooledImage] = []

        for img in document.find_all("img"):
            src = img.get("src")
            if not src:
                continue
            alt = img.get("alt") or ""
            parent_text = img.parent.get_text().lower() if img.parent is not None else ""

            if any(k in alt.lower() or k in parent_text or k in src.lower() for k in keywords):
                pool.append(PooledImage(src=absolutize_url(src, self.source.origin), alt=alt))

        return pool

    def _nearby_image(self, anchor: Tag) -> str:
        """First image found in the nearest of the anchor's three ancestors."""
        parent = anchor.parent
        for _ in range(ANCESTOR_DEPTH):
            if parent is None:
                break
            img = parent.find("img")
            if img is not None:
                src = img.get("src") or img.get("data-src")
                if src:
                    return src
            parent = parent.parent
        return ""

    def _best_pooled_image(self, pool: List[PooledImage], title: str) -> str:
        for image in pool:
            if score(image.alt, title):
                return image.src
        return ""


def _recency_key(item: NewsItem):
    parsed = parse_listing_date(item.date)
    return (parsed is not None, parsed or date.min)
