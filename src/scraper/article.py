"""
Article detail enrichment.

Visits an item's own article page to backfill a representative image and a
description, preferring page metadata over page content.
"""

from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..config.logging import get_logger
from ..config.models import DEFAULT_DESCRIPTION_PLACEHOLDER
from .models import ArticleDetails, clean_text


logger = get_logger(__name__)


# (selector, attribute) pairs, tried in order
IMAGE_SOURCES: List[Tuple[str, str]] = [
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    (".article-header img", "src"),
    (".article-content img", "src"),
    ("img", "src"),
]

DESCRIPTION_META_SOURCES: List[Tuple[str, str]] = [
    ('meta[property="og:description"]', "content"),
    ('meta[name="description"]', "content"),
]


def _first_attribute(document: BeautifulSoup, sources: List[Tuple[str, str]]) -> str:
    for selector, attribute in sources:
        element = document.select_one(selector)
        if element is None:
            continue
        value = (element.get(attribute) or "").strip()
        if value:
            return value
    return ""


def extract_article_details(
    html: str,
    base_url: Optional[str] = None,
    placeholder: str = DEFAULT_DESCRIPTION_PLACEHOLDER
) -> ArticleDetails:
    """
    Extract an image and a description from article HTML.

    Args:
        html: Raw article page HTML
        base_url: Article URL used to resolve relative image sources
        placeholder: Description used when nothing better is found

    Returns:
        ArticleDetails; fields fall back to ``""`` and ``placeholder``
    """
    if not html or not html.strip():
        return ArticleDetails(image_url="", description=placeholder)

    document = BeautifulSoup(html, "html.parser")

    image_url = _first_attribute(document, IMAGE_SOURCES)
    if image_url and base_url and "://" not in image_url:
        image_url = urljoin(base_url, image_url)

    description = _first_attribute(document, DESCRIPTION_META_SOURCES)
    if not description:
        paragraph = document.select_one(".article-content p")
        if paragraph is not None:
            description = clean_text(paragraph.get_text(" "))

    return ArticleDetails(
        image_url=image_url,
        description=description or placeholder
    )


class ArticleDetailEnricher:
    """Fetches article pages and extracts their details; never raises."""

    def __init__(
        self,
        fetch: Callable[[str], str],
        placeholder: str = DEFAULT_DESCRIPTION_PLACEHOLDER
    ):
        """
        Args:
            fetch: ``(url) -> html`` callable, normally RateLimitedFetcher.fetch
            placeholder: Default description
        """
        self.fetch = fetch
        self.placeholder = placeholder

    def fetch_details(self, url: str) -> ArticleDetails:
        """
        Fetch ``url`` and extract its details.

        Any fetch or parse failure yields the default details.
        """
        try:
            html = self.fetch(url)
            return extract_article_details(html, base_url=url, placeholder=self.placeholder)
        except Exception as e:
            logger.warning("Error fetching article details", url=url, error=str(e),
                           error_type=type(e).__name__)
            return ArticleDetails(image_url="", description=self.placeholder)
