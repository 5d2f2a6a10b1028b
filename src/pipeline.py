"""
News pipeline orchestration.

Fetches the listing page, extracts items with the selector cascade or the
heuristic fallback, enriches items that lack an image or a real description
from their article pages, and applies the title length guard.
"""

from dataclasses import replace
from typing import List, Optional

from .config.logging import get_logger
from .config.manager import get_system_config
from .config.models import SystemConfig
from .scraper.article import ArticleDetailEnricher
from .scraper.fetcher import RateLimitedFetcher
from .scraper.listing import extract_news
from .scraper.models import NewsItem
from .scraper.ratelimit import get_default_bucket


logger = get_logger(__name__)

MAX_TITLE_LENGTH = 250
# A sentence break is accepted strictly between these indexes
SPLIT_WINDOW_START = 10
SPLIT_WINDOW_END = 240


def apply_title_guard(item: NewsItem) -> NewsItem:
    """
    Shorten titles longer than 250 characters.

    The title is cut after the first period strictly between index 10 and
    240, and the rest is prepended to the description. Without such a period
    the title is hard-truncated at 250 characters with an ellipsis and the
    remainder moves to the description.
    """
    title = item.title
    description = item.description

    if not title or len(title) <= MAX_TITLE_LENGTH:
        return item

    break_point = title.find(".", SPLIT_WINDOW_START + 1, SPLIT_WINDOW_END)
    if break_point != -1:
        description = title[break_point + 1:].strip() + ("\n\n" + description if description else "")
        title = title[:break_point + 1].strip()
    else:
        description = title[MAX_TITLE_LENGTH:] + ("...\n\n" + description if description else "...")
        title = title[:MAX_TITLE_LENGTH] + "..."

    return replace(item, title=title, description=description)


class NewsPipeline:
    """
    Listing fetch, extraction and per-item enrichment in one run.

    Every request goes through the same rate-limited fetcher, so the listing
    fetch completes before enrichment starts and enrichment fetches run one
    at a time in item order.
    """

    def __init__(
        self,
        config: Optional[SystemConfig] = None,
        fetcher: Optional[RateLimitedFetcher] = None
    ):
        """
        Initialize the pipeline.

        Args:
            config: System configuration; loaded from the environment if None
            fetcher: Rate-limited fetcher; defaults to HTTP through the process-wide bucket
        """
        self.config = config or get_system_config()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RateLimitedFetcher(bucket=get_default_bucket(self.config.rate_limit))
        self.enricher = ArticleDetailEnricher(
            self.fetcher.fetch,
            placeholder=self.config.source.description_placeholder
        )

    def run(self, limit: Optional[int] = None) -> List[NewsItem]:
        """
        Fetch, extract and enrich up to ``limit`` news items.

        Never raises: any failure, including a failed listing fetch, is logged
        and yields an empty list.

        Args:
            limit: Maximum number of items; defaults to the configured default

        Returns:
            Ordered list of NewsItem
        """
        if limit is None:
            limit = self.config.default_limit
        source = self.config.source

        logger.set_context(component="news_pipeline", url=source.listing_url)

        try:
            with logger.timed_operation("news_pipeline", limit=limit):
                logger.info("Fetching news listing", url=source.listing_url, limit=limit)
                html = self.fetcher.fetch(source.listing_url)

                items = extract_news(html, limit, source)

                if self.config.enrich:
                    items = [self.enrich(item) for item in items]

                if self.config.title_guard:
                    items = [apply_title_guard(item) for item in items]

                logger.info("Total news items found", count=len(items))
                return items

        except Exception as e:
            logger.error("Error fetching news", error=e, url=source.listing_url)
            return []

    def needs_enrichment(self, item: NewsItem) -> bool:
        """True when the item has a link and lacks an image or a real description."""
        placeholder = self.config.source.description_placeholder
        return bool(item.link) and (not item.image_url or item.description == placeholder)

    def enrich(self, item: NewsItem) -> NewsItem:
        """Fill a missing image and replace a placeholder description from the article page."""
        if not self.needs_enrichment(item):
            return item

        placeholder = self.config.source.description_placeholder
        logger.info("Fetching details for article", title=item.title, url=item.link)
        details = self.enricher.fetch_details(item.link)

        image_url = item.image_url
        description = item.description

        if not image_url and details.image_url:
            image_url = details.image_url

        if description == placeholder and details.description != placeholder:
            description = details.description

        return replace(item, image_url=image_url, description=description)

    def close(self) -> None:
        """Close the HTTP session if this pipeline created the fetcher."""
        if self._owns_fetcher:
            self.fetcher.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
