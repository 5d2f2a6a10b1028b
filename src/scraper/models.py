"""
Data structures shared by the listing extractors, the article enricher
and the pipeline.
"""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
from urllib.parse import urljoin

from ..config.models import DEFAULT_DESCRIPTION_PLACEHOLDER, DEFAULT_TITLE_PLACEHOLDER


@dataclass
class NewsItem:
    """A single entry from the news listing page."""

    title: str = DEFAULT_TITLE_PLACEHOLDER
    link: str = ""
    date: str = ""
    image_url: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)


@dataclass
class ArticleDetails:
    """Image and description recovered from an article page."""

    image_url: str = ""
    description: str = DEFAULT_DESCRIPTION_PLACEHOLDER


def absolutize_url(url: Optional[str], origin: str) -> str:
    """
    Resolve a link or image source against the site origin.

    Absolute URLs are returned unchanged; path-only and protocol-relative
    values are resolved against ``origin``.

    Args:
        url: Raw href/src value, possibly empty
        origin: Scheme and host, e.g. ``https://www.nintendo.com``

    Returns:
        Absolute URL, or an empty string when ``url`` is empty
    """
    if not url:
        return ""
    url = url.strip()
    if not url:
        return ""
    if "://" in url:
        return url
    return urljoin(origin.rstrip("/") + "/", url)


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs and trim."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()
