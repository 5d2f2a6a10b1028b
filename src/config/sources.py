"""
Listing source configurations for news scraping.

This module contains the predefined configuration for the Nintendo "What's New"
listing page, including the ordered candidate selectors that describe the
page layouts seen so far.
"""

from .models import SourceConfig


# Ordered by priority; the first selector with a match wins on each fetch.
NINTENDO_CANDIDATE_SELECTORS = [
    ".WhatIsNewPage-module__item",
    ".news-item",
    ".grid-item",
    ".nw-c-NewsItem",
    "article",
    ".card",
    ".link-block",
    "li.news-list-item",
    ".NintendoCard-module__main",
    ".COMPT-module__tile",
    ".WhatsNewHighlightModule-module__tile",
]

NINTENDO_WHATSNEW_CONFIG = SourceConfig(
    name="nintendo-whatsnew",
    listing_url="https://www.nintendo.com/us/whatsnew/",
    candidate_selectors=list(NINTENDO_CANDIDATE_SELECTORS),
    marker_phrase="Read more",
    image_keywords=["news"],
)

# Registry of all known sources
SOURCE_CONFIGS = {
    "nintendo-whatsnew": NINTENDO_WHATSNEW_CONFIG,
}


def get_source_config(name: str = "nintendo-whatsnew") -> SourceConfig:
    """
    Get a source configuration by name.

    Args:
        name: Registered source name

    Returns:
        SourceConfig for the name

    Raises:
        KeyError: If no source is registered under the name
    """
    return SOURCE_CONFIGS[name.lower()]
