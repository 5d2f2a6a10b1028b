"""
News listing scraper module for What's New Insights.

This module provides rate-limited HTTP fetching, runtime discovery of the
listing layout through a selector cascade, structured and heuristic item
extraction, and article detail enrichment.
"""

# Lazy imports to avoid dependency issues during testing
__all__ = [
    'NewsItem',
    'ArticleDetails',
    'TokenBucket',
    'HTTPFetcher',
    'FetchResult',
    'NetworkError',
    'RateLimitedFetcher',
    'SelectorCascade',
    'CascadeMatch',
    'StructuredItemExtractor',
    'HeuristicLinkExtractor',
    'ArticleDetailEnricher',
    'extract_news',
    'extract_article_details'
]

_LOCATIONS = {
    'NewsItem': '.models',
    'ArticleDetails': '.models',
    'TokenBucket': '.ratelimit',
    'HTTPFetcher': '.fetcher',
    'FetchResult': '.fetcher',
    'NetworkError': '.fetcher',
    'RateLimitedFetcher': '.fetcher',
    'SelectorCascade': '.cascade',
    'CascadeMatch': '.cascade',
    'StructuredItemExtractor': '.listing',
    'HeuristicLinkExtractor': '.heuristic',
    'ArticleDetailEnricher': '.article',
    'extract_news': '.listing',
    'extract_article_details': '.article',
}


def __getattr__(name):
    if name in _LOCATIONS:
        from importlib import import_module
        module = import_module(_LOCATIONS[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
