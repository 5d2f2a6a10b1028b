"""
Unit tests for the selector cascade.
"""

from bs4 import BeautifulSoup
from src.scraper.cascade import SelectorCascade, CascadeMatch
from src.config.sources import NINTENDO_CANDIDATE_SELECTORS


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestSelectorCascade:
    """Test cases for SelectorCascade class."""

    def test_default_candidates(self):
        """Test that the default candidates follow the known layout order."""
        cascade = SelectorCascade()
        assert cascade.candidates == NINTENDO_CANDIDATE_SELECTORS
        assert cascade.candidates[0] == ".WhatIsNewPage-module__item"
        assert cascade.candidates[-1] == ".WhatsNewHighlightModule-module__tile"

    def test_first_matching_candidate_wins(self):
        """Test that priority order beats match counts."""
        html = """
        <div class="card">one</div>
        <article>a</article><article>b</article><article>c</article>
        <div class="card">two</div>
        """
        match = SelectorCascade().select(soup(html))

        assert isinstance(match, CascadeMatch)
        assert match.selector == "article"
        assert len(match.nodes) == 3

    def test_higher_priority_single_match(self):
        """Test that one match on a higher candidate is enough."""
        html = """
        <div class="news-item">only one</div>
        <div class="grid-item">x</div><div class="grid-item">y</div>
        """
        match = SelectorCascade().select(soup(html))

        assert match.selector == ".news-item"
        assert len(match.nodes) == 1

    def test_no_match_returns_none(self):
        """Test that a page matching no candidate yields None."""
        html = "<div><a href='/a'>03/01/24 Title Read more</a></div>"
        assert SelectorCascade().select(soup(html)) is None

    def test_custom_candidates(self):
        """Test a cascade with custom candidates."""
        html = "<ul><li class='entry'>a</li></ul>"
        match = SelectorCascade(["section.missing", "li.entry"]).select(soup(html))

        assert match.selector == "li.entry"

    def test_invalid_selector_is_skipped(self):
        """Test that a malformed candidate does not abort the cascade."""
        html = "<article>a</article>"
        match = SelectorCascade(["div[", "article"]).select(soup(html))

        assert match.selector == "article"

    def test_selection_is_not_remembered(self):
        """Test that each call re-evaluates the document it is given."""
        cascade = SelectorCascade()

        first = cascade.select(soup("<article>a</article>"))
        second = cascade.select(soup("<div class='card'>b</div>"))

        assert first.selector == "article"
        assert second.selector == ".card"
