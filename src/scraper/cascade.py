"""
Runtime discovery of the listing layout.

The listing markup changes between deployments, so each fetch evaluates an
ordered list of candidate selectors and keeps the first one that matches.
Nothing is remembered between calls.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from ..config.logging import get_logger
from ..config.sources import NINTENDO_CANDIDATE_SELECTORS


logger = get_logger(__name__)


@dataclass
class CascadeMatch:
    """The winning selector and the nodes it matched."""

    selector: str
    nodes: List[Tag] = field(default_factory=list)


class SelectorCascade:
    """Ordered candidate selectors tried in priority order."""

    def __init__(self, candidates: Optional[Sequence[str]] = None):
        self.candidates = list(candidates) if candidates is not None else list(NINTENDO_CANDIDATE_SELECTORS)

    def select(self, document: BeautifulSoup) -> Optional[CascadeMatch]:
        """
        Return the first candidate with at least one match.

        Args:
            document: Parsed listing page

        Returns:
            CascadeMatch for the winning selector, or None if no candidate matches
        """
        for selector in self.candidates:
            try:
                nodes = document.select(selector)
            except SelectorSyntaxError as e:
                logger.warning("Skipping invalid candidate selector", selector=selector, error=str(e))
                continue
            logger.debug("Evaluated candidate selector", selector=selector, matches=len(nodes))
            if len(nodes) > 0:
                logger.info("Selected listing selector", selector=selector, matches=len(nodes))
                return CascadeMatch(selector=selector, nodes=nodes)

        logger.info("No candidate selector matched", candidates=len(self.candidates))
        return None
