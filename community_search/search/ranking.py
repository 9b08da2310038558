"""
Relevance ranking for search candidates.

A candidate's rank is the tier of the first criterion that fires, in this
precedence order, plus a bonus for featured or pinned records:

    raw query in title        title_exact     exact_title
    raw query in excerpt      excerpt_exact   excerpt_match
    raw query in body         body_exact      content_match
    for each term, in order:
        term in title         90 - 5*index    key_term_title
        term in body          70 - 5*index    key_term_content
    nothing                   minimum         general_match

All matching is case-insensitive substring matching.
"""

from typing import Dict, List, Optional, Tuple
import logging

from community_search.config.search_config import RANKING_CONFIG
from .records import SearchCandidate

logger = logging.getLogger("search")

EXACT_TITLE = "exact_title"
EXCERPT_MATCH = "excerpt_match"
CONTENT_MATCH = "content_match"
KEY_TERM_TITLE = "key_term_title"
KEY_TERM_CONTENT = "key_term_content"
GENERAL_MATCH = "general_match"
FALLBACK_MATCH = "fallback_match"


class RelevanceRanker:
    """Computes rank and match type for candidates of any content type."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or RANKING_CONFIG

    def term_title_tier(self, index: int) -> float:
        """Title tier for the term at ``index``; decays with index down to the floor."""
        return max(
            self.config['term_title_base'] - self.config['term_decay'] * index,
            self.config['term_floor']
        )

    def term_body_tier(self, index: int) -> float:
        """Body tier for the term at ``index``; decays with index down to the floor."""
        return max(
            self.config['term_body_base'] - self.config['term_decay'] * index,
            self.config['term_floor']
        )

    def score(
        self,
        candidate: SearchCandidate,
        query: str,
        terms: List[str]
    ) -> Tuple[float, str]:
        """
        Score one candidate.

        Args:
            candidate: Candidate with raw title/body/secondary text
            query: Raw query text
            terms: Extracted terms in extraction order

        Returns:
            Tuple of (rank, match_type)
        """
        needle = query.strip().lower()
        title = candidate.title.lower()
        body = candidate.body.lower()
        secondary = candidate.secondary.lower()

        rank, match_type = self._tier(needle, title, body, secondary, terms)

        if candidate.boosted:
            rank += self.config['featured_bonus']

        return rank, match_type

    def _tier(
        self,
        needle: str,
        title: str,
        body: str,
        secondary: str,
        terms: List[str]
    ) -> Tuple[float, str]:
        if needle and needle in title:
            return self.config['title_exact'], EXACT_TITLE
        if needle and needle in secondary:
            return self.config['excerpt_exact'], EXCERPT_MATCH
        if needle and needle in body:
            return self.config['body_exact'], CONTENT_MATCH

        for index, term in enumerate(terms):
            if term in title:
                return self.term_title_tier(index), KEY_TERM_TITLE
            if term in body:
                return self.term_body_tier(index), KEY_TERM_CONTENT

        return self.config['minimum'], GENERAL_MATCH

    def rank(
        self,
        candidates: List[SearchCandidate],
        query: str,
        terms: List[str]
    ) -> List[SearchCandidate]:
        """
        Score candidates in place and return them in rank order.

        Order: rank desc, then view count desc, then creation time desc.
        """
        for candidate in candidates:
            candidate.rank, candidate.match_type = self.score(candidate, query, terms)

        return sort_by_relevance(candidates)


def sort_by_relevance(candidates: List[SearchCandidate]) -> List[SearchCandidate]:
    """Sort by rank, then popularity, then recency (all descending)."""
    # Stable sorts, least significant key first
    ordered = sorted(candidates, key=lambda c: c.created_at or '', reverse=True)
    return sorted(ordered, key=lambda c: (c.rank, c.view_count), reverse=True)
