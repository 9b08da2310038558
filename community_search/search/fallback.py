"""
Fallback search used when the primary pass finds nothing.

The primary pass is strict for precision. When it comes back empty for
every requested type, each type is queried again with only the raw query
(no term expansion). Title matches come first, then popularity.
"""

import asyncio
from concurrent.futures import Executor
from typing import Dict, List, Optional
import logging

from community_search.common.outcome import Outcome
from community_search.config.search_config import (
    CONCURRENCY_CONFIG,
    RANKING_CONFIG,
    SEARCH_CONFIG
)
from community_search.store.base import ContentStore
from community_search.store.predicates import RecordQuery
from .content_types import ContentType, get_descriptor
from .ranking import FALLBACK_MATCH
from .records import SearchCandidate, SearchQuery
from .store_calls import call_store

logger = logging.getLogger("search")


class FallbackController:
    """Loosened raw-query search across content types."""

    def __init__(
        self,
        store: ContentStore,
        executor: Executor,
        ranking_config: Optional[Dict] = None,
        config: Optional[Dict] = None,
        timeout: float = None
    ):
        self.store = store
        self.executor = executor
        self.ranking_config = ranking_config or RANKING_CONFIG
        self.config = config or SEARCH_CONFIG
        self.timeout = timeout or CONCURRENCY_CONFIG['store_timeout_seconds']

    @staticmethod
    def should_run(primary: List[Outcome]) -> bool:
        """True only when every primary per-type result set is empty."""
        return all(not outcome.value for outcome in primary)

    async def search_type(self, query: SearchQuery, content_type: ContentType) -> Outcome:
        """Raw-query search for one content type."""
        raw = query.text.strip()
        record_query = RecordQuery(
            descriptor=get_descriptor(content_type),
            patterns=[raw],
            category_id=query.category_id,
            limit=max(query.offset + query.limit, self.config['candidate_pool_size'])
        )

        outcome = await call_store(
            self.executor,
            self.store.find_records,
            record_query,
            timeout=self.timeout,
            source=f"fallback:{content_type.value}",
            default=[]
        )
        if not outcome.is_ok:
            return Outcome.degraded([], outcome.reason, outcome.source)

        needle = raw.lower()
        candidates = []
        for row in outcome.value:
            candidate = SearchCandidate.from_row(content_type, row)
            if needle in candidate.title.lower():
                candidate.rank = self.ranking_config['fallback_title']
            else:
                candidate.rank = self.ranking_config['fallback_other']
            candidate.match_type = FALLBACK_MATCH
            candidates.append(candidate)

        # Title matches first, then most viewed; the store already returned
        # rows most viewed first so a stable sort on rank keeps that order
        candidates.sort(key=lambda c: c.rank, reverse=True)

        return Outcome.ok(candidates[:query.offset + query.limit], outcome.source)

    async def run(self, query: SearchQuery) -> List[Outcome]:
        """
        Fallback pass over every requested content type.

        An all-empty result is a valid answer, not an error.
        """
        logger.info(f"No primary results for '{query.text.strip()}', running fallback search")

        outcomes = await asyncio.gather(*[
            self.search_type(query, content_type)
            for content_type in query.content_types
        ])

        found = sum(len(outcome.value or []) for outcome in outcomes)
        if found == 0:
            logger.info("Fallback search exhausted with no results")
        else:
            logger.info(f"Fallback search found {found} results")

        return list(outcomes)
